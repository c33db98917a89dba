from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List

from pydantic import BaseModel

from app.api.estoque.core.snapshot import ProdutoReceitaSnapshot


class ProdutoVendaDTO(BaseModel):
    """DTO de produto para precificar itens de pedido."""
    id: int
    nome: str
    preco: Decimal
    ativo: bool


class IProdutoContract(ABC):
    """Contrato para acesso a produtos do contexto Catalogo."""

    @abstractmethod
    def obter_produtos_por_ids(self, ids: Iterable[int]) -> List[ProdutoVendaDTO]:
        raise NotImplementedError

    @abstractmethod
    def receitas_por_ids(self, ids: Iterable[int]) -> Dict[int, ProdutoReceitaSnapshot]:
        """Receita de cada produto, inclusive inativos (pedidos antigos)."""
        raise NotImplementedError
