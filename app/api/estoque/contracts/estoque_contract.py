from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, Optional

from app.api.estoque.core.consumo_receita import BaixaCalculada
from app.api.estoque.core.snapshot import IngredienteSnapshot


class IEstoqueContract(ABC):
    """Contrato do contexto Estoque usado por pedidos."""

    @abstractmethod
    def snapshot(self) -> Dict[int, IngredienteSnapshot]:
        """Fotografia de todos os insumos numa única leitura."""
        raise NotImplementedError

    @abstractmethod
    def aplicar_consumo(self, baixas: Iterable[BaixaCalculada], pedido_id: Optional[int] = None) -> Dict[int, Decimal]:
        """Aplica as baixas na transação corrente; devolve o novo saldo por insumo."""
        raise NotImplementedError
