from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from app.api.catalogo.contracts.produto_contract import IProdutoContract, ProdutoVendaDTO
from app.api.catalogo.repositories.repo_produto import ProdutoRepository
from app.api.estoque.core.snapshot import ProdutoReceitaSnapshot


class ProdutoAdapter(IProdutoContract):
    """Implementação do contrato de produtos sobre o ProdutoRepository."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProdutoRepository(db)

    def obter_produtos_por_ids(self, ids: Iterable[int]) -> List[ProdutoVendaDTO]:
        return [
            ProdutoVendaDTO(id=p.id, nome=p.nome, preco=Decimal(str(p.preco)), ativo=bool(p.ativo))
            for p in self.repo.listar_por_ids(ids)
        ]

    def receitas_por_ids(self, ids: Iterable[int]) -> Dict[int, ProdutoReceitaSnapshot]:
        return {p.id: ProdutoReceitaSnapshot.from_model(p) for p in self.repo.listar_por_ids(ids)}
