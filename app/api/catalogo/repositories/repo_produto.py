from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.api.catalogo.models.model_produto import ProdutoModel


class ProdutoRepository:
    """Repository de produtos com receita e extras."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(ProdutoModel).options(
            selectinload(ProdutoModel.receita),
            selectinload(ProdutoModel.extras),
        )

    def get(self, produto_id: int) -> Optional[ProdutoModel]:
        return self._query().filter(ProdutoModel.id == produto_id).first()

    def listar(self, apenas_ativos: bool = True) -> List[ProdutoModel]:
        query = self._query()
        if apenas_ativos:
            query = query.filter(ProdutoModel.ativo.is_(True))
        return query.order_by(ProdutoModel.categoria, ProdutoModel.nome).all()

    def listar_por_ids(self, ids: Iterable[int]) -> List[ProdutoModel]:
        ids = list(set(ids))
        if not ids:
            return []
        return self._query().filter(ProdutoModel.id.in_(ids)).all()

    def add(self, obj: ProdutoModel) -> ProdutoModel:
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def salvar(self, obj: ProdutoModel) -> ProdutoModel:
        self.db.commit()
        self.db.refresh(obj)
        return obj
