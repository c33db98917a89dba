from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.api.pedidos.models.model_pedido import PedidoModel
from app.api.pedidos.models.model_pedido_historico import PedidoStatusHistoricoModel


class PedidoRepository:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(PedidoModel).options(
            selectinload(PedidoModel.itens),
            selectinload(PedidoModel.adicionais),
        )

    # ---------------- LEITURA ----------------
    def get(self, pedido_id: int, for_update: bool = False) -> Optional[PedidoModel]:
        query = self._query().filter(PedidoModel.id == pedido_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def listar_ativos(self) -> List[PedidoModel]:
        return (
            self._query()
            .filter(PedidoModel.arquivado.is_(False))
            .order_by(PedidoModel.created_at.asc(), PedidoModel.id.asc())
            .all()
        )

    def listar_historico(self, limite: Optional[int] = None) -> List[PedidoModel]:
        query = (
            self._query()
            .filter(PedidoModel.arquivado.is_(True))
            .order_by(PedidoModel.created_at.desc(), PedidoModel.id.desc())
        )
        if limite is not None:
            query = query.limit(limite)
        return query.all()

    def buscar_por_telefones(self, telefones: List[str]) -> List[PedidoModel]:
        if not telefones:
            return []
        return (
            self._query()
            .filter(PedidoModel.cliente_telefone.in_(telefones))
            .order_by(PedidoModel.created_at.desc(), PedidoModel.id.desc())
            .all()
        )

    # ---------------- ESCRITA ----------------
    def add(self, pedido: PedidoModel) -> PedidoModel:
        self.db.add(pedido)
        self.db.flush()
        return pedido

    def registrar_historico(
        self,
        pedido: PedidoModel,
        status_anterior: Optional[str],
        status_novo: str,
        motivo: Optional[str] = None,
    ):
        pedido.historico.append(
            PedidoStatusHistoricoModel(
                status_anterior=status_anterior,
                status_novo=status_novo,
                motivo=motivo,
            )
        )

    def commit(self, pedido: PedidoModel) -> PedidoModel:
        self.db.commit()
        self.db.refresh(pedido)
        return pedido
