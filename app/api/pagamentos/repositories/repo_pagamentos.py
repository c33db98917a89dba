from typing import List, Optional

from sqlalchemy.orm import Session

from app.api.pagamentos.models.model_transacao_pagamento import TransacaoPagamentoModel
from app.api.shared.schemas.schema_shared_enums import PagamentoStatusEnum
from app.utils.database_utils import now_trimmed


class PagamentoRepository:
    def __init__(self, db: Session):
        self.db = db

    def criar(self, transacao: TransacaoPagamentoModel) -> TransacaoPagamentoModel:
        self.db.add(transacao)
        self.db.flush()
        return transacao

    def get_by_reference(self, provider_reference: str, for_update: bool = False) -> Optional[TransacaoPagamentoModel]:
        query = self.db.query(TransacaoPagamentoModel).filter(
            TransacaoPagamentoModel.provider_reference == provider_reference
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def listar_por_pedido(self, pedido_id: int) -> List[TransacaoPagamentoModel]:
        return (
            self.db.query(TransacaoPagamentoModel)
            .filter(TransacaoPagamentoModel.pedido_id == pedido_id)
            .order_by(TransacaoPagamentoModel.id.desc())
            .all()
        )

    def pendente_do_pedido(self, pedido_id: int) -> Optional[TransacaoPagamentoModel]:
        return (
            self.db.query(TransacaoPagamentoModel)
            .filter(
                TransacaoPagamentoModel.pedido_id == pedido_id,
                TransacaoPagamentoModel.status == PagamentoStatusEnum.PENDENTE,
            )
            .order_by(TransacaoPagamentoModel.id.desc())
            .first()
        )

    def finalizar(
        self,
        transacao: TransacaoPagamentoModel,
        status: PagamentoStatusEnum,
        erro: Optional[str] = None,
        payload: Optional[dict] = None,
    ) -> bool:
        """Leva a transação a um status terminal; False se ela já era terminal."""
        if transacao.status != PagamentoStatusEnum.PENDENTE:
            return False
        transacao.status = status
        transacao.erro = erro
        transacao.finalizado_em = now_trimmed()
        if payload is not None:
            transacao.payload_gateway = payload
        return True

    def commit(self):
        self.db.commit()
