from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text, JSON, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.api.shared.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    PagamentoGatewayEnum,
    PagamentoStatusEnum,
)
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


def _valores(enum_cls):
    return [m.value for m in enum_cls]


class TransacaoPagamentoModel(Base):
    """
    Intenção de pagamento online (PIX automático ou cartão).

    Só o serviço de pagamentos altera a transação, e uma vez fora de
    `pending` ela não muda mais.
    """
    __tablename__ = "pagamento_transacoes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)

    metodo = Column(
        SAEnum(FormaPagamentoEnum, name="pagamento_metodo_enum", native_enum=False, values_callable=_valores),
        nullable=False,
    )
    gateway = Column(
        SAEnum(PagamentoGatewayEnum, name="pagamento_gateway_enum", native_enum=False, values_callable=_valores),
        nullable=False,
    )
    status = Column(
        SAEnum(PagamentoStatusEnum, name="pagamento_status_enum", native_enum=False, values_callable=_valores),
        nullable=False,
        default=PagamentoStatusEnum.PENDENTE,
    )

    provider_reference = Column(String(100), nullable=True, unique=True, index=True)
    valor = Column(Numeric(18, 2), nullable=False)

    qr_code = Column(Text, nullable=True)
    qr_code_base64 = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    cartao_final = Column(String(4), nullable=True)
    cartao_bandeira = Column(String(20), nullable=True)
    erro = Column(String(255), nullable=True)
    payload_gateway = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)
    finalizado_em = Column(DateTime(timezone=True), nullable=True)

    pedido = relationship("PedidoModel")
