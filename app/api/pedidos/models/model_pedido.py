from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Numeric, Boolean, Text, Index, Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from app.api.shared.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    PedidoStatusEnum,
    TipoCartaoEnum,
    TipoEntregaEnum,
)
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


def _valores(enum_cls):
    return [m.value for m in enum_cls]


class PedidoModel(Base):
    """
    Pedido do cliente.

    Pedidos ativos e arquivados ficam na mesma tabela; `arquivado` separa a
    fila de trabalho (ativos) do histórico, e é ligado quando o pedido chega
    a `completed` ou `cancelled`.
    """
    __tablename__ = "pedidos"
    __table_args__ = (
        Index("ix_pedidos_arquivado_created_at", "arquivado", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Cliente
    cliente_nome = Column(String(120), nullable=False)
    cliente_telefone = Column(String(20), nullable=False, index=True)

    # Entrega
    tipo_entrega = Column(
        SAEnum(TipoEntregaEnum, name="tipo_entrega_enum", native_enum=False, values_callable=_valores),
        nullable=False,
    )
    endereco = Column(Text, nullable=True)
    setor = Column(String(60), nullable=True)
    observacao = Column(Text, nullable=True)

    # Pagamento
    forma_pagamento = Column(
        SAEnum(FormaPagamentoEnum, name="forma_pagamento_enum", native_enum=False, values_callable=_valores),
        nullable=False,
    )
    tipo_cartao = Column(
        SAEnum(TipoCartaoEnum, name="tipo_cartao_enum", native_enum=False, values_callable=_valores),
        nullable=True,
    )
    troco_para = Column(Numeric(18, 2), nullable=True)
    pago = Column(Boolean, nullable=False, default=False)
    pago_em = Column(DateTime(timezone=True), nullable=True)

    # Valores
    cupom_id = Column(Integer, ForeignKey("cupons.id", ondelete="SET NULL"), nullable=True)
    cupom_codigo = Column(String(30), nullable=True)
    desconto = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    taxa_entrega = Column(Numeric(18, 2), nullable=False, default=Decimal("0.00"))
    subtotal = Column(Numeric(18, 2), nullable=False)
    total = Column(Numeric(18, 2), nullable=False)

    # Ciclo de vida
    status = Column(
        SAEnum(PedidoStatusEnum, name="pedido_status_enum", native_enum=False, values_callable=_valores),
        nullable=False,
        default=PedidoStatusEnum.PENDENTE,
        index=True,
    )
    estoque_baixado = Column(Boolean, nullable=False, default=False)
    arquivado = Column(Boolean, nullable=False, default=False)
    motivo_cancelamento = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)
    concluido_em = Column(DateTime(timezone=True), nullable=True)
    cancelado_em = Column(DateTime(timezone=True), nullable=True)

    itens = relationship(
        "PedidoItemModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoItemModel.id",
    )
    adicionais = relationship(
        "PedidoAdicionalModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoAdicionalModel.id",
    )
    historico = relationship(
        "PedidoStatusHistoricoModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoStatusHistoricoModel.id",
    )

    def __repr__(self):
        return f"<Pedido(id={self.id}, status={self.status}, total={self.total})>"
