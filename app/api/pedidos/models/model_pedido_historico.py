from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class PedidoStatusHistoricoModel(Base):
    __tablename__ = "pedido_status_historico"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)
    status_anterior = Column(String(30), nullable=True)
    status_novo = Column(String(30), nullable=False)
    motivo = Column(String(255), nullable=True)
    criado_em = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)

    pedido = relationship("PedidoModel", back_populates="historico")
