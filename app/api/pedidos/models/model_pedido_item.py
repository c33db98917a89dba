from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class PedidoItemModel(Base):
    """Linha do pedido com nome e preço congelados no momento da compra."""
    __tablename__ = "pedido_itens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)
    produto_id = Column(Integer, ForeignKey("produtos.id", ondelete="RESTRICT"), nullable=False)
    nome = Column(String(100), nullable=False)
    preco_unitario = Column(Numeric(18, 2), nullable=False)
    quantidade = Column(Integer, nullable=False, default=1)
    observacao = Column(Text, nullable=True)

    pedido = relationship("PedidoModel", back_populates="itens")

    @property
    def subtotal(self) -> Decimal:
        return Decimal(str(self.preco_unitario or 0)) * (self.quantidade or 0)


class PedidoAdicionalModel(Base):
    """Acompanhamento escolhido pelo cliente (vale para o pedido inteiro)."""
    __tablename__ = "pedido_adicionais"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="RESTRICT"), nullable=False)
    nome = Column(String(100), nullable=False)

    pedido = relationship("PedidoModel", back_populates="adicionais")
