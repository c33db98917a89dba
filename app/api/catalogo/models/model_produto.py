from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class ProdutoModel(Base):
    """Produto vendável do cardápio."""
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False)
    descricao = Column(String(255), nullable=True)
    categoria = Column(String(60), nullable=True)  # seção do cardápio (ex.: "Lanches")
    preco = Column(Numeric(18, 2), nullable=False)
    ativo = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    receita = relationship(
        "ReceitaIngredienteModel",
        back_populates="produto",
        cascade="all, delete-orphan",
        order_by="ReceitaIngredienteModel.ordem",
    )
    extras = relationship(
        "ReceitaExtraModel",
        back_populates="produto",
        cascade="all, delete-orphan",
        order_by="ReceitaExtraModel.ordem",
    )

    def __repr__(self):
        return f"<Produto(id={self.id}, nome='{self.nome}')>"
