from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Boolean
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class ReceitaIngredienteModel(Base):
    """Linha da receita de um produto, vinculada a um insumo do estoque."""
    __tablename__ = "produto_receita_ingredientes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    produto_id = Column(Integer, ForeignKey("produtos.id", ondelete="CASCADE"), nullable=False, index=True)
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="RESTRICT"), nullable=False)
    # Quantidade por unidade do produto: na unidade do insumo, ou número de porções se porcao_id
    quantidade_usada = Column(Numeric(18, 4), nullable=False)
    porcao_id = Column(Integer, ForeignKey("estoque_porcoes.id", ondelete="SET NULL"), nullable=True)
    ocultar_cliente = Column(Boolean, nullable=False, default=False)
    ordem = Column(Integer, nullable=False, default=0)

    produto = relationship("ProdutoModel", back_populates="receita")
    ingrediente = relationship("IngredienteEstoqueModel")
    porcao = relationship("PorcaoIngredienteModel")


class ReceitaExtraModel(Base):
    """Ingrediente apenas descritivo: aparece no cardápio mas não baixa estoque."""
    __tablename__ = "produto_receita_extras"

    id = Column(Integer, primary_key=True, autoincrement=True)
    produto_id = Column(Integer, ForeignKey("produtos.id", ondelete="CASCADE"), nullable=False, index=True)
    nome = Column(String(100), nullable=False)
    ordem = Column(Integer, nullable=False, default=0)

    produto = relationship("ProdutoModel", back_populates="extras")
