from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


def _enum_valores(enum_cls):
    return [m.value for m in enum_cls]


class IngredienteEstoqueModel(Base):
    """Insumo controlado em estoque (ingrediente, embalagem ou acompanhamento)."""
    __tablename__ = "estoque_ingredientes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False)

    tipo_unidade = Column(
        SAEnum(TipoUnidadeEnum, name="tipo_unidade_enum", native_enum=False, values_callable=_enum_valores),
        nullable=False,
    )
    categoria = Column(
        SAEnum(CategoriaIngredienteEnum, name="categoria_ingrediente_enum", native_enum=False,
               values_callable=_enum_valores),
        nullable=False,
        default=CategoriaIngredienteEnum.INGREDIENTE,
    )

    # kg quando tipo_unidade=weight, contagem quando unit; pode ficar negativo após baixa
    estoque_atual = Column(Numeric(18, 3), nullable=False, default=0)
    estoque_minimo = Column(Numeric(18, 3), nullable=False, default=0)

    # Só para acompanhamentos: quanto sai por pedido quando o cliente escolhe
    quantidade_padrao_pedido = Column(Numeric(18, 3), nullable=True)

    # Preço por kg/unidade da última compra e custo médio ponderado do histórico
    preco_unitario = Column(Numeric(18, 4), nullable=True)
    custo_medio = Column(Numeric(18, 4), nullable=True)

    ativo = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    porcoes = relationship(
        "PorcaoIngredienteModel",
        back_populates="ingrediente",
        cascade="all, delete-orphan",
        order_by="PorcaoIngredienteModel.id",
    )
    compras = relationship(
        "CompraIngredienteModel",
        back_populates="ingrediente",
        cascade="all, delete-orphan",
        order_by="CompraIngredienteModel.data",
    )

    @property
    def custo_referencia(self):
        """Custo usado no relatório: média ponderada, ou a última compra."""
        return self.custo_medio if self.custo_medio is not None else self.preco_unitario

    def __repr__(self):
        return f"<IngredienteEstoque(id={self.id}, nome='{self.nome}', estoque={self.estoque_atual})>"


class PorcaoIngredienteModel(Base):
    """Porção nomeada em gramas (ex.: 'Hambúrguer 120g') de um ingrediente por peso."""
    __tablename__ = "estoque_porcoes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False)
    rotulo = Column(String(60), nullable=False)
    gramas = Column(Numeric(10, 2), nullable=False)

    ingrediente = relationship("IngredienteEstoqueModel", back_populates="porcoes")


class CompraIngredienteModel(Base):
    """Histórico de compras (reposições). Só cresce."""
    __tablename__ = "estoque_compras"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False, index=True)
    data = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    quantidade = Column(Numeric(18, 3), nullable=False)
    preco = Column(Numeric(18, 2), nullable=False)  # valor total pago

    ingrediente = relationship("IngredienteEstoqueModel", back_populates="compras")


class BaixaEstoqueModel(Base):
    """Registro de cada baixa aplicada; base do relatório de consumo diário."""
    __tablename__ = "estoque_baixas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    data = Column(DateTime(timezone=True), default=now_trimmed, nullable=False, index=True)
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False, index=True)
    quantidade = Column(Numeric(18, 3), nullable=False)
    # Sem FK para evitar dependência circular com pedidos/catalogo
    pedido_id = Column(Integer, nullable=True, index=True)
    produto_id = Column(Integer, nullable=True)


class AgendaReposicaoModel(Base):
    """Dias da semana em que cada ingrediente costuma ser reposto."""
    __tablename__ = "estoque_agenda_reposicao"
    __table_args__ = (
        UniqueConstraint("dia_semana", "ingrediente_id", name="uq_agenda_dia_ingrediente"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dia_semana = Column(Integer, nullable=False)  # 0=segunda ... 6=domingo
    ingrediente_id = Column(Integer, ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False)
