from sqlalchemy import Column, Integer, String, DateTime, Numeric, Boolean, Enum as SAEnum

from app.api.shared.schemas.schema_shared_enums import TipoCupomEnum
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


# ----------------------
# CUPOM
# ----------------------
class CupomModel(Base):
    __tablename__ = "cupons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(30), unique=True, nullable=False, index=True)
    descricao = Column(String(120), nullable=True)

    tipo = Column(
        SAEnum(TipoCupomEnum, name="tipo_cupom_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    # Percentual (0-100) quando tipo=percentage; valor em reais quando tipo=fixed
    valor = Column(Numeric(18, 2), nullable=False)
    valor_minimo_pedido = Column(Numeric(18, 2), nullable=True)

    ativo = Column(Boolean, nullable=False, default=True)
    validade_inicio = Column(DateTime(timezone=True), nullable=True)
    validade_fim = Column(DateTime(timezone=True), nullable=True)

    # -1 = ilimitado
    max_usos = Column(Integer, nullable=False, default=-1)
    usos_atuais = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    @property
    def esgotado(self) -> bool:
        return self.max_usos is not None and self.max_usos != -1 and (self.usos_atuais or 0) >= self.max_usos
