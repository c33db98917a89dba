"""
Schemas de Cupons
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator, model_validator

from app.api.shared.schemas.schema_shared_enums import TipoCupomEnum


# ------------------- CUPOM -------------------
class CupomCreate(BaseModel):
    codigo: constr(min_length=1, max_length=30)
    descricao: Optional[constr(max_length=120)] = None
    tipo: TipoCupomEnum
    valor: Decimal = Field(..., gt=0)
    valor_minimo_pedido: Optional[Decimal] = Field(None, ge=0)
    ativo: bool = True
    validade_inicio: Optional[datetime] = None
    validade_fim: Optional[datetime] = None
    max_usos: int = Field(-1, ge=-1)

    @field_validator("codigo")
    @classmethod
    def _codigo_maiusculo(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def _percentual_ate_100(self):
        if self.tipo == TipoCupomEnum.PERCENTUAL and self.valor > 100:
            raise ValueError("Percentual do cupom deve ser no máximo 100")
        return self


class CupomUpdate(BaseModel):
    descricao: Optional[constr(max_length=120)] = None
    tipo: Optional[TipoCupomEnum] = None
    valor: Optional[Decimal] = Field(None, gt=0)
    valor_minimo_pedido: Optional[Decimal] = Field(None, ge=0)
    ativo: Optional[bool] = None
    validade_inicio: Optional[datetime] = None
    validade_fim: Optional[datetime] = None
    max_usos: Optional[int] = Field(None, ge=-1)


class CupomOut(BaseModel):
    id: int
    codigo: str
    descricao: Optional[str] = None
    tipo: TipoCupomEnum
    valor: float
    valor_minimo_pedido: Optional[float] = None
    ativo: bool
    validade_inicio: Optional[datetime] = None
    validade_fim: Optional[datetime] = None
    max_usos: int
    usos_atuais: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CupomPublicoOut(BaseModel):
    """Cupom como o cliente vê: sem contadores de uso."""
    codigo: str
    descricao: Optional[str] = None
    tipo: TipoCupomEnum
    valor: float

    model_config = ConfigDict(from_attributes=True)


# ------------------- VALIDAÇÃO -------------------
class ValidarCupomRequest(BaseModel):
    codigo: constr(min_length=1, max_length=30)
    subtotal: Decimal = Field(..., ge=0, description="Subtotal dos itens, sem taxa de entrega")


class ValidarCupomResponse(BaseModel):
    valido: bool
    desconto: float = 0.0
    cupom: Optional[CupomPublicoOut] = None
    motivo: Optional[str] = None
