from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.shared.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    PagamentoGatewayEnum,
    PagamentoStatusEnum,
)


# ------------------- PIX -------------------
class CriarPixRequest(BaseModel):
    pedido_id: int = Field(..., gt=0)


class PixPagamentoResponse(BaseModel):
    modo: Literal["manual", "automatico"]
    pedido_id: int
    valor: float
    # manual
    chave_pix: Optional[str] = None
    # automático
    provider_reference: Optional[str] = None
    qr_code: Optional[str] = Field(None, description="Imagem do QR em base64")
    copia_cola: Optional[str] = None
    expires_at: Optional[datetime] = None


class StatusPagamentoResponse(BaseModel):
    status: PagamentoStatusEnum
    pedido_id: int
    provider_reference: str


# ------------------- CARTÃO -------------------
class CartaoIn(BaseModel):
    numero: constr(max_length=25)
    nome_titular: constr(max_length=120)
    validade: constr(max_length=7) = Field(..., description="MM/AA")
    cvv: constr(max_length=4)


class CobrarCartaoRequest(BaseModel):
    pedido_id: int = Field(..., gt=0)
    cartao: CartaoIn


class CobrancaCartaoResponse(BaseModel):
    sucesso: bool
    erro: Optional[str] = None
    erros: List[str] = Field(default_factory=list)
    provider_reference: Optional[str] = None
    bandeira: Optional[str] = None


# ------------------- CONSULTA -------------------
class TransacaoOut(BaseModel):
    id: int
    pedido_id: int
    metodo: FormaPagamentoEnum
    gateway: PagamentoGatewayEnum
    status: PagamentoStatusEnum
    provider_reference: Optional[str] = None
    valor: float
    expires_at: Optional[datetime] = None
    cartao_final: Optional[str] = None
    cartao_bandeira: Optional[str] = None
    erro: Optional[str] = None
    created_at: datetime
    finalizado_em: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
