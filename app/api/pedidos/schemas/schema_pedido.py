from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, constr

from app.api.pedidos.core.maquina_estados import transicoes_permitidas
from app.api.shared.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    PedidoStatusEnum,
    TipoCartaoEnum,
    TipoEntregaEnum,
)


# ======================================================================
# ============================ ENTRADA =================================
# ======================================================================
class ClientePedidoIn(BaseModel):
    nome: constr(max_length=120)
    telefone: constr(max_length=20)


class ItemPedidoIn(BaseModel):
    produto_id: int = Field(..., gt=0)
    quantidade: int = Field(..., ge=1, le=99)
    observacao: Optional[constr(max_length=255)] = None
    # Informativos: nome e preço oficiais vêm do catálogo
    nome: Optional[str] = None
    preco_unitario: Optional[Decimal] = None


class AdicionalPedidoIn(BaseModel):
    ingrediente_id: int = Field(..., gt=0)
    nome: Optional[str] = None


class PedidoCreate(BaseModel):
    cliente: ClientePedidoIn
    tipo_entrega: TipoEntregaEnum
    endereco: Optional[constr(max_length=500)] = None
    setor: Optional[constr(max_length=60)] = None
    itens: List[ItemPedidoIn] = Field(default_factory=list)
    adicionais: List[AdicionalPedidoIn] = Field(default_factory=list)
    forma_pagamento: FormaPagamentoEnum
    tipo_cartao: Optional[TipoCartaoEnum] = None
    troco_para: Optional[Decimal] = Field(None, ge=0)
    cupom_codigo: Optional[constr(max_length=30)] = None
    observacao: Optional[constr(max_length=500)] = None


class AtualizarStatusRequest(BaseModel):
    status: PedidoStatusEnum


class CancelarPedidoRequest(BaseModel):
    motivo: Optional[constr(max_length=255)] = None


# ======================================================================
# ============================= SAÍDA ==================================
# ======================================================================
class PedidoCriadoResponse(BaseModel):
    pedido_id: int
    status: PedidoStatusEnum
    subtotal: float
    desconto: float
    taxa_entrega: float
    total: float


class ItemPedidoOut(BaseModel):
    id: int
    produto_id: int
    nome: str
    preco_unitario: float
    quantidade: int
    observacao: Optional[str] = None
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class AdicionalPedidoOut(BaseModel):
    ingrediente_id: int
    nome: str

    model_config = ConfigDict(from_attributes=True)


class PedidoStatusHistoricoOut(BaseModel):
    status_anterior: Optional[str] = None
    status_novo: str
    motivo: Optional[str] = None
    criado_em: datetime

    model_config = ConfigDict(from_attributes=True)


class PedidoOut(BaseModel):
    id: int
    cliente_nome: str
    cliente_telefone: str
    tipo_entrega: TipoEntregaEnum
    endereco: Optional[str] = None
    setor: Optional[str] = None
    observacao: Optional[str] = None

    forma_pagamento: FormaPagamentoEnum
    tipo_cartao: Optional[TipoCartaoEnum] = None
    troco_para: Optional[float] = None
    pago: bool

    cupom_codigo: Optional[str] = None
    desconto: float
    taxa_entrega: float
    subtotal: float
    total: float

    status: PedidoStatusEnum
    arquivado: bool
    estoque_baixado: bool
    motivo_cancelamento: Optional[str] = None

    created_at: datetime
    concluido_em: Optional[datetime] = None
    cancelado_em: Optional[datetime] = None

    itens: List[ItemPedidoOut] = Field(default_factory=list)
    adicionais: List[AdicionalPedidoOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def proximos_status(self) -> List[PedidoStatusEnum]:
        """Destinos válidos a partir do status atual (para os botões do painel)."""
        return sorted(transicoes_permitidas(self.tipo_entrega, self.status), key=lambda s: s.value)


class PedidoDetalheOut(PedidoOut):
    historico: List[PedidoStatusHistoricoOut] = Field(default_factory=list)
