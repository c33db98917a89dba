"""
Schemas compartilhados entre diferentes domínios
"""

from app.api.shared.schemas.schema_shared_enums import (
    CategoriaIngredienteEnum,
    FormaPagamentoEnum,
    PagamentoGatewayEnum,
    PagamentoStatusEnum,
    PedidoStatusEnum,
    TipoCartaoEnum,
    TipoCupomEnum,
    TipoEntregaEnum,
    TipoUnidadeEnum,
)

__all__ = [
    "CategoriaIngredienteEnum",
    "FormaPagamentoEnum",
    "PagamentoGatewayEnum",
    "PagamentoStatusEnum",
    "PedidoStatusEnum",
    "TipoCartaoEnum",
    "TipoCupomEnum",
    "TipoEntregaEnum",
    "TipoUnidadeEnum",
]
