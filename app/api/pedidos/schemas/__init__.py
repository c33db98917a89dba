"""
Schemas (DTOs) do bounded context de Pedidos.
"""

from .schema_pedido import (
    # Request schemas
    ClientePedidoIn,
    ItemPedidoIn,
    AdicionalPedidoIn,
    PedidoCreate,
    AtualizarStatusRequest,
    CancelarPedidoRequest,
    # Response schemas
    PedidoCriadoResponse,
    ItemPedidoOut,
    AdicionalPedidoOut,
    PedidoStatusHistoricoOut,
    PedidoOut,
    PedidoDetalheOut,
)

__all__ = [
    # Request schemas
    "ClientePedidoIn",
    "ItemPedidoIn",
    "AdicionalPedidoIn",
    "PedidoCreate",
    "AtualizarStatusRequest",
    "CancelarPedidoRequest",
    # Response schemas
    "PedidoCriadoResponse",
    "ItemPedidoOut",
    "AdicionalPedidoOut",
    "PedidoStatusHistoricoOut",
    "PedidoOut",
    "PedidoDetalheOut",
]
