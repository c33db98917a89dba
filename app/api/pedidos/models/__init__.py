from app.api.pedidos.models.model_pedido import PedidoModel
from app.api.pedidos.models.model_pedido_item import PedidoItemModel, PedidoAdicionalModel
from app.api.pedidos.models.model_pedido_historico import PedidoStatusHistoricoModel

__all__ = [
    "PedidoModel",
    "PedidoItemModel",
    "PedidoAdicionalModel",
    "PedidoStatusHistoricoModel",
]
