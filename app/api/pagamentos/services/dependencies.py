from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.pagamentos.services.service_pagamento import PagamentoService
from app.api.pagamentos.services.service_pagamento_gateway import PaymentGatewayClient
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.database.db_connection import get_db


@lru_cache
def get_payment_gateway() -> PaymentGatewayClient:
    # uma instância por processo: o modo mock guarda as consultas por referência
    return PaymentGatewayClient()


def get_pagamento_service(
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
    pedido_service: PedidoService = Depends(get_pedido_service),
) -> PagamentoService:
    return PagamentoService(db, gateway=gateway, pedido_service=pedido_service)
