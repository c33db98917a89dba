from typing import List

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.pedidos.schemas.schema_pedido import PedidoCreate, PedidoCriadoResponse, PedidoOut
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pedidos", tags=["Client - Pedidos"])


@router.post("", response_model=PedidoCriadoResponse, status_code=status.HTTP_201_CREATED)
def criar_pedido(
    payload: PedidoCreate = Body(...),
    svc: PedidoService = Depends(get_pedido_service),
):
    """
    Finaliza o checkout. Preços vêm do catálogo, o cupom é consumido na mesma
    transação e o total segue `max(0, subtotal - desconto) + taxa (delivery)`.
    """
    logger.info(
        f"[Pedidos] Checkout recebido - tipo={payload.tipo_entrega.value} itens={len(payload.itens)} "
        f"pagamento={payload.forma_pagamento.value} cupom={payload.cupom_codigo}"
    )
    pedido = svc.criar_pedido(payload)
    return PedidoCriadoResponse(
        pedido_id=pedido.id,
        status=pedido.status,
        subtotal=float(pedido.subtotal),
        desconto=float(pedido.desconto),
        taxa_entrega=float(pedido.taxa_entrega),
        total=float(pedido.total),
    )


@router.get("/buscar", response_model=List[PedidoOut])
def buscar_por_telefone(
    telefone: str = Query(..., min_length=8),
    svc: PedidoService = Depends(get_pedido_service),
):
    return svc.buscar_por_telefone(telefone)
