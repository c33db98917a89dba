from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from app.api.pedidos.schemas.schema_pedido import (
    AtualizarStatusRequest,
    CancelarPedidoRequest,
    PedidoDetalheOut,
    PedidoOut,
)
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pedidos", tags=["Admin - Pedidos"])


@router.get("/ativos", response_model=List[PedidoOut])
def listar_ativos(svc: PedidoService = Depends(get_pedido_service)):
    return svc.listar_ativos()


@router.get("/historico", response_model=List[PedidoOut])
def listar_historico(
    limite: Optional[int] = Query(None, ge=-1, description="Quantidade máxima; -1 traz todos"),
    svc: PedidoService = Depends(get_pedido_service),
):
    return svc.listar_historico(limite)


@router.put("/{pedido_id}/status", response_model=PedidoOut)
def atualizar_status(
    pedido_id: int = Path(..., gt=0),
    payload: AtualizarStatusRequest = Body(...),
    svc: PedidoService = Depends(get_pedido_service),
):
    logger.info(f"[Pedidos] Atualização de status solicitada - id={pedido_id} status={payload.status.value}")
    return svc.atualizar_status(pedido_id, payload.status)


@router.post("/{pedido_id}/cancelar", response_model=PedidoOut)
def cancelar_pedido(
    pedido_id: int = Path(..., gt=0),
    payload: Optional[CancelarPedidoRequest] = Body(None),
    svc: PedidoService = Depends(get_pedido_service),
):
    motivo = payload.motivo if payload else None
    logger.info(f"[Pedidos] Cancelamento solicitado - id={pedido_id} motivo={motivo}")
    return svc.cancelar(pedido_id, motivo)


@router.get("/{pedido_id}", response_model=PedidoDetalheOut)
def obter_pedido(pedido_id: int = Path(..., gt=0), svc: PedidoService = Depends(get_pedido_service)):
    return svc.obter(pedido_id)
