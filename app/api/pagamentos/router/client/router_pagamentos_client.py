from fastapi import APIRouter, Body, Depends, Path

from app.api.pagamentos.schemas.schema_pagamento import (
    CobrancaCartaoResponse,
    CobrarCartaoRequest,
    CriarPixRequest,
    PixPagamentoResponse,
    StatusPagamentoResponse,
)
from app.api.pagamentos.services.dependencies import get_pagamento_service
from app.api.pagamentos.services.service_pagamento import PagamentoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pagamentos", tags=["Client - Pagamentos"])


@router.post("/pix", response_model=PixPagamentoResponse)
async def criar_pix(
    payload: CriarPixRequest = Body(...),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """
    Gera a intenção PIX do pedido. No modo manual devolve só a chave da loja;
    no automático devolve QR + copia-e-cola e reaproveita intenção pendente válida.
    """
    logger.info(f"[Pagamentos] Solicitação de PIX - pedido={payload.pedido_id}")
    return await svc.criar_pix(payload.pedido_id)


@router.get("/status/{provider_reference}", response_model=StatusPagamentoResponse)
async def consultar_status(
    provider_reference: str = Path(..., min_length=1),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    return await svc.consultar_status(provider_reference)


@router.post("/cartao", response_model=CobrancaCartaoResponse)
async def cobrar_cartao(
    payload: CobrarCartaoRequest = Body(...),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """Cartão inválido volta `sucesso=false` com a lista de erros, sem chamar o gateway."""
    return await svc.cobrar_cartao(payload.pedido_id, payload.cartao)
