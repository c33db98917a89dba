from typing import List

from fastapi import APIRouter, Depends, Path

from app.api.pagamentos.schemas.schema_pagamento import TransacaoOut
from app.api.pagamentos.services.dependencies import get_pagamento_service
from app.api.pagamentos.services.service_pagamento import PagamentoService

router = APIRouter(prefix="/api/pagamentos/admin", tags=["Admin - Pagamentos"])


@router.get("/pedido/{pedido_id}", response_model=List[TransacaoOut])
def listar_transacoes_do_pedido(
    pedido_id: int = Path(..., gt=0),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    return svc.listar_do_pedido(pedido_id)
