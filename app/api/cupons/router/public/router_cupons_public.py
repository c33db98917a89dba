from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.api.cupons.schemas.schema_cupom import ValidarCupomRequest, ValidarCupomResponse
from app.api.cupons.services.service_cupom import CuponsService
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/cupons", tags=["Public - Cupons"])


@router.post("/validar", response_model=ValidarCupomResponse)
def validar_cupom(payload: ValidarCupomRequest = Body(...), db: Session = Depends(get_db)):
    """
    Valida um código de cupom contra o subtotal do carrinho (sem taxa de entrega).
    Cupom recusado não é erro HTTP: volta `valido=false` com o motivo.
    """
    return CuponsService(db).validar(payload.codigo, payload.subtotal)
