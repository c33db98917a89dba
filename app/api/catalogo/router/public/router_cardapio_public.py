from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.catalogo.schemas.schema_produto import AcompanhamentoPublicoOut, ProdutoPublicoOut
from app.api.catalogo.services.service_produto import ProdutoService
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/produtos", tags=["Public - Cardápio"])


@router.get("", response_model=List[ProdutoPublicoOut])
def listar_cardapio(db: Session = Depends(get_db)):
    return ProdutoService(db).listar_cardapio()


@router.get("/acompanhamentos", response_model=List[AcompanhamentoPublicoOut])
def listar_acompanhamentos(db: Session = Depends(get_db)):
    return ProdutoService(db).listar_acompanhamentos()
