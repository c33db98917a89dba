from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.cupons.schemas.schema_cupom import CupomOut, CupomCreate, CupomUpdate
from app.api.cupons.services.service_cupom import CuponsService
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/cupons/admin", tags=["Admin - Cupons"])


@router.get("", response_model=List[CupomOut])
def listar_cupons(db: Session = Depends(get_db)):
    return CuponsService(db).list()


@router.get("/{cupom_id}", response_model=CupomOut)
def obter_cupom(cupom_id: int = Path(...), db: Session = Depends(get_db)):
    return CuponsService(db).get(cupom_id)


@router.post("", response_model=CupomOut, status_code=status.HTTP_201_CREATED)
def criar_cupom(payload: CupomCreate, db: Session = Depends(get_db)):
    return CuponsService(db).create(payload)


@router.put("/{cupom_id}", response_model=CupomOut)
def atualizar_cupom(cupom_id: int, payload: CupomUpdate, db: Session = Depends(get_db)):
    return CuponsService(db).update(cupom_id, payload)


@router.delete("/{cupom_id}", status_code=status.HTTP_204_NO_CONTENT)
def deletar_cupom(cupom_id: int, db: Session = Depends(get_db)):
    CuponsService(db).delete(cupom_id)
    return None
