from typing import List

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.catalogo.schemas.schema_produto import ProdutoAdminOut, ProdutoCreate, ProdutoUpdate
from app.api.catalogo.services.service_produto import ProdutoService
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/produtos/admin", tags=["Admin - Produtos"])


@router.get("", response_model=List[ProdutoAdminOut])
def listar_produtos(db: Session = Depends(get_db)):
    return ProdutoService(db).listar_admin()


@router.get("/{produto_id}", response_model=ProdutoAdminOut)
def obter_produto(produto_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    return ProdutoService(db).obter_admin(produto_id)


@router.post("", response_model=ProdutoAdminOut, status_code=status.HTTP_201_CREATED)
def criar_produto(payload: ProdutoCreate = Body(...), db: Session = Depends(get_db)):
    return ProdutoService(db).criar(payload)


@router.put("/{produto_id}", response_model=ProdutoAdminOut)
def atualizar_produto(
    produto_id: int = Path(..., gt=0),
    payload: ProdutoUpdate = Body(...),
    db: Session = Depends(get_db),
):
    return ProdutoService(db).atualizar(produto_id, payload)


@router.delete("/{produto_id}", status_code=status.HTTP_204_NO_CONTENT)
def desativar_produto(produto_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    """Produtos não são apagados: pedidos antigos continuam referenciando."""
    ProdutoService(db).desativar(produto_id)
    return None
