from typing import List

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.estoque.schemas.schema_estoque import (
    AgendaReposicaoSchema,
    DisponibilidadeResponse,
    IngredienteEstoqueCreate,
    IngredienteEstoqueOut,
    IngredienteEstoqueUpdate,
    RelatorioDiarioResponse,
    ReposicaoRequest,
)
from app.api.estoque.services.service_estoque import EstoqueService
from app.database.db_connection import get_db
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger

router = APIRouter(prefix="/api/estoque", tags=["Admin - Estoque"])


def get_estoque_service(db: Session = Depends(get_db)) -> EstoqueService:
    return EstoqueService(db)


# ======================================================================
# ============================ INGREDIENTES ============================
@router.get("/ingredientes", response_model=List[IngredienteEstoqueOut])
def listar_ingredientes(svc: EstoqueService = Depends(get_estoque_service)):
    return svc.listar()


@router.get("/ingredientes/{ingrediente_id}", response_model=IngredienteEstoqueOut)
def obter_ingrediente(ingrediente_id: int = Path(..., gt=0), svc: EstoqueService = Depends(get_estoque_service)):
    return svc.obter(ingrediente_id)


@router.post("/ingredientes", response_model=IngredienteEstoqueOut, status_code=status.HTTP_201_CREATED)
def criar_ingrediente(
    payload: IngredienteEstoqueCreate = Body(...),
    svc: EstoqueService = Depends(get_estoque_service),
):
    return svc.criar(payload)


@router.put("/ingredientes/{ingrediente_id}", response_model=IngredienteEstoqueOut)
def atualizar_ingrediente(
    ingrediente_id: int = Path(..., gt=0),
    payload: IngredienteEstoqueUpdate = Body(...),
    svc: EstoqueService = Depends(get_estoque_service),
):
    return svc.atualizar(ingrediente_id, payload)


@router.delete("/ingredientes/{ingrediente_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_ingrediente(ingrediente_id: int = Path(..., gt=0), svc: EstoqueService = Depends(get_estoque_service)):
    svc.excluir(ingrediente_id)
    return None


@router.post("/ingredientes/{ingrediente_id}/reposicao", response_model=IngredienteEstoqueOut)
def repor_ingrediente(
    ingrediente_id: int = Path(..., gt=0),
    payload: ReposicaoRequest = Body(...),
    svc: EstoqueService = Depends(get_estoque_service),
):
    logger.info(f"[Estoque] Reposição solicitada - id={ingrediente_id} quantidade={payload.quantidade}")
    return svc.repor(ingrediente_id, payload.quantidade, payload.preco)


# ======================================================================
# ====================== DISPONIBILIDADE / RELATÓRIO ===================
@router.get("/disponibilidade", response_model=DisponibilidadeResponse)
def disponibilidade(svc: EstoqueService = Depends(get_estoque_service)):
    """Produtos que não podem ser vendidos agora e insumos zerados/abaixo do mínimo."""
    return svc.disponibilidade()


@router.get("/relatorio-diario", response_model=RelatorioDiarioResponse)
def relatorio_diario(svc: EstoqueService = Depends(get_estoque_service)):
    """Consumo do dia operacional corrente (04:00 às 04:00)."""
    return svc.relatorio_diario()


# ======================================================================
# ======================== AGENDA DE REPOSIÇÃO =========================
@router.get("/agenda-reposicao", response_model=AgendaReposicaoSchema)
def obter_agenda(svc: EstoqueService = Depends(get_estoque_service)):
    return svc.obter_agenda()


@router.put("/agenda-reposicao", response_model=AgendaReposicaoSchema)
def salvar_agenda(
    payload: AgendaReposicaoSchema = Body(...),
    svc: EstoqueService = Depends(get_estoque_service),
):
    return svc.salvar_agenda(payload)


@router.get("/agenda-reposicao/hoje", response_model=List[IngredienteEstoqueOut])
def reposicoes_de_hoje(svc: EstoqueService = Depends(get_estoque_service)):
    return svc.reposicoes_do_dia(now_trimmed().weekday())
