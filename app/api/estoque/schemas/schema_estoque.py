from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator, model_validator

from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum


# ------------------- PORÇÕES / COMPRAS -------------------
class PorcaoIn(BaseModel):
    rotulo: constr(min_length=1, max_length=60)
    gramas: Decimal = Field(..., gt=0)


class PorcaoOut(BaseModel):
    id: int
    rotulo: str
    gramas: float

    model_config = ConfigDict(from_attributes=True)


class CompraOut(BaseModel):
    id: int
    data: datetime
    quantidade: float
    preco: float

    model_config = ConfigDict(from_attributes=True)


# ------------------- INGREDIENTE -------------------
def _checar_coerencia(tipo_unidade, categoria, porcoes, quantidade_padrao_pedido):
    if porcoes and tipo_unidade != TipoUnidadeEnum.PESO:
        raise ValueError("Porções só podem ser definidas para insumos controlados por peso")
    if quantidade_padrao_pedido is not None and categoria != CategoriaIngredienteEnum.ACOMPANHAMENTO:
        raise ValueError("Quantidade padrão por pedido só se aplica a acompanhamentos")


class IngredienteEstoqueCreate(BaseModel):
    nome: constr(min_length=1, max_length=100)
    tipo_unidade: TipoUnidadeEnum
    categoria: CategoriaIngredienteEnum = CategoriaIngredienteEnum.INGREDIENTE
    estoque_atual: Decimal = Decimal("0")
    estoque_minimo: Decimal = Field(Decimal("0"), ge=0)
    quantidade_padrao_pedido: Optional[Decimal] = Field(None, gt=0)
    porcoes: List[PorcaoIn] = Field(default_factory=list)

    @field_validator("nome")
    @classmethod
    def _nome_limpo(cls, v: str) -> str:
        return " ".join(v.split())

    @model_validator(mode="after")
    def _coerencia(self):
        _checar_coerencia(self.tipo_unidade, self.categoria, self.porcoes, self.quantidade_padrao_pedido)
        return self


class IngredienteEstoqueUpdate(BaseModel):
    """Campos ausentes não são alterados; `porcoes` informado substitui a lista."""
    nome: Optional[constr(min_length=1, max_length=100)] = None
    tipo_unidade: Optional[TipoUnidadeEnum] = None
    categoria: Optional[CategoriaIngredienteEnum] = None
    estoque_atual: Optional[Decimal] = None
    estoque_minimo: Optional[Decimal] = Field(None, ge=0)
    quantidade_padrao_pedido: Optional[Decimal] = Field(None, gt=0)
    ativo: Optional[bool] = None
    porcoes: Optional[List[PorcaoIn]] = None


class IngredienteEstoqueOut(BaseModel):
    id: int
    nome: str
    tipo_unidade: TipoUnidadeEnum
    categoria: CategoriaIngredienteEnum
    estoque_atual: float
    estoque_minimo: float
    quantidade_padrao_pedido: Optional[float] = None
    preco_unitario: Optional[float] = None
    custo_medio: Optional[float] = None
    ativo: bool
    porcoes: List[PorcaoOut] = Field(default_factory=list)
    compras: List[CompraOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class IngredienteResumoOut(BaseModel):
    id: int
    nome: str
    estoque_atual: float
    estoque_minimo: float

    model_config = ConfigDict(from_attributes=True)


# ------------------- OPERAÇÕES -------------------
class ReposicaoRequest(BaseModel):
    quantidade: Decimal = Field(..., gt=0)
    preco: Decimal = Field(..., ge=0, description="Valor total pago na compra")


class DisponibilidadeResponse(BaseModel):
    produtos_indisponiveis: List[int]
    ingredientes_zerados: List[IngredienteResumoOut]
    ingredientes_baixos: List[IngredienteResumoOut]


class RelatorioDiarioLinha(BaseModel):
    ingrediente_id: int
    nome: str
    consumido: float
    custo: float
    restante: float


class RelatorioDiarioResponse(BaseModel):
    inicio_dia_operacional: datetime
    fim_dia_operacional: datetime
    linhas: List[RelatorioDiarioLinha]
    custo_total_dia: float


class AgendaReposicaoSchema(BaseModel):
    """dia da semana (0=segunda ... 6=domingo) -> ids dos ingredientes"""
    dias: Dict[int, List[int]] = Field(default_factory=dict)

    @field_validator("dias")
    @classmethod
    def _dias_validos(cls, v: Dict[int, List[int]]) -> Dict[int, List[int]]:
        invalidos = [d for d in v if d < 0 or d > 6]
        if invalidos:
            raise ValueError(f"Dias da semana inválidos: {invalidos}")
        return {d: sorted(set(ids)) for d, ids in v.items()}
