from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum


# ------------------- RECEITA -------------------
class ReceitaItemIn(BaseModel):
    ingrediente_id: int = Field(..., gt=0)
    quantidade_usada: Decimal = Field(..., gt=0)
    porcao_id: Optional[int] = None
    # None = padrão da categoria (embalagem/acompanhamento sempre ocultos)
    ocultar_cliente: Optional[bool] = None


class ReceitaItemOut(BaseModel):
    id: int
    ingrediente_id: int
    ingrediente_nome: str
    categoria: CategoriaIngredienteEnum
    quantidade_usada: float
    porcao_id: Optional[int] = None
    ocultar_cliente: bool


# ------------------- PRODUTO -------------------
class ProdutoCreate(BaseModel):
    nome: constr(min_length=1, max_length=100)
    descricao: Optional[constr(max_length=255)] = None
    categoria: Optional[constr(max_length=60)] = None
    preco: Decimal = Field(..., ge=0)
    ativo: bool = True
    receita: List[ReceitaItemIn] = Field(default_factory=list)
    extras: List[constr(min_length=1, max_length=100)] = Field(default_factory=list)


class ProdutoUpdate(BaseModel):
    nome: Optional[constr(min_length=1, max_length=100)] = None
    descricao: Optional[constr(max_length=255)] = None
    categoria: Optional[constr(max_length=60)] = None
    preco: Optional[Decimal] = Field(None, ge=0)
    ativo: Optional[bool] = None
    receita: Optional[List[ReceitaItemIn]] = None
    extras: Optional[List[constr(min_length=1, max_length=100)]] = None


class ProdutoAdminOut(BaseModel):
    id: int
    nome: str
    descricao: Optional[str] = None
    categoria: Optional[str] = None
    preco: float
    ativo: bool
    receita: List[ReceitaItemOut]
    extras: List[str]
    disponivel: bool
    unidades_disponiveis: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ProdutoPublicoOut(BaseModel):
    """Visão do cardápio: sem embalagens, acompanhamentos ou itens ocultos."""
    id: int
    nome: str
    descricao: Optional[str] = None
    categoria: Optional[str] = None
    preco: float
    ingredientes: List[str]
    disponivel: bool


class AcompanhamentoPublicoOut(BaseModel):
    """Acompanhamentos que o cliente pode escolher no checkout."""
    ingrediente_id: int
    nome: str
    disponivel: bool
