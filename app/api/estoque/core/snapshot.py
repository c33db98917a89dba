"""
Fotografias imutáveis do estoque e das receitas.

Os motores de disponibilidade e consumo trabalham sobre estas estruturas,
nunca sobre a sessão do banco: uma avaliação = uma leitura do estoque.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum


def _decimal(valor) -> Decimal:
    return valor if isinstance(valor, Decimal) else Decimal(str(valor or 0))


@dataclass(slots=True, frozen=True)
class PorcaoSnapshot:
    id: int
    rotulo: str
    gramas: Decimal


@dataclass(slots=True, frozen=True)
class IngredienteSnapshot:
    id: int
    nome: str
    tipo_unidade: TipoUnidadeEnum
    categoria: CategoriaIngredienteEnum
    estoque_atual: Decimal
    estoque_minimo: Decimal = Decimal("0")
    quantidade_padrao_pedido: Optional[Decimal] = None
    porcoes: tuple[PorcaoSnapshot, ...] = ()

    def gramas_porcao(self, porcao_id: Optional[int]) -> Optional[Decimal]:
        if porcao_id is None or self.tipo_unidade != TipoUnidadeEnum.PESO:
            return None
        for porcao in self.porcoes:
            if porcao.id == porcao_id:
                return porcao.gramas
        return None

    @classmethod
    def from_model(cls, model) -> "IngredienteSnapshot":
        return cls(
            id=model.id,
            nome=model.nome,
            tipo_unidade=TipoUnidadeEnum(model.tipo_unidade),
            categoria=CategoriaIngredienteEnum(model.categoria),
            estoque_atual=_decimal(model.estoque_atual),
            estoque_minimo=_decimal(model.estoque_minimo),
            quantidade_padrao_pedido=(
                _decimal(model.quantidade_padrao_pedido) if model.quantidade_padrao_pedido is not None else None
            ),
            porcoes=tuple(
                PorcaoSnapshot(id=p.id, rotulo=p.rotulo, gramas=_decimal(p.gramas)) for p in model.porcoes
            ),
        )


@dataclass(slots=True, frozen=True)
class ItemReceitaSnapshot:
    ingrediente_id: int
    quantidade_usada: Decimal
    porcao_id: Optional[int] = None


@dataclass(slots=True, frozen=True)
class ProdutoReceitaSnapshot:
    id: int
    nome: str
    itens: tuple[ItemReceitaSnapshot, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, model) -> "ProdutoReceitaSnapshot":
        return cls(
            id=model.id,
            nome=model.nome,
            itens=tuple(
                ItemReceitaSnapshot(
                    ingrediente_id=r.ingrediente_id,
                    quantidade_usada=_decimal(r.quantidade_usada),
                    porcao_id=r.porcao_id,
                )
                for r in model.receita
            ),
        )


def indexar_estoque(
    estoque: Mapping[int, IngredienteSnapshot] | Iterable[IngredienteSnapshot],
) -> Mapping[int, IngredienteSnapshot]:
    if isinstance(estoque, Mapping):
        return estoque
    return {ing.id: ing for ing in estoque}


def quantidade_por_unidade(item: ItemReceitaSnapshot, ingrediente: IngredienteSnapshot) -> Decimal:
    """
    Quanto uma unidade do produto consome do insumo, na unidade do estoque.

    Com porção selecionada: quantidade_usada x (gramas da porção / 1000), em kg.
    Sem porção: quantidade_usada direto (kg ou unidades).
    """
    gramas = ingrediente.gramas_porcao(item.porcao_id)
    if gramas is not None:
        return item.quantidade_usada * gramas / Decimal("1000")
    return item.quantidade_usada
