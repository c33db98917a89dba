"""
Disponibilidade de produtos a partir do estoque.

Só insumos da categoria `ingredient` bloqueiam a venda; embalagem e
acompanhamento nunca tornam um produto indisponível.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR
from typing import Iterable, Mapping, Optional

from app.api.estoque.core.snapshot import (
    IngredienteSnapshot,
    ProdutoReceitaSnapshot,
    indexar_estoque,
    quantidade_por_unidade,
)
from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum

EstoqueSnapshot = Mapping[int, IngredienteSnapshot] | Iterable[IngredienteSnapshot]


def _necessidades(produto: ProdutoReceitaSnapshot, estoque: Mapping[int, IngredienteSnapshot]):
    """(ingrediente ou None, quantidade por unidade) de cada insumo bloqueante."""
    for item in produto.itens:
        ingrediente = estoque.get(item.ingrediente_id)
        if ingrediente is None:
            yield None, item.quantidade_usada
            continue
        if ingrediente.categoria != CategoriaIngredienteEnum.INGREDIENTE:
            continue
        yield ingrediente, quantidade_por_unidade(item, ingrediente)


def esta_disponivel(produto: ProdutoReceitaSnapshot, estoque: EstoqueSnapshot) -> bool:
    estoque = indexar_estoque(estoque)
    for ingrediente, necessario in _necessidades(produto, estoque):
        # insumo que sumiu do estoque: sem como garantir o preparo
        if ingrediente is None:
            return False
        if ingrediente.estoque_atual < necessario:
            return False
    return True


def unidades_disponiveis(produto: ProdutoReceitaSnapshot, estoque: EstoqueSnapshot) -> Optional[int]:
    """
    Quantas unidades o estoque atual comporta; o insumo mais escasso define o
    limite. None quando nenhum insumo bloqueante limita o produto.
    """
    estoque = indexar_estoque(estoque)
    limite: Optional[int] = None
    for ingrediente, necessario in _necessidades(produto, estoque):
        if ingrediente is None:
            return 0
        if necessario <= 0:
            continue
        saldo = max(ingrediente.estoque_atual, Decimal("0"))
        unidades = int((saldo / necessario).to_integral_value(rounding=ROUND_FLOOR))
        limite = unidades if limite is None else min(limite, unidades)
    return limite


def produtos_indisponiveis(
    produtos: Iterable[ProdutoReceitaSnapshot],
    estoque: EstoqueSnapshot,
) -> set[int]:
    """Variante em lote: uma única fotografia do estoque para todos os produtos."""
    estoque = indexar_estoque(estoque)
    return {produto.id for produto in produtos if not esta_disponivel(produto, estoque)}


def ingredientes_zerados(estoque: EstoqueSnapshot) -> list[IngredienteSnapshot]:
    return [i for i in indexar_estoque(estoque).values() if i.estoque_atual <= 0]


def ingredientes_baixos(estoque: EstoqueSnapshot) -> list[IngredienteSnapshot]:
    """Abaixo do mínimo de alerta mas ainda com saldo positivo."""
    return [
        i for i in indexar_estoque(estoque).values()
        if 0 < i.estoque_atual <= i.estoque_minimo
    ]
