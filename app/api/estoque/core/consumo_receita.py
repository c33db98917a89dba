"""
Cálculo das baixas de estoque de um pedido.

Regras:
- ingrediente: quantidade por unidade x quantidade da linha, somando linhas
  que usam o mesmo insumo;
- embalagem: uma vez por pedido em delivery/retirada, nunca no local;
- acompanhamento: só os escolhidos pelo cliente, `quantidade_padrao_pedido`
  uma vez por pedido, e nada no consumo local.

Nada aqui escreve no banco; quem chama decide quando aplicar.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from app.api.estoque.core.snapshot import (
    IngredienteSnapshot,
    ProdutoReceitaSnapshot,
    indexar_estoque,
    quantidade_por_unidade,
)
from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoEntregaEnum

QUANTIDADE_PADRAO_ACOMPANHAMENTO = Decimal("1")


@dataclass(slots=True, frozen=True)
class LinhaConsumo:
    produto_id: int
    quantidade: int


@dataclass(slots=True, frozen=True)
class BaixaCalculada:
    ingrediente_id: int
    quantidade: Decimal
    produto_id: Optional[int] = None  # None para embalagem/acompanhamento do pedido


def calcular_baixas_detalhadas(
    linhas: Iterable[LinhaConsumo],
    adicionais_ids: Iterable[int],
    tipo_entrega: TipoEntregaEnum | str,
    produtos: Mapping[int, ProdutoReceitaSnapshot],
    estoque: Mapping[int, IngredienteSnapshot] | Iterable[IngredienteSnapshot],
) -> list[BaixaCalculada]:
    """Baixas por (insumo, produto), na ordem das linhas do pedido."""
    estoque = indexar_estoque(estoque)
    consumo_local = TipoEntregaEnum(tipo_entrega) == TipoEntregaEnum.LOCAL

    por_produto: dict[tuple[int, int], Decimal] = {}
    embalagens: dict[int, Decimal] = {}

    for linha in linhas:
        produto = produtos.get(linha.produto_id)
        if produto is None or linha.quantidade <= 0:
            continue
        for item in produto.itens:
            ingrediente = estoque.get(item.ingrediente_id)
            if ingrediente is None:
                continue
            necessario = quantidade_por_unidade(item, ingrediente)

            if ingrediente.categoria == CategoriaIngredienteEnum.INGREDIENTE:
                chave = (ingrediente.id, produto.id)
                por_produto[chave] = por_produto.get(chave, Decimal("0")) + necessario * linha.quantidade
            elif ingrediente.categoria == CategoriaIngredienteEnum.EMBALAGEM and not consumo_local:
                # mesma embalagem em vários produtos continua saindo uma vez só
                embalagens[ingrediente.id] = max(embalagens.get(ingrediente.id, Decimal("0")), necessario)

    baixas = [
        BaixaCalculada(ingrediente_id=ing_id, quantidade=qtd, produto_id=prod_id)
        for (ing_id, prod_id), qtd in por_produto.items()
    ]
    baixas.extend(BaixaCalculada(ingrediente_id=ing_id, quantidade=qtd) for ing_id, qtd in embalagens.items())

    if not consumo_local:
        vistos: set[int] = set()
        for ingrediente_id in adicionais_ids:
            if ingrediente_id in vistos:
                continue
            vistos.add(ingrediente_id)
            ingrediente = estoque.get(ingrediente_id)
            if ingrediente is None or ingrediente.categoria != CategoriaIngredienteEnum.ACOMPANHAMENTO:
                continue
            baixas.append(
                BaixaCalculada(
                    ingrediente_id=ingrediente_id,
                    quantidade=ingrediente.quantidade_padrao_pedido or QUANTIDADE_PADRAO_ACOMPANHAMENTO,
                )
            )

    return [b for b in baixas if b.quantidade > 0]


def calcular_baixas(
    linhas: Iterable[LinhaConsumo],
    adicionais_ids: Iterable[int],
    tipo_entrega: TipoEntregaEnum | str,
    produtos: Mapping[int, ProdutoReceitaSnapshot],
    estoque: Mapping[int, IngredienteSnapshot] | Iterable[IngredienteSnapshot],
) -> dict[int, Decimal]:
    """Mapa ingrediente_id -> quantidade total a baixar."""
    total: dict[int, Decimal] = {}
    for baixa in calcular_baixas_detalhadas(linhas, adicionais_ids, tipo_entrega, produtos, estoque):
        total[baixa.ingrediente_id] = total.get(baixa.ingrediente_id, Decimal("0")) + baixa.quantidade
    return total
