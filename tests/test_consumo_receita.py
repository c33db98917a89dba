from decimal import Decimal

from app.api.estoque.core.consumo_receita import LinhaConsumo, calcular_baixas, calcular_baixas_detalhadas
from app.api.estoque.core.snapshot import (
    IngredienteSnapshot,
    ItemReceitaSnapshot,
    PorcaoSnapshot,
    ProdutoReceitaSnapshot,
)
from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum

CARNE = IngredienteSnapshot(
    1, "Carne", TipoUnidadeEnum.PESO, CategoriaIngredienteEnum.INGREDIENTE, Decimal("5"),
    porcoes=(PorcaoSnapshot(10, "100g", Decimal("100")),),
)
CAIXA = IngredienteSnapshot(2, "Caixa", TipoUnidadeEnum.UNIDADE, CategoriaIngredienteEnum.EMBALAGEM, Decimal("50"))
MOLHO = IngredienteSnapshot(
    3, "Molho", TipoUnidadeEnum.UNIDADE, CategoriaIngredienteEnum.ACOMPANHAMENTO, Decimal("30"),
    quantidade_padrao_pedido=Decimal("2"),
)
ESTOQUE = [CARNE, CAIXA, MOLHO]

BURGER = ProdutoReceitaSnapshot(
    1, "Burger", (ItemReceitaSnapshot(1, Decimal("1"), porcao_id=10), ItemReceitaSnapshot(2, Decimal("1")))
)
DUPLO = ProdutoReceitaSnapshot(
    2, "Duplo", (ItemReceitaSnapshot(1, Decimal("2"), porcao_id=10), ItemReceitaSnapshot(2, Decimal("1")))
)
PRODUTOS = {1: BURGER, 2: DUPLO}


def test_delivery_soma_ingredientes_e_embalagem_uma_vez():
    baixas = calcular_baixas([LinhaConsumo(1, 2)], [], "delivery", PRODUTOS, ESTOQUE)
    assert baixas == {1: Decimal("0.2"), 2: Decimal("1")}


def test_consumo_local_nao_usa_embalagem_nem_acompanhamento():
    baixas = calcular_baixas([LinhaConsumo(1, 2)], [3], "dine-in", PRODUTOS, ESTOQUE)
    assert baixas == {1: Decimal("0.2")}


def test_varias_linhas_somam_mesmo_insumo():
    baixas = calcular_baixas([LinhaConsumo(1, 1), LinhaConsumo(2, 1)], [], "pickup", PRODUTOS, ESTOQUE)
    assert baixas == {1: Decimal("0.3"), 2: Decimal("1")}


def test_acompanhamento_sai_uma_vez_com_quantidade_padrao():
    baixas = calcular_baixas([LinhaConsumo(1, 3)], [3, 3], "delivery", PRODUTOS, ESTOQUE)
    assert baixas[3] == Decimal("2")


def test_adicional_que_nao_e_acompanhamento_e_ignorado():
    baixas = calcular_baixas([LinhaConsumo(1, 1)], [1], "delivery", PRODUTOS, ESTOQUE)
    assert baixas[1] == Decimal("0.1")


def test_baixas_detalhadas_mantem_produto_de_origem():
    baixas = calcular_baixas_detalhadas([LinhaConsumo(1, 1), LinhaConsumo(2, 1)], [], "pickup", PRODUTOS, ESTOQUE)
    por_produto = {(b.ingrediente_id, b.produto_id): b.quantidade for b in baixas}
    assert por_produto == {
        (1, 1): Decimal("0.1"),
        (1, 2): Decimal("0.2"),
        (2, None): Decimal("1"),
    }


def test_produto_desconhecido_e_linha_zerada_nao_geram_baixa():
    assert calcular_baixas([LinhaConsumo(99, 1), LinhaConsumo(1, 0)], [], "delivery", PRODUTOS, ESTOQUE) == {}
