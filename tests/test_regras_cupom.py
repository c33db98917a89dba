from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from app.api.cupons.core.regras_cupom import (
    MOTIVO_ESGOTADO,
    MOTIVO_EXPIRADO,
    MOTIVO_INATIVO,
    MOTIVO_NAO_ENCONTRADO,
    MOTIVO_NAO_INICIADO,
    calcular_desconto,
    validar_cupom,
)
from app.api.shared.schemas.schema_shared_enums import TipoCupomEnum


def _cupom(**kwargs):
    dados = dict(
        codigo="PROMO",
        tipo=TipoCupomEnum.FIXO,
        valor=Decimal("10"),
        ativo=True,
        esgotado=False,
        validade_inicio=None,
        validade_fim=None,
        valor_minimo_pedido=None,
    )
    dados.update(kwargs)
    return SimpleNamespace(**dados)


def test_desconto_percentual_arredonda_em_centavos():
    assert calcular_desconto(TipoCupomEnum.PERCENTUAL, Decimal("15"), Decimal("33.33")) == Decimal("5.00")


def test_desconto_fixo_nao_passa_do_subtotal():
    assert calcular_desconto(TipoCupomEnum.FIXO, Decimal("50"), Decimal("30.00")) == Decimal("30.00")


def test_desconto_percentual_100_zera_subtotal():
    assert calcular_desconto("percentage", 100, "42.90") == Decimal("42.90")


def test_cupom_inexistente():
    resultado = validar_cupom(None, Decimal("40"))
    assert not resultado.valido
    assert resultado.motivo == MOTIVO_NAO_ENCONTRADO


def test_cupom_inativo():
    assert validar_cupom(_cupom(ativo=False), Decimal("40")).motivo == MOTIVO_INATIVO


def test_cupom_esgotado():
    assert validar_cupom(_cupom(esgotado=True), Decimal("40")).motivo == MOTIVO_ESGOTADO


def test_cupom_fora_da_validade():
    agora = datetime(2026, 5, 1, 12, 0)
    futuro = _cupom(validade_inicio=agora + timedelta(days=1))
    vencido = _cupom(validade_fim=agora - timedelta(minutes=1))

    assert validar_cupom(futuro, Decimal("40"), agora=agora).motivo == MOTIVO_NAO_INICIADO
    assert validar_cupom(vencido, Decimal("40"), agora=agora).motivo == MOTIVO_EXPIRADO


def test_cupom_abaixo_do_minimo():
    resultado = validar_cupom(_cupom(valor_minimo_pedido=Decimal("50")), Decimal("49.99"))
    assert not resultado.valido
    assert "50,00" in resultado.motivo


def test_cupom_valido_devolve_desconto():
    resultado = validar_cupom(_cupom(valor_minimo_pedido=Decimal("50")), Decimal("50.00"))
    assert resultado.valido
    assert resultado.desconto == Decimal("10.00")
