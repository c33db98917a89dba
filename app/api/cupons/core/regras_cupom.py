"""
Cálculo de desconto de cupom.

Funções puras: não consultam banco nem alteram o cupom. O incremento de uso
acontece no servidor, na mesma transação que cria o pedido.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from app.api.shared.schemas.schema_shared_enums import TipoCupomEnum
from app.utils.database_utils import now_trimmed, para_fuso_loja

CENTAVOS = Decimal("0.01")

MOTIVO_NAO_ENCONTRADO = "Cupom não encontrado"
MOTIVO_INATIVO = "Cupom inativo"
MOTIVO_ESGOTADO = "Cupom esgotado"
MOTIVO_EXPIRADO = "Cupom expirado"
MOTIVO_NAO_INICIADO = "Cupom ainda não está válido"


@dataclass(slots=True, frozen=True)
class ResultadoCupom:
    valido: bool
    desconto: Decimal = Decimal("0.00")
    cupom: Optional[Any] = None
    motivo: Optional[str] = None


def _dinheiro(valor) -> Decimal:
    return Decimal(str(valor or 0)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_desconto(tipo: TipoCupomEnum | str, valor, subtotal) -> Decimal:
    """Desconto limitado a [0, subtotal]."""
    subtotal = max(_dinheiro(subtotal), Decimal("0.00"))
    valor = Decimal(str(valor or 0))

    if TipoCupomEnum(tipo) == TipoCupomEnum.PERCENTUAL:
        desconto = subtotal * valor / Decimal("100")
    else:
        desconto = valor

    desconto = _dinheiro(desconto)
    return min(max(desconto, Decimal("0.00")), subtotal)


def validar_cupom(cupom, subtotal, agora: datetime | None = None) -> ResultadoCupom:
    """
    Valida o cupom (objeto com os atributos de CupomModel, ou None) contra o
    subtotal do pedido, que não inclui a taxa de entrega.
    """
    if cupom is None:
        return ResultadoCupom(valido=False, motivo=MOTIVO_NAO_ENCONTRADO)

    if not cupom.ativo:
        return ResultadoCupom(valido=False, cupom=cupom, motivo=MOTIVO_INATIVO)

    if cupom.esgotado:
        return ResultadoCupom(valido=False, cupom=cupom, motivo=MOTIVO_ESGOTADO)

    agora = para_fuso_loja(agora or now_trimmed())
    if cupom.validade_inicio and agora < para_fuso_loja(cupom.validade_inicio):
        return ResultadoCupom(valido=False, cupom=cupom, motivo=MOTIVO_NAO_INICIADO)
    if cupom.validade_fim and agora > para_fuso_loja(cupom.validade_fim):
        return ResultadoCupom(valido=False, cupom=cupom, motivo=MOTIVO_EXPIRADO)

    subtotal = _dinheiro(subtotal)
    minimo = cupom.valor_minimo_pedido
    if minimo is not None and subtotal < _dinheiro(minimo):
        return ResultadoCupom(
            valido=False,
            cupom=cupom,
            motivo=f"Pedido mínimo de R$ {_dinheiro(minimo):.2f} para este cupom".replace(".", ","),
        )

    return ResultadoCupom(
        valido=True,
        desconto=calcular_desconto(cupom.tipo, cupom.valor, subtotal),
        cupom=cupom,
    )
