from decimal import Decimal, ROUND_HALF_UP

from app.api.shared.schemas.schema_shared_enums import TipoEntregaEnum

CENTAVOS = Decimal("0.01")


def dinheiro(valor) -> Decimal:
    return Decimal(str(valor or 0)).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_total(subtotal, desconto, taxa_entrega, tipo_entrega: TipoEntregaEnum | str) -> Decimal:
    """total = max(0, subtotal - desconto) + taxa de entrega (só em delivery)."""
    base = max(dinheiro(subtotal) - dinheiro(desconto), Decimal("0.00"))
    if TipoEntregaEnum(tipo_entrega) == TipoEntregaEnum.DELIVERY:
        base += dinheiro(taxa_entrega)
    return base
