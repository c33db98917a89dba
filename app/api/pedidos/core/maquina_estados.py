"""
Grafo de status do pedido por tipo de entrega.

    delivery: pending -> preparing -> packing -> ready_for_delivery -> out_for_delivery -> completed
    pickup:   pending -> preparing -> ready_for_pickup -> completed
    dine-in:  pending -> preparing -> completed

`cancelled` sai de qualquer status não terminal. Só se anda um passo por vez.
Usado tanto pelo servidor quanto pelo painel cliente (app/fluxos).
"""
from __future__ import annotations

from typing import Optional

from app.api.shared.schemas.schema_shared_enums import PedidoStatusEnum, TipoEntregaEnum

S = PedidoStatusEnum

FLUXOS: dict[TipoEntregaEnum, tuple[PedidoStatusEnum, ...]] = {
    TipoEntregaEnum.DELIVERY: (
        S.PENDENTE, S.EM_PREPARO, S.EMBALANDO, S.PRONTO_ENTREGA, S.SAIU_PARA_ENTREGA, S.CONCLUIDO,
    ),
    TipoEntregaEnum.RETIRADA: (S.PENDENTE, S.EM_PREPARO, S.PRONTO_RETIRADA, S.CONCLUIDO),
    TipoEntregaEnum.LOCAL: (S.PENDENTE, S.EM_PREPARO, S.CONCLUIDO),
}

STATUS_TERMINAIS = frozenset({S.CONCLUIDO, S.CANCELADO})


class TransicaoInvalidaError(Exception):
    def __init__(self, atual: PedidoStatusEnum, alvo: PedidoStatusEnum, tipo_entrega: TipoEntregaEnum):
        self.atual = atual
        self.alvo = alvo
        self.tipo_entrega = tipo_entrega
        super().__init__(
            f"Transição inválida para pedido {tipo_entrega.value}: {atual.value} -> {alvo.value}"
        )


def eh_terminal(status: PedidoStatusEnum | str) -> bool:
    return PedidoStatusEnum(status) in STATUS_TERMINAIS


def proximo_status(tipo_entrega: TipoEntregaEnum | str, atual: PedidoStatusEnum | str) -> Optional[PedidoStatusEnum]:
    """Próximo passo do fluxo normal (sem cancelamento); None se terminal."""
    atual = PedidoStatusEnum(atual)
    fluxo = FLUXOS[TipoEntregaEnum(tipo_entrega)]
    if atual not in fluxo or atual in STATUS_TERMINAIS:
        return None
    return fluxo[fluxo.index(atual) + 1]


def transicoes_permitidas(tipo_entrega: TipoEntregaEnum | str, atual: PedidoStatusEnum | str) -> set[PedidoStatusEnum]:
    atual = PedidoStatusEnum(atual)
    if atual in STATUS_TERMINAIS:
        return set()
    permitidas = {S.CANCELADO}
    proximo = proximo_status(tipo_entrega, atual)
    if proximo is not None:
        permitidas.add(proximo)
    return permitidas


def transicao_permitida(
    tipo_entrega: TipoEntregaEnum | str,
    atual: PedidoStatusEnum | str,
    alvo: PedidoStatusEnum | str,
) -> bool:
    return PedidoStatusEnum(alvo) in transicoes_permitidas(tipo_entrega, atual)


def validar_transicao(
    tipo_entrega: TipoEntregaEnum | str,
    atual: PedidoStatusEnum | str,
    alvo: PedidoStatusEnum | str,
) -> None:
    """Levanta TransicaoInvalidaError se `alvo` não sai de `atual` no fluxo do tipo."""
    if not transicao_permitida(tipo_entrega, atual, alvo):
        raise TransicaoInvalidaError(PedidoStatusEnum(atual), PedidoStatusEnum(alvo), TipoEntregaEnum(tipo_entrega))
