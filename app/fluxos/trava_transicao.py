from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional

from app.config import settings


@dataclass(eq=False)
class PosseTrava:
    """Comprovante de quem adquiriu a trava; só ele a libera."""

    chave: Hashable
    expira_em: float


class TravaTransicao:
    """
    Conjunto de pedidos com transição em andamento, com tempo de vida limitado.

    Um segundo pedido de transição para o mesmo id é ignorado enquanto a trava
    existir; se a resposta nunca chegar, a trava vence sozinha após `timeout`.
    Depois do vencimento outro dono pode adquirir a chave, e a liberação
    atrasada do dono anterior não remove a trava nova.
    """

    def __init__(self, timeout: Optional[float] = None, relogio: Callable[[], float] = time.monotonic):
        self.timeout = settings.TIMEOUT_TRAVA_TRANSICAO_SEGUNDOS if timeout is None else timeout
        self._relogio = relogio
        self._travas: Dict[Hashable, PosseTrava] = {}

    def _limpar_vencidas(self) -> None:
        agora = self._relogio()
        for chave in [k for k, posse in self._travas.items() if posse.expira_em <= agora]:
            del self._travas[chave]

    def adquirir(self, chave: Hashable) -> Optional[PosseTrava]:
        self._limpar_vencidas()
        if chave in self._travas:
            return None
        posse = PosseTrava(chave, self._relogio() + self.timeout)
        self._travas[chave] = posse
        return posse

    def liberar(self, posse: PosseTrava) -> bool:
        if self._travas.get(posse.chave) is not posse:
            return False
        del self._travas[posse.chave]
        return True

    def travado(self, chave: Hashable) -> bool:
        self._limpar_vencidas()
        return chave in self._travas
