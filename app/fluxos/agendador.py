"""
Timers cooperativos dos fluxos do cliente.

Cada timer tem nome e um TokenCancelamento próprio. Os três usados na prática
são a atualização da lista de pedidos, o polling do pagamento e a atualização
do estoque; o dono do contexto chama `encerrar()` no teardown.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from app.fluxos.exceptions import FluxoError
from app.utils.logger import logger

Acao = Callable[[], Awaitable[None]]


class TokenCancelamento:
    def __init__(self, nome: str):
        self.nome = nome
        self._evento = asyncio.Event()
        self._motivo: Optional[str] = None

    @property
    def cancelado(self) -> bool:
        return self._evento.is_set()

    @property
    def motivo(self) -> Optional[str]:
        return self._motivo

    def cancelar(self, motivo: str = "manual") -> None:
        if self._evento.is_set():
            return
        self._motivo = motivo
        self._evento.set()

    async def aguardar(self, timeout: Optional[float] = None) -> bool:
        """Espera o cancelamento; True se cancelado, False se o timeout venceu antes."""
        try:
            await asyncio.wait_for(self._evento.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False


@dataclass
class _Timer:
    token: TokenCancelamento
    tarefa: asyncio.Task


class Agendador:
    def __init__(self):
        self._timers: Dict[str, _Timer] = {}
        self._encerrado = False

    @property
    def nomes(self) -> List[str]:
        return [nome for nome, timer in self._timers.items() if not timer.tarefa.done()]

    def ativo(self, nome: str) -> bool:
        timer = self._timers.get(nome)
        return bool(timer and not timer.token.cancelado and not timer.tarefa.done())

    def periodico(self, nome: str, intervalo: float, acao: Acao, *, imediato: bool = True) -> TokenCancelamento:
        """Roda `acao` a cada `intervalo` segundos até o token ser cancelado. Substitui timer de mesmo nome."""
        return self._agendar(nome, lambda token: self._loop_periodico(token, intervalo, acao, imediato))

    def uma_vez(self, nome: str, atraso: float, acao: Acao) -> TokenCancelamento:
        return self._agendar(nome, lambda token: self._disparo_unico(token, atraso, acao))

    def cancelar(self, nome: str, motivo: str = "manual") -> bool:
        timer = self._timers.pop(nome, None)
        if not timer:
            return False
        timer.token.cancelar(motivo)
        logger.debug(f"[Fluxos] Timer '{nome}' cancelado ({motivo})")
        return True

    async def encerrar(self) -> None:
        self._encerrado = True
        timers = list(self._timers.values())
        self._timers.clear()
        for timer in timers:
            timer.token.cancelar("encerramento")
        atual = asyncio.current_task()
        pendentes = [t.tarefa for t in timers if t.tarefa is not atual and not t.tarefa.done()]
        for tarefa in pendentes:
            tarefa.cancel()
        if pendentes:
            await asyncio.gather(*pendentes, return_exceptions=True)
        logger.info(f"[Fluxos] Agendador encerrado - {len(timers)} timer(s) cancelado(s)")

    # ---------------- Helpers ----------------
    def _agendar(self, nome: str, fabrica) -> TokenCancelamento:
        if self._encerrado:
            raise RuntimeError("Agendador já foi encerrado")
        self.cancelar(nome, motivo="substituido")
        token = TokenCancelamento(nome)
        tarefa = asyncio.get_running_loop().create_task(fabrica(token), name=f"timer:{nome}")
        self._timers[nome] = _Timer(token=token, tarefa=tarefa)
        return token

    async def _executar(self, token: TokenCancelamento, acao: Acao) -> None:
        try:
            await acao()
        except FluxoError as e:
            # leituras periódicas tentam de novo no próximo tick
            logger.warning(f"[Fluxos] Timer '{token.nome}' falhou: {e.mensagem}")
        except Exception:
            logger.exception(f"[Fluxos] Erro inesperado no timer '{token.nome}'")

    async def _loop_periodico(self, token: TokenCancelamento, intervalo: float, acao: Acao, imediato: bool) -> None:
        if not imediato and await token.aguardar(intervalo):
            return
        while not token.cancelado:
            await self._executar(token, acao)
            if await token.aguardar(intervalo):
                return

    async def _disparo_unico(self, token: TokenCancelamento, atraso: float, acao: Acao) -> None:
        if await token.aguardar(max(0.0, atraso)):
            return
        await self._executar(token, acao)
        if self._timers.get(token.nome) is not None and self._timers[token.nome].token is token:
            del self._timers[token.nome]
