"""
Painel de pedidos do operador.

Transições são aplicadas de forma otimista na lista local e reconciliadas
com a resposta do servidor. Se o servidor recusar, a mudança local é
desfeita e a lista é recarregada (visão desatualizada).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from app.api.pedidos.core.maquina_estados import eh_terminal, transicao_permitida
from app.api.pedidos.schemas.schema_pedido import PedidoOut
from app.api.shared.schemas.schema_shared_enums import PedidoStatusEnum
from app.config import settings
from app.fluxos.agendador import Agendador
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.exceptions import FluxoError, LojaIndisponivelError
from app.fluxos.trava_transicao import PosseTrava, TravaTransicao
from app.utils.logger import logger

TIMER_PEDIDOS = "pedidos"


class DesfechoTransicao(str, Enum):
    APLICADA = "aplicada"
    IGNORADA = "ignorada"
    REJEITADA = "rejeitada"
    FALHA = "falha"


@dataclass
class ResultadoTransicao:
    desfecho: DesfechoTransicao
    pedido: Optional[PedidoOut] = None
    mensagem: Optional[str] = None
    # cliente e servidor discordaram: a lista foi recarregada
    divergencia: bool = False

    @property
    def aplicada(self) -> bool:
        return self.desfecho == DesfechoTransicao.APLICADA


class PainelPedidos:
    def __init__(
        self,
        loja: ILojaContract,
        agendador: Optional[Agendador] = None,
        trava: Optional[TravaTransicao] = None,
    ):
        self.loja = loja
        self.agendador = agendador or Agendador()
        self.trava = trava or TravaTransicao()
        self._pedidos: Dict[int, PedidoOut] = {}

    @property
    def pedidos(self) -> List[PedidoOut]:
        return sorted(self._pedidos.values(), key=lambda p: p.created_at)

    def obter(self, pedido_id: int) -> Optional[PedidoOut]:
        return self._pedidos.get(pedido_id)

    # ---------------- Atualização ----------------
    async def atualizar(self) -> List[PedidoOut]:
        ativos = await self.loja.listar_pedidos_ativos()
        # pedido com transição em andamento mantém o valor otimista
        mantidos = {pid: p for pid, p in self._pedidos.items() if self.trava.travado(pid)}
        self._pedidos = {p.id: p for p in ativos}
        self._pedidos.update(mantidos)
        return self.pedidos

    def iniciar(self, intervalo: Optional[float] = None) -> None:
        intervalo = settings.INTERVALO_ATUALIZACAO_PEDIDOS_SEGUNDOS if intervalo is None else intervalo
        self.agendador.periodico(TIMER_PEDIDOS, intervalo, self._tick)

    def parar(self) -> None:
        self.agendador.cancelar(TIMER_PEDIDOS)

    async def _tick(self) -> None:
        await self.atualizar()

    # ---------------- Transições ----------------
    async def avancar(self, pedido_id: int) -> ResultadoTransicao:
        pedido = self._pedidos.get(pedido_id)
        if pedido is None:
            return ResultadoTransicao(DesfechoTransicao.REJEITADA, mensagem="Pedido não está na lista")
        destinos = [s for s in pedido.proximos_status if s != PedidoStatusEnum.CANCELADO]
        if not destinos:
            return ResultadoTransicao(DesfechoTransicao.REJEITADA, pedido=pedido, mensagem="Pedido já finalizado")
        return await self.transicionar(pedido_id, destinos[0])

    async def cancelar(self, pedido_id: int, motivo: Optional[str] = None) -> ResultadoTransicao:
        return await self.transicionar(pedido_id, PedidoStatusEnum.CANCELADO, motivo=motivo)

    async def transicionar(
        self,
        pedido_id: int,
        alvo: PedidoStatusEnum,
        motivo: Optional[str] = None,
    ) -> ResultadoTransicao:
        posse = self.trava.adquirir(pedido_id)
        if posse is None:
            logger.info(f"[Fluxos] Transição ignorada - pedido {pedido_id} já tem transição em andamento")
            return ResultadoTransicao(DesfechoTransicao.IGNORADA, pedido=self._pedidos.get(pedido_id))

        try:
            anterior = self._pedidos.get(pedido_id)
            if anterior is None:
                return ResultadoTransicao(DesfechoTransicao.REJEITADA, mensagem="Pedido não está na lista")
            if anterior.status == alvo:
                return ResultadoTransicao(DesfechoTransicao.IGNORADA, pedido=anterior)
            if not transicao_permitida(anterior.tipo_entrega, anterior.status, alvo):
                # recusa local: nada muda e nada vai ao servidor
                return ResultadoTransicao(
                    DesfechoTransicao.REJEITADA,
                    pedido=anterior,
                    mensagem=f"Transição {anterior.status.value} -> {alvo.value} não permitida",
                )

            self._pedidos[pedido_id] = anterior.model_copy(update={"status": alvo})

            try:
                if alvo == PedidoStatusEnum.CANCELADO:
                    confirmado = await self.loja.cancelar_pedido(pedido_id, motivo)
                else:
                    confirmado = await self.loja.atualizar_status(pedido_id, alvo)
            except LojaIndisponivelError as e:
                self._pedidos[pedido_id] = anterior
                return ResultadoTransicao(DesfechoTransicao.FALHA, pedido=anterior, mensagem=e.mensagem)
            except FluxoError as e:
                # 409, 404 de pedido já arquivado ou outro 4xx: a lista local está desatualizada
                self._pedidos[pedido_id] = anterior
                logger.warning(f"[Fluxos] Servidor recusou transição do pedido {pedido_id}: {e.mensagem}")
                await self._recarregar_apos_divergencia(posse)
                return ResultadoTransicao(
                    DesfechoTransicao.REJEITADA,
                    pedido=self._pedidos.get(pedido_id),
                    mensagem=e.mensagem,
                    divergencia=True,
                )

            if eh_terminal(confirmado.status):
                self._pedidos.pop(pedido_id, None)
            else:
                self._pedidos[pedido_id] = confirmado
            logger.info(f"[Fluxos] Pedido {pedido_id}: {anterior.status.value} -> {confirmado.status.value}")
            return ResultadoTransicao(DesfechoTransicao.APLICADA, pedido=confirmado)
        finally:
            self.trava.liberar(posse)

    async def _recarregar_apos_divergencia(self, posse: PosseTrava) -> None:
        # libera a trava antes para o valor do servidor prevalecer no recarregamento
        self.trava.liberar(posse)
        try:
            await self.atualizar()
        except FluxoError as e:
            logger.warning(f"[Fluxos] Não foi possível recarregar os pedidos: {e.mensagem}")
