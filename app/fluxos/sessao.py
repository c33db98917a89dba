"""
Contexto explícito do cliente: identidade, pedidos pendentes e timers.

Substitui estado global persistido. `iniciar()` na abertura do app e
`encerrar()` no logout/fechamento; depois de encerrada, a sessão não agenda
mais nada e nenhum timer continua atualizando uma tela descartada.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum
from app.fluxos.agendador import Agendador
from app.fluxos.checkout import Checkout
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.estoque import MonitorEstoque
from app.fluxos.pagamento import EstadoPagamento, OrquestradorPagamento
from app.utils.logger import logger
from app.utils.telefone import normalizar_telefone


@dataclass
class IdentidadeCliente:
    nome: str
    telefone: str


class SessaoCliente:
    def __init__(self, loja: ILojaContract, *, intervalo_estoque: Optional[float] = None):
        self.loja = loja
        self._intervalo_estoque = intervalo_estoque
        self.agendador: Optional[Agendador] = None
        self.estoque: Optional[MonitorEstoque] = None
        self.cliente: Optional[IdentidadeCliente] = None
        self._pagamentos: Dict[int, OrquestradorPagamento] = {}

    @property
    def ativa(self) -> bool:
        return self.agendador is not None

    def _exigir_ativa(self) -> Agendador:
        if self.agendador is None:
            raise RuntimeError("Sessão não iniciada")
        return self.agendador

    async def iniciar(self, cliente: Optional[IdentidadeCliente] = None) -> None:
        if self.ativa:
            return
        self.agendador = Agendador()
        self.estoque = MonitorEstoque(self.loja, self.agendador)
        self.estoque.iniciar(self._intervalo_estoque)
        if cliente:
            self.identificar(cliente.nome, cliente.telefone)
        logger.info("[Fluxos] Sessão do cliente iniciada")

    async def encerrar(self) -> None:
        if not self.ativa:
            return
        for orquestrador in self._pagamentos.values():
            orquestrador.abandonar()
        await self.agendador.encerrar()
        self.agendador = None
        self.estoque = None
        self.cliente = None
        self._pagamentos.clear()
        logger.info("[Fluxos] Sessão do cliente encerrada")

    def identificar(self, nome: str, telefone: str) -> IdentidadeCliente:
        self.cliente = IdentidadeCliente(nome=nome.strip(), telefone=normalizar_telefone(telefone) or telefone.strip())
        return self.cliente

    def novo_checkout(self) -> Checkout:
        self._exigir_ativa()
        return Checkout(self.loja, monitor=self.estoque)

    def pagamento_do_pedido(self, pedido_id: int, forma_pagamento: FormaPagamentoEnum) -> OrquestradorPagamento:
        """Orquestrador do pedido, criado na primeira chamada e reaproveitado depois."""
        agendador = self._exigir_ativa()
        orquestrador = self._pagamentos.get(pedido_id)
        if orquestrador is None:
            orquestrador = OrquestradorPagamento(self.loja, agendador, pedido_id, forma_pagamento)
            self._pagamentos[pedido_id] = orquestrador
        return orquestrador

    @property
    def pedidos_pendentes(self) -> List[int]:
        """Pedidos cujo pagamento ainda não chegou a um desfecho (podem ser retomados)."""
        return [pid for pid, o in self._pagamentos.items() if not o.terminal]

    def esquecer_pedido(self, pedido_id: int) -> None:
        orquestrador = self._pagamentos.pop(pedido_id, None)
        if orquestrador:
            orquestrador.abandonar()

    def estado_pagamento(self, pedido_id: int) -> Optional[EstadoPagamento]:
        orquestrador = self._pagamentos.get(pedido_id)
        return orquestrador.estado if orquestrador else None
