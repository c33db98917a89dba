"""
Orquestração do pagamento de um pedido no lado cliente.

Fluxos por forma de pagamento:

- PIX manual: mostra a chave da loja, o cliente confirma por conta própria e
  o pedido segue `pending` até o operador ver o comprovante.
- PIX automático: cria a intenção no servidor e consulta o status a cada
  poucos segundos até `approved`, `rejected` ou o vencimento local.
- Cartão online: valida o cartão antes de cobrar; recusa não muda o pedido.
- Maquininha / dinheiro: sem confirmação online, aceito na hora.

Cada tentativa chega a exatamente um desfecho terminal, e os timers da
tentativa são cancelados quando ele é alcançado ou quando o cliente abandona.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from app.api.pagamentos.core.validacao_cartao import DadosCartao, validar_cartao
from app.api.pagamentos.schemas.schema_pagamento import CartaoIn, PixPagamentoResponse
from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, PagamentoStatusEnum
from app.config import settings
from app.fluxos.agendador import Agendador
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.exceptions import FluxoError, LojaIndisponivelError, TransicaoRejeitadaError
from app.utils.database_utils import now_trimmed, para_fuso_loja
from app.utils.logger import logger


class EstadoPagamento(str, Enum):
    OCIOSO = "ocioso"
    AGUARDANDO = "aguardando"
    PROCESSANDO = "processando"
    ABANDONADO = "abandonado"
    # terminais
    APROVADO = "aprovado"
    RECUSADO = "recusado"
    EXPIRADO = "expirado"
    CONFIRMADO_PELO_CLIENTE = "confirmado_pelo_cliente"
    PAGAMENTO_PRESENCIAL = "pagamento_presencial"


ESTADOS_TERMINAIS = frozenset({
    EstadoPagamento.APROVADO,
    EstadoPagamento.RECUSADO,
    EstadoPagamento.EXPIRADO,
    EstadoPagamento.CONFIRMADO_PELO_CLIENTE,
    EstadoPagamento.PAGAMENTO_PRESENCIAL,
})

_DO_GATEWAY = {
    PagamentoStatusEnum.APROVADO: EstadoPagamento.APROVADO,
    PagamentoStatusEnum.RECUSADO: EstadoPagamento.RECUSADO,
    PagamentoStatusEnum.EXPIRADO: EstadoPagamento.EXPIRADO,
}


@dataclass
class ResultadoPagamento:
    estado: EstadoPagamento
    mensagem: Optional[str] = None
    erros: List[str] = field(default_factory=list)
    pix: Optional[PixPagamentoResponse] = None
    # falha transitória: mostrar botão de tentar novamente
    pode_tentar_novamente: bool = False

    @property
    def terminal(self) -> bool:
        return self.estado in ESTADOS_TERMINAIS


AoFinalizar = Callable[[EstadoPagamento], Awaitable[None]]


class OrquestradorPagamento:
    def __init__(
        self,
        loja: ILojaContract,
        agendador: Agendador,
        pedido_id: int,
        forma_pagamento: FormaPagamentoEnum,
        *,
        intervalo_polling: Optional[float] = None,
        relogio: Callable[[], datetime] = now_trimmed,
        ao_finalizar: Optional[AoFinalizar] = None,
    ):
        self.loja = loja
        self.agendador = agendador
        self.pedido_id = pedido_id
        self.forma_pagamento = FormaPagamentoEnum(forma_pagamento)
        self.intervalo_polling = (
            settings.INTERVALO_POLLING_PAGAMENTO_SEGUNDOS if intervalo_polling is None else intervalo_polling
        )
        self._relogio = relogio
        self._ao_finalizar = ao_finalizar

        self.estado = EstadoPagamento.OCIOSO
        self.pix: Optional[PixPagamentoResponse] = None
        self.mensagem: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.estado in ESTADOS_TERMINAIS

    @property
    def timer_polling(self) -> str:
        return f"pagamento:{self.pedido_id}"

    @property
    def timer_expiracao(self) -> str:
        return f"pagamento-expiracao:{self.pedido_id}"

    def _resultado(self, **kwargs) -> ResultadoPagamento:
        kwargs.setdefault("mensagem", self.mensagem)
        return ResultadoPagamento(estado=self.estado, pix=self.pix, **kwargs)

    def _exigir_forma(self, *formas: FormaPagamentoEnum) -> None:
        if self.forma_pagamento not in formas:
            raise ValueError(
                f"Pedido {self.pedido_id} é pago com {self.forma_pagamento.value}, operação não se aplica"
            )

    def _parar_timers(self, motivo: str) -> None:
        self.agendador.cancelar(self.timer_polling, motivo)
        self.agendador.cancelar(self.timer_expiracao, motivo)

    async def _finalizar(self, estado: EstadoPagamento, mensagem: Optional[str] = None) -> bool:
        """Único ponto que leva a tentativa a um estado terminal."""
        if self.terminal:
            return False
        self.estado = estado
        self.mensagem = mensagem
        self._parar_timers(estado.value)
        logger.info(f"[Fluxos] Pagamento do pedido {self.pedido_id} finalizado: {estado.value}")
        if self._ao_finalizar:
            await self._ao_finalizar(estado)
        return True

    # ---------------- PIX ----------------
    async def iniciar_pix(self) -> ResultadoPagamento:
        self._exigir_forma(FormaPagamentoEnum.PIX)
        if self.terminal or self.estado == EstadoPagamento.AGUARDANDO:
            return self._resultado()

        try:
            intencao = await self.loja.criar_pagamento_pix(self.pedido_id)
        except TransicaoRejeitadaError as e:
            # pedido já pago ou cancelado no servidor
            return self._resultado(mensagem=e.mensagem)
        except FluxoError as e:
            return self._resultado(
                mensagem=e.mensagem,
                pode_tentar_novamente=isinstance(e, LojaIndisponivelError),
            )

        self.pix = intencao
        self.mensagem = None
        self.estado = EstadoPagamento.AGUARDANDO
        if intencao.modo == "automatico":
            self._agendar_timers()
        logger.info(f"[Fluxos] PIX {intencao.modo} iniciado para o pedido {self.pedido_id}")
        return self._resultado()

    async def confirmar_pix_manual(self) -> ResultadoPagamento:
        """O cliente diz que pagou; nada é verificado no servidor."""
        self._exigir_forma(FormaPagamentoEnum.PIX)
        if not self.pix or self.pix.modo != "manual":
            return self._resultado(mensagem="Confirmação manual só vale para PIX com chave da loja")
        await self._finalizar(EstadoPagamento.CONFIRMADO_PELO_CLIENTE)
        return self._resultado()

    async def nova_tentativa_pix(self) -> ResultadoPagamento:
        """Depois de recusa ou vencimento, cria outra intenção."""
        if self.estado not in (EstadoPagamento.RECUSADO, EstadoPagamento.EXPIRADO):
            return self._resultado()
        self.estado = EstadoPagamento.OCIOSO
        self.pix = None
        self.mensagem = None
        return await self.iniciar_pix()

    def segundos_restantes(self) -> Optional[float]:
        if not self.pix or not self.pix.expires_at:
            return None
        restante = (para_fuso_loja(self.pix.expires_at) - para_fuso_loja(self._relogio())).total_seconds()
        return max(0.0, restante)

    def _agendar_timers(self) -> None:
        self.agendador.periodico(self.timer_polling, self.intervalo_polling, self.consultar)
        restante = self.segundos_restantes()
        if restante is not None:
            self.agendador.uma_vez(self.timer_expiracao, restante, self._expirar)

    async def _expirar(self) -> None:
        if self.estado == EstadoPagamento.AGUARDANDO:
            await self._finalizar(EstadoPagamento.EXPIRADO, "O PIX expirou")

    async def consultar(self) -> None:
        """Um tick do polling. Falhas de rede ficam para o próximo tick."""
        if self.estado != EstadoPagamento.AGUARDANDO or not self.pix or not self.pix.provider_reference:
            return
        if self.segundos_restantes() == 0:
            await self._expirar()
            return

        try:
            resposta = await self.loja.consultar_pagamento(self.pix.provider_reference)
        except LojaIndisponivelError as e:
            logger.warning(f"[Fluxos] Consulta do PIX {self.pix.provider_reference} falhou: {e.mensagem}")
            return

        # resposta chegou depois de abandono ou de outro desfecho
        if self.estado != EstadoPagamento.AGUARDANDO:
            return
        estado = _DO_GATEWAY.get(resposta.status)
        if estado is None:
            return
        mensagem = {
            EstadoPagamento.RECUSADO: "Pagamento recusado. Gere um novo PIX para tentar de novo.",
            EstadoPagamento.EXPIRADO: "O PIX expirou",
        }.get(estado)
        await self._finalizar(estado, mensagem)

    # ---------------- CARTÃO ONLINE ----------------
    async def pagar_cartao(self, cartao: CartaoIn) -> ResultadoPagamento:
        self._exigir_forma(FormaPagamentoEnum.CARTAO)
        # cobrança em andamento: segundo clique só recebe o estado atual
        if self.terminal or self.estado == EstadoPagamento.PROCESSANDO:
            return self._resultado()

        erros = validar_cartao(
            DadosCartao(
                numero=cartao.numero,
                nome_titular=cartao.nome_titular,
                validade=cartao.validade,
                cvv=cartao.cvv,
            )
        )
        if erros:
            return self._resultado(mensagem=erros[0], erros=erros)

        self.estado = EstadoPagamento.PROCESSANDO
        try:
            cobranca = await self.loja.cobrar_cartao(self.pedido_id, cartao)
        except TransicaoRejeitadaError as e:
            self._voltar_de_processando()
            return self._resultado(mensagem=e.mensagem)
        except FluxoError as e:
            self._voltar_de_processando()
            return self._resultado(
                mensagem=e.mensagem,
                pode_tentar_novamente=isinstance(e, LojaIndisponivelError),
            )

        if not cobranca.sucesso:
            self._voltar_de_processando()
            return self._resultado(mensagem=cobranca.erro or "Pagamento não aprovado", erros=cobranca.erros)
        await self._finalizar(EstadoPagamento.APROVADO)
        return self._resultado()

    def _voltar_de_processando(self) -> None:
        # um desfecho presencial pode ter chegado durante a cobrança
        if self.estado == EstadoPagamento.PROCESSANDO:
            self.estado = EstadoPagamento.OCIOSO

    # ---------------- MAQUININHA / DINHEIRO ----------------
    async def aceitar_pagamento_presencial(self) -> ResultadoPagamento:
        self._exigir_forma(FormaPagamentoEnum.CARTAO, FormaPagamentoEnum.DINHEIRO)
        await self._finalizar(EstadoPagamento.PAGAMENTO_PRESENCIAL)
        return self._resultado()

    # ---------------- Abandono ----------------
    def abandonar(self) -> None:
        """
        O cliente fechou a tela de pagamento: para o polling sem desfazer a
        intenção. O pedido continua `pending` e pode ser retomado.
        """
        self._parar_timers("abandono")
        if self.estado == EstadoPagamento.AGUARDANDO:
            self.estado = EstadoPagamento.ABANDONADO
            logger.info(f"[Fluxos] Pagamento do pedido {self.pedido_id} abandonado")

    async def retomar(self) -> ResultadoPagamento:
        if self.estado != EstadoPagamento.ABANDONADO:
            return self._resultado()
        self.estado = EstadoPagamento.AGUARDANDO
        if self.pix and self.pix.modo == "automatico":
            if self.segundos_restantes() == 0:
                await self._expirar()
            else:
                self._agendar_timers()
        return self._resultado()
