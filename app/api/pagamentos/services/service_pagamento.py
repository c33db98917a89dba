from __future__ import annotations

from datetime import timedelta
from typing import List

import httpx
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.pagamentos.core.validacao_cartao import DadosCartao, detectar_bandeira, validar_cartao
from app.api.pagamentos.models.model_transacao_pagamento import TransacaoPagamentoModel
from app.api.pagamentos.repositories.repo_pagamentos import PagamentoRepository
from app.api.pagamentos.schemas.schema_pagamento import (
    CartaoIn,
    CobrancaCartaoResponse,
    PixPagamentoResponse,
    StatusPagamentoResponse,
)
from app.api.pedidos.models.model_pedido import PedidoModel
from app.api.pedidos.services.service_pedido import PedidoService
from app.api.shared.schemas.schema_shared_enums import (
    FormaPagamentoEnum,
    PagamentoStatusEnum,
    PedidoStatusEnum,
    TipoCartaoEnum,
)
from app.config import settings
from app.utils.database_utils import now_trimmed, para_fuso_loja
from app.utils.logger import logger
from app.utils.prometheus_metrics import pagamentos_total

from .service_pagamento_gateway import PaymentGatewayClient, PaymentResult


class PagamentoService:
    """
    Intenções de pagamento online (PIX automático e cartão).

    Cada transação termina em exatamente um status terminal: `finalizar` só
    age sobre transações pendentes e `marcar_pago` só age sobre pedidos não
    pagos, então consultas repetidas não duplicam efeitos.
    """

    def __init__(self, db: Session, gateway: PaymentGatewayClient, pedido_service: PedidoService):
        self.db = db
        self.repo = PagamentoRepository(db)
        self.gateway = gateway
        self.pedidos = pedido_service

    # ---------------- Helpers ----------------
    def _pedido_pagavel(self, pedido_id: int, forma: FormaPagamentoEnum, for_update: bool = False) -> PedidoModel:
        pedido = self.pedidos.obter(pedido_id, for_update=for_update)
        if pedido.forma_pagamento != forma:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                f"Pedido {pedido_id} não é pago com {forma.value}",
            )
        if pedido.pago:
            raise HTTPException(status.HTTP_409_CONFLICT, "Pedido já está pago")
        if pedido.status == PedidoStatusEnum.CANCELADO:
            raise HTTPException(status.HTTP_409_CONFLICT, "Pedido cancelado não aceita pagamento")
        return pedido

    def _expirou(self, transacao: TransacaoPagamentoModel) -> bool:
        if transacao.expires_at is None:
            return False
        return para_fuso_loja(transacao.expires_at) <= now_trimmed()

    async def _chamar_gateway(self, coro) -> PaymentResult:
        try:
            return await coro
        except httpx.HTTPError as e:
            logger.error(f"[Pagamentos] Falha de comunicação com gateway: {e}")
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, "Gateway de pagamento indisponível")
        except RuntimeError as e:
            logger.error(f"[Pagamentos] Gateway mal configurado: {e}")
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))

    def _finalizar(
        self,
        transacao: TransacaoPagamentoModel,
        novo_status: PagamentoStatusEnum,
        pedido: PedidoModel | None = None,
        erro: str | None = None,
        payload: dict | None = None,
    ) -> None:
        if not self.repo.finalizar(transacao, novo_status, erro=erro, payload=payload):
            return
        if novo_status == PagamentoStatusEnum.APROVADO:
            pedido = pedido or self.pedidos.obter(transacao.pedido_id)
            self.pedidos.marcar_pago(pedido)
        pagamentos_total.labels(metodo=transacao.metodo.value, status=novo_status.value).inc()
        logger.info(
            f"[Pagamentos] Transação {transacao.provider_reference} do pedido {transacao.pedido_id} "
            f"-> {novo_status.value}"
        )

    def _resposta_pix(self, transacao: TransacaoPagamentoModel) -> PixPagamentoResponse:
        return PixPagamentoResponse(
            modo="automatico",
            pedido_id=transacao.pedido_id,
            valor=float(transacao.valor),
            provider_reference=transacao.provider_reference,
            qr_code=transacao.qr_code_base64,
            copia_cola=transacao.qr_code,
            expires_at=transacao.expires_at,
        )

    # ---------------- PIX ----------------
    async def criar_pix(self, pedido_id: int) -> PixPagamentoResponse:
        pedido = self._pedido_pagavel(pedido_id, FormaPagamentoEnum.PIX)

        if settings.PIX_MODO == "manual":
            if not settings.PIX_CHAVE_MANUAL:
                raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Chave PIX da loja não configurada")
            return PixPagamentoResponse(
                modo="manual",
                pedido_id=pedido.id,
                valor=float(pedido.total),
                chave_pix=settings.PIX_CHAVE_MANUAL,
            )

        pendente = self.repo.pendente_do_pedido(pedido.id)
        if pendente and pendente.metodo == FormaPagamentoEnum.PIX:
            if not self._expirou(pendente):
                logger.info(f"[Pagamentos] Reaproveitando PIX pendente {pendente.provider_reference}")
                return self._resposta_pix(pendente)
            self._finalizar(pendente, PagamentoStatusEnum.EXPIRADO, erro="PIX expirado")

        expires_at = now_trimmed() + timedelta(minutes=settings.PIX_EXPIRACAO_MINUTOS)
        resultado = await self._chamar_gateway(
            self.gateway.criar_pix(
                pedido_id=pedido.id,
                valor=pedido.total,
                expires_at=expires_at,
                cliente={"nome": pedido.cliente_nome, "telefone": pedido.cliente_telefone},
            )
        )

        transacao = self.repo.criar(
            TransacaoPagamentoModel(
                pedido_id=pedido.id,
                metodo=FormaPagamentoEnum.PIX,
                gateway=self.gateway.gateway,
                status=PagamentoStatusEnum.PENDENTE,
                provider_reference=resultado.provider_reference,
                valor=pedido.total,
                qr_code=resultado.qr_code,
                qr_code_base64=resultado.qr_code_base64,
                expires_at=resultado.expires_at or expires_at,
                payload_gateway=resultado.payload,
            )
        )
        if resultado.status != PagamentoStatusEnum.PENDENTE:
            self._finalizar(transacao, resultado.status, pedido=pedido, erro=resultado.detalhe)
        self.repo.commit()

        logger.info(f"[Pagamentos] PIX criado - pedido={pedido.id} ref={transacao.provider_reference}")
        return self._resposta_pix(transacao)

    async def consultar_status(self, provider_reference: str) -> StatusPagamentoResponse:
        transacao = self.repo.get_by_reference(provider_reference, for_update=True)
        if not transacao:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Pagamento não encontrado")

        if transacao.status == PagamentoStatusEnum.PENDENTE:
            if self._expirou(transacao):
                self._finalizar(transacao, PagamentoStatusEnum.EXPIRADO, erro="PIX expirado")
            else:
                resultado = await self._chamar_gateway(self.gateway.consultar(provider_reference))
                if resultado.status != PagamentoStatusEnum.PENDENTE:
                    self._finalizar(
                        transacao,
                        resultado.status,
                        erro=resultado.detalhe,
                        payload=resultado.payload,
                    )
            self.repo.commit()

        return StatusPagamentoResponse(
            status=transacao.status,
            pedido_id=transacao.pedido_id,
            provider_reference=transacao.provider_reference,
        )

    # ---------------- CARTÃO ----------------
    async def cobrar_cartao(self, pedido_id: int, cartao_in: CartaoIn) -> CobrancaCartaoResponse:
        # pedido travado até a cobrança pendente ser gravada: uma segunda requisição
        # só enxerga o pedido depois disso e para no 409 abaixo
        pedido = self._pedido_pagavel(pedido_id, FormaPagamentoEnum.CARTAO, for_update=True)
        cartao = DadosCartao(
            numero=cartao_in.numero,
            nome_titular=cartao_in.nome_titular,
            validade=cartao_in.validade,
            cvv=cartao_in.cvv,
        )

        erros = validar_cartao(cartao)
        if erros:
            logger.info(f"[Pagamentos] Cartão recusado na validação - pedido={pedido.id} erros={erros}")
            return CobrancaCartaoResponse(sucesso=False, erro=erros[0], erros=erros)

        em_andamento = self.repo.pendente_do_pedido(pedido.id)
        if em_andamento and em_andamento.metodo == FormaPagamentoEnum.CARTAO:
            logger.warning(f"[Pagamentos] Cobrança duplicada ignorada - pedido={pedido.id}")
            raise HTTPException(status.HTTP_409_CONFLICT, "Pagamento do pedido já está em processamento")

        transacao = self.repo.criar(
            TransacaoPagamentoModel(
                pedido_id=pedido.id,
                metodo=FormaPagamentoEnum.CARTAO,
                gateway=self.gateway.gateway,
                status=PagamentoStatusEnum.PENDENTE,
                valor=pedido.total,
                cartao_final=cartao.final,
                cartao_bandeira=detectar_bandeira(cartao.numero_limpo),
            )
        )
        self.repo.commit()

        try:
            resultado = await self._chamar_gateway(
                self.gateway.cobrar_cartao(
                    pedido_id=pedido.id,
                    valor=pedido.total,
                    cartao=cartao,
                    tipo_cartao=pedido.tipo_cartao or TipoCartaoEnum.CREDITO,
                )
            )
        except HTTPException as e:
            self._finalizar(transacao, PagamentoStatusEnum.RECUSADO, erro=str(e.detail))
            self.repo.commit()
            raise

        transacao.provider_reference = resultado.provider_reference or None
        transacao.payload_gateway = resultado.payload
        if resultado.status != PagamentoStatusEnum.PENDENTE:
            self._finalizar(transacao, resultado.status, pedido=pedido, erro=resultado.detalhe)
        self.repo.commit()

        aprovado = transacao.status == PagamentoStatusEnum.APROVADO
        return CobrancaCartaoResponse(
            sucesso=aprovado,
            erro=None if aprovado else (resultado.detalhe or "Pagamento não aprovado"),
            provider_reference=transacao.provider_reference,
            bandeira=transacao.cartao_bandeira,
        )

    # ---------------- Consultas ----------------
    def listar_do_pedido(self, pedido_id: int) -> List[TransacaoPagamentoModel]:
        self.pedidos.obter(pedido_id)
        return self.repo.listar_por_pedido(pedido_id)
