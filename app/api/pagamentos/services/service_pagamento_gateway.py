from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from app.api.pagamentos.core.validacao_cartao import DadosCartao, detectar_bandeira, interpretar_validade, luhn_valido
from app.api.shared.schemas.schema_shared_enums import PagamentoGatewayEnum, PagamentoStatusEnum, TipoCartaoEnum
from app.config import settings
from app.integrations.mercadopago.client import MercadoPagoClient, MercadoPagoPayment

METODOS_MERCADOPAGO = {
    (TipoCartaoEnum.CREDITO, "visa"): "visa",
    (TipoCartaoEnum.CREDITO, "mastercard"): "master",
    (TipoCartaoEnum.CREDITO, "amex"): "amex",
    (TipoCartaoEnum.CREDITO, "elo"): "elo",
    (TipoCartaoEnum.DEBITO, "visa"): "debvisa",
    (TipoCartaoEnum.DEBITO, "mastercard"): "debmaster",
    (TipoCartaoEnum.DEBITO, "elo"): "debelo",
}


@dataclass
class PaymentResult:
    status: PagamentoStatusEnum
    provider_reference: str
    payload: Dict[str, Any]
    qr_code: Optional[str] = None
    qr_code_base64: Optional[str] = None
    expires_at: Optional[datetime] = None
    detalhe: Optional[str] = None


@dataclass
class _MockPix:
    consultas: int = 0
    payload: Dict[str, Any] = field(default_factory=dict)


class PaymentGatewayClient:
    """
    Fachada dos gateways de pagamento.

    `mock` simula o fluxo sem rede: o PIX fica pendente e é aprovado na
    N-ésima consulta (`mock_consultas_ate_aprovar`); o cartão é aprovado se
    passar no Luhn, salvo cenário "failure".
    """

    def __init__(
        self,
        mode: str | None = None,
        mock_scenario: str = "success",
        mock_consultas_ate_aprovar: int = 2,
        mercadopago_client: MercadoPagoClient | None = None,
    ):
        self.mode = (mode or settings.GATEWAY_MODE).lower()
        self.mock_scenario = mock_scenario  # "success", "failure", "pending"
        self.mock_consultas_ate_aprovar = mock_consultas_ate_aprovar
        self._mercadopago_client = mercadopago_client
        self._mock_pix: Dict[str, _MockPix] = {}

    @property
    def gateway(self) -> PagamentoGatewayEnum:
        return PagamentoGatewayEnum.MERCADOPAGO if self.mode == "mercadopago" else PagamentoGatewayEnum.MOCK

    @property
    def mercadopago(self) -> MercadoPagoClient:
        if not self._mercadopago_client:
            if not settings.MERCADOPAGO_ACCESS_TOKEN:
                raise RuntimeError("MERCADOPAGO_ACCESS_TOKEN não configurado")
            self._mercadopago_client = MercadoPagoClient(
                access_token=settings.MERCADOPAGO_ACCESS_TOKEN,
                base_url=settings.MERCADOPAGO_BASE_URL,
                timeout=settings.MERCADOPAGO_TIMEOUT_SECONDS,
            )
        return self._mercadopago_client

    async def close(self) -> None:
        if self._mercadopago_client is not None:
            await self._mercadopago_client.close()

    # ---------------- PIX ----------------
    async def criar_pix(
        self,
        *,
        pedido_id: int,
        valor: Decimal,
        expires_at: datetime,
        cliente: Dict[str, Any],
    ) -> PaymentResult:
        if self.gateway == PagamentoGatewayEnum.MERCADOPAGO:
            payment = await self.mercadopago.create_pix_payment(
                external_reference=str(pedido_id),
                amount=valor,
                expires_at=expires_at,
                payer={
                    "email": settings.MERCADOPAGO_PAYER_EMAIL,
                    "first_name": cliente.get("nome"),
                },
                metadata={"pedido_id": pedido_id, "telefone": cliente.get("telefone")},
            )
            resultado = self._payment_to_result(payment)
            if resultado.expires_at is None:
                resultado.expires_at = expires_at
            return resultado

        referencia = f"mock_pix_{uuid.uuid4().hex[:12]}"
        payload = {"mock": True, "pedido_id": pedido_id, "valor": str(valor)}
        self._mock_pix[referencia] = _MockPix(payload=payload)
        return PaymentResult(
            status=PagamentoStatusEnum.PENDENTE,
            provider_reference=referencia,
            payload=payload,
            qr_code=f"00020126580014BR.GOV.BCB.PIX0136{referencia}5204000053039865802BR",
            qr_code_base64="iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg==",
            expires_at=expires_at,
        )

    async def consultar(self, provider_reference: str) -> PaymentResult:
        if self.gateway == PagamentoGatewayEnum.MERCADOPAGO:
            return self._payment_to_result(await self.mercadopago.get_payment(provider_reference))

        mock = self._mock_pix.setdefault(provider_reference, _MockPix())
        mock.consultas += 1
        if self.mock_scenario == "failure":
            status = PagamentoStatusEnum.RECUSADO
        elif self.mock_scenario == "pending" or mock.consultas < self.mock_consultas_ate_aprovar:
            status = PagamentoStatusEnum.PENDENTE
        else:
            status = PagamentoStatusEnum.APROVADO
        return PaymentResult(status=status, provider_reference=provider_reference, payload=mock.payload)

    # ---------------- CARTÃO ----------------
    async def cobrar_cartao(
        self,
        *,
        pedido_id: int,
        valor: Decimal,
        cartao: DadosCartao,
        tipo_cartao: TipoCartaoEnum,
    ) -> PaymentResult:
        bandeira = detectar_bandeira(cartao.numero_limpo)

        if self.gateway == PagamentoGatewayEnum.MERCADOPAGO:
            metodo = METODOS_MERCADOPAGO.get((tipo_cartao, bandeira))
            if metodo is None:
                return PaymentResult(
                    status=PagamentoStatusEnum.RECUSADO,
                    provider_reference="",
                    payload={},
                    detalhe=f"Bandeira não aceita para {tipo_cartao.value}",
                )
            mes, ano = interpretar_validade(cartao.validade)
            token = await self.mercadopago.create_card_token(
                numero=cartao.numero_limpo,
                nome_titular=cartao.nome_titular,
                mes_expiracao=mes,
                ano_expiracao=ano,
                cvv=cartao.cvv,
            )
            payment = await self.mercadopago.create_card_payment(
                external_reference=str(pedido_id),
                amount=valor,
                card_token=token,
                payment_method_id=metodo,
                payer={"email": settings.MERCADOPAGO_PAYER_EMAIL},
            )
            return self._payment_to_result(payment)

        aprovado = self.mock_scenario != "failure" and luhn_valido(cartao.numero_limpo)
        return PaymentResult(
            status=PagamentoStatusEnum.APROVADO if aprovado else PagamentoStatusEnum.RECUSADO,
            provider_reference=f"mock_card_{uuid.uuid4().hex[:12]}",
            payload={"mock": True, "pedido_id": pedido_id, "valor": str(valor), "bandeira": bandeira},
            detalhe=None if aprovado else "cc_rejected_other_reason",
        )

    # ---------------- Helpers ----------------
    def _payment_to_result(self, payment: MercadoPagoPayment) -> PaymentResult:
        status_map = {
            "pending": PagamentoStatusEnum.PENDENTE,
            "in_process": PagamentoStatusEnum.PENDENTE,
            "authorized": PagamentoStatusEnum.PENDENTE,
            "approved": PagamentoStatusEnum.APROVADO,
            "rejected": PagamentoStatusEnum.RECUSADO,
            "cancelled": PagamentoStatusEnum.RECUSADO,
            "expired": PagamentoStatusEnum.EXPIRADO,
        }
        return PaymentResult(
            status=status_map.get(payment.status, PagamentoStatusEnum.PENDENTE),
            provider_reference=payment.id,
            payload=payment.raw,
            qr_code=payment.qr_code,
            qr_code_base64=payment.qr_code_base64,
            expires_at=payment.expires_at,
            detalhe=payment.status_detail,
        )
