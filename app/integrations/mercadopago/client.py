from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx


def _parse_datetime(valor: Any) -> Optional[datetime]:
    if not valor:
        return None
    try:
        return datetime.fromisoformat(str(valor))
    except ValueError:
        return None


@dataclass(slots=True)
class MercadoPagoPayment:
    """Resposta simplificada de um pagamento (PIX ou cartão) do Mercado Pago."""

    id: str
    status: str
    status_detail: str | None
    qr_code: str | None
    qr_code_base64: str | None
    expires_at: datetime | None
    raw: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MercadoPagoPayment":
        transaction_data = (data.get("point_of_interaction") or {}).get("transaction_data") or {}

        qr_code_base64 = transaction_data.get("qr_code_base64")
        # Algumas respostas trazem o QR como objeto {"data": "..."}
        if isinstance(qr_code_base64, dict):
            qr_code_base64 = qr_code_base64.get("data")

        return cls(
            id=str(data.get("id")),
            status=data.get("status", "pending"),
            status_detail=data.get("status_detail"),
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=qr_code_base64,
            expires_at=_parse_datetime(data.get("date_of_expiration")),
            raw=data,
        )


class MercadoPagoClient:
    """Cliente HTTP para a API de pagamentos do Mercado Pago."""

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token é obrigatório para o Mercado Pago")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def create_pix_payment(
        self,
        *,
        external_reference: str,
        amount: Decimal,
        expires_at: datetime,
        payer: Dict[str, Any],
        descricao: str | None = None,
        metadata: Dict[str, Any] | None = None,
    ) -> MercadoPagoPayment:
        """
        Cria um pagamento PIX com data de expiração.

        `external_reference` é o id do pedido; a chave de idempotência impede
        duas cobranças se o mesmo pedido for reenviado na mesma tentativa.
        """
        payload: Dict[str, Any] = {
            "transaction_amount": float(amount),
            "description": descricao or f"Pedido {external_reference}",
            "payment_method_id": "pix",
            "external_reference": external_reference,
            "date_of_expiration": expires_at.isoformat(timespec="milliseconds"),
            "payer": payer,
            "metadata": metadata or {},
        }
        resp = await self._client.post(
            "/v1/payments",
            json=payload,
            headers={"X-Idempotency-Key": f"pix-{external_reference}-{int(expires_at.timestamp())}"},
        )
        resp.raise_for_status()
        return MercadoPagoPayment.from_dict(resp.json())

    async def create_card_token(
        self,
        *,
        numero: str,
        nome_titular: str,
        mes_expiracao: int,
        ano_expiracao: int,
        cvv: str,
    ) -> str:
        resp = await self._client.post(
            "/v1/card_tokens",
            json={
                "card_number": numero,
                "expiration_month": mes_expiracao,
                "expiration_year": ano_expiracao,
                "security_code": cvv,
                "cardholder": {"name": nome_titular},
            },
        )
        resp.raise_for_status()
        return str(resp.json()["id"])

    async def create_card_payment(
        self,
        *,
        external_reference: str,
        amount: Decimal,
        card_token: str,
        payment_method_id: str,
        payer: Dict[str, Any],
        descricao: str | None = None,
    ) -> MercadoPagoPayment:
        resp = await self._client.post(
            "/v1/payments",
            json={
                "transaction_amount": float(amount),
                "description": descricao or f"Pedido {external_reference}",
                "token": card_token,
                "installments": 1,
                "payment_method_id": payment_method_id,
                "external_reference": external_reference,
                "payer": payer,
            },
            headers={"X-Idempotency-Key": f"card-{external_reference}-{card_token}"},
        )
        resp.raise_for_status()
        return MercadoPagoPayment.from_dict(resp.json())

    async def get_payment(self, payment_id: str) -> MercadoPagoPayment:
        resp = await self._client.get(f"/v1/payments/{payment_id}")
        resp.raise_for_status()
        return MercadoPagoPayment.from_dict(resp.json())
