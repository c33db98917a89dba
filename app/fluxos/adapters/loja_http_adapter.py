from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter

from app.api.catalogo.schemas.schema_produto import ProdutoPublicoOut
from app.api.cupons.schemas.schema_cupom import ValidarCupomResponse
from app.api.estoque.schemas.schema_estoque import (
    DisponibilidadeResponse,
    IngredienteEstoqueCreate,
    IngredienteEstoqueOut,
    RelatorioDiarioResponse,
)
from app.api.pagamentos.schemas.schema_pagamento import (
    CartaoIn,
    CobrancaCartaoResponse,
    PixPagamentoResponse,
    StatusPagamentoResponse,
)
from app.api.pedidos.schemas.schema_pedido import PedidoCreate, PedidoCriadoResponse, PedidoOut
from app.api.shared.schemas.schema_shared_enums import PedidoStatusEnum
from app.config import settings
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.exceptions import (
    LojaIndisponivelError,
    RecursoNaoEncontradoError,
    RequisicaoInvalidaError,
    TransicaoRejeitadaError,
)
from app.utils.logger import logger

M = TypeVar("M", bound=BaseModel)


class LojaHttpAdapter(ILojaContract):
    """Implementa ILojaContract sobre a API HTTP da loja."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.LOJA_API_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout or settings.LOJA_API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LojaHttpAdapter":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ---------------- Helpers ----------------
    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"[Fluxos] Loja inacessível em {method} {path}: {e}")
            raise LojaIndisponivelError("Não foi possível falar com a loja. Tente novamente.") from e

        if resp.status_code >= 400:
            self._levantar_erro(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def _levantar_erro(self, resp: httpx.Response) -> None:
        try:
            corpo = resp.json()
        except ValueError:
            corpo = {}
        detalhe = corpo.get("detail") if isinstance(corpo, dict) else None

        erros: List[str] = []
        if isinstance(detalhe, list):
            erros = [str(d.get("message") or d.get("msg") or d) if isinstance(d, dict) else str(d) for d in detalhe]
            mensagem = erros[0] if erros else "Dados inválidos"
        else:
            mensagem = str(detalhe or resp.reason_phrase or "Erro na loja")

        codigo = resp.status_code
        if codigo == 409:
            raise TransicaoRejeitadaError(mensagem, codigo)
        if codigo == 404:
            raise RecursoNaoEncontradoError(mensagem, codigo)
        if codigo >= 500:
            raise LojaIndisponivelError(mensagem, codigo)
        raise RequisicaoInvalidaError(mensagem, codigo, erros=erros or None)

    @staticmethod
    def _modelo(modelo: Type[M], dados: Any) -> M:
        return modelo.model_validate(dados)

    @staticmethod
    def _lista(modelo: Type[M], dados: Any) -> List[M]:
        return TypeAdapter(List[modelo]).validate_python(dados or [])

    # ---------------- Pedidos ----------------
    async def criar_pedido(self, rascunho: PedidoCreate) -> PedidoCriadoResponse:
        dados = await self._request("POST", "/api/pedidos", json=rascunho.model_dump(mode="json"))
        return self._modelo(PedidoCriadoResponse, dados)

    async def atualizar_status(self, pedido_id: int, status: PedidoStatusEnum) -> PedidoOut:
        dados = await self._request("PUT", f"/api/pedidos/{pedido_id}/status", json={"status": status.value})
        return self._modelo(PedidoOut, dados)

    async def cancelar_pedido(self, pedido_id: int, motivo: Optional[str] = None) -> PedidoOut:
        dados = await self._request("POST", f"/api/pedidos/{pedido_id}/cancelar", json={"motivo": motivo})
        return self._modelo(PedidoOut, dados)

    async def listar_pedidos_ativos(self) -> List[PedidoOut]:
        return self._lista(PedidoOut, await self._request("GET", "/api/pedidos/ativos"))

    async def listar_historico(self, limite: int = 50) -> List[PedidoOut]:
        dados = await self._request("GET", "/api/pedidos/historico", params={"limite": limite})
        return self._lista(PedidoOut, dados)

    # ---------------- Cardápio / cupons ----------------
    async def listar_cardapio(self) -> List[ProdutoPublicoOut]:
        return self._lista(ProdutoPublicoOut, await self._request("GET", "/api/produtos"))

    async def validar_cupom(self, codigo: str, subtotal: Decimal) -> ValidarCupomResponse:
        dados = await self._request(
            "POST",
            "/api/cupons/validar",
            json={"codigo": codigo, "subtotal": str(subtotal)},
        )
        return self._modelo(ValidarCupomResponse, dados)

    # ---------------- Pagamentos ----------------
    async def criar_pagamento_pix(self, pedido_id: int) -> PixPagamentoResponse:
        dados = await self._request("POST", "/api/pagamentos/pix", json={"pedido_id": pedido_id})
        return self._modelo(PixPagamentoResponse, dados)

    async def consultar_pagamento(self, provider_reference: str) -> StatusPagamentoResponse:
        dados = await self._request("GET", f"/api/pagamentos/status/{provider_reference}")
        return self._modelo(StatusPagamentoResponse, dados)

    async def cobrar_cartao(self, pedido_id: int, cartao: CartaoIn) -> CobrancaCartaoResponse:
        dados = await self._request(
            "POST",
            "/api/pagamentos/cartao",
            json={"pedido_id": pedido_id, "cartao": cartao.model_dump(mode="json")},
        )
        return self._modelo(CobrancaCartaoResponse, dados)

    # ---------------- Estoque ----------------
    async def listar_ingredientes(self) -> List[IngredienteEstoqueOut]:
        return self._lista(IngredienteEstoqueOut, await self._request("GET", "/api/estoque/ingredientes"))

    async def salvar_ingrediente(
        self,
        ingrediente: IngredienteEstoqueCreate,
        ingrediente_id: Optional[int] = None,
    ) -> IngredienteEstoqueOut:
        corpo = ingrediente.model_dump(mode="json")
        if ingrediente_id is None:
            dados = await self._request("POST", "/api/estoque/ingredientes", json=corpo)
        else:
            dados = await self._request("PUT", f"/api/estoque/ingredientes/{ingrediente_id}", json=corpo)
        return self._modelo(IngredienteEstoqueOut, dados)

    async def repor_ingrediente(self, ingrediente_id: int, quantidade: Decimal, preco: Decimal) -> IngredienteEstoqueOut:
        dados = await self._request(
            "POST",
            f"/api/estoque/ingredientes/{ingrediente_id}/reposicao",
            json={"quantidade": str(quantidade), "preco": str(preco)},
        )
        return self._modelo(IngredienteEstoqueOut, dados)

    async def consultar_disponibilidade(self) -> DisponibilidadeResponse:
        return self._modelo(DisponibilidadeResponse, await self._request("GET", "/api/estoque/disponibilidade"))

    async def relatorio_diario(self) -> RelatorioDiarioResponse:
        return self._modelo(RelatorioDiarioResponse, await self._request("GET", "/api/estoque/relatorio-diario"))
