from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

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


class ILojaContract(ABC):
    """
    Operações que os fluxos do cliente consomem da loja.

    Os DTOs são os mesmos schemas pydantic que a API publica, então o
    adapter HTTP só precisa validar o JSON de resposta contra eles.
    """

    # ---------------- Pedidos ----------------
    @abstractmethod
    async def criar_pedido(self, rascunho: PedidoCreate) -> PedidoCriadoResponse:
        raise NotImplementedError

    @abstractmethod
    async def atualizar_status(self, pedido_id: int, status: PedidoStatusEnum) -> PedidoOut:
        raise NotImplementedError

    @abstractmethod
    async def cancelar_pedido(self, pedido_id: int, motivo: Optional[str] = None) -> PedidoOut:
        raise NotImplementedError

    @abstractmethod
    async def listar_pedidos_ativos(self) -> List[PedidoOut]:
        raise NotImplementedError

    @abstractmethod
    async def listar_historico(self, limite: int = 50) -> List[PedidoOut]:
        raise NotImplementedError

    # ---------------- Cardápio / cupons ----------------
    @abstractmethod
    async def listar_cardapio(self) -> List[ProdutoPublicoOut]:
        raise NotImplementedError

    @abstractmethod
    async def validar_cupom(self, codigo: str, subtotal: Decimal) -> ValidarCupomResponse:
        raise NotImplementedError

    # ---------------- Pagamentos ----------------
    @abstractmethod
    async def criar_pagamento_pix(self, pedido_id: int) -> PixPagamentoResponse:
        raise NotImplementedError

    @abstractmethod
    async def consultar_pagamento(self, provider_reference: str) -> StatusPagamentoResponse:
        raise NotImplementedError

    @abstractmethod
    async def cobrar_cartao(self, pedido_id: int, cartao: CartaoIn) -> CobrancaCartaoResponse:
        raise NotImplementedError

    # ---------------- Estoque ----------------
    @abstractmethod
    async def listar_ingredientes(self) -> List[IngredienteEstoqueOut]:
        raise NotImplementedError

    @abstractmethod
    async def salvar_ingrediente(
        self,
        ingrediente: IngredienteEstoqueCreate,
        ingrediente_id: Optional[int] = None,
    ) -> IngredienteEstoqueOut:
        raise NotImplementedError

    @abstractmethod
    async def repor_ingrediente(self, ingrediente_id: int, quantidade: Decimal, preco: Decimal) -> IngredienteEstoqueOut:
        raise NotImplementedError

    @abstractmethod
    async def consultar_disponibilidade(self) -> DisponibilidadeResponse:
        raise NotImplementedError

    @abstractmethod
    async def relatorio_diario(self) -> RelatorioDiarioResponse:
        raise NotImplementedError
