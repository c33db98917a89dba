import os

# Configuração precisa existir antes de importar o app (settings lê na importação)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GATEWAY_MODE"] = "mock"
os.environ["PIX_MODO"] = "automatico"
os.environ["TAXA_ENTREGA"] = "5.00"
os.environ["SETORES_ENTREGA"] = ""
os.environ["ESTOQUE_MOMENTO_BAIXA"] = "criacao"

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api.cupons.schemas.schema_cupom import ValidarCupomResponse
from app.api.estoque.schemas.schema_estoque import (
    DisponibilidadeResponse,
    IngredienteEstoqueOut,
    RelatorioDiarioResponse,
)
from app.api.pagamentos.schemas.schema_pagamento import (
    CobrancaCartaoResponse,
    PixPagamentoResponse,
    StatusPagamentoResponse,
)
from app.api.pagamentos.services.dependencies import get_payment_gateway
from app.api.pedidos.core.maquina_estados import eh_terminal, transicao_permitida
from app.api.pedidos.schemas.schema_pedido import PedidoCriadoResponse, PedidoOut
from app.api.shared.schemas.schema_shared_enums import PagamentoStatusEnum, PedidoStatusEnum
from app.database.db_connection import Base, SessionLocal, engine
from app.database.init_db import importar_models
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.exceptions import TransicaoRejeitadaError
from app.main import app
from app.utils.database_utils import now_trimmed

importar_models()


@pytest.fixture(autouse=True)
def banco():
    Base.metadata.create_all(bind=engine)
    get_payment_gateway.cache_clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def _criar_ingrediente(client, **dados):
    resp = client.post("/api/estoque/ingredientes", json=dados)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def cardapio(client):
    """
    Cardápio mínimo: X-Burger (pão + 180 g de carne + caixa) e um molho
    como acompanhamento.
    """
    pao = _criar_ingrediente(client, nome="Pão brioche", tipo_unidade="unit", estoque_atual="100", estoque_minimo="10")
    carne = _criar_ingrediente(
        client,
        nome="Carne moída",
        tipo_unidade="weight",
        estoque_atual="2.0",
        estoque_minimo="0.5",
        porcoes=[{"rotulo": "Hambúrguer 180g", "gramas": "180"}],
    )
    caixa = _criar_ingrediente(
        client, nome="Caixa de lanche", tipo_unidade="unit", categoria="packaging", estoque_atual="50"
    )
    molho = _criar_ingrediente(
        client,
        nome="Molho especial",
        tipo_unidade="unit",
        categoria="accompaniment",
        estoque_atual="30",
        quantidade_padrao_pedido="1",
    )

    resp = client.post(
        "/api/produtos/admin",
        json={
            "nome": "X-Burger",
            "categoria": "Lanches",
            "preco": "25.00",
            "receita": [
                {"ingrediente_id": pao["id"], "quantidade_usada": "1"},
                {"ingrediente_id": carne["id"], "quantidade_usada": "1", "porcao_id": carne["porcoes"][0]["id"]},
                {"ingrediente_id": caixa["id"], "quantidade_usada": "1"},
            ],
            "extras": ["Picles"],
        },
    )
    assert resp.status_code == 201, resp.text
    burger = resp.json()

    return {"pao": pao, "carne": carne, "caixa": caixa, "molho": molho, "burger": burger}


@pytest.fixture
def novo_pedido(client, cardapio):
    def _criar(**extra):
        payload = {
            "cliente": {"nome": "Maria", "telefone": "(11) 98765-4321"},
            "tipo_entrega": "delivery",
            "endereco": "Rua das Flores, 10",
            "itens": [{"produto_id": cardapio["burger"]["id"], "quantidade": 2}],
            "forma_pagamento": "pix",
        }
        payload.update(extra)
        resp = client.post("/api/pedidos", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _criar


# ======================================================================
# ===================== Loja falsa para app/fluxos =====================
# ======================================================================
def montar_pedido_out(pedido_id: int, tipo_entrega: str = "delivery", status: str = "pending") -> PedidoOut:
    return PedidoOut(
        id=pedido_id,
        cliente_nome="Maria",
        cliente_telefone="5511987654321",
        tipo_entrega=tipo_entrega,
        forma_pagamento="pix",
        pago=False,
        desconto=0,
        taxa_entrega=5,
        subtotal=50,
        total=55,
        status=status,
        arquivado=False,
        estoque_baixado=True,
        created_at=now_trimmed(),
    )


class LojaFalsa(ILojaContract):
    """
    Loja em memória. `erros[metodo]` é uma fila de exceções levantadas nas
    próximas chamadas; `portoes[metodo]` segura a resposta até o Event ser setado.
    """

    def __init__(self):
        self.pedidos: dict[int, PedidoOut] = {}
        self.chamadas: list[tuple] = []
        self.erros: dict[str, list[Exception]] = {}
        self.portoes: dict[str, asyncio.Event] = {}
        self.cupons: dict[str, ValidarCupomResponse] = {}
        self.status_pix: list[PagamentoStatusEnum] = []
        self.pix_modo = "automatico"
        self.pix_expira_em = None
        self.cobrancas: list[CobrancaCartaoResponse] = []
        self.disponibilidade = DisponibilidadeResponse(
            produtos_indisponiveis=[], ingredientes_zerados=[], ingredientes_baixos=[]
        )
        self._proximo_id = 100

    def chamadas_de(self, metodo: str) -> list[tuple]:
        return [c for c in self.chamadas if c[0] == metodo]

    async def _registrar(self, metodo: str, *args):
        self.chamadas.append((metodo, *args))
        fila = self.erros.get(metodo)
        if fila:
            raise fila.pop(0)
        portao = self.portoes.get(metodo)
        if portao is not None:
            await portao.wait()

    # ---------------- Pedidos ----------------
    async def criar_pedido(self, rascunho):
        await self._registrar("criar_pedido", rascunho)
        self._proximo_id += 1
        subtotal = sum((Decimal(str(i.preco_unitario)) * i.quantidade for i in rascunho.itens), Decimal("0"))
        return PedidoCriadoResponse(
            pedido_id=self._proximo_id,
            status=PedidoStatusEnum.PENDENTE,
            subtotal=float(subtotal),
            desconto=0,
            taxa_entrega=0,
            total=float(subtotal),
        )

    async def _transicionar(self, pedido_id, alvo):
        pedido = self.pedidos[pedido_id]
        if not transicao_permitida(pedido.tipo_entrega, pedido.status, alvo):
            raise TransicaoRejeitadaError(f"Transição inválida: {pedido.status.value} -> {alvo.value}", 409)
        self.pedidos[pedido_id] = pedido.model_copy(update={"status": alvo})
        return self.pedidos[pedido_id]

    async def atualizar_status(self, pedido_id, status):
        await self._registrar("atualizar_status", pedido_id, status)
        return await self._transicionar(pedido_id, status)

    async def cancelar_pedido(self, pedido_id, motivo=None):
        await self._registrar("cancelar_pedido", pedido_id, motivo)
        return await self._transicionar(pedido_id, PedidoStatusEnum.CANCELADO)

    async def listar_pedidos_ativos(self):
        await self._registrar("listar_pedidos_ativos")
        return [p for p in self.pedidos.values() if not eh_terminal(p.status)]

    async def listar_historico(self, limite=50):
        await self._registrar("listar_historico", limite)
        return [p for p in self.pedidos.values() if eh_terminal(p.status)][:limite]

    # ---------------- Cardápio / cupons ----------------
    async def listar_cardapio(self):
        await self._registrar("listar_cardapio")
        return []

    async def validar_cupom(self, codigo, subtotal):
        await self._registrar("validar_cupom", codigo, subtotal)
        return self.cupons.get(codigo, ValidarCupomResponse(valido=False, motivo="Cupom não encontrado"))

    # ---------------- Pagamentos ----------------
    async def criar_pagamento_pix(self, pedido_id):
        await self._registrar("criar_pagamento_pix", pedido_id)
        if self.pix_modo == "manual":
            return PixPagamentoResponse(modo="manual", pedido_id=pedido_id, valor=55.0, chave_pix="pix@loja.com.br")
        tentativa = len(self.chamadas_de("criar_pagamento_pix"))
        return PixPagamentoResponse(
            modo="automatico",
            pedido_id=pedido_id,
            valor=55.0,
            provider_reference=f"pix_{pedido_id}_{tentativa}",
            qr_code="iVBORw0KGgo=",
            copia_cola="00020126",
            expires_at=self.pix_expira_em or now_trimmed() + timedelta(minutes=30),
        )

    async def consultar_pagamento(self, provider_reference):
        await self._registrar("consultar_pagamento", provider_reference)
        status = self.status_pix.pop(0) if self.status_pix else PagamentoStatusEnum.PENDENTE
        return StatusPagamentoResponse(status=status, pedido_id=0, provider_reference=provider_reference)

    async def cobrar_cartao(self, pedido_id, cartao):
        await self._registrar("cobrar_cartao", pedido_id, cartao)
        if self.cobrancas:
            return self.cobrancas.pop(0)
        return CobrancaCartaoResponse(sucesso=True, provider_reference="card_1", bandeira="visa")

    # ---------------- Estoque ----------------
    async def listar_ingredientes(self):
        await self._registrar("listar_ingredientes")
        return []

    async def salvar_ingrediente(self, ingrediente, ingrediente_id=None):
        await self._registrar("salvar_ingrediente", ingrediente, ingrediente_id)
        return IngredienteEstoqueOut(
            id=ingrediente_id or 1,
            nome=ingrediente.nome,
            tipo_unidade=ingrediente.tipo_unidade,
            categoria=ingrediente.categoria,
            estoque_atual=float(ingrediente.estoque_atual),
            estoque_minimo=float(ingrediente.estoque_minimo),
            ativo=True,
        )

    async def repor_ingrediente(self, ingrediente_id, quantidade, preco):
        await self._registrar("repor_ingrediente", ingrediente_id, quantidade, preco)
        return IngredienteEstoqueOut(
            id=ingrediente_id,
            nome="Pão brioche",
            tipo_unidade="unit",
            categoria="ingredient",
            estoque_atual=float(quantidade),
            estoque_minimo=0,
            ativo=True,
        )

    async def consultar_disponibilidade(self):
        await self._registrar("consultar_disponibilidade")
        return self.disponibilidade

    async def relatorio_diario(self):
        await self._registrar("relatorio_diario")
        agora = now_trimmed()
        return RelatorioDiarioResponse(
            inicio_dia_operacional=agora, fim_dia_operacional=agora, linhas=[], custo_total_dia=0
        )


@pytest.fixture
def loja():
    return LojaFalsa()


@pytest.fixture
def pedido_out():
    return montar_pedido_out
