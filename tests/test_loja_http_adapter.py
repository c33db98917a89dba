import asyncio
from decimal import Decimal

import httpx
import pytest

from app.api.pedidos.schemas.schema_pedido import ClientePedidoIn, ItemPedidoIn, PedidoCreate
from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, PedidoStatusEnum, TipoEntregaEnum
from app.fluxos.adapters.loja_http_adapter import LojaHttpAdapter
from app.fluxos.exceptions import (
    LojaIndisponivelError,
    RecursoNaoEncontradoError,
    RequisicaoInvalidaError,
    TransicaoRejeitadaError,
)
from app.main import app


def _adapter(transport=None):
    return LojaHttpAdapter(base_url="http://loja", transport=transport or httpx.ASGITransport(app=app))


def _rascunho(produto_id, **extra):
    dados = dict(
        cliente=ClientePedidoIn(nome="Maria", telefone="(11) 98765-4321"),
        tipo_entrega=TipoEntregaEnum.DELIVERY,
        endereco="Rua das Flores, 10",
        itens=[ItemPedidoIn(produto_id=produto_id, quantidade=2)],
        forma_pagamento=FormaPagamentoEnum.PIX,
    )
    dados.update(extra)
    return PedidoCreate(**dados)


def test_criar_e_avancar_pedido_pela_api(cardapio):
    async def cenario():
        async with _adapter() as loja:
            criado = await loja.criar_pedido(_rascunho(cardapio["burger"]["id"]))
            assert criado.total == 55.0

            pedido = await loja.atualizar_status(criado.pedido_id, PedidoStatusEnum.EM_PREPARO)
            assert pedido.status == PedidoStatusEnum.EM_PREPARO
            assert [p.id for p in await loja.listar_pedidos_ativos()] == [criado.pedido_id]

            with pytest.raises(TransicaoRejeitadaError) as erro:
                await loja.atualizar_status(criado.pedido_id, PedidoStatusEnum.CONCLUIDO)
            assert erro.value.status_code == 409
            assert erro.value.mensagem == "Transição inválida: preparing -> completed"

    asyncio.run(cenario())


def test_erros_de_validacao_viram_requisicao_invalida(cardapio):
    async def cenario():
        async with _adapter() as loja:
            with pytest.raises(RequisicaoInvalidaError) as erro:
                await loja.criar_pedido(_rascunho(cardapio["burger"]["id"], endereco=None))
            assert erro.value.status_code == 400
            assert erro.value.erros == ["Endereço é obrigatório para delivery"]

            with pytest.raises(RequisicaoInvalidaError) as erro:
                await loja.repor_ingrediente(cardapio["pao"]["id"], Decimal("0"), Decimal("1"))
            assert erro.value.status_code == 422

    asyncio.run(cenario())


def test_recurso_inexistente(cardapio):
    async def cenario():
        async with _adapter() as loja:
            with pytest.raises(RecursoNaoEncontradoError):
                await loja.cancelar_pedido(999, "teste")

    asyncio.run(cenario())


def test_disponibilidade_e_reposicao(cardapio):
    async def cenario():
        async with _adapter() as loja:
            ingrediente = await loja.repor_ingrediente(cardapio["pao"]["id"], Decimal("10"), Decimal("0.5"))
            assert ingrediente.estoque_atual == 110
            disponibilidade = await loja.consultar_disponibilidade()
            assert disponibilidade.produtos_indisponiveis == []

    asyncio.run(cenario())


def test_falha_de_rede_e_5xx_sao_transitorias():
    def sem_rede(request):
        raise httpx.ConnectError("conexão recusada", request=request)

    def fora_do_ar(request):
        return httpx.Response(503, json={"detail": "Manutenção", "status_code": 503})

    async def cenario():
        async with _adapter(httpx.MockTransport(sem_rede)) as loja:
            with pytest.raises(LojaIndisponivelError) as erro:
                await loja.consultar_disponibilidade()
            assert erro.value.status_code is None

        async with _adapter(httpx.MockTransport(fora_do_ar)) as loja:
            with pytest.raises(LojaIndisponivelError) as erro:
                await loja.listar_pedidos_ativos()
            assert erro.value.mensagem == "Manutenção"

    asyncio.run(cenario())
