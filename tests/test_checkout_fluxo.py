import asyncio
from decimal import Decimal

from app.api.cupons.schemas.schema_cupom import CupomPublicoOut, ValidarCupomResponse
from app.api.estoque.schemas.schema_estoque import DisponibilidadeResponse
from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, TipoEntregaEnum
from app.fluxos.checkout import Checkout
from app.fluxos.estoque import MonitorEstoque
from app.fluxos.exceptions import LojaIndisponivelError, RequisicaoInvalidaError
from app.fluxos.sessao import SessaoCliente

DADOS_CLIENTE = dict(cliente_nome="Maria", cliente_telefone="(11) 98765-4321")


def _cupom_dez():
    return ValidarCupomResponse(
        valido=True,
        desconto=10.0,
        cupom=CupomPublicoOut(codigo="DEZ", tipo="fixed", valor=10.0),
    )


def _checkout(loja, monitor=None):
    checkout = Checkout(loja, monitor=monitor, taxa_entrega=Decimal("5.00"), setores_entrega=[])
    checkout.adicionar_item(1, "X-Burger", Decimal("25.00"), quantidade=2)
    return checkout


# ---------------- Carrinho ----------------
def test_totais_com_cupom_e_taxa(loja):
    async def cenario():
        loja.cupons["DEZ"] = _cupom_dez()
        checkout = _checkout(loja)

        resposta = await checkout.aplicar_cupom(" dez ")
        assert resposta.valido
        assert loja.chamadas_de("validar_cupom") == [("validar_cupom", "DEZ", Decimal("50.00"))]

        delivery = checkout.totais(TipoEntregaEnum.DELIVERY)
        assert (delivery.subtotal, delivery.desconto, delivery.taxa_entrega, delivery.total) == (
            Decimal("50.00"), Decimal("10.00"), Decimal("5.00"), Decimal("45.00"),
        )
        assert checkout.totais(TipoEntregaEnum.RETIRADA).total == Decimal("40.00")

    asyncio.run(cenario())


def test_desconto_recalculado_quando_o_carrinho_muda(loja):
    async def cenario():
        loja.cupons["DEZ"] = _cupom_dez()
        checkout = Checkout(loja, taxa_entrega=Decimal("5.00"), setores_entrega=[])
        checkout.adicionar_item(2, "Refrigerante", Decimal("6.00"), quantidade=3)
        await checkout.aplicar_cupom("DEZ")

        checkout.remover_item(2, quantidade=2)
        assert checkout.subtotal == Decimal("6.00")
        assert checkout.desconto == Decimal("6.00")
        assert checkout.totais(TipoEntregaEnum.LOCAL).total == Decimal("0.00")

    asyncio.run(cenario())


def test_cupom_recusado_nao_fica_aplicado(loja):
    async def cenario():
        checkout = _checkout(loja)
        resposta = await checkout.aplicar_cupom("NADA")
        assert not resposta.valido
        assert checkout.cupom is None
        assert checkout.desconto == Decimal("0.00")

    asyncio.run(cenario())


def test_produto_indisponivel_nao_entra_no_carrinho(loja):
    async def cenario():
        loja.disponibilidade = DisponibilidadeResponse(
            produtos_indisponiveis=[1], ingredientes_zerados=[], ingredientes_baixos=[]
        )
        monitor = MonitorEstoque(loja)
        await monitor.atualizar()

        checkout = Checkout(loja, monitor=monitor)
        assert not checkout.adicionar_item(1, "X-Burger", Decimal("25.00"))
        assert checkout.adicionar_item(2, "Refrigerante", Decimal("6.00"))
        assert list(checkout.itens) == [2]

    asyncio.run(cenario())


def test_alternar_acompanhamento(loja):
    checkout = _checkout(loja)
    assert checkout.alternar_adicional(9, "Molho especial") is True
    assert checkout.alternar_adicional(9, "Molho especial") is False
    assert checkout.adicionais == {}


# ---------------- Envio ----------------
def test_validacao_local_mostra_todos_os_problemas(loja):
    async def cenario():
        checkout = Checkout(loja, setores_entrega=["Centro"])
        resultado = await checkout.finalizar(
            cliente_nome="",
            cliente_telefone="11987654321",
            tipo_entrega=TipoEntregaEnum.DELIVERY,
            forma_pagamento=FormaPagamentoEnum.PIX,
        )
        assert not resultado.sucesso
        assert resultado.erros == [
            "Informe o nome do cliente",
            "O pedido precisa ter ao menos um item",
            "Endereço é obrigatório para delivery",
            "Selecione o setor de entrega",
        ]
        assert loja.chamadas_de("criar_pedido") == []

    asyncio.run(cenario())


def test_finalizar_envia_rascunho_e_limpa_carrinho(loja):
    async def cenario():
        loja.cupons["DEZ"] = _cupom_dez()
        checkout = _checkout(loja)
        checkout.alternar_adicional(9, "Molho especial")
        await checkout.aplicar_cupom("DEZ")

        resultado = await checkout.finalizar(
            **DADOS_CLIENTE,
            tipo_entrega=TipoEntregaEnum.RETIRADA,
            forma_pagamento=FormaPagamentoEnum.DINHEIRO,
            endereco="ignorado na retirada",
            troco_para=Decimal("50"),
        )

        assert resultado.sucesso
        assert resultado.pedido.pedido_id == 101
        rascunho = loja.chamadas_de("criar_pedido")[0][1]
        assert rascunho.endereco is None
        assert rascunho.cupom_codigo == "DEZ"
        assert rascunho.troco_para == Decimal("50")
        assert [a.ingrediente_id for a in rascunho.adicionais] == [9]
        assert checkout.itens == {}
        assert checkout.cupom is None

    asyncio.run(cenario())


def test_falha_de_rede_mantem_carrinho_sem_reenviar(loja):
    async def cenario():
        loja.erros["criar_pedido"] = [LojaIndisponivelError("Não foi possível falar com a loja. Tente novamente.")]
        checkout = _checkout(loja)

        resultado = await checkout.finalizar(
            **DADOS_CLIENTE, tipo_entrega=TipoEntregaEnum.LOCAL, forma_pagamento=FormaPagamentoEnum.PIX
        )
        assert not resultado.sucesso
        assert resultado.pode_tentar_novamente
        assert len(loja.chamadas_de("criar_pedido")) == 1
        assert list(checkout.itens) == [1]

    asyncio.run(cenario())


def test_recusa_do_servidor_volta_como_erros(loja):
    async def cenario():
        loja.erros["criar_pedido"] = [
            RequisicaoInvalidaError("Produto X-Burger indisponível no momento", 400)
        ]
        checkout = _checkout(loja)

        resultado = await checkout.finalizar(
            **DADOS_CLIENTE, tipo_entrega=TipoEntregaEnum.LOCAL, forma_pagamento=FormaPagamentoEnum.PIX
        )
        assert resultado.erros == ["Produto X-Burger indisponível no momento"]
        assert not resultado.pode_tentar_novamente

    asyncio.run(cenario())


# ---------------- Estoque / sessão ----------------
def test_monitor_mantem_retrato_quando_a_loja_cai(loja):
    async def cenario():
        loja.disponibilidade = DisponibilidadeResponse(
            produtos_indisponiveis=[3], ingredientes_zerados=[], ingredientes_baixos=[]
        )
        monitor = MonitorEstoque(loja)
        await monitor._tick()
        assert monitor.carregado

        loja.erros["consultar_disponibilidade"] = [LojaIndisponivelError("fora do ar")]
        await monitor._tick()
        assert monitor.produtos_indisponiveis == {3}
        assert not monitor.pode_adicionar(3)

    asyncio.run(cenario())


def test_repor_atualiza_o_retrato(loja):
    async def cenario():
        monitor = MonitorEstoque(loja)
        ingrediente = await monitor.repor(1, Decimal("10"), Decimal("8.00"))
        assert ingrediente.estoque_atual == 10
        assert len(loja.chamadas_de("consultar_disponibilidade")) == 1

    asyncio.run(cenario())


def test_sessao_do_cliente(loja):
    async def cenario():
        sessao = SessaoCliente(loja, intervalo_estoque=0.01)
        await sessao.iniciar()
        assert sessao.ativa
        sessao.identificar(" Maria ", "(11) 98765-4321")
        assert sessao.cliente.telefone == "5511987654321"

        orq = sessao.pagamento_do_pedido(7, FormaPagamentoEnum.PIX)
        assert sessao.pagamento_do_pedido(7, FormaPagamentoEnum.PIX) is orq
        await orq.iniciar_pix()
        assert sessao.pedidos_pendentes == [7]

        await asyncio.sleep(0.02)
        assert sessao.estoque.carregado

        agendador = sessao.agendador
        await sessao.encerrar()
        assert not sessao.ativa
        assert agendador.nomes == []
        assert sessao.estado_pagamento(7) is None

        consultas = len(loja.chamadas_de("consultar_pagamento"))
        await asyncio.sleep(0.03)
        assert len(loja.chamadas_de("consultar_pagamento")) == consultas

    asyncio.run(cenario())


def test_sessao_encerrada_nao_cria_checkout(loja):
    sessao = SessaoCliente(loja)
    try:
        sessao.novo_checkout()
    except RuntimeError as e:
        assert "não iniciada" in str(e)
    else:
        raise AssertionError("esperava RuntimeError")
