import asyncio
from datetime import timedelta

import pytest

from app.api.pagamentos.schemas.schema_pagamento import CartaoIn, CobrancaCartaoResponse
from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, PagamentoStatusEnum
from app.fluxos.agendador import Agendador
from app.fluxos.exceptions import LojaIndisponivelError, TransicaoRejeitadaError
from app.fluxos.pagamento import EstadoPagamento, OrquestradorPagamento
from app.utils.database_utils import now_trimmed

CARTAO_OK = CartaoIn(numero="4539578763621486", nome_titular="MARIA SILVA", validade="12/35", cvv="123")


async def _esperar(condicao, limite=1.0):
    passos = int(limite / 0.005)
    for _ in range(passos):
        if condicao():
            return
        await asyncio.sleep(0.005)
    raise AssertionError("condição não atingida a tempo")


def _orquestrador(loja, agendador, forma=FormaPagamentoEnum.PIX, **kwargs):
    kwargs.setdefault("intervalo_polling", 0.01)
    return OrquestradorPagamento(loja, agendador, 1, forma, **kwargs)


# ---------------- PIX automático ----------------
def test_polling_ate_aprovacao(loja):
    async def cenario():
        agendador = Agendador()
        desfechos = []

        async def ao_finalizar(estado):
            desfechos.append(estado)

        loja.status_pix = [PagamentoStatusEnum.PENDENTE, PagamentoStatusEnum.APROVADO]
        orq = _orquestrador(loja, agendador, ao_finalizar=ao_finalizar)

        resultado = await orq.iniciar_pix()
        assert resultado.estado == EstadoPagamento.AGUARDANDO
        assert resultado.pix.provider_reference == "pix_1_1"
        assert agendador.ativo(orq.timer_polling)
        assert agendador.ativo(orq.timer_expiracao)

        await _esperar(lambda: orq.terminal)
        await asyncio.sleep(0.03)

        assert orq.estado == EstadoPagamento.APROVADO
        assert desfechos == [EstadoPagamento.APROVADO]
        assert len(loja.chamadas_de("consultar_pagamento")) == 2
        assert agendador.nomes == []

        # um segundo desfecho não sobrescreve o primeiro
        await orq._expirar()
        assert orq.estado == EstadoPagamento.APROVADO
        assert desfechos == [EstadoPagamento.APROVADO]
        await agendador.encerrar()

    asyncio.run(cenario())


def test_pix_vence_localmente(loja):
    async def cenario():
        agendador = Agendador()
        inicio = now_trimmed()
        relogio = {"agora": inicio}
        loja.pix_expira_em = inicio + timedelta(minutes=1)
        orq = _orquestrador(loja, agendador, intervalo_polling=10, relogio=lambda: relogio["agora"])

        await orq.iniciar_pix()
        assert orq.segundos_restantes() == 60

        relogio["agora"] = inicio + timedelta(minutes=2)
        await orq.consultar()

        assert orq.estado == EstadoPagamento.EXPIRADO
        assert orq.mensagem == "O PIX expirou"
        assert agendador.nomes == []
        # tick imediato do polling aconteceu antes do vencimento; depois, nenhuma consulta
        assert len(loja.chamadas_de("consultar_pagamento")) <= 1
        await agendador.encerrar()

    asyncio.run(cenario())


def test_pix_recusado_permite_nova_tentativa(loja):
    async def cenario():
        agendador = Agendador()
        loja.status_pix = [PagamentoStatusEnum.RECUSADO]
        orq = _orquestrador(loja, agendador)

        await orq.iniciar_pix()
        await _esperar(lambda: orq.terminal)
        assert orq.estado == EstadoPagamento.RECUSADO

        resultado = await orq.nova_tentativa_pix()
        assert resultado.estado == EstadoPagamento.AGUARDANDO
        assert resultado.pix.provider_reference == "pix_1_2"
        await agendador.encerrar()

    asyncio.run(cenario())


def test_falha_de_rede_no_polling_espera_o_proximo_tick(loja):
    async def cenario():
        agendador = Agendador()
        loja.erros["consultar_pagamento"] = [LojaIndisponivelError("timeout")]
        loja.status_pix = [PagamentoStatusEnum.APROVADO]
        orq = _orquestrador(loja, agendador)

        await orq.iniciar_pix()
        await _esperar(lambda: orq.terminal)
        assert orq.estado == EstadoPagamento.APROVADO
        assert len(loja.chamadas_de("consultar_pagamento")) == 2
        await agendador.encerrar()

    asyncio.run(cenario())


def test_erro_ao_criar_pix_sugere_nova_tentativa(loja):
    async def cenario():
        agendador = Agendador()
        loja.erros["criar_pagamento_pix"] = [
            LojaIndisponivelError("Não foi possível falar com a loja. Tente novamente."),
            TransicaoRejeitadaError("Pedido já está pago", 409),
        ]
        orq = _orquestrador(loja, agendador)

        resultado = await orq.iniciar_pix()
        assert resultado.estado == EstadoPagamento.OCIOSO
        assert resultado.pode_tentar_novamente

        resultado = await orq.iniciar_pix()
        assert resultado.mensagem == "Pedido já está pago"
        assert not resultado.pode_tentar_novamente
        assert agendador.nomes == []

    asyncio.run(cenario())


# ---------------- Abandono ----------------
def test_abandonar_para_o_polling_e_retomar_reagenda(loja):
    async def cenario():
        agendador = Agendador()
        orq = _orquestrador(loja, agendador)

        await orq.iniciar_pix()
        await asyncio.sleep(0.025)
        orq.abandonar()
        assert orq.estado == EstadoPagamento.ABANDONADO
        assert agendador.nomes == []

        consultas = len(loja.chamadas_de("consultar_pagamento"))
        await asyncio.sleep(0.03)
        assert len(loja.chamadas_de("consultar_pagamento")) == consultas

        loja.status_pix = [PagamentoStatusEnum.APROVADO]
        resultado = await orq.retomar()
        assert resultado.estado == EstadoPagamento.AGUARDANDO
        await _esperar(lambda: orq.terminal)
        assert orq.estado == EstadoPagamento.APROVADO
        await agendador.encerrar()

    asyncio.run(cenario())


def test_resposta_atrasada_depois_do_abandono_e_descartada(loja):
    async def cenario():
        agendador = Agendador()
        orq = _orquestrador(loja, agendador, intervalo_polling=10)
        loja.portoes["consultar_pagamento"] = asyncio.Event()
        loja.status_pix = [PagamentoStatusEnum.APROVADO]

        await orq.iniciar_pix()
        await asyncio.sleep(0)
        consulta = asyncio.create_task(orq.consultar())
        await asyncio.sleep(0)

        orq.abandonar()
        loja.portoes["consultar_pagamento"].set()
        await consulta

        assert orq.estado == EstadoPagamento.ABANDONADO
        await agendador.encerrar()

    asyncio.run(cenario())


# ---------------- PIX manual ----------------
def test_pix_manual_confirmado_pelo_cliente(loja):
    async def cenario():
        agendador = Agendador()
        loja.pix_modo = "manual"
        orq = _orquestrador(loja, agendador)

        resultado = await orq.iniciar_pix()
        assert resultado.pix.chave_pix == "pix@loja.com.br"
        assert agendador.nomes == []

        resultado = await orq.confirmar_pix_manual()
        assert resultado.estado == EstadoPagamento.CONFIRMADO_PELO_CLIENTE
        assert loja.chamadas_de("consultar_pagamento") == []

    asyncio.run(cenario())


# ---------------- Cartão ----------------
def test_cartao_invalido_nao_e_cobrado(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.CARTAO)
        resultado = await orq.pagar_cartao(CARTAO_OK.model_copy(update={"numero": "4539578763621487"}))

        assert resultado.estado == EstadoPagamento.OCIOSO
        assert resultado.erros == ["Número do cartão inválido"]
        assert loja.chamadas_de("cobrar_cartao") == []

    asyncio.run(cenario())


def test_cartao_recusado_pode_tentar_de_novo(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.CARTAO)
        loja.cobrancas = [CobrancaCartaoResponse(sucesso=False, erro="cc_rejected_insufficient_amount")]

        resultado = await orq.pagar_cartao(CARTAO_OK)
        assert not resultado.terminal
        assert resultado.mensagem == "cc_rejected_insufficient_amount"

        resultado = await orq.pagar_cartao(CARTAO_OK)
        assert resultado.estado == EstadoPagamento.APROVADO

    asyncio.run(cenario())


def test_clique_duplo_no_pagar_cobra_uma_vez(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.CARTAO)
        loja.portoes["cobrar_cartao"] = asyncio.Event()

        primeira = asyncio.create_task(orq.pagar_cartao(CARTAO_OK))
        await _esperar(lambda: len(loja.chamadas_de("cobrar_cartao")) == 1)
        assert orq.estado == EstadoPagamento.PROCESSANDO

        segunda = await orq.pagar_cartao(CARTAO_OK)
        assert segunda.estado == EstadoPagamento.PROCESSANDO
        assert not segunda.terminal

        loja.portoes["cobrar_cartao"].set()
        resultado = await primeira
        assert resultado.estado == EstadoPagamento.APROVADO
        assert len(loja.chamadas_de("cobrar_cartao")) == 1

    asyncio.run(cenario())


def test_falha_de_rede_na_cobranca_libera_novo_clique(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.CARTAO)
        loja.erros["cobrar_cartao"] = [LojaIndisponivelError("Não foi possível falar com a loja. Tente novamente.")]

        resultado = await orq.pagar_cartao(CARTAO_OK)
        assert resultado.estado == EstadoPagamento.OCIOSO
        assert resultado.pode_tentar_novamente

        resultado = await orq.pagar_cartao(CARTAO_OK)
        assert resultado.estado == EstadoPagamento.APROVADO
        assert len(loja.chamadas_de("cobrar_cartao")) == 2

    asyncio.run(cenario())


def test_pagamento_presencial(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.DINHEIRO)
        resultado = await orq.aceitar_pagamento_presencial()
        assert resultado.estado == EstadoPagamento.PAGAMENTO_PRESENCIAL

    asyncio.run(cenario())


def test_operacao_de_outra_forma_de_pagamento(loja):
    async def cenario():
        orq = _orquestrador(loja, Agendador(), forma=FormaPagamentoEnum.PIX)
        with pytest.raises(ValueError):
            await orq.pagar_cartao(CARTAO_OK)
        with pytest.raises(ValueError):
            await orq.aceitar_pagamento_presencial()

    asyncio.run(cenario())
