import asyncio

import pytest

from app.fluxos.agendador import Agendador, TokenCancelamento
from app.fluxos.exceptions import LojaIndisponivelError


def test_token_aguardar_respeita_timeout():
    async def cenario():
        token = TokenCancelamento("t")
        assert await token.aguardar(0.01) is False
        token.cancelar("fim")
        token.cancelar("ignorado")
        assert await token.aguardar(1) is True
        assert token.motivo == "fim"

    asyncio.run(cenario())


def test_periodico_roda_ate_ser_cancelado():
    async def cenario():
        agendador = Agendador()
        execucoes = []

        async def acao():
            execucoes.append(1)

        agendador.periodico("pedidos", 0.01, acao)
        await asyncio.sleep(0.055)
        assert agendador.ativo("pedidos")
        assert agendador.cancelar("pedidos") is True

        total = len(execucoes)
        assert total >= 3
        await asyncio.sleep(0.03)
        assert len(execucoes) == total
        assert not agendador.ativo("pedidos")
        assert agendador.cancelar("pedidos") is False

    asyncio.run(cenario())


def test_periodico_sem_execucao_imediata():
    async def cenario():
        agendador = Agendador()
        execucoes = []

        async def acao():
            execucoes.append(1)

        agendador.periodico("estoque", 10, acao, imediato=False)
        await asyncio.sleep(0.01)
        assert execucoes == []
        await agendador.encerrar()

    asyncio.run(cenario())


def test_falha_na_acao_nao_derruba_o_timer():
    async def cenario():
        agendador = Agendador()
        tentativas = []

        async def acao():
            tentativas.append(1)
            if len(tentativas) == 1:
                raise LojaIndisponivelError("fora do ar")
            if len(tentativas) == 2:
                raise ValueError("inesperado")

        agendador.periodico("pedidos", 0.01, acao)
        await asyncio.sleep(0.06)
        await agendador.encerrar()
        assert len(tentativas) >= 3

    asyncio.run(cenario())


def test_uma_vez_dispara_so_uma_vez():
    async def cenario():
        agendador = Agendador()
        disparos = []

        async def acao():
            disparos.append(1)

        agendador.uma_vez("expiracao", 0.01, acao)
        await asyncio.sleep(0.05)
        assert disparos == [1]
        assert agendador.nomes == []

        agendador.uma_vez("expiracao", 0.05, acao)
        agendador.cancelar("expiracao")
        await asyncio.sleep(0.08)
        assert disparos == [1]

    asyncio.run(cenario())


def test_mesmo_nome_substitui_o_timer_anterior():
    async def cenario():
        agendador = Agendador()

        async def acao():
            pass

        primeiro = agendador.periodico("pagamento:1", 10, acao, imediato=False)
        segundo = agendador.periodico("pagamento:1", 10, acao, imediato=False)

        assert primeiro.cancelado
        assert primeiro.motivo == "substituido"
        assert not segundo.cancelado
        await asyncio.sleep(0)
        assert agendador.nomes == ["pagamento:1"]
        await agendador.encerrar()

    asyncio.run(cenario())


def test_encerrar_cancela_tudo_e_bloqueia_novos_timers():
    async def cenario():
        agendador = Agendador()

        async def acao():
            pass

        tokens = [
            agendador.periodico("pedidos", 10, acao, imediato=False),
            agendador.uma_vez("pagamento-expiracao:1", 10, acao),
        ]
        await agendador.encerrar()

        assert all(t.cancelado and t.motivo == "encerramento" for t in tokens)
        assert agendador.nomes == []
        with pytest.raises(RuntimeError):
            agendador.periodico("estoque", 1, acao)

    asyncio.run(cenario())
