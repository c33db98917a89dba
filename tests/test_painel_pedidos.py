import asyncio

from app.api.shared.schemas.schema_shared_enums import PedidoStatusEnum as S
from app.fluxos.exceptions import LojaIndisponivelError, RecursoNaoEncontradoError, RequisicaoInvalidaError
from app.fluxos.painel_pedidos import DesfechoTransicao, PainelPedidos
from app.fluxos.trava_transicao import TravaTransicao


def _painel(loja, *pedidos):
    for pedido in pedidos:
        loja.pedidos[pedido.id] = pedido
    painel = PainelPedidos(loja)
    return painel


def test_avancar_segue_o_fluxo(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1, "pickup"))
        await painel.atualizar()

        resultado = await painel.avancar(1)
        assert resultado.aplicada
        assert painel.obter(1).status == S.EM_PREPARO

        await painel.avancar(1)
        assert painel.obter(1).status == S.PRONTO_RETIRADA

    asyncio.run(cenario())


def test_transicao_duplicada_chega_uma_vez_ao_servidor(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1))
        await painel.atualizar()
        loja.portoes["atualizar_status"] = asyncio.Event()

        primeira = asyncio.create_task(painel.transicionar(1, S.EM_PREPARO))
        await asyncio.sleep(0)
        # valor otimista já aparece na lista
        assert painel.obter(1).status == S.EM_PREPARO

        segunda = await painel.transicionar(1, S.EM_PREPARO)
        assert segunda.desfecho == DesfechoTransicao.IGNORADA

        # recarga periódica não apaga o valor otimista
        await painel.atualizar()
        assert painel.obter(1).status == S.EM_PREPARO

        loja.portoes["atualizar_status"].set()
        assert (await primeira).aplicada
        assert len(loja.chamadas_de("atualizar_status")) == 1
        assert not painel.trava.travado(1)

    asyncio.run(cenario())


def test_transicao_fora_do_fluxo_nao_vai_ao_servidor(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1, "dine-in"))
        await painel.atualizar()

        resultado = await painel.transicionar(1, S.EMBALANDO)
        assert resultado.desfecho == DesfechoTransicao.REJEITADA
        assert loja.chamadas_de("atualizar_status") == []
        assert painel.obter(1).status == S.PENDENTE

    asyncio.run(cenario())


def test_recusa_do_servidor_desfaz_e_recarrega(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1))
        await painel.atualizar()
        # outro operador já avançou o pedido no servidor
        loja.pedidos[1] = pedido_out(1, status="packing")

        resultado = await painel.transicionar(1, S.EM_PREPARO)
        assert resultado.desfecho == DesfechoTransicao.REJEITADA
        assert resultado.divergencia
        assert "packing -> preparing" in resultado.mensagem
        assert painel.obter(1).status == S.EMBALANDO
        assert not painel.trava.travado(1)

    asyncio.run(cenario())


def test_falha_de_rede_desfaz_sem_divergencia(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1))
        await painel.atualizar()
        loja.erros["atualizar_status"] = [LojaIndisponivelError("timeout")]

        resultado = await painel.transicionar(1, S.EM_PREPARO)
        assert resultado.desfecho == DesfechoTransicao.FALHA
        assert not resultado.divergencia
        assert painel.obter(1).status == S.PENDENTE

        assert (await painel.transicionar(1, S.EM_PREPARO)).aplicada

    asyncio.run(cenario())


def test_pedido_terminal_sai_da_lista(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1), pedido_out(2))
        await painel.atualizar()

        resultado = await painel.cancelar(1, motivo="Cliente desistiu")
        assert resultado.aplicada
        assert painel.obter(1) is None
        assert [p.id for p in painel.pedidos] == [2]
        assert loja.chamadas_de("cancelar_pedido") == [("cancelar_pedido", 1, "Cliente desistiu")]

    asyncio.run(cenario())


def test_atualizacao_periodica(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1))
        painel.iniciar(0.01)
        await asyncio.sleep(0.035)
        painel.parar()

        chamadas = len(loja.chamadas_de("listar_pedidos_ativos"))
        assert chamadas >= 2
        assert painel.obter(1) is not None
        await asyncio.sleep(0.03)
        assert len(loja.chamadas_de("listar_pedidos_ativos")) == chamadas
        await painel.agendador.encerrar()

    asyncio.run(cenario())


def test_pedido_arquivado_por_outro_operador_desfaz_e_recarrega(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1), pedido_out(2))
        await painel.atualizar()

        # outro operador concluiu o pedido 1 e ele saiu da lista de ativos
        loja.pedidos[1] = pedido_out(1, status="completed")
        loja.erros["atualizar_status"] = [RecursoNaoEncontradoError("Pedido não encontrado", 404)]

        resultado = await painel.transicionar(1, S.EM_PREPARO)

        assert resultado.desfecho == DesfechoTransicao.REJEITADA
        assert resultado.divergencia
        assert resultado.mensagem == "Pedido não encontrado"
        assert painel.obter(1) is None
        assert [p.id for p in painel.pedidos] == [2]
        assert not painel.trava.travado(1)

    asyncio.run(cenario())


def test_recusa_de_validacao_devolve_status_anterior(loja, pedido_out):
    async def cenario():
        painel = _painel(loja, pedido_out(1))
        await painel.atualizar()
        loja.erros["cancelar_pedido"] = [RequisicaoInvalidaError("Motivo muito longo", 422)]

        resultado = await painel.cancelar(1, "x" * 300)

        assert resultado.desfecho == DesfechoTransicao.REJEITADA
        assert resultado.divergencia
        assert painel.obter(1).status == S.PENDENTE

    asyncio.run(cenario())


def test_resposta_depois_do_vencimento_nao_solta_trava_nova(loja, pedido_out):
    async def cenario():
        relogio = {"agora": 0.0}
        painel = PainelPedidos(loja, trava=TravaTransicao(timeout=10, relogio=lambda: relogio["agora"]))
        loja.pedidos[1] = pedido_out(1)
        await painel.atualizar()
        loja.portoes["atualizar_status"] = asyncio.Event()

        primeira = asyncio.create_task(painel.transicionar(1, S.EM_PREPARO))
        await asyncio.sleep(0)

        # a primeira transição passou do tempo; outro clique tomou a trava
        relogio["agora"] = 11
        segunda = painel.trava.adquirir(1)
        assert segunda is not None

        loja.portoes["atualizar_status"].set()
        assert (await primeira).aplicada

        assert painel.trava.travado(1)
        ignorada = await painel.avancar(1)
        assert ignorada.desfecho == DesfechoTransicao.IGNORADA
        assert len(loja.chamadas_de("atualizar_status")) == 1

        painel.trava.liberar(segunda)
        assert not painel.trava.travado(1)

    asyncio.run(cenario())
