from app.fluxos.trava_transicao import TravaTransicao


class RelogioFalso:
    def __init__(self):
        self.agora = 0.0

    def __call__(self):
        return self.agora


def test_segunda_aquisicao_e_recusada():
    trava = TravaTransicao(timeout=10, relogio=RelogioFalso())
    assert trava.adquirir(1)
    assert not trava.adquirir(1)
    assert trava.adquirir(2)


def test_liberar_permite_nova_transicao():
    trava = TravaTransicao(timeout=10, relogio=RelogioFalso())
    posse = trava.adquirir(1)
    assert trava.liberar(posse)
    assert not trava.travado(1)
    assert trava.adquirir(1)


def test_trava_vence_sozinha():
    relogio = RelogioFalso()
    trava = TravaTransicao(timeout=10, relogio=relogio)
    trava.adquirir(1)

    relogio.agora = 9.9
    assert trava.travado(1)
    relogio.agora = 10
    assert not trava.travado(1)
    assert trava.adquirir(1)


def test_liberacao_atrasada_nao_remove_trava_de_outro_dono():
    relogio = RelogioFalso()
    trava = TravaTransicao(timeout=10, relogio=relogio)
    primeira = trava.adquirir(1)

    relogio.agora = 11
    segunda = trava.adquirir(1)
    assert segunda is not None

    assert not trava.liberar(primeira)
    assert trava.travado(1)
    assert trava.adquirir(1) is None

    assert trava.liberar(segunda)
    assert not trava.travado(1)


def test_timeout_padrao_vem_da_configuracao():
    assert TravaTransicao().timeout == 10
