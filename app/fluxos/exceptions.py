"""Erros do lado cliente, já traduzidos do transporte HTTP."""
from typing import List, Optional


class FluxoError(Exception):
    def __init__(self, mensagem: str, status_code: Optional[int] = None):
        super().__init__(mensagem)
        self.mensagem = mensagem
        self.status_code = status_code


class LojaIndisponivelError(FluxoError):
    """Falha de rede ou 5xx: transitória, o usuário pode tentar de novo."""


class RequisicaoInvalidaError(FluxoError):
    def __init__(self, mensagem: str, status_code: Optional[int] = None, erros: Optional[List[str]] = None):
        super().__init__(mensagem, status_code)
        self.erros = erros or [mensagem]


class RecursoNaoEncontradoError(FluxoError):
    pass


class TransicaoRejeitadaError(FluxoError):
    """409 do servidor: transição fora do fluxo ou pagamento já resolvido."""
