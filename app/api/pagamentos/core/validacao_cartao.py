"""
Pré-validação de cartão antes de qualquer cobrança.

Mesmas regras no checkout do cliente e no servidor: número com dígito
verificador (Luhn) válido, titular preenchido, validade MM/AA não vencida e
CVV com 3 dígitos (4 para Amex).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

BANDEIRAS = (
    ("amex", re.compile(r"^3[47]")),
    ("visa", re.compile(r"^4")),
    ("mastercard", re.compile(r"^(5[1-5]|2[2-7])")),
    ("elo", re.compile(r"^6")),
)


@dataclass(slots=True, frozen=True)
class DadosCartao:
    numero: str
    nome_titular: str
    validade: str  # "MM/AA"
    cvv: str

    @property
    def numero_limpo(self) -> str:
        return apenas_digitos(self.numero)

    @property
    def final(self) -> str:
        return self.numero_limpo[-4:]


def apenas_digitos(valor: Optional[str]) -> str:
    return re.sub(r"\D", "", valor or "")


def luhn_valido(numero: str) -> bool:
    digitos = apenas_digitos(numero)
    if not digitos:
        return False
    soma = 0
    for posicao, caractere in enumerate(reversed(digitos)):
        d = int(caractere)
        if posicao % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        soma += d
    return soma % 10 == 0


def detectar_bandeira(numero: str) -> Optional[str]:
    digitos = apenas_digitos(numero)
    for nome, padrao in BANDEIRAS:
        if padrao.match(digitos):
            return nome
    return None


def interpretar_validade(validade: str) -> Optional[tuple[int, int]]:
    """'MM/AA' -> (mês, ano com 4 dígitos); None se o formato não bate."""
    casamento = re.fullmatch(r"\s*(\d{2})\s*/\s*(\d{2})\s*", validade or "")
    if not casamento:
        return None
    mes, ano = int(casamento.group(1)), 2000 + int(casamento.group(2))
    if not 1 <= mes <= 12:
        return None
    return mes, ano


def validar_cartao(cartao: DadosCartao, hoje: Optional[date] = None) -> list[str]:
    erros: list[str] = []
    numero = cartao.numero_limpo

    if len(numero) < 13 or len(numero) > 19 or not luhn_valido(numero):
        erros.append("Número do cartão inválido")

    if not (cartao.nome_titular or "").strip():
        erros.append("Informe o nome impresso no cartão")

    validade = interpretar_validade(cartao.validade)
    if validade is None:
        erros.append("Validade deve estar no formato MM/AA")
    else:
        hoje = hoje or date.today()
        mes, ano = validade
        if (ano, mes) < (hoje.year, hoje.month):
            erros.append("Cartão vencido")

    cvv = apenas_digitos(cartao.cvv)
    tamanho_cvv = 4 if detectar_bandeira(numero) == "amex" else 3
    if len(cvv) != len(cartao.cvv.strip()) or len(cvv) != tamanho_cvv:
        erros.append("CVV inválido")

    return erros
