"""
Regras de preenchimento do pedido no checkout.

Devolve a lista de problemas em vez de levantar exceção: o checkout do
cliente mostra todos de uma vez e o servidor transforma o primeiro em 400.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, TipoEntregaEnum


def validar_rascunho(
    *,
    cliente_nome: Optional[str],
    cliente_telefone: Optional[str],
    tipo_entrega: TipoEntregaEnum | str,
    endereco: Optional[str],
    setor: Optional[str],
    forma_pagamento: FormaPagamentoEnum | str,
    tipo_cartao: Optional[str],
    troco_para: Optional[Decimal],
    quantidade_itens: int,
    total: Optional[Decimal] = None,
    setores_configurados: Iterable[str] = (),
) -> list[str]:
    erros: list[str] = []
    tipo_entrega = TipoEntregaEnum(tipo_entrega)
    forma_pagamento = FormaPagamentoEnum(forma_pagamento)
    setores = [s.lower() for s in setores_configurados]

    if not (cliente_nome or "").strip():
        erros.append("Informe o nome do cliente")
    if not (cliente_telefone or "").strip():
        erros.append("Informe o telefone do cliente")
    if quantidade_itens <= 0:
        erros.append("O pedido precisa ter ao menos um item")

    if tipo_entrega == TipoEntregaEnum.DELIVERY:
        if not (endereco or "").strip():
            erros.append("Endereço é obrigatório para delivery")
        if setores:
            if not (setor or "").strip():
                erros.append("Selecione o setor de entrega")
            elif setor.strip().lower() not in setores:
                erros.append(f"Setor de entrega desconhecido: {setor}")

    if forma_pagamento == FormaPagamentoEnum.CARTAO and not tipo_cartao:
        erros.append("Informe se o cartão é crédito ou débito")
    if forma_pagamento != FormaPagamentoEnum.CARTAO and tipo_cartao:
        erros.append("Tipo de cartão só se aplica a pagamento com cartão")

    if troco_para is not None:
        if forma_pagamento != FormaPagamentoEnum.DINHEIRO:
            erros.append("Troco só se aplica a pagamento em dinheiro")
        elif total is not None and troco_para < total:
            erros.append("Valor para troco deve ser maior ou igual ao total do pedido")

    return erros
