from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from app.api.cupons.core.regras_cupom import calcular_desconto
from app.api.cupons.schemas.schema_cupom import ValidarCupomResponse
from app.api.pedidos.core.totais import calcular_total, dinheiro
from app.api.pedidos.core.validacao_pedido import validar_rascunho
from app.api.pedidos.schemas.schema_pedido import (
    AdicionalPedidoIn,
    ClientePedidoIn,
    ItemPedidoIn,
    PedidoCreate,
    PedidoCriadoResponse,
)
from app.api.shared.schemas.schema_shared_enums import FormaPagamentoEnum, TipoCartaoEnum, TipoEntregaEnum
from app.config import settings
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.estoque import MonitorEstoque
from app.fluxos.exceptions import LojaIndisponivelError, RequisicaoInvalidaError
from app.utils.logger import logger


@dataclass
class ItemCarrinho:
    produto_id: int
    nome: str
    preco_unitario: Decimal
    quantidade: int = 1
    observacao: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return dinheiro(self.preco_unitario * self.quantidade)


@dataclass
class Totais:
    subtotal: Decimal
    desconto: Decimal
    taxa_entrega: Decimal
    total: Decimal


@dataclass
class ResultadoCheckout:
    sucesso: bool
    pedido: Optional[PedidoCriadoResponse] = None
    erros: List[str] = field(default_factory=list)
    pode_tentar_novamente: bool = False


class Checkout:
    """Carrinho + cupom + envio do pedido. Problemas de preenchimento não saem da tela."""

    def __init__(
        self,
        loja: ILojaContract,
        monitor: Optional[MonitorEstoque] = None,
        taxa_entrega: Decimal = settings.TAXA_ENTREGA,
        setores_entrega: Optional[List[str]] = None,
    ):
        self.loja = loja
        self.monitor = monitor
        self.taxa_entrega = taxa_entrega
        self.setores_entrega = settings.SETORES_ENTREGA if setores_entrega is None else setores_entrega
        self.itens: Dict[int, ItemCarrinho] = {}
        self.adicionais: Dict[int, str] = {}
        self.cupom: Optional[ValidarCupomResponse] = None

    # ---------------- Carrinho ----------------
    def adicionar_item(
        self,
        produto_id: int,
        nome: str,
        preco_unitario: Decimal,
        quantidade: int = 1,
        observacao: Optional[str] = None,
    ) -> bool:
        if self.monitor is not None and not self.monitor.pode_adicionar(produto_id):
            logger.info(f"[Fluxos] Produto {produto_id} indisponível, não entrou no carrinho")
            return False
        item = self.itens.get(produto_id)
        if item:
            item.quantidade += quantidade
            if observacao:
                item.observacao = observacao
        else:
            self.itens[produto_id] = ItemCarrinho(produto_id, nome, Decimal(str(preco_unitario)), quantidade, observacao)
        return True

    def remover_item(self, produto_id: int, quantidade: Optional[int] = None) -> None:
        item = self.itens.get(produto_id)
        if not item:
            return
        if quantidade is None or quantidade >= item.quantidade:
            del self.itens[produto_id]
        else:
            item.quantidade -= quantidade

    def alternar_adicional(self, ingrediente_id: int, nome: str) -> bool:
        """Marca/desmarca um acompanhamento; devolve se ficou marcado."""
        if ingrediente_id in self.adicionais:
            del self.adicionais[ingrediente_id]
            return False
        self.adicionais[ingrediente_id] = nome
        return True

    def limpar(self) -> None:
        self.itens.clear()
        self.adicionais.clear()
        self.cupom = None

    @property
    def subtotal(self) -> Decimal:
        return dinheiro(sum((i.subtotal for i in self.itens.values()), Decimal("0")))

    # ---------------- Cupom ----------------
    async def aplicar_cupom(self, codigo: str) -> ValidarCupomResponse:
        resposta = await self.loja.validar_cupom(codigo.strip().upper(), self.subtotal)
        self.cupom = resposta if resposta.valido else None
        return resposta

    def remover_cupom(self) -> None:
        self.cupom = None

    @property
    def desconto(self) -> Decimal:
        if not self.cupom or not self.cupom.cupom:
            return Decimal("0.00")
        # recalculado sobre o subtotal atual: o carrinho pode ter mudado depois da validação
        return calcular_desconto(self.cupom.cupom.tipo, self.cupom.cupom.valor, self.subtotal)

    def totais(self, tipo_entrega: TipoEntregaEnum) -> Totais:
        subtotal = self.subtotal
        desconto = self.desconto
        taxa = dinheiro(self.taxa_entrega) if TipoEntregaEnum(tipo_entrega) == TipoEntregaEnum.DELIVERY else Decimal("0.00")
        return Totais(
            subtotal=subtotal,
            desconto=desconto,
            taxa_entrega=taxa,
            total=calcular_total(subtotal, desconto, self.taxa_entrega, tipo_entrega),
        )

    # ---------------- Envio ----------------
    def validar(
        self,
        *,
        cliente_nome: Optional[str],
        cliente_telefone: Optional[str],
        tipo_entrega: TipoEntregaEnum,
        forma_pagamento: FormaPagamentoEnum,
        endereco: Optional[str] = None,
        setor: Optional[str] = None,
        tipo_cartao: Optional[TipoCartaoEnum] = None,
        troco_para: Optional[Decimal] = None,
    ) -> List[str]:
        return validar_rascunho(
            cliente_nome=cliente_nome,
            cliente_telefone=cliente_telefone,
            tipo_entrega=tipo_entrega,
            endereco=endereco,
            setor=setor,
            forma_pagamento=forma_pagamento,
            tipo_cartao=tipo_cartao,
            troco_para=troco_para,
            quantidade_itens=len(self.itens),
            total=self.totais(tipo_entrega).total,
            setores_configurados=self.setores_entrega,
        )

    async def finalizar(
        self,
        *,
        cliente_nome: str,
        cliente_telefone: str,
        tipo_entrega: TipoEntregaEnum,
        forma_pagamento: FormaPagamentoEnum,
        endereco: Optional[str] = None,
        setor: Optional[str] = None,
        tipo_cartao: Optional[TipoCartaoEnum] = None,
        troco_para: Optional[Decimal] = None,
        observacao: Optional[str] = None,
    ) -> ResultadoCheckout:
        erros = self.validar(
            cliente_nome=cliente_nome,
            cliente_telefone=cliente_telefone,
            tipo_entrega=tipo_entrega,
            forma_pagamento=forma_pagamento,
            endereco=endereco,
            setor=setor,
            tipo_cartao=tipo_cartao,
            troco_para=troco_para,
        )
        if erros:
            return ResultadoCheckout(sucesso=False, erros=erros)

        rascunho = PedidoCreate(
            cliente=ClientePedidoIn(nome=cliente_nome.strip(), telefone=cliente_telefone.strip()),
            tipo_entrega=tipo_entrega,
            endereco=endereco if tipo_entrega == TipoEntregaEnum.DELIVERY else None,
            setor=setor,
            itens=[
                ItemPedidoIn(
                    produto_id=i.produto_id,
                    quantidade=i.quantidade,
                    observacao=i.observacao,
                    nome=i.nome,
                    preco_unitario=i.preco_unitario,
                )
                for i in self.itens.values()
            ],
            adicionais=[AdicionalPedidoIn(ingrediente_id=iid, nome=nome) for iid, nome in self.adicionais.items()],
            forma_pagamento=forma_pagamento,
            tipo_cartao=tipo_cartao if forma_pagamento == FormaPagamentoEnum.CARTAO else None,
            troco_para=troco_para if forma_pagamento == FormaPagamentoEnum.DINHEIRO else None,
            cupom_codigo=self.cupom.cupom.codigo if self.cupom and self.cupom.cupom else None,
            observacao=observacao,
        )

        # sem retry automático: reenviar sozinho poderia duplicar o pedido
        try:
            pedido = await self.loja.criar_pedido(rascunho)
        except LojaIndisponivelError as e:
            return ResultadoCheckout(sucesso=False, erros=[e.mensagem], pode_tentar_novamente=True)
        except RequisicaoInvalidaError as e:
            return ResultadoCheckout(sucesso=False, erros=e.erros)

        logger.info(f"[Fluxos] Pedido {pedido.pedido_id} enviado - total={pedido.total}")
        self.limpar()
        return ResultadoCheckout(sucesso=True, pedido=pedido)
