from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalogo.contracts.produto_contract import IProdutoContract
from app.api.cupons.services.service_cupom import CuponsService
from app.api.estoque.contracts.estoque_contract import IEstoqueContract
from app.api.estoque.core.consumo_receita import LinhaConsumo, calcular_baixas_detalhadas
from app.api.estoque.core.disponibilidade import esta_disponivel
from app.api.pedidos.core.maquina_estados import STATUS_TERMINAIS, transicao_permitida
from app.api.pedidos.core.totais import calcular_total, dinheiro
from app.api.pedidos.core.validacao_pedido import validar_rascunho
from app.api.pedidos.models.model_pedido import PedidoModel
from app.api.pedidos.models.model_pedido_item import PedidoAdicionalModel, PedidoItemModel
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.api.pedidos.schemas.schema_pedido import PedidoCreate
from app.api.shared.schemas.schema_shared_enums import (
    CategoriaIngredienteEnum,
    PedidoStatusEnum,
    TipoEntregaEnum,
)
from app.config.settings import (
    ESTOQUE_MOMENTO_BAIXA,
    HISTORICO_LIMITE_PADRAO,
    SETORES_ENTREGA,
    TAXA_ENTREGA,
)
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.prometheus_metrics import pedidos_criados_total, pedidos_transicoes_total
from app.utils.telefone import normalizar_telefone, variantes_celular_para_busca


class PedidoService:
    """
    Criação e ciclo de vida dos pedidos.

    O servidor é a autoridade do grafo de status: transições fora do fluxo são
    recusadas com 409 mesmo que o painel do operador tenha deixado passar, e
    repetir o status atual é idempotente (sem efeito colateral duplicado).
    """

    def __init__(
        self,
        db: Session,
        produto_contract: IProdutoContract,
        estoque_contract: IEstoqueContract,
        momento_baixa: str = ESTOQUE_MOMENTO_BAIXA,
        taxa_entrega: Decimal = TAXA_ENTREGA,
        setores_entrega: Optional[List[str]] = None,
    ):
        self.db = db
        self.repo = PedidoRepository(db)
        self.produto_contract = produto_contract
        self.estoque_contract = estoque_contract
        self.cupons = CuponsService(db)
        self.momento_baixa = momento_baixa
        self.taxa_entrega = taxa_entrega
        self.setores_entrega = SETORES_ENTREGA if setores_entrega is None else setores_entrega

    # ---------------- Helpers ----------------
    def _obter(self, pedido_id: int, for_update: bool = False) -> PedidoModel:
        pedido = self.repo.get(pedido_id, for_update=for_update)
        if not pedido:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Pedido não encontrado")
        return pedido

    def _baixar_estoque(self, pedido: PedidoModel):
        """Aplica as baixas do pedido uma única vez (flag `estoque_baixado`)."""
        if pedido.estoque_baixado:
            return

        receitas = self.produto_contract.receitas_por_ids(item.produto_id for item in pedido.itens)
        baixas = calcular_baixas_detalhadas(
            linhas=[LinhaConsumo(produto_id=i.produto_id, quantidade=i.quantidade) for i in pedido.itens],
            adicionais_ids=[a.ingrediente_id for a in pedido.adicionais],
            tipo_entrega=pedido.tipo_entrega,
            produtos=receitas,
            estoque=self.estoque_contract.snapshot(),
        )
        self.estoque_contract.aplicar_consumo(baixas, pedido_id=pedido.id)
        pedido.estoque_baixado = True
        logger.info(f"[Pedidos] Estoque baixado - pedido_id={pedido.id} baixas={len(baixas)}")

    # ---------------- Criação ----------------
    def criar_pedido(self, payload: PedidoCreate) -> PedidoModel:
        produtos = {p.id: p for p in self.produto_contract.obter_produtos_por_ids(i.produto_id for i in payload.itens)}

        for item in payload.itens:
            produto = produtos.get(item.produto_id)
            if produto is None:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Produto {item.produto_id} não encontrado")
            if not produto.ativo:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Produto {produto.nome} não está à venda")

        # Mesma regra do carrinho: não aceita item cujo insumo acabou
        estoque = self.estoque_contract.snapshot()
        receitas = self.produto_contract.receitas_por_ids(produtos.keys())
        for produto_id, receita in receitas.items():
            if not esta_disponivel(receita, estoque):
                raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Produto {receita.nome} indisponível no momento")

        for adicional in payload.adicionais:
            ingrediente = estoque.get(adicional.ingrediente_id)
            if ingrediente is None or ingrediente.categoria != CategoriaIngredienteEnum.ACOMPANHAMENTO:
                raise HTTPException(
                    status.HTTP_400_BAD_REQUEST, f"Acompanhamento {adicional.ingrediente_id} inválido"
                )

        subtotal = sum(
            (dinheiro(produtos[i.produto_id].preco) * i.quantidade for i in payload.itens),
            Decimal("0.00"),
        )
        taxa = dinheiro(self.taxa_entrega) if payload.tipo_entrega == TipoEntregaEnum.DELIVERY else Decimal("0.00")

        # Prévia sem cupom só para validar troco; o cupom só é consumido depois
        # que tudo mais passou, para não gastar uso em pedido recusado.
        desconto_previsto = Decimal("0.00")
        if payload.cupom_codigo:
            previa = self.cupons.avaliar(payload.cupom_codigo, subtotal)
            if not previa.valido:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, previa.motivo)
            desconto_previsto = previa.desconto
        total_previsto = calcular_total(subtotal, desconto_previsto, taxa, payload.tipo_entrega)

        erros = validar_rascunho(
            cliente_nome=payload.cliente.nome,
            cliente_telefone=payload.cliente.telefone,
            tipo_entrega=payload.tipo_entrega,
            endereco=payload.endereco,
            setor=payload.setor,
            forma_pagamento=payload.forma_pagamento,
            tipo_cartao=payload.tipo_cartao,
            troco_para=payload.troco_para,
            quantidade_itens=len(payload.itens),
            total=total_previsto,
            setores_configurados=self.setores_entrega,
        )
        if erros:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, erros[0])

        cupom_id = None
        desconto = Decimal("0.00")
        if payload.cupom_codigo:
            resultado = self.cupons.consumir(payload.cupom_codigo, subtotal)
            cupom_id = resultado.cupom.id
            desconto = resultado.desconto

        pedido = PedidoModel(
            cliente_nome=payload.cliente.nome.strip(),
            cliente_telefone=normalizar_telefone(payload.cliente.telefone),
            tipo_entrega=payload.tipo_entrega,
            endereco=payload.endereco if payload.tipo_entrega == TipoEntregaEnum.DELIVERY else None,
            setor=payload.setor,
            observacao=payload.observacao,
            forma_pagamento=payload.forma_pagamento,
            tipo_cartao=payload.tipo_cartao,
            troco_para=payload.troco_para,
            cupom_id=cupom_id,
            cupom_codigo=payload.cupom_codigo.strip().upper() if cupom_id else None,
            desconto=desconto,
            taxa_entrega=taxa,
            subtotal=subtotal,
            total=calcular_total(subtotal, desconto, taxa, payload.tipo_entrega),
            status=PedidoStatusEnum.PENDENTE,
            pago=False,
            estoque_baixado=False,
            arquivado=False,
            created_at=now_trimmed(),
        )
        pedido.itens = [
            PedidoItemModel(
                produto_id=i.produto_id,
                nome=produtos[i.produto_id].nome,
                preco_unitario=dinheiro(produtos[i.produto_id].preco),
                quantidade=i.quantidade,
                observacao=i.observacao,
            )
            for i in payload.itens
        ]
        pedido.adicionais = [
            PedidoAdicionalModel(ingrediente_id=a.ingrediente_id, nome=estoque[a.ingrediente_id].nome)
            for a in payload.adicionais
        ]
        self.repo.add(pedido)
        self.repo.registrar_historico(pedido, None, PedidoStatusEnum.PENDENTE.value, "Pedido criado")

        if self.momento_baixa == "criacao":
            self._baixar_estoque(pedido)

        self.repo.commit(pedido)

        pedidos_criados_total.labels(
            tipo_entrega=pedido.tipo_entrega.value,
            forma_pagamento=pedido.forma_pagamento.value,
        ).inc()
        logger.info(
            f"[Pedidos] Pedido criado - id={pedido.id} tipo={pedido.tipo_entrega.value} "
            f"subtotal={pedido.subtotal} desconto={pedido.desconto} total={pedido.total}"
        )
        return pedido

    # ---------------- Transições ----------------
    def atualizar_status(
        self,
        pedido_id: int,
        novo_status: PedidoStatusEnum,
        motivo: Optional[str] = None,
    ) -> PedidoModel:
        pedido = self._obter(pedido_id, for_update=True)
        atual = PedidoStatusEnum(pedido.status)
        novo_status = PedidoStatusEnum(novo_status)

        if atual == novo_status:
            # repetição (duplo clique, outro operador): nada a fazer
            pedidos_transicoes_total.labels(status_destino=novo_status.value, resultado="repetida").inc()
            logger.info(f"[Pedidos] Transição repetida ignorada - id={pedido.id} status={atual.value}")
            return pedido

        if not transicao_permitida(pedido.tipo_entrega, atual, novo_status):
            pedidos_transicoes_total.labels(status_destino=novo_status.value, resultado="recusada").inc()
            logger.warning(
                f"[Pedidos] Transição recusada - id={pedido.id} tipo={pedido.tipo_entrega.value} "
                f"{atual.value} -> {novo_status.value}"
            )
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                f"Transição inválida: {atual.value} -> {novo_status.value}",
            )

        agora = now_trimmed()
        pedido.status = novo_status
        if novo_status == PedidoStatusEnum.CANCELADO:
            pedido.cancelado_em = agora
            pedido.motivo_cancelamento = motivo
        elif novo_status == PedidoStatusEnum.CONCLUIDO:
            pedido.concluido_em = agora
        if novo_status in STATUS_TERMINAIS:
            pedido.arquivado = True

        if novo_status == PedidoStatusEnum.EM_PREPARO and self.momento_baixa == "preparo":
            self._baixar_estoque(pedido)

        self.repo.registrar_historico(pedido, atual.value, novo_status.value, motivo)
        self.repo.commit(pedido)

        pedidos_transicoes_total.labels(status_destino=novo_status.value, resultado="aceita").inc()
        logger.info(f"[Pedidos] Status atualizado - id={pedido.id} {atual.value} -> {novo_status.value}")
        return pedido

    def cancelar(self, pedido_id: int, motivo: Optional[str] = None) -> PedidoModel:
        return self.atualizar_status(pedido_id, PedidoStatusEnum.CANCELADO, motivo=motivo)

    def marcar_pago(self, pedido: PedidoModel) -> bool:
        """Marca o pedido como pago; False se já estava. Não faz commit."""
        if pedido.pago:
            return False
        pedido.pago = True
        pedido.pago_em = now_trimmed()
        self.repo.registrar_historico(pedido, pedido.status.value, pedido.status.value, "Pagamento confirmado")
        return True

    # ---------------- Consultas ----------------
    def obter(self, pedido_id: int, for_update: bool = False) -> PedidoModel:
        return self._obter(pedido_id, for_update=for_update)

    def listar_ativos(self) -> List[PedidoModel]:
        return self.repo.listar_ativos()

    def listar_historico(self, limite: Optional[int] = None) -> List[PedidoModel]:
        """Pedidos arquivados, mais recentes primeiro. limite=-1 traz todos."""
        if limite is None:
            limite = HISTORICO_LIMITE_PADRAO
        return self.repo.listar_historico(None if limite == -1 else limite)

    def buscar_por_telefone(self, telefone: str) -> List[PedidoModel]:
        variantes = variantes_celular_para_busca(telefone)
        if not variantes:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Telefone inválido para busca")
        return self.repo.buscar_por_telefones(variantes)
