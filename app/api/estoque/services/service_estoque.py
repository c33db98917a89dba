from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalogo.repositories.repo_produto import ProdutoRepository
from app.api.estoque.core.consumo_receita import BaixaCalculada
from app.api.estoque.core.disponibilidade import (
    ingredientes_baixos,
    ingredientes_zerados,
    produtos_indisponiveis,
)
from app.api.estoque.core.snapshot import IngredienteSnapshot, ProdutoReceitaSnapshot
from app.api.estoque.models.model_ingrediente_estoque import (
    AgendaReposicaoModel,
    BaixaEstoqueModel,
    CompraIngredienteModel,
    IngredienteEstoqueModel,
    PorcaoIngredienteModel,
)
from app.api.estoque.repositories.repo_estoque import EstoqueRepository
from app.api.estoque.schemas.schema_estoque import (
    AgendaReposicaoSchema,
    DisponibilidadeResponse,
    IngredienteEstoqueCreate,
    IngredienteEstoqueUpdate,
    IngredienteResumoOut,
    RelatorioDiarioLinha,
    RelatorioDiarioResponse,
)
from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum
from app.utils.database_utils import janela_dia_operacional, now_trimmed
from app.utils.logger import logger
from app.utils.prometheus_metrics import estoque_alertas_total

CENTAVOS = Decimal("0.01")
QUATRO_CASAS = Decimal("0.0001")


class EstoqueService:
    """
    Livro de estoque: cadastro de insumos, reposições (compras), baixas por
    pedido e relatório de consumo do dia operacional.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = EstoqueRepository(db)
        self.repo_produtos = ProdutoRepository(db)

    # ---------------- Helpers ----------------
    def _obter(self, ingrediente_id: int, for_update: bool = False) -> IngredienteEstoqueModel:
        ingrediente = self.repo.get(ingrediente_id, for_update=for_update)
        if not ingrediente:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Ingrediente não encontrado")
        return ingrediente

    @staticmethod
    def _validar_coerencia(ingrediente: IngredienteEstoqueModel):
        if ingrediente.porcoes and ingrediente.tipo_unidade != TipoUnidadeEnum.PESO:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Porções só podem ser definidas para insumos controlados por peso",
            )
        if (
            ingrediente.quantidade_padrao_pedido is not None
            and ingrediente.categoria != CategoriaIngredienteEnum.ACOMPANHAMENTO
        ):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Quantidade padrão por pedido só se aplica a acompanhamentos",
            )

    # ---------------- Cadastro ----------------
    def listar(self) -> List[IngredienteEstoqueModel]:
        return self.repo.listar()

    def obter(self, ingrediente_id: int) -> IngredienteEstoqueModel:
        return self._obter(ingrediente_id)

    def criar(self, data: IngredienteEstoqueCreate) -> IngredienteEstoqueModel:
        payload = data.model_dump(exclude={"porcoes"})
        ingrediente = IngredienteEstoqueModel(**payload, ativo=True)
        ingrediente.porcoes = [PorcaoIngredienteModel(**p.model_dump()) for p in data.porcoes]
        self.repo.add(ingrediente)
        logger.info(f"[Estoque] Ingrediente criado - id={ingrediente.id} nome={ingrediente.nome}")
        return ingrediente

    def atualizar(self, ingrediente_id: int, data: IngredienteEstoqueUpdate) -> IngredienteEstoqueModel:
        ingrediente = self._obter(ingrediente_id)
        payload = data.model_dump(exclude_unset=True, exclude={"porcoes"})
        for key, value in payload.items():
            if value is not None or key == "quantidade_padrao_pedido":
                setattr(ingrediente, key, value)

        if data.porcoes is not None:
            ingrediente.porcoes = [PorcaoIngredienteModel(**p.model_dump()) for p in data.porcoes]
        elif ingrediente.tipo_unidade != TipoUnidadeEnum.PESO:
            ingrediente.porcoes = []

        self._validar_coerencia(ingrediente)
        self.repo.salvar(ingrediente)
        logger.info(f"[Estoque] Ingrediente atualizado - id={ingrediente.id}")
        return ingrediente

    def excluir(self, ingrediente_id: int):
        ingrediente = self._obter(ingrediente_id)
        if self.repo.em_uso_por_produto_ativo(ingrediente_id):
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                "Ingrediente está na receita de um produto ativo; remova da receita ou desative o insumo",
            )
        self.repo.delete(ingrediente)
        logger.info(f"[Estoque] Ingrediente removido - id={ingrediente_id}")

    # ---------------- Reposição ----------------
    def repor(self, ingrediente_id: int, quantidade: Decimal, preco: Decimal) -> IngredienteEstoqueModel:
        if quantidade <= 0:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Quantidade da reposição deve ser maior que zero")
        if preco < 0:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Preço da reposição não pode ser negativo")

        ingrediente = self._obter(ingrediente_id, for_update=True)
        ingrediente.compras.append(
            CompraIngredienteModel(data=now_trimmed(), quantidade=quantidade, preco=preco)
        )
        self.db.flush()

        ingrediente.estoque_atual = Decimal(str(ingrediente.estoque_atual or 0)) + quantidade
        ingrediente.preco_unitario = (preco / quantidade).quantize(QUATRO_CASAS, rounding=ROUND_HALF_UP)

        qtd_total, valor_total = self.repo.totais_compras(ingrediente_id)
        if qtd_total > 0:
            ingrediente.custo_medio = (valor_total / qtd_total).quantize(QUATRO_CASAS, rounding=ROUND_HALF_UP)

        self.repo.salvar(ingrediente)
        logger.info(
            f"[Estoque] Reposição - id={ingrediente.id} +{quantidade} preco={preco} "
            f"estoque={ingrediente.estoque_atual} custo_medio={ingrediente.custo_medio}"
        )
        return ingrediente

    # ---------------- Baixas ----------------
    def aplicar_consumo(self, baixas: Iterable[BaixaCalculada], pedido_id: Optional[int] = None) -> dict[int, Decimal]:
        """
        Subtrai as baixas do estoque e registra cada uma. Saldo negativo é
        aceito: a venda já aconteceu, então só gera alerta operacional.

        Não faz commit; roda na transação de quem chamou.
        """
        baixas = list(baixas)
        ingredientes = {i.id: i for i in self.repo.listar_por_ids((b.ingrediente_id for b in baixas), for_update=True)}
        agora = now_trimmed()
        saldos: dict[int, Decimal] = {}

        for baixa in baixas:
            ingrediente = ingredientes.get(baixa.ingrediente_id)
            if ingrediente is None:
                logger.warning(f"[Estoque] Baixa ignorada, ingrediente inexistente - id={baixa.ingrediente_id}")
                continue
            ingrediente.estoque_atual = Decimal(str(ingrediente.estoque_atual or 0)) - baixa.quantidade
            saldos[ingrediente.id] = ingrediente.estoque_atual
            self.repo.registrar_baixa(
                BaixaEstoqueModel(
                    data=agora,
                    ingrediente_id=ingrediente.id,
                    quantidade=baixa.quantidade,
                    pedido_id=pedido_id,
                    produto_id=baixa.produto_id,
                )
            )

        for ingrediente_id, saldo in saldos.items():
            self._alertar_saldo(ingredientes[ingrediente_id], saldo, pedido_id)

        self.db.flush()
        return saldos

    @staticmethod
    def _alertar_saldo(ingrediente: IngredienteEstoqueModel, saldo: Decimal, pedido_id: Optional[int]):
        if saldo < 0:
            tipo = "negativo"
        elif saldo == 0:
            tipo = "zerado"
        elif saldo <= Decimal(str(ingrediente.estoque_minimo or 0)):
            tipo = "baixo"
        else:
            return
        estoque_alertas_total.labels(tipo=tipo).inc()
        logger.warning(
            f"[Estoque] ALERTA estoque {tipo} - ingrediente={ingrediente.nome} (id={ingrediente.id}) "
            f"saldo={saldo} minimo={ingrediente.estoque_minimo} pedido_id={pedido_id}"
        )

    # ---------------- Disponibilidade ----------------
    def snapshot_estoque(self) -> dict[int, IngredienteSnapshot]:
        return {i.id: IngredienteSnapshot.from_model(i) for i in self.repo.listar()}

    def snapshot_produtos(self, apenas_ativos: bool = True) -> dict[int, ProdutoReceitaSnapshot]:
        return {p.id: ProdutoReceitaSnapshot.from_model(p) for p in self.repo_produtos.listar(apenas_ativos)}

    def disponibilidade(self) -> DisponibilidadeResponse:
        estoque = self.snapshot_estoque()
        indisponiveis = produtos_indisponiveis(self.snapshot_produtos().values(), estoque)

        def _resumo(snap: IngredienteSnapshot) -> IngredienteResumoOut:
            return IngredienteResumoOut(
                id=snap.id,
                nome=snap.nome,
                estoque_atual=float(snap.estoque_atual),
                estoque_minimo=float(snap.estoque_minimo),
            )

        return DisponibilidadeResponse(
            produtos_indisponiveis=sorted(indisponiveis),
            ingredientes_zerados=[_resumo(s) for s in ingredientes_zerados(estoque)],
            ingredientes_baixos=[_resumo(s) for s in ingredientes_baixos(estoque)],
        )

    # ---------------- Relatório ----------------
    def relatorio_diario(self, agora: Optional[datetime] = None) -> RelatorioDiarioResponse:
        inicio, fim = janela_dia_operacional(agora)
        consumo = self.repo.consumo_por_ingrediente(inicio, fim)
        ingredientes = {i.id: i for i in self.repo.listar_por_ids(consumo.keys())}

        linhas: List[RelatorioDiarioLinha] = []
        custo_total = Decimal("0.00")
        for ingrediente_id, consumido in sorted(consumo.items()):
            ingrediente = ingredientes.get(ingrediente_id)
            if ingrediente is None:
                continue
            custo_unitario = Decimal(str(ingrediente.custo_referencia or 0))
            custo = (consumido * custo_unitario).quantize(CENTAVOS, rounding=ROUND_HALF_UP)
            custo_total += custo
            linhas.append(
                RelatorioDiarioLinha(
                    ingrediente_id=ingrediente_id,
                    nome=ingrediente.nome,
                    consumido=float(consumido),
                    custo=float(custo),
                    restante=float(ingrediente.estoque_atual),
                )
            )

        return RelatorioDiarioResponse(
            inicio_dia_operacional=inicio,
            fim_dia_operacional=fim,
            linhas=linhas,
            custo_total_dia=float(custo_total),
        )

    # ---------------- Agenda de reposição ----------------
    def obter_agenda(self) -> AgendaReposicaoSchema:
        dias: dict[int, list[int]] = {}
        for entrada in self.repo.listar_agenda():
            dias.setdefault(entrada.dia_semana, []).append(entrada.ingrediente_id)
        return AgendaReposicaoSchema(dias=dias)

    def salvar_agenda(self, agenda: AgendaReposicaoSchema) -> AgendaReposicaoSchema:
        ids = {i for ids in agenda.dias.values() for i in ids}
        existentes = {i.id for i in self.repo.listar_por_ids(ids)}
        faltando = sorted(ids - existentes)
        if faltando:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, f"Ingredientes inexistentes na agenda: {faltando}")

        self.repo.substituir_agenda([
            AgendaReposicaoModel(dia_semana=dia, ingrediente_id=ingrediente_id)
            for dia, ids_dia in agenda.dias.items()
            for ingrediente_id in ids_dia
        ])
        return self.obter_agenda()

    def reposicoes_do_dia(self, dia_semana: int) -> List[IngredienteEstoqueModel]:
        ids = self.obter_agenda().dias.get(dia_semana, [])
        return self.repo.listar_por_ids(ids)
