from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.api.catalogo.models.model_produto import ProdutoModel
from app.api.catalogo.models.model_receita import ReceitaIngredienteModel
from app.api.estoque.models.model_ingrediente_estoque import (
    AgendaReposicaoModel,
    BaixaEstoqueModel,
    CompraIngredienteModel,
    IngredienteEstoqueModel,
)


class EstoqueRepository:
    """Acesso a insumos, compras, baixas e agenda de reposição."""

    def __init__(self, db: Session):
        self.db = db

    # ---------------- INGREDIENTES ----------------
    def get(self, ingrediente_id: int, for_update: bool = False) -> Optional[IngredienteEstoqueModel]:
        query = self.db.query(IngredienteEstoqueModel).filter(IngredienteEstoqueModel.id == ingrediente_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def listar(self, apenas_ativos: bool = False) -> List[IngredienteEstoqueModel]:
        query = self.db.query(IngredienteEstoqueModel).options(
            selectinload(IngredienteEstoqueModel.porcoes),
            selectinload(IngredienteEstoqueModel.compras),
        )
        if apenas_ativos:
            query = query.filter(IngredienteEstoqueModel.ativo.is_(True))
        return query.order_by(IngredienteEstoqueModel.nome).all()

    def listar_por_ids(self, ids: Iterable[int], for_update: bool = False) -> List[IngredienteEstoqueModel]:
        ids = list(set(ids))
        if not ids:
            return []
        query = self.db.query(IngredienteEstoqueModel).filter(IngredienteEstoqueModel.id.in_(ids))
        if for_update:
            query = query.with_for_update()
        return query.order_by(IngredienteEstoqueModel.id).all()

    def add(self, obj: IngredienteEstoqueModel) -> IngredienteEstoqueModel:
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def salvar(self, obj: IngredienteEstoqueModel) -> IngredienteEstoqueModel:
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, obj: IngredienteEstoqueModel):
        self.db.delete(obj)
        self.db.commit()

    def em_uso_por_produto_ativo(self, ingrediente_id: int) -> bool:
        return (
            self.db.query(ReceitaIngredienteModel.id)
            .join(ProdutoModel, ProdutoModel.id == ReceitaIngredienteModel.produto_id)
            .filter(
                ReceitaIngredienteModel.ingrediente_id == ingrediente_id,
                ProdutoModel.ativo.is_(True),
            )
            .first()
            is not None
        )

    # ---------------- COMPRAS ----------------
    def totais_compras(self, ingrediente_id: int) -> tuple[Decimal, Decimal]:
        """(soma das quantidades, soma dos valores pagos) de todo o histórico."""
        qtd, valor = (
            self.db.query(
                func.coalesce(func.sum(CompraIngredienteModel.quantidade), 0),
                func.coalesce(func.sum(CompraIngredienteModel.preco), 0),
            )
            .filter(CompraIngredienteModel.ingrediente_id == ingrediente_id)
            .one()
        )
        return Decimal(str(qtd)), Decimal(str(valor))

    # ---------------- BAIXAS ----------------
    def registrar_baixa(self, baixa: BaixaEstoqueModel) -> BaixaEstoqueModel:
        self.db.add(baixa)
        return baixa

    def consumo_por_ingrediente(self, inicio: datetime, fim: datetime) -> dict[int, Decimal]:
        linhas = (
            self.db.query(BaixaEstoqueModel.ingrediente_id, func.sum(BaixaEstoqueModel.quantidade))
            .filter(BaixaEstoqueModel.data >= inicio, BaixaEstoqueModel.data < fim)
            .group_by(BaixaEstoqueModel.ingrediente_id)
            .all()
        )
        return {ingrediente_id: Decimal(str(total)) for ingrediente_id, total in linhas}

    def baixas_do_pedido(self, pedido_id: int) -> List[BaixaEstoqueModel]:
        return (
            self.db.query(BaixaEstoqueModel)
            .filter(BaixaEstoqueModel.pedido_id == pedido_id)
            .order_by(BaixaEstoqueModel.id)
            .all()
        )

    # ---------------- AGENDA ----------------
    def listar_agenda(self) -> List[AgendaReposicaoModel]:
        return (
            self.db.query(AgendaReposicaoModel)
            .order_by(AgendaReposicaoModel.dia_semana, AgendaReposicaoModel.ingrediente_id)
            .all()
        )

    def substituir_agenda(self, entradas: List[AgendaReposicaoModel]):
        self.db.query(AgendaReposicaoModel).delete()
        self.db.add_all(entradas)
        self.db.commit()
