from __future__ import annotations

from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalogo.models.model_produto import ProdutoModel
from app.api.catalogo.models.model_receita import ReceitaExtraModel, ReceitaIngredienteModel
from app.api.catalogo.repositories.repo_produto import ProdutoRepository
from app.api.catalogo.schemas.schema_produto import (
    AcompanhamentoPublicoOut,
    ProdutoAdminOut,
    ProdutoCreate,
    ProdutoPublicoOut,
    ProdutoUpdate,
    ReceitaItemIn,
    ReceitaItemOut,
)
from app.api.estoque.core.disponibilidade import esta_disponivel, unidades_disponiveis
from app.api.estoque.core.snapshot import IngredienteSnapshot, ProdutoReceitaSnapshot
from app.api.estoque.repositories.repo_estoque import EstoqueRepository
from app.api.shared.schemas.schema_shared_enums import CategoriaIngredienteEnum, TipoUnidadeEnum
from app.utils.logger import logger

CATEGORIAS_SEMPRE_OCULTAS = {CategoriaIngredienteEnum.EMBALAGEM, CategoriaIngredienteEnum.ACOMPANHAMENTO}


class ProdutoService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProdutoRepository(db)
        self.repo_estoque = EstoqueRepository(db)

    # ---------------- Helpers ----------------
    def _obter(self, produto_id: int) -> ProdutoModel:
        produto = self.repo.get(produto_id)
        if not produto:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Produto não encontrado")
        return produto

    def _montar_receita(self, itens: List[ReceitaItemIn]) -> List[ReceitaIngredienteModel]:
        ingredientes = {i.id: i for i in self.repo_estoque.listar_por_ids(item.ingrediente_id for item in itens)}
        receita: List[ReceitaIngredienteModel] = []
        for ordem, item in enumerate(itens):
            ingrediente = ingredientes.get(item.ingrediente_id)
            if ingrediente is None:
                raise HTTPException(
                    status.HTTP_400_BAD_REQUEST, f"Ingrediente {item.ingrediente_id} não existe no estoque"
                )

            if item.porcao_id is not None:
                if ingrediente.tipo_unidade != TipoUnidadeEnum.PESO:
                    raise HTTPException(
                        status.HTTP_400_BAD_REQUEST,
                        f"Ingrediente {ingrediente.nome} não é controlado por peso e não tem porções",
                    )
                if item.porcao_id not in {p.id for p in ingrediente.porcoes}:
                    raise HTTPException(
                        status.HTTP_400_BAD_REQUEST,
                        f"Porção {item.porcao_id} não pertence ao ingrediente {ingrediente.nome}",
                    )

            if ingrediente.categoria in CATEGORIAS_SEMPRE_OCULTAS:
                ocultar = True
            else:
                ocultar = bool(item.ocultar_cliente)

            receita.append(
                ReceitaIngredienteModel(
                    ingrediente_id=ingrediente.id,
                    quantidade_usada=item.quantidade_usada,
                    porcao_id=item.porcao_id,
                    ocultar_cliente=ocultar,
                    ordem=ordem,
                )
            )
        return receita

    @staticmethod
    def _montar_extras(nomes: List[str]) -> List[ReceitaExtraModel]:
        return [ReceitaExtraModel(nome=nome.strip(), ordem=ordem) for ordem, nome in enumerate(nomes)]

    def _snapshot_estoque(self) -> dict[int, IngredienteSnapshot]:
        return {i.id: IngredienteSnapshot.from_model(i) for i in self.repo_estoque.listar()}

    def _para_admin(self, produto: ProdutoModel, estoque: dict[int, IngredienteSnapshot]) -> ProdutoAdminOut:
        snapshot = ProdutoReceitaSnapshot.from_model(produto)
        return ProdutoAdminOut(
            id=produto.id,
            nome=produto.nome,
            descricao=produto.descricao,
            categoria=produto.categoria,
            preco=float(produto.preco),
            ativo=produto.ativo,
            receita=[
                ReceitaItemOut(
                    id=r.id,
                    ingrediente_id=r.ingrediente_id,
                    ingrediente_nome=r.ingrediente.nome,
                    categoria=r.ingrediente.categoria,
                    quantidade_usada=float(r.quantidade_usada),
                    porcao_id=r.porcao_id,
                    ocultar_cliente=r.ocultar_cliente,
                )
                for r in produto.receita
            ],
            extras=[e.nome for e in produto.extras],
            disponivel=esta_disponivel(snapshot, estoque),
            unidades_disponiveis=unidades_disponiveis(snapshot, estoque),
        )

    # ---------------- Admin ----------------
    def listar_admin(self) -> List[ProdutoAdminOut]:
        estoque = self._snapshot_estoque()
        return [self._para_admin(p, estoque) for p in self.repo.listar(apenas_ativos=False)]

    def obter_admin(self, produto_id: int) -> ProdutoAdminOut:
        return self._para_admin(self._obter(produto_id), self._snapshot_estoque())

    def criar(self, data: ProdutoCreate) -> ProdutoAdminOut:
        produto = ProdutoModel(**data.model_dump(exclude={"receita", "extras"}))
        produto.receita = self._montar_receita(data.receita)
        produto.extras = self._montar_extras(data.extras)
        self.repo.add(produto)
        logger.info(f"[Catalogo] Produto criado - id={produto.id} nome={produto.nome} itens_receita={len(produto.receita)}")
        return self.obter_admin(produto.id)

    def atualizar(self, produto_id: int, data: ProdutoUpdate) -> ProdutoAdminOut:
        produto = self._obter(produto_id)
        for key, value in data.model_dump(exclude_none=True, exclude={"receita", "extras"}).items():
            setattr(produto, key, value)
        if data.receita is not None:
            produto.receita = self._montar_receita(data.receita)
        if data.extras is not None:
            produto.extras = self._montar_extras(data.extras)
        self.repo.salvar(produto)
        logger.info(f"[Catalogo] Produto atualizado - id={produto.id}")
        return self.obter_admin(produto.id)

    def desativar(self, produto_id: int):
        produto = self._obter(produto_id)
        produto.ativo = False
        self.repo.salvar(produto)

    # ---------------- Cardápio ----------------
    def listar_cardapio(self) -> List[ProdutoPublicoOut]:
        estoque = self._snapshot_estoque()
        saida: List[ProdutoPublicoOut] = []
        for produto in self.repo.listar(apenas_ativos=True):
            visiveis = [
                r.ingrediente.nome for r in produto.receita
                if not r.ocultar_cliente and r.ingrediente.categoria not in CATEGORIAS_SEMPRE_OCULTAS
            ]
            saida.append(
                ProdutoPublicoOut(
                    id=produto.id,
                    nome=produto.nome,
                    descricao=produto.descricao,
                    categoria=produto.categoria,
                    preco=float(produto.preco),
                    ingredientes=visiveis + [e.nome for e in produto.extras],
                    disponivel=esta_disponivel(ProdutoReceitaSnapshot.from_model(produto), estoque),
                )
            )
        return saida

    def listar_acompanhamentos(self) -> List[AcompanhamentoPublicoOut]:
        return [
            AcompanhamentoPublicoOut(
                ingrediente_id=snap.id,
                nome=snap.nome,
                disponivel=snap.estoque_atual > 0,
            )
            for snap in self._snapshot_estoque().values()
            if snap.categoria == CategoriaIngredienteEnum.ACOMPANHAMENTO
        ]
