import logging

from sqlalchemy import text

from .db_connection import engine, Base

logger = logging.getLogger("app_logger")


def importar_models():
    # ─── Cupons ──────────────────────────────────────────────────
    from app.api.cupons.models.model_cupom import CupomModel
    # ─── Estoque ─────────────────────────────────────────────────
    from app.api.estoque.models.model_ingrediente_estoque import (
        IngredienteEstoqueModel,
        PorcaoIngredienteModel,
        CompraIngredienteModel,
        BaixaEstoqueModel,
        AgendaReposicaoModel,
    )
    # ─── Catálogo ────────────────────────────────────────────────
    from app.api.catalogo.models.model_produto import ProdutoModel
    from app.api.catalogo.models.model_receita import ReceitaIngredienteModel, ReceitaExtraModel
    # ─── Pedidos / Pagamentos ────────────────────────────────────
    from app.api.pedidos.models.model_pedido import PedidoModel
    from app.api.pedidos.models.model_pedido_item import PedidoItemModel, PedidoAdicionalModel
    from app.api.pedidos.models.model_pedido_historico import PedidoStatusHistoricoModel
    from app.api.pagamentos.models.model_transacao_pagamento import TransacaoPagamentoModel


def configurar_timezone():
    """Ajusta o timezone da sessão no PostgreSQL (SQLite não tem essa configuração)."""
    if engine.dialect.name != "postgresql":
        return
    try:
        with engine.begin() as conn:
            result = conn.execute(text("SHOW timezone"))
            logger.info(f"✅ Timezone do banco configurado: {result.scalar()}")
    except Exception as e:
        logger.warning(f"⚠️ Erro ao verificar timezone do banco: {e}")


def criar_tabelas():
    """
    Importa os modelos para registrá-los no Base e cria as tabelas que
    ainda não existem (checkfirst). Em produção o schema é mantido pelo Alembic.
    """
    importar_models()
    tabelas = list(Base.metadata.tables.values())
    logger.info(f"📊 Criando/verificando {len(tabelas)} tabelas: {', '.join(sorted(t.name for t in tabelas))}")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("✅ Tabelas criadas/verificadas com sucesso")


def inicializar_banco():
    logger.info("🚀 Iniciando processo de inicialização do banco de dados...")
    configurar_timezone()
    criar_tabelas()
    logger.info("✅ Banco de dados pronto")
