"""Schema inicial: cupons, estoque por receita, produtos, pedidos e pagamentos

Revision ID: 20261019_pedidos_estoque_inicial
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_pedidos_estoque_inicial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # cupons
    op.create_table(
        "cupons",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("codigo", sa.String(30), nullable=False, unique=True, index=True),
        sa.Column("descricao", sa.String(120), nullable=True),
        sa.Column("tipo", sa.String(20), nullable=False),
        sa.Column("valor", sa.Numeric(18, 2), nullable=False),
        sa.Column("valor_minimo_pedido", sa.Numeric(18, 2), nullable=True),
        sa.Column("ativo", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("validade_inicio", sa.DateTime(timezone=True), nullable=True),
        sa.Column("validade_fim", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_usos", sa.Integer, nullable=False, server_default="-1"),
        sa.Column("usos_atuais", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )

    # estoque
    op.create_table(
        "estoque_ingredientes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("tipo_unidade", sa.String(20), nullable=False),
        sa.Column("categoria", sa.String(20), nullable=False),
        sa.Column("estoque_atual", sa.Numeric(18, 3), nullable=False, server_default="0"),
        sa.Column("estoque_minimo", sa.Numeric(18, 3), nullable=False, server_default="0"),
        sa.Column("quantidade_padrao_pedido", sa.Numeric(18, 3), nullable=True),
        sa.Column("preco_unitario", sa.Numeric(18, 4), nullable=True),
        sa.Column("custo_medio", sa.Numeric(18, 4), nullable=True),
        sa.Column("ativo", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_table(
        "estoque_porcoes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rotulo", sa.String(60), nullable=False),
        sa.Column("gramas", sa.Numeric(10, 2), nullable=False),
    )
    op.create_table(
        "estoque_compras",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("data", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("quantidade", sa.Numeric(18, 3), nullable=False),
        sa.Column("preco", sa.Numeric(18, 2), nullable=False),
    )
    op.create_table(
        "estoque_baixas",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("data", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False, index=True),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("quantidade", sa.Numeric(18, 3), nullable=False),
        sa.Column("pedido_id", sa.Integer, nullable=True, index=True),
        sa.Column("produto_id", sa.Integer, nullable=True),
    )
    op.create_table(
        "estoque_agenda_reposicao",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("dia_semana", sa.Integer, nullable=False),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("dia_semana", "ingrediente_id", name="uq_agenda_dia_ingrediente"),
    )

    # catálogo
    op.create_table(
        "produtos",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("descricao", sa.String(255), nullable=True),
        sa.Column("categoria", sa.String(60), nullable=True),
        sa.Column("preco", sa.Numeric(18, 2), nullable=False),
        sa.Column("ativo", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_table(
        "produto_receita_ingredientes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("produto_id", sa.Integer, sa.ForeignKey("produtos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantidade_usada", sa.Numeric(18, 4), nullable=False),
        sa.Column("porcao_id", sa.Integer, sa.ForeignKey("estoque_porcoes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("ocultar_cliente", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("ordem", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_table(
        "produto_receita_extras",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("produto_id", sa.Integer, sa.ForeignKey("produtos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("ordem", sa.Integer, nullable=False, server_default="0"),
    )

    # pedidos
    op.create_table(
        "pedidos",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("cliente_nome", sa.String(120), nullable=False),
        sa.Column("cliente_telefone", sa.String(20), nullable=False, index=True),
        sa.Column("tipo_entrega", sa.String(20), nullable=False),
        sa.Column("endereco", sa.Text, nullable=True),
        sa.Column("setor", sa.String(60), nullable=True),
        sa.Column("observacao", sa.Text, nullable=True),
        sa.Column("forma_pagamento", sa.String(20), nullable=False),
        sa.Column("tipo_cartao", sa.String(20), nullable=True),
        sa.Column("troco_para", sa.Numeric(18, 2), nullable=True),
        sa.Column("pago", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("pago_em", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cupom_id", sa.Integer, sa.ForeignKey("cupons.id", ondelete="SET NULL"), nullable=True),
        sa.Column("cupom_codigo", sa.String(30), nullable=True),
        sa.Column("desconto", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("taxa_entrega", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("total", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("estoque_baixado", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("arquivado", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("motivo_cancelamento", sa.String(255), nullable=True),
        *_timestamps(),
        sa.Column("concluido_em", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelado_em", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_pedidos_arquivado_created_at", "pedidos", ["arquivado", "created_at"])

    op.create_table(
        "pedido_itens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.Integer, sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("produto_id", sa.Integer, sa.ForeignKey("produtos.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("preco_unitario", sa.Numeric(18, 2), nullable=False),
        sa.Column("quantidade", sa.Integer, nullable=False, server_default="1"),
        sa.Column("observacao", sa.Text, nullable=True),
    )
    op.create_table(
        "pedido_adicionais",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.Integer, sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("ingrediente_id", sa.Integer, sa.ForeignKey("estoque_ingredientes.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("nome", sa.String(100), nullable=False),
    )
    op.create_table(
        "pedido_status_historico",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.Integer, sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("status_anterior", sa.String(30), nullable=True),
        sa.Column("status_novo", sa.String(30), nullable=False),
        sa.Column("motivo", sa.String(255), nullable=True),
        sa.Column("criado_em", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # pagamentos
    op.create_table(
        "pagamento_transacoes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.Integer, sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("metodo", sa.String(20), nullable=False),
        sa.Column("gateway", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("provider_reference", sa.String(100), nullable=True, unique=True, index=True),
        sa.Column("valor", sa.Numeric(18, 2), nullable=False),
        sa.Column("qr_code", sa.Text, nullable=True),
        sa.Column("qr_code_base64", sa.Text, nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cartao_final", sa.String(4), nullable=True),
        sa.Column("cartao_bandeira", sa.String(20), nullable=True),
        sa.Column("erro", sa.String(255), nullable=True),
        sa.Column("payload_gateway", sa.JSON, nullable=True),
        *_timestamps(),
        sa.Column("finalizado_em", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("pagamento_transacoes")
    op.drop_table("pedido_status_historico")
    op.drop_table("pedido_adicionais")
    op.drop_table("pedido_itens")
    op.drop_index("ix_pedidos_arquivado_created_at", table_name="pedidos")
    op.drop_table("pedidos")
    op.drop_table("produto_receita_extras")
    op.drop_table("produto_receita_ingredientes")
    op.drop_table("produtos")
    op.drop_table("estoque_agenda_reposicao")
    op.drop_table("estoque_baixas")
    op.drop_table("estoque_compras")
    op.drop_table("estoque_porcoes")
    op.drop_table("estoque_ingredientes")
    op.drop_table("cupons")
