from datetime import datetime
from decimal import Decimal

from app.api.estoque.models.model_ingrediente_estoque import BaixaEstoqueModel
from app.api.estoque.services.service_estoque import EstoqueService


def test_reposicao_atualiza_saldo_preco_e_custo_medio(client, cardapio):
    pao_id = cardapio["pao"]["id"]

    resp = client.post(f"/api/estoque/ingredientes/{pao_id}/reposicao", json={"quantidade": "10", "preco": "5.00"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["estoque_atual"] == 110
    assert resp.json()["custo_medio"] == 0.5

    resp = client.post(f"/api/estoque/ingredientes/{pao_id}/reposicao", json={"quantidade": "30", "preco": "21.00"})
    corpo = resp.json()
    assert corpo["estoque_atual"] == 140
    assert corpo["preco_unitario"] == 0.7
    # (5 + 21) / (10 + 30)
    assert corpo["custo_medio"] == 0.65
    assert len(corpo["compras"]) == 2


def test_reposicao_com_quantidade_zero_e_recusada(client, cardapio):
    resp = client.post(
        f"/api/estoque/ingredientes/{cardapio['pao']['id']}/reposicao", json={"quantidade": "0", "preco": "1"}
    )
    assert resp.status_code == 422


def test_porcao_so_em_insumo_por_peso(client):
    resp = client.post(
        "/api/estoque/ingredientes",
        json={"nome": "Queijo", "tipo_unidade": "unit", "porcoes": [{"rotulo": "Fatia", "gramas": "20"}]},
    )
    assert resp.status_code == 422


def test_nao_exclui_insumo_usado_por_produto_ativo(client, cardapio):
    resp = client.delete(f"/api/estoque/ingredientes/{cardapio['pao']['id']}")
    assert resp.status_code == 409

    molho_id = cardapio["molho"]["id"]
    assert client.delete(f"/api/estoque/ingredientes/{molho_id}").status_code == 204
    assert client.get(f"/api/estoque/ingredientes/{molho_id}").status_code == 404


def test_disponibilidade_acompanha_o_estoque(client, cardapio):
    burger_id = cardapio["burger"]["id"]
    carne_id = cardapio["carne"]["id"]

    resp = client.get("/api/estoque/disponibilidade")
    assert resp.json()["produtos_indisponiveis"] == []

    client.put(f"/api/estoque/ingredientes/{carne_id}", json={"estoque_atual": "0.1"})
    corpo = client.get("/api/estoque/disponibilidade").json()
    assert corpo["produtos_indisponiveis"] == [burger_id]
    assert [i["id"] for i in corpo["ingredientes_baixos"]] == [carne_id]
    assert corpo["ingredientes_zerados"] == []


def test_produto_admin_mostra_unidades_disponiveis(client, cardapio):
    resp = client.get(f"/api/produtos/admin/{cardapio['burger']['id']}")
    assert resp.status_code == 200
    assert resp.json()["unidades_disponiveis"] == 11
    assert resp.json()["disponivel"] is True


def test_cardapio_publico_esconde_embalagem(client, cardapio):
    produtos = client.get("/api/produtos").json()
    assert len(produtos) == 1
    assert produtos[0]["ingredientes"] == ["Pão brioche", "Carne moída", "Picles"]

    acompanhamentos = client.get("/api/produtos/acompanhamentos").json()
    assert [a["nome"] for a in acompanhamentos] == ["Molho especial"]


def test_relatorio_respeita_virada_do_dia_as_quatro(db, cardapio):
    carne_id = cardapio["carne"]["id"]
    db.add_all([
        BaixaEstoqueModel(data=datetime(2026, 3, 10, 2, 30), ingrediente_id=carne_id, quantidade=Decimal("0.36")),
        BaixaEstoqueModel(data=datetime(2026, 3, 10, 4, 30), ingrediente_id=carne_id, quantidade=Decimal("0.18")),
    ])
    db.commit()

    svc = EstoqueService(db)
    madrugada = svc.relatorio_diario(datetime(2026, 3, 10, 3, 0))
    manha = svc.relatorio_diario(datetime(2026, 3, 10, 5, 0))

    assert madrugada.inicio_dia_operacional.day == 9
    assert [(l.ingrediente_id, l.consumido) for l in madrugada.linhas] == [(carne_id, 0.36)]
    assert [(l.ingrediente_id, l.consumido) for l in manha.linhas] == [(carne_id, 0.18)]


def test_relatorio_usa_custo_medio(client, db, cardapio):
    pao_id = cardapio["pao"]["id"]
    client.post(f"/api/estoque/ingredientes/{pao_id}/reposicao", json={"quantidade": "10", "preco": "8.00"})
    db.add(BaixaEstoqueModel(data=datetime(2026, 3, 10, 12, 0), ingrediente_id=pao_id, quantidade=Decimal("3")))
    db.commit()

    relatorio = EstoqueService(db).relatorio_diario(datetime(2026, 3, 10, 20, 0))
    assert relatorio.linhas[0].custo == 2.4
    assert relatorio.custo_total_dia == 2.4


def test_agenda_de_reposicao(client, cardapio):
    pao_id = cardapio["pao"]["id"]
    resp = client.put("/api/estoque/agenda-reposicao", json={"dias": {"0": [pao_id, pao_id]}})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"dias": {"0": [pao_id]}}

    resp = client.put("/api/estoque/agenda-reposicao", json={"dias": {"7": [pao_id]}})
    assert resp.status_code == 422
