def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_metrics_expoe_pedidos_criados(client, novo_pedido):
    novo_pedido()

    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "pedidos_criados_total{" in resp.text


def test_rota_de_logs_nao_existe(client):
    assert client.get("/api/monitoring/logs").status_code == 404
