import os
from decimal import Decimal
from dotenv import load_dotenv
from pathlib import Path

# Carrega o .env manualmente se estiver fora do Docker
if not os.getenv("RUNNING_IN_DOCKER"):
    dotenv_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(dotenv_path=dotenv_path)


def _env_bool(nome: str, padrao: str = "false") -> bool:
    return os.getenv(nome, padrao).lower() in ("1", "true", "yes")


def _env_lista(nome: str) -> list[str]:
    return [v.strip() for v in os.getenv(nome, "").split(",") if v.strip()]


# Configuração de conexão
DB_CONFIG = {
    'database': os.getenv('DB_NAME'),
    'user': os.getenv('DB_USER'),
    'password': os.getenv('DB_PASSWORD'),
    'host': os.getenv('DB_HOST'),
    'port': int(os.getenv('DB_PORT', 5432)),
}

# SSL do banco (opcional)
DB_SSL_MODE = os.getenv('DB_SSL_MODE')  # ex.: require, verify-ca, verify-full

# URL completa (tem prioridade sobre DB_CONFIG; ex.: sqlite:// nos testes)
DATABASE_URL = os.getenv("DATABASE_URL")

# CORS
CORS_ORIGINS = _env_lista("CORS_ORIGINS")
CORS_ALLOW_ALL = _env_bool("CORS_ALLOW_ALL")

# FastAPI / App
BASE_URL = os.getenv("BASE_URL", "")
ENABLE_DOCS = _env_bool("ENABLE_DOCS", "true")

# Fuso e dia operacional (o "dia" da loja vira às 04:00, não à meia-noite)
TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")
HORA_INICIO_DIA_OPERACIONAL = int(os.getenv("HORA_INICIO_DIA_OPERACIONAL", 4))

# Pedidos
TAXA_ENTREGA = Decimal(os.getenv("TAXA_ENTREGA", "5.00"))
SETORES_ENTREGA = _env_lista("SETORES_ENTREGA")
HISTORICO_LIMITE_PADRAO = int(os.getenv("HISTORICO_LIMITE_PADRAO", 50))

# Estoque: "criacao" baixa ao criar o pedido, "preparo" ao entrar em preparo
ESTOQUE_MOMENTO_BAIXA = os.getenv("ESTOQUE_MOMENTO_BAIXA", "criacao").lower()

# PIX
PIX_MODO = os.getenv("PIX_MODO", "automatico").lower()  # automatico | manual
PIX_CHAVE_MANUAL = os.getenv("PIX_CHAVE_MANUAL", "")
PIX_EXPIRACAO_MINUTOS = int(os.getenv("PIX_EXPIRACAO_MINUTOS", 30))

# Gateway de pagamento
GATEWAY_MODE = os.getenv("GATEWAY_MODE", "mock").lower()  # mock | mercadopago

# Mercado Pago
MERCADOPAGO_ACCESS_TOKEN = os.getenv("MERCADOPAGO_ACCESS_TOKEN")
MERCADOPAGO_BASE_URL = os.getenv("MERCADOPAGO_BASE_URL", "https://api.mercadopago.com")
MERCADOPAGO_TIMEOUT_SECONDS = int(os.getenv("MERCADOPAGO_TIMEOUT_SECONDS", 20))
MERCADOPAGO_PAYER_EMAIL = os.getenv("MERCADOPAGO_PAYER_EMAIL", "pagador@loja.com.br")

# Núcleo cliente (app/fluxos): intervalos dos timers
LOJA_API_URL = os.getenv("LOJA_API_URL", "http://localhost:8000")
LOJA_API_TIMEOUT_SECONDS = float(os.getenv("LOJA_API_TIMEOUT_SECONDS", 10))
INTERVALO_POLLING_PAGAMENTO_SEGUNDOS = float(os.getenv("INTERVALO_POLLING_PAGAMENTO_SEGUNDOS", 3))
INTERVALO_ATUALIZACAO_PEDIDOS_SEGUNDOS = float(os.getenv("INTERVALO_ATUALIZACAO_PEDIDOS_SEGUNDOS", 15))
INTERVALO_ATUALIZACAO_ESTOQUE_SEGUNDOS = float(os.getenv("INTERVALO_ATUALIZACAO_ESTOQUE_SEGUNDOS", 60))
TIMEOUT_TRAVA_TRANSICAO_SEGUNDOS = float(os.getenv("TIMEOUT_TRAVA_TRANSICAO_SEGUNDOS", 10))
