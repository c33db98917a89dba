from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config.settings import BASE_URL, CORS_ALLOW_ALL, CORS_ORIGINS, ENABLE_DOCS
from app.core.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.utils.logger import logger
from app.utils.prometheus_metrics import PrometheusMiddleware

# ───────────────────────────
# Routers
# ───────────────────────────
from app.api.catalogo.router.router import router as catalogo_router
from app.api.cupons.router.router import api_cupons
from app.api.estoque.router.router import api_estoque
from app.api.monitoring.router import router as monitoring_router
from app.api.pagamentos.router.router import api_pagamentos
from app.api.pedidos.router.router import api_pedidos

# ──────────────────────────
# Instância FastAPI
# ──────────────────────────
app = FastAPI(
    title="API de Pedidos e Estoque",
    version="1.0.0",
    description="Pedidos, pagamentos, cupons e estoque por receita",
    docs_url=("/swagger" if ENABLE_DOCS else None),
    redoc_url=("/redoc" if ENABLE_DOCS else None),
    openapi_url=("/openapi.json" if ENABLE_DOCS else None),
    servers=[{"url": BASE_URL, "description": "Base URL do ambiente"}] if BASE_URL else None,
    redirect_slashes=False,  # Evita redirecionamento 307 quando URL não termina com /
)

# ───────────────────────────
# Exception Handlers Globais
# ───────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# ───────────────────────────
# Middlewares
# ───────────────────────────
# Middlewares são executados na ORDEM REVERSA da adição (último adicionado = primeiro executado)
app.add_middleware(PrometheusMiddleware)

# - Se CORS_ALLOW_ALL=true => allow_origins=["*"], allow_credentials=False
# - Caso contrário => CORS_ORIGINS (vazio cai para ["*"]), credenciais só com origens explícitas
if CORS_ALLOW_ALL:
    allowed_origins = ["*"]
    allow_credentials = False
else:
    allowed_origins = CORS_ORIGINS or ["*"]
    allow_credentials = bool(CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ───────────────────────────
# Startup
# ───────────────────────────
@app.on_event("startup")
async def startup():
    from app.database.init_db import inicializar_banco

    logger.info("Iniciando API e banco de dados...")
    inicializar_banco()
    logger.info("API iniciada com sucesso.")


@app.on_event("shutdown")
async def shutdown():
    from app.api.pagamentos.services.dependencies import get_payment_gateway

    await get_payment_gateway().close()
    logger.info("API encerrada.")


# ───────────────────────────
# Rotas
# ───────────────────────────
@app.get("/")
async def root():
    return {"status": "ok", "message": "API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(monitoring_router)
app.include_router(api_cupons)
app.include_router(api_estoque)
app.include_router(catalogo_router)
app.include_router(api_pedidos)
app.include_router(api_pagamentos)
