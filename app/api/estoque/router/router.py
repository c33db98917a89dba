from fastapi import APIRouter

from app.api.estoque.router.admin.router_estoque_admin import router as router_estoque_admin

api_estoque = APIRouter(tags=["API - Estoque"])

api_estoque.include_router(router_estoque_admin)
