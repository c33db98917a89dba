from fastapi import APIRouter

from app.api.cupons.router.admin.router_cupons_admin import router as router_cupons_admin
from app.api.cupons.router.public.router_cupons_public import router as router_cupons_public

api_cupons = APIRouter(tags=["API - Cupons"])

api_cupons.include_router(router_cupons_public)
api_cupons.include_router(router_cupons_admin)
