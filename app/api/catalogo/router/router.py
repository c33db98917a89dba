from fastapi import APIRouter

from app.api.catalogo.router.admin.router_produtos_admin import router as router_produtos_admin
from app.api.catalogo.router.public.router_cardapio_public import router as router_cardapio_public

router = APIRouter(tags=["API - Catálogo"])

router.include_router(router_cardapio_public)
router.include_router(router_produtos_admin)
