from fastapi import APIRouter

from app.api.pagamentos.router.admin.router_pagamentos_admin import router as router_pagamentos_admin
from app.api.pagamentos.router.client.router_pagamentos_client import router as router_pagamentos_client

api_pagamentos = APIRouter(tags=["API - Pagamentos"])

api_pagamentos.include_router(router_pagamentos_client)
api_pagamentos.include_router(router_pagamentos_admin)
