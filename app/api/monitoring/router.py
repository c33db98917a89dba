"""
Router de monitoramento: métricas Prometheus.
"""
from fastapi import APIRouter
from fastapi.responses import Response

from app.utils.prometheus_metrics import CONTENT_TYPE_LATEST, get_metrics

router = APIRouter(tags=["Monitoring - Monitoramento"])


@router.get("/metrics")
async def metrics():
    """Endpoint de métricas Prometheus."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
