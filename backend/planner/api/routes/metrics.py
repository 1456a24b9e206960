"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - sync_latency_ms{resource, operation, outcome}
    - sync_errors_total{resource, operation}
    - cache_hits_total{resource}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
