from __future__ import annotations

from fastapi import APIRouter

from app.utils.query_cache import get_query_cache

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check used by load balancers and monitoring.

    Returns:
        dict: ``status`` set to "ok" and lightweight query cache metrics.
    """

    return {"status": "ok", "query_cache": get_query_cache().stats()}
