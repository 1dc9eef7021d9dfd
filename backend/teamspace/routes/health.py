"""
Teamspace Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs `SELECT 1` against the relational store and `ping` against the
       document store, and reports each.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   every enabled store answered
    - degraded:  the document store is down (chat documents unavailable)
    - unhealthy: the relational store is down (HTTP 503)

In mock mode neither store is probed and the service reports healthy.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from teamspace import __version__
from teamspace.config import settings
from teamspace.database import engine
from teamspace.mongo import ping_document_store
from teamspace.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "disabled"
    doc_status = "disabled"
    overall = "healthy"

    if not settings.database_disabled:
        # ── Relational store ──────────────────────────────────────────────
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "connected"
        except Exception as e:
            db_status = "disconnected"
            overall = "unhealthy"
            logger.warning("Health check: database unreachable: %s", str(e))

        # ── Document store ────────────────────────────────────────────────
        if settings.mongo_enabled:
            if await ping_document_store():
                doc_status = "connected"
            else:
                doc_status = "disconnected"
                overall = "degraded" if overall != "unhealthy" else overall

    if overall == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        document_store=doc_status,
        mock_mode=settings.database_disabled,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
