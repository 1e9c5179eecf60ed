"""
Tourify Backend — Health Check Route
=====================================

GET /health for container probes and load balancers. The only dependency
probed is the database (SELECT 1): identity provider and media storage are
not needed to serve published tours, so they do not affect health.

    healthy    → 200
    unhealthy  → 503 (database unreachable)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tourify import __version__
from tourify.database import engine
from tourify.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def probe_database() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", e)
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    database_ok = await probe_database()
    if not database_ok:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if database_ok else "unhealthy",
        version=__version__,
        database="connected" if database_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
