"""
Stargazer Backend — Health Check Route
=======================================

What:  Health check endpoint for monitoring and container liveness checks.
How:   Runs SELECT 1 against the engine and reports the result.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable or not initialized
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from stargazer import __version__, database
from stargazer.schemas.star import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """
    Check the health of the service and its database.

    Always answers 200; the body carries the verdict so that checkers can
    distinguish "process down" from "database down".
    """
    db_status = "connected"
    overall = "healthy"

    try:
        if database.engine is None:
            raise RuntimeError("database not initialized")
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
