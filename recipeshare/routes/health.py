"""
RecipeShare API: Health Check Route
====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and a credentials check against
       the image store, then reports an aggregate status.

Status levels:
    healthy:   database and image store reachable
    degraded:  image store unreachable or unconfigured (reads still work)
    unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from recipeshare import __version__
from recipeshare.database import engine
from recipeshare.schemas.recipe import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    image_store_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    image_store = getattr(request.app.state, "image_store", None)
    if image_store is None:
        image_store_status = "unconfigured"
    elif not await image_store.health_check():
        image_store_status = "unavailable"

    if image_store_status != "available" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        image_store=image_store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
