"""
CRUD Gateway: Health Check Route
=================================

What:  Liveness endpoint reporting the reachability of the pooled stores.
How:   Runs `SELECT 1` on the relational pool and a Mongo `ping`. Object
       storage has no connection to check; only its region is reported.

Status levels:
    - healthy:   both stores answered
    - degraded:  at least one did not (still HTTP 200; the process is alive)
"""

import logging
import time

from fastapi import APIRouter, Request
from pymongo.errors import PyMongoError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from crudgateway import __version__
from crudgateway.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    backends = request.app.state.backends
    settings = request.app.state.settings
    relational = "connected"
    document = "connected"
    checks = []

    try:
        async with backends.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        relational = "disconnected"
        checks.append(f"relational: {e}")
        logger.warning("Health check: MySQL unreachable: %s", e)

    try:
        await backends.ping_document_store()
    except PyMongoError as e:
        document = "disconnected"
        checks.append(f"document: {e}")
        logger.warning("Health check: MongoDB unreachable: %s", e)

    return HealthResponse(
        status="healthy" if not checks else "degraded",
        version=__version__,
        relational=relational,
        document=document,
        object_storage_region=settings.region,
        uptime_seconds=round(time.time() - _start_time, 2),
        checks=checks,
    )
