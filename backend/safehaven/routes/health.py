"""
Safe Haven Backend: Health Check Route
========================================

What:  GET /health for Docker and load balancer health checks.

Status levels:
    healthy:   database reachable and mail configured (HTTP 200)
    degraded:  database reachable, mail not configured (HTTP 200;
               bookings still work, emails are skipped)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from safehaven import __version__
from safehaven.database import engine
from safehaven.schemas.common import HealthResponse
from safehaven.services.mail_service import mail_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    mail_status = "configured" if mail_service.configured else "not_configured"
    if mail_status != "configured" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        mail=mail_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
