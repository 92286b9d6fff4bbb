"""
Health check endpoint.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from quickcourt.config import APP_VERSION
from quickcourt.dependencies import DB
from quickcourt.models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check (pings the database)",
    responses={503: {"model": HealthResponse}},
)
async def get_health(request: Request, db: DB):
    uptime = round(time.monotonic() - request.app.state.started_at, 3)
    try:
        await db.ping()
    except Exception:
        logger.exception("Health check failed")
        body = HealthResponse(
            status="ERROR",
            timestamp=datetime.now(timezone.utc),
            uptime=uptime,
            database="Disconnected",
            version=APP_VERSION,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(mode="json", by_alias=True),
        )

    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        uptime=uptime,
        database="Connected",
        version=APP_VERSION,
    )
