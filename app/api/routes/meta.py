from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import get_database, get_settings
from app.core.config import Settings
from app.db.mongo import Database

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@router.get("/health")
async def process_health(
    request: Request,
    database: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    try:
        await database.ping()
    except Exception:  # noqa: BLE001 - any driver failure means unhealthy
        logger.exception("Database health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": _now(),
                "error": "Database connection failed",
            },
        )

    started_at = getattr(request.app.state, "started_at", None)
    uptime = round(time.monotonic() - started_at, 3) if started_at is not None else 0.0
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": _now(),
            "uptime": uptime,
            "environment": settings.env,
            "database": "connected",
        }
    )


@router.get("/ping")
def ping() -> dict[str, str]:
    return {"status": "ok", "timestamp": _now()}


@router.get("/")
def root() -> dict[str, str]:
    return {"name": "weather-gateway", "status": "ok"}
