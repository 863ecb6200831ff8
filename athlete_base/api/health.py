"""Service health endpoint."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from athlete_base.api.dependencies.registration import get_pool
from athlete_base.db.pool import ConnectionPool

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(request: Request, pool: ConnectionPool = Depends(get_pool)) -> JSONResponse:
    """Report server, database and pool status.

    Returns 200 with status "ok" when the database answers, otherwise
    503 with status "degraded".
    """
    settings = pool.settings
    database_ok = await pool.check_health()
    overall = "ok" if database_ok else "degraded"

    started_at = getattr(request.app.state, "started_at", time.monotonic())
    payload = {
        "status": overall,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - started_at, 3),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {
            "server": {"status": "ok", "message": "Server is running"},
            "database": {
                "status": "ok" if database_ok else "error",
                "message": "Database reachable" if database_ok else "Database unreachable",
            },
            "pool": pool.stats().to_dict(),
        },
    }
    status_code = status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=payload)
