"""Registration endpoints for players and coaches.

Bodies are read as raw JSON rather than through pydantic request models:
the registration service validates untrusted payloads itself and reports
every field error at once.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from athlete_base.api.dependencies.registration import get_registration_service
from athlete_base.registration.service import RegistrationService

router = APIRouter(prefix="/api/auth/register", tags=["registration"])


async def _read_json(request: Request) -> tuple[Any, JSONResponse | None]:
    try:
        return await request.json(), None
    except ValueError:
        logger.warning(f"[API] Invalid JSON body for {request.url.path}")
        return None, JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid JSON in request body"},
        )


@router.post("/player")
async def register_player(
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> JSONResponse:
    """Register a player account.

    Returns:
        201 with playerId, 400 with field errors, 409 on duplicate email,
        500 on internal failure
    """
    body, error_response = await _read_json(request)
    if error_response is not None:
        return error_response
    result = await service.register_player(body)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/coach")
async def register_coach(
    request: Request,
    service: RegistrationService = Depends(get_registration_service),
) -> JSONResponse:
    """Register a coach account.

    Returns:
        201 with coachId, 400 with field errors, 409 on duplicate email,
        500 on internal failure
    """
    body, error_response = await _read_json(request)
    if error_response is not None:
        return error_response
    result = await service.register_coach(body)
    return JSONResponse(status_code=result.status_code, content=result.body)
