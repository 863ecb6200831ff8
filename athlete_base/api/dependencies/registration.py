"""Request-scoped access to the process-wide pool and registration service.

Both live on ``app.state`` and are created by the application lifespan.
"""

from __future__ import annotations

from fastapi import Request

from athlete_base.db.pool import ConnectionPool
from athlete_base.registration.service import RegistrationService


def get_pool(request: Request) -> ConnectionPool:
    return request.app.state.pool


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration_service
