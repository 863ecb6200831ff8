"""Registration orchestration for players and coaches.

One call handles one request and keeps no state between requests:

    validate -> (invalid: 400) -> uniqueness pre-check -> (taken: 409)
    -> hash password -> insert -> (unique violation: 409, other failure: 500) -> 201

Hashing happens only after the pre-check passed, and the insert only after
hashing succeeded. The service never raises; every failure becomes a
RegistrationResult whose body is safe to return to the caller.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from loguru import logger

from athlete_base.core.password import hash_password_async
from athlete_base.registration.normalize import clean_text, normalize_email, to_float
from athlete_base.registration.types import (
    AlreadyExists,
    CoachRecord,
    Created,
    CreateResult,
    Failed,
    PlayerRecord,
    RegistrationOutcome,
    RegistrationResult,
    ValidationResult,
)
from athlete_base.registration.validation import USA, validate_coach_registration, validate_player_registration
from athlete_base.users.base_repository import BaseRepository
from athlete_base.users.coach_repository import CoachRepository
from athlete_base.users.player_repository import PlayerRepository

PasswordHasher = Callable[[str], Awaitable[str]]

CONFLICT_MESSAGE = "Email already registered"
FAILURE_MESSAGE = "An error occurred during registration"


def build_player_record(payload: Mapping[str, Any], password_hash: str) -> PlayerRecord:
    """Normalize a validated player payload into an insertable record."""
    country = clean_text(payload.get("country")) or ""
    in_usa = country.upper() == USA
    return PlayerRecord(
        first_name=clean_text(payload.get("firstName")) or "",
        last_name=clean_text(payload.get("lastName")) or "",
        email=normalize_email(payload["email"]),
        password_hash=password_hash,
        sex=(clean_text(payload.get("sex")) or "").lower(),
        sport=clean_text(payload.get("sport")) or "",
        position=clean_text(payload.get("position")) or "",
        gpa=to_float(payload.get("gpa")) or 0.0,
        country=country,
        state=clean_text(payload.get("state")) if in_usa else None,
        region=None if in_usa else clean_text(payload.get("region")),
        scholarship_amount=to_float(payload.get("scholarshipAmount")),
        test_scores=clean_text(payload.get("testScores")),
    )


def build_coach_record(payload: Mapping[str, Any], password_hash: str) -> CoachRecord:
    """Normalize a validated coach payload into an insertable record."""
    return CoachRecord(
        first_name=clean_text(payload.get("firstName")) or "",
        last_name=clean_text(payload.get("lastName")) or "",
        email=normalize_email(payload["email"]),
        password_hash=password_hash,
        coaching_category=(clean_text(payload.get("coachingCategory")) or "").lower(),
        sports=[sport.strip() for sport in payload["sports"]],
        university=clean_text(payload.get("university")) or "",
    )


def _elapsed_ms(started: float) -> str:
    return f"{(time.perf_counter() - started) * 1000:.0f}ms"


class RegistrationService:
    """Validate, de-duplicate, hash and persist new player and coach accounts."""

    def __init__(
        self,
        players: PlayerRepository,
        coaches: CoachRepository,
        hasher: PasswordHasher = hash_password_async,
    ) -> None:
        self._players = players
        self._coaches = coaches
        self._hasher = hasher

    async def register_player(self, payload: Any) -> RegistrationResult:
        return await self._register(
            entity="player",
            payload=payload,
            validate=validate_player_registration,
            repository=self._players,
            build_record=build_player_record,
        )

    async def register_coach(self, payload: Any) -> RegistrationResult:
        return await self._register(
            entity="coach",
            payload=payload,
            validate=validate_coach_registration,
            repository=self._coaches,
            build_record=build_coach_record,
        )

    async def _register(
        self,
        *,
        entity: str,
        payload: Any,
        validate: Callable[[Any], ValidationResult],
        repository: BaseRepository,
        build_record: Callable[[Mapping[str, Any], str], Any],
    ) -> RegistrationResult:
        request_id = str(uuid.uuid4())
        started = time.perf_counter()
        log = logger.bind(request_id=request_id)
        log.info(f"[REGISTRATION] {entity} registration received")

        try:
            validation = validate(payload)
            if not validation.is_valid:
                log.warning(
                    f"[REGISTRATION] {entity} validation failed: "
                    f"errors={len(validation.errors)}, fields={sorted(validation.fields())}"
                )
                return self._rejected(validation)

            email = normalize_email(payload["email"])
            password = payload["password"]

            async def hash_and_build() -> Any:
                log.debug("[REGISTRATION] Hashing credential")
                password_hash = await self._hasher(password)
                return build_record(payload, password_hash)

            result: CreateResult = await repository.create_if_absent(email, hash_and_build)
        except Exception as e:
            log.opt(exception=e).error(
                f"[REGISTRATION] Unexpected error during {entity} registration: "
                f"error_type={type(e).__name__}, duration={_elapsed_ms(started)}"
            )
            return self._failed()

        if isinstance(result, Created):
            log.info(
                f"[REGISTRATION] {entity.capitalize()} registered successfully: "
                f"{entity}_id={result.record_id}, email={email}, duration={_elapsed_ms(started)}"
            )
            return RegistrationResult(
                outcome=RegistrationOutcome.SUCCEEDED,
                status_code=201,
                body={
                    "success": True,
                    "message": f"{entity.capitalize()} registered successfully",
                    f"{entity}Id": result.record_id,
                },
            )

        if isinstance(result, AlreadyExists):
            log.warning(
                f"[REGISTRATION] Duplicate email registration attempt: "
                f"entity={entity}, email={result.email}, duration={_elapsed_ms(started)}"
            )
            return RegistrationResult(
                outcome=RegistrationOutcome.CONFLICT,
                status_code=409,
                body={"success": False, "message": CONFLICT_MESSAGE},
            )

        if isinstance(result, Failed):
            cause = result.error.__cause__
            log.error(
                f"[REGISTRATION] {entity} registration failed: error={result.error}, "
                f"cause={type(cause).__name__ if cause else None}, duration={_elapsed_ms(started)}"
            )
        return self._failed()

    @staticmethod
    def _rejected(validation: ValidationResult) -> RegistrationResult:
        return RegistrationResult(
            outcome=RegistrationOutcome.REJECTED,
            status_code=400,
            body={"success": False, "errors": [error.to_dict() for error in validation.errors]},
        )

    @staticmethod
    def _failed() -> RegistrationResult:
        return RegistrationResult(
            outcome=RegistrationOutcome.FAILED,
            status_code=500,
            body={"success": False, "message": FAILURE_MESSAGE},
        )
