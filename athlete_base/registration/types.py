"""Value types for the registration pipeline.

Covers:
- Field-scoped validation errors and results
- Normalized records handed to the repositories
- Persisted profiles read back from the database
- The create-if-absent union (Created | AlreadyExists | Failed)
- The service result and its HTTP status mapping
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from athlete_base.registration.errors import RegistrationError


@dataclass(frozen=True)
class FieldError:
    """One violated rule for one payload field."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def fields(self) -> set[str]:
        return {error.field for error in self.errors}


@dataclass(frozen=True)
class PlayerRecord:
    """Player data ready for insertion. Exactly one of state/region is set."""

    first_name: str
    last_name: str
    email: str
    password_hash: str
    sex: str
    sport: str
    position: str
    gpa: float
    country: str
    state: str | None = None
    region: str | None = None
    scholarship_amount: float | None = None
    test_scores: str | None = None


@dataclass(frozen=True)
class CoachRecord:
    """Coach data ready for insertion. ``sports[0]`` is the primary sport."""

    first_name: str
    last_name: str
    email: str
    password_hash: str
    coaching_category: str
    sports: list[str]
    university: str

    @property
    def primary_sport(self) -> str:
        return self.sports[0]


@dataclass(frozen=True)
class PlayerProfile:
    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    sex: str
    sport: str
    position: str
    gpa: float
    country: str
    state: str | None
    region: str | None
    scholarship_amount: float | None
    test_scores: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CoachProfile:
    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    sport: str
    coaching_level: str
    current_organization: str
    specializations: list[str]
    country: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Created:
    record_id: str


@dataclass(frozen=True)
class AlreadyExists:
    email: str


@dataclass(frozen=True)
class Failed:
    error: RegistrationError


CreateResult = Created | AlreadyExists | Failed


class RegistrationOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass(frozen=True)
class RegistrationResult:
    """Response body plus HTTP status for one registration request."""

    outcome: RegistrationOutcome
    status_code: int
    body: dict[str, Any]
