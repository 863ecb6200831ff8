"""Repository for coach accounts.

Registration collects fewer fields than the coaches table holds; the
first sport doubles as the primary ``sport`` column and country defaults
to USA.
"""

from __future__ import annotations

from typing import Any

from athlete_base.db.models import Coach
from athlete_base.registration.normalize import normalize_email
from athlete_base.registration.types import CoachProfile, CoachRecord
from athlete_base.users.base_repository import BaseRepository

DEFAULT_COACH_COUNTRY = "USA"


class CoachRepository(BaseRepository[CoachRecord, CoachProfile]):
    """Repository for coach data access."""

    model = Coach
    entity = "coach"

    def _insert_values(self, record: CoachRecord) -> dict[str, Any]:
        return {
            "first_name": record.first_name,
            "last_name": record.last_name,
            "email": normalize_email(record.email),
            "password_hash": record.password_hash,
            "sport": record.primary_sport,
            "coaching_level": record.coaching_category,
            "current_organization": record.university,
            "specializations": list(record.sports),
            "country": DEFAULT_COACH_COUNTRY,
        }

    def _to_profile(self, row: dict[str, Any]) -> CoachProfile:
        return CoachProfile(
            id=str(row["id"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            sport=row["sport"],
            coaching_level=row["coaching_level"],
            current_organization=row["current_organization"],
            specializations=list(row["specializations"] or []),
            country=row["country"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
