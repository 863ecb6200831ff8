"""Repository for player accounts."""

from __future__ import annotations

from typing import Any

from athlete_base.db.models import Player
from athlete_base.registration.normalize import normalize_email
from athlete_base.registration.types import PlayerProfile, PlayerRecord
from athlete_base.users.base_repository import BaseRepository


class PlayerRepository(BaseRepository[PlayerRecord, PlayerProfile]):
    """Repository for player data access."""

    model = Player
    entity = "player"

    def _insert_values(self, record: PlayerRecord) -> dict[str, Any]:
        return {
            "first_name": record.first_name,
            "last_name": record.last_name,
            "email": normalize_email(record.email),
            "password_hash": record.password_hash,
            "sex": record.sex,
            "sport": record.sport,
            "position": record.position,
            "gpa": record.gpa,
            "country": record.country,
            "state": record.state or None,
            "region": record.region or None,
            "scholarship_amount": record.scholarship_amount,
            "test_scores": record.test_scores or None,
        }

    def _to_profile(self, row: dict[str, Any]) -> PlayerProfile:
        scholarship = row["scholarship_amount"]
        return PlayerProfile(
            id=str(row["id"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            sex=row["sex"],
            sport=row["sport"],
            position=row["position"],
            gpa=float(row["gpa"]),
            country=row["country"],
            state=row["state"],
            region=row["region"],
            scholarship_amount=float(scholarship) if scholarship is not None else None,
            test_scores=row["test_scores"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
