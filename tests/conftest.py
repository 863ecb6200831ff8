"""Root conftest for all tests.

Database-backed tests run the real ConnectionPool against a throwaway
sqlite file through aiosqlite; nothing touches a shared database.
"""

from __future__ import annotations

import pytest

from athlete_base.config.settings import Settings
from athlete_base.db.pool import ConnectionPool
from athlete_base.users.coach_repository import CoachRepository
from athlete_base.users.player_repository import PlayerRepository


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings bound to a per-test sqlite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'athlete_base.db'}",
        bcrypt_rounds=4,
        allowed_origins="http://localhost:3000",
        environment="test",
    )


@pytest.fixture
async def pool(settings):
    """Open pool with the players and coaches tables created."""
    connection_pool = ConnectionPool(settings)
    await connection_pool.create_schema()
    try:
        yield connection_pool
    finally:
        await connection_pool.close()


@pytest.fixture
def player_repository(pool) -> PlayerRepository:
    return PlayerRepository(pool)


@pytest.fixture
def coach_repository(pool) -> CoachRepository:
    return CoachRepository(pool)


@pytest.fixture
def fake_hasher():
    """Deterministic stand-in for bcrypt that records what it hashed."""

    calls: list[str] = []

    async def _hash(password: str) -> str:
        calls.append(password)
        return f"hashed::{password}"

    _hash.calls = calls
    return _hash


@pytest.fixture
def player_payload() -> dict:
    return {
        "firstName": "Jordan",
        "lastName": "Miles",
        "email": "Jordan.Miles@Example.com ",
        "password": "Password123!",
        "sex": "Female",
        "sport": "Basketball",
        "position": "Point Guard",
        "gpa": 3.6,
        "country": "USA",
        "state": "CA",
        "scholarshipAmount": 1500,
        "testScores": "SAT 1400",
    }


@pytest.fixture
def coach_payload() -> dict:
    return {
        "firstName": "Pat",
        "lastName": "Summers",
        "email": "Pat.Summers@State.edu",
        "password": "Password123!",
        "coachingCategory": "Womens",
        "sports": ["basketball", "football"],
        "university": "State University",
    }
