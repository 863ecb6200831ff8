"""Scenario tests for the registration orchestrator.

Repository I/O is replaced with AsyncMocks on real repository instances,
so create_if_absent (the two-layer uniqueness logic) runs for real.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from athlete_base.db.pool import ConnectionPool
from athlete_base.registration.errors import (
    AvailabilityCheckError,
    EmailAlreadyRegisteredError,
    RecordCreationError,
)
from athlete_base.registration.service import RegistrationService
from athlete_base.registration.types import CoachRecord, PlayerRecord, RegistrationOutcome
from athlete_base.users.coach_repository import CoachRepository
from athlete_base.users.player_repository import PlayerRepository


@pytest.fixture
def players():
    repository = PlayerRepository(MagicMock(spec=ConnectionPool))
    repository.check_email_exists = AsyncMock(return_value=False)
    repository.create = AsyncMock(return_value="player-123")
    return repository


@pytest.fixture
def coaches():
    repository = CoachRepository(MagicMock(spec=ConnectionPool))
    repository.check_email_exists = AsyncMock(return_value=False)
    repository.create = AsyncMock(return_value="coach-456")
    return repository


@pytest.fixture
def service(players, coaches, fake_hasher):
    return RegistrationService(players, coaches, hasher=fake_hasher)


@pytest.mark.asyncio
async def test_player_registration_succeeds(service, players, fake_hasher, player_payload):
    """Unique email, hash and insert succeed -> 201 with the new id."""
    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.SUCCEEDED
    assert result.status_code == 201
    assert result.body == {
        "success": True,
        "message": "Player registered successfully",
        "playerId": "player-123",
    }
    players.check_email_exists.assert_awaited_once_with("jordan.miles@example.com")
    assert fake_hasher.calls == ["Password123!"]


@pytest.mark.asyncio
async def test_player_record_is_normalized(service, players, player_payload):
    await service.register_player(player_payload)

    record = players.create.await_args.args[0]
    assert isinstance(record, PlayerRecord)
    assert record.email == "jordan.miles@example.com"
    assert record.password_hash == "hashed::Password123!"
    assert record.sex == "female"
    assert record.state == "CA"
    assert record.region is None
    assert record.gpa == 3.6
    assert record.scholarship_amount == 1500.0


@pytest.mark.asyncio
async def test_non_usa_player_keeps_region_only(service, players, player_payload):
    player_payload.update(country="Canada", region="Ontario", state="CA")

    result = await service.register_player(player_payload)

    record = players.create.await_args.args[0]
    assert result.status_code == 201
    assert record.region == "Ontario"
    assert record.state is None


@pytest.mark.asyncio
async def test_existing_email_conflicts_without_hashing(service, players, fake_hasher, player_payload):
    """Pre-check finds the email -> 409, and neither hashing nor insert run."""
    players.check_email_exists.return_value = True

    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.CONFLICT
    assert result.status_code == 409
    assert result.body == {"success": False, "message": "Email already registered"}
    assert fake_hasher.calls == []
    players.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_existence_check_failure_returns_generic_error(service, players, fake_hasher, player_payload):
    players.check_email_exists.side_effect = AvailabilityCheckError()

    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.FAILED
    assert result.status_code == 500
    assert result.body == {"success": False, "message": "An error occurred during registration"}
    assert fake_hasher.calls == []


@pytest.mark.asyncio
async def test_insert_race_conflict_maps_to_409(service, players, player_payload):
    """Pre-check passes but the unique constraint rejects the insert."""
    players.create.side_effect = EmailAlreadyRegisteredError()

    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.CONFLICT
    assert result.status_code == 409
    assert result.body == {"success": False, "message": "Email already registered"}


@pytest.mark.asyncio
async def test_insert_failure_returns_generic_error(service, players, player_payload):
    players.create.side_effect = RecordCreationError("player")

    result = await service.register_player(player_payload)

    assert result.status_code == 500
    assert "player" not in result.body["message"].lower()


@pytest.mark.asyncio
async def test_hashing_failure_returns_generic_error_without_insert(players, coaches, player_payload):
    async def broken_hasher(_password: str) -> str:
        raise RuntimeError("bcrypt backend unavailable")

    service = RegistrationService(players, coaches, hasher=broken_hasher)

    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.FAILED
    assert result.body == {"success": False, "message": "An error occurred during registration"}
    players.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_payload_rejected_before_any_io(service, players, fake_hasher, player_payload):
    player_payload.pop("lastName")
    player_payload["gpa"] = 5

    result = await service.register_player(player_payload)

    assert result.outcome is RegistrationOutcome.REJECTED
    assert result.status_code == 400
    assert result.body["success"] is False
    fields = {error["field"] for error in result.body["errors"]}
    assert {"lastName", "gpa"} <= fields
    players.check_email_exists.assert_not_awaited()
    assert fake_hasher.calls == []


@pytest.mark.asyncio
async def test_non_object_payload_rejected(service):
    result = await service.register_player("not an object")

    assert result.status_code == 400


@pytest.mark.asyncio
async def test_coach_registration_succeeds(service, coaches, coach_payload):
    result = await service.register_coach(coach_payload)

    assert result.status_code == 201
    assert result.body == {
        "success": True,
        "message": "Coach registered successfully",
        "coachId": "coach-456",
    }
    record = coaches.create.await_args.args[0]
    assert isinstance(record, CoachRecord)
    assert record.email == "pat.summers@state.edu"
    assert record.coaching_category == "womens"
    assert record.sports == ["basketball", "football"]
    assert record.primary_sport == "basketball"


@pytest.mark.asyncio
async def test_coach_conflict(service, coaches, fake_hasher, coach_payload):
    coaches.check_email_exists.return_value = True

    result = await service.register_coach(coach_payload)

    assert result.status_code == 409
    assert fake_hasher.calls == []


@pytest.mark.asyncio
async def test_coach_sports_must_be_list(service, coaches, coach_payload):
    coach_payload["sports"] = "basketball"

    result = await service.register_coach(coach_payload)

    assert result.status_code == 400
    assert {"field": "sports", "message": "At least one sport is required"} in result.body["errors"]
    coaches.check_email_exists.assert_not_awaited()


@pytest.mark.asyncio
async def test_player_and_coach_tables_are_independent(service, players, coaches, coach_payload):
    players.check_email_exists.return_value = True

    result = await service.register_coach(coach_payload)

    assert result.status_code == 201
    players.check_email_exists.assert_not_awaited()
