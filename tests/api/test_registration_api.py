"""HTTP tests for the registration and health endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from athlete_base.config.settings import Settings
from athlete_base.db.pool import ConnectionPool
from athlete_base.main import create_app


@pytest.fixture
async def client(settings, pool, fake_hasher):
    app = create_app(settings, pool=pool, hasher=fake_hasher)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


@pytest.mark.asyncio
async def test_register_player_created(client, player_repository, player_payload):
    response = await client.post("/api/auth/register/player", json=player_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Player registered successfully"
    stored = await player_repository.get_by_email("jordan.miles@example.com")
    assert stored.id == body["playerId"]
    assert stored.password_hash == "hashed::Password123!"


@pytest.mark.asyncio
async def test_register_player_duplicate_email_conflicts(client, player_payload):
    first = await client.post("/api/auth/register/player", json=player_payload)
    player_payload["email"] = "JORDAN.MILES@example.com"
    second = await client.post("/api/auth/register/player", json=player_payload)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"success": False, "message": "Email already registered"}


@pytest.mark.asyncio
async def test_register_player_validation_errors(client):
    response = await client.post(
        "/api/auth/register/player",
        json={"email": "bad", "password": "weak", "country": "Canada", "gpa": 4.5},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    fields = {error["field"] for error in body["errors"]}
    assert {"firstName", "email", "password", "gpa", "region"} <= fields
    assert all(set(error) == {"field", "message"} for error in body["errors"])


@pytest.mark.asyncio
async def test_register_player_invalid_json(client):
    response = await client.post(
        "/api/auth/register/player",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid JSON in request body"}


@pytest.mark.asyncio
async def test_register_coach_created(client, coach_repository, coach_payload):
    response = await client.post("/api/auth/register/coach", json=coach_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Coach registered successfully"
    stored = await coach_repository.get_by_email("pat.summers@state.edu")
    assert stored.id == body["coachId"]
    assert stored.sport == "basketball"
    assert stored.specializations == ["basketball", "football"]


@pytest.mark.asyncio
async def test_register_coach_rejects_string_sports(client, coach_payload):
    coach_payload["sports"] = "basketball"

    response = await client.post("/api/auth/register/coach", json=coach_payload)

    assert response.status_code == 400
    assert "sports" in {error["field"] for error in response.json()["errors"]}


@pytest.mark.asyncio
async def test_database_outage_returns_generic_500(tmp_path, fake_hasher, player_payload):
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'absent' / 'db.sqlite'}")
    pool = ConnectionPool(settings)
    app = create_app(settings, pool=pool, hasher=fake_hasher)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/api/auth/register/player", json=player_payload)

    await pool.close()
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "An error occurred during registration"}
    assert fake_hasher.calls == []


@pytest.mark.asyncio
async def test_default_hasher_uses_injected_bcrypt_rounds(settings, pool, player_repository, player_payload):
    app = create_app(settings, pool=pool)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.post("/api/auth/register/player", json=player_payload)

    assert response.status_code == 201
    stored = await player_repository.get_by_email("jordan.miles@example.com")
    assert settings.bcrypt_rounds == 4
    assert stored.password_hash.startswith("$2b$04$")


@pytest.mark.asyncio
async def test_health_ok(client, settings):
    response = await client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"
    assert body["checks"]["database"]["status"] == "ok"
    assert body["checks"]["pool"]["max_connections"] == settings.database_max_connections


@pytest.mark.asyncio
async def test_health_degraded_when_database_unreachable(tmp_path):
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'absent' / 'db.sqlite'}")
    pool = ConnectionPool(settings)
    app = create_app(settings, pool=pool)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/api/health")

    await pool.close()
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_cors_preflight_allows_configured_origin(client):
    response = await client.options(
        "/api/auth/register/player",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
