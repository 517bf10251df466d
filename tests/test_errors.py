"""Error payload tests.

Every failure is {"error", "message"} JSON, including unknown routes,
request validation (400, not 422) and unhandled exceptions.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from estatehub.config import Settings
from estatehub.errors import Conflict, NotFound
from estatehub.main import create_app


def test_app_error_to_dict():
    assert NotFound("gone", error="Property not found").to_dict() == {
        "error": "Property not found",
        "message": "gone",
    }
    exc = Conflict("dup", details=[{"field": "email"}])
    assert exc.status_code == 409
    assert exc.to_dict()["details"] == [{"field": "email"}]


@pytest.mark.asyncio
async def test_unknown_route_is_json_404(client):
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found", "message": "Route GET /api/nope not found"}


@pytest.mark.asyncio
async def test_wrong_method_is_json_404(client):
    r = await client.patch("/api/health")
    assert r.status_code == 404
    assert r.json()["message"] == "Route PATCH /api/health not found"


@pytest.mark.asyncio
async def test_validation_error_shape(client):
    r = await client.post("/api/auth/login", json={"email": "a@test.com"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation error"
    assert body["message"].startswith("password:")
    assert body["details"][0]["loc"] == ["body", "password"]


async def _boom():
    raise RuntimeError("database exploded")


def _app_with_failing_route(settings: Settings):
    app = create_app(settings)
    app.add_api_route("/api/boom", _boom)
    return app


@pytest.mark.asyncio
async def test_unhandled_error_shows_message_in_development(settings):
    app = _app_with_failing_route(settings)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/api/boom")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error", "message": "database exploded"}
    await app.state.database.dispose()


@pytest.mark.asyncio
async def test_unhandled_error_is_generic_in_production(settings):
    prod = settings.model_copy(update={"environment": "production"})
    app = _app_with_failing_route(prod)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/api/boom")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error", "message": "Something went wrong"}
    await app.state.database.dispose()


def test_default_secret_refused_outside_development():
    with pytest.raises(ValueError):
        Settings(environment="production")
