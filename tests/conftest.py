"""Test fixtures: a fresh app and SQLite database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own Settings pointing at a SQLite file under
   tmp_path (aiosqlite driver), with cheap bcrypt rounds and a private
   upload directory.
2. create_app(settings) wires a Database onto app.state; the schema is
   created with create_all() instead of Alembic.
3. httpx talks to the app in-process through ASGITransport. Nothing is
   shared between tests, so there is no rollback dance.

Account helpers go through the real register endpoint, so every token in
the suite is a real signed JWT.
"""

import uuid
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from estatehub.config import Settings
from estatehub.main import create_app

TEST_JWT_SECRET = "test-secret-not-for-production"


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_JWT_SECRET,
        bcrypt_rounds=4,
        environment="development",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest_asyncio.fixture()
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ═══════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════


class Account:
    """A registered account plus its bearer token."""

    def __init__(self, user: dict, token: str, password: str):
        self.user = user
        self.token = token
        self.password = password

    @property
    def id(self) -> str:
        return self.user["id"]

    @property
    def email(self) -> str:
        return self.user["email"]

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


async def register_account(client: AsyncClient, role: str = "user", **overrides) -> Account:
    password = overrides.pop("password", "secret123")
    body = {
        "email": f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        "password": password,
        "firstName": "Test",
        "lastName": role.title(),
        "phone": "555-0100",
        "role": role,
        **overrides,
    }
    r = await client.post("/api/auth/register", json=body)
    assert r.status_code == 201, r.text
    data = r.json()
    return Account(data["user"], data["token"], password)


@pytest_asyncio.fixture()
async def agent(client) -> Account:
    return await register_account(client, role="agent")


@pytest_asyncio.fixture()
async def other_agent(client) -> Account:
    return await register_account(client, role="agent")


@pytest_asyncio.fixture()
async def admin(client) -> Account:
    return await register_account(client, role="admin")


@pytest_asyncio.fixture()
async def buyer(client) -> Account:
    return await register_account(client, role="user")


# ═══════════════════════════════════════════════════════════
# Listings and leads
# ═══════════════════════════════════════════════════════════


def property_payload(**overrides) -> dict:
    body = {
        "title": "Harbour View Penthouse",
        "description": "Top floor, wraparound terrace.",
        "location": "12 Quay Street",
        "city": "Seattle",
        "state": "WA",
        "price": 1250000,
        "beds": 3,
        "baths": 2,
        "sqft": 2100,
        "propertyType": "penthouse",
        "yearBuilt": 2015,
        "status": "active",
        "amenities": ["pool", "gym"],
        "zipCode": "98101",
    }
    body.update(overrides)
    return body


async def create_property(client: AsyncClient, owner: Account, **overrides) -> dict:
    r = await client.post(
        "/api/properties", json=property_payload(**overrides), headers=owner.headers
    )
    assert r.status_code == 201, r.text
    return r.json()["property"]


async def create_inquiry(client: AsyncClient, property_id: str, **overrides) -> dict:
    body = {
        "propertyId": property_id,
        "name": "Jamie Buyer",
        "email": "jamie@example.com",
        "message": "Is the terrace south facing?",
        **overrides,
    }
    r = await client.post("/api/inquiries", json=body)
    assert r.status_code == 201, r.text
    return r.json()["inquiry"]


async def create_appointment(client: AsyncClient, property_id: str, **overrides) -> dict:
    body = {
        "propertyId": property_id,
        "name": "Jamie Buyer",
        "email": "jamie@example.com",
        "preferred_date": (date.today() + timedelta(days=3)).isoformat(),
        "preferred_time": "14:30",
        **overrides,
    }
    r = await client.post("/api/appointments", json=body)
    assert r.status_code == 201, r.text
    return r.json()["appointment"]


@pytest_asyncio.fixture()
async def listing(client, agent) -> dict:
    """An active listing owned by `agent`."""
    return await create_property(client, agent)
