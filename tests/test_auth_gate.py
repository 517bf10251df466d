"""Auth gate and role gate tests.

Status asymmetry under test: a missing credential is 401, a credential
that doesn't verify is 403, and a verified identity with the wrong role
is 403.
"""

from datetime import datetime, timedelta, timezone

import pytest

from estatehub.auth.dependencies import (
    CurrentIdentity,
    authenticate,
    check_role,
    extract_bearer_token,
)
from estatehub.auth.jwt import create_access_token
from estatehub.config import Settings
from estatehub.errors import Forbidden, Unauthenticated

from conftest import TEST_JWT_SECRET

USER_ID = "0b7c56d4-0a9a-4d0b-93a4-6f4f5b0e2d11"


@pytest.fixture()
def gate_settings() -> Settings:
    return Settings(jwt_secret=TEST_JWT_SECRET)


# ═══════════════════════════════════════════════════════════
# Unit: authenticate / check_role
# ═══════════════════════════════════════════════════════════


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert extract_bearer_token("Bearer") is None
    assert extract_bearer_token("") is None
    assert extract_bearer_token(None) is None


def test_no_token_is_unauthenticated(gate_settings):
    with pytest.raises(Unauthenticated):
        authenticate(None, gate_settings)


def test_bad_token_is_forbidden(gate_settings):
    with pytest.raises(Forbidden) as exc:
        authenticate("garbage", gate_settings)
    assert exc.value.message == "Invalid or expired token"


def test_expired_token_is_forbidden(gate_settings):
    token = create_access_token(
        USER_ID,
        "a@test.com",
        "agent",
        secret=TEST_JWT_SECRET,
        expires_minutes=1,
        now=datetime.now(timezone.utc) - timedelta(hours=1),
    )
    with pytest.raises(Forbidden):
        authenticate(token, gate_settings)


def test_non_uuid_subject_is_forbidden(gate_settings):
    token = create_access_token("42", "a@test.com", "agent", secret=TEST_JWT_SECRET)
    with pytest.raises(Forbidden):
        authenticate(token, gate_settings)


def test_valid_token_yields_identity(gate_settings):
    token = create_access_token(USER_ID, "a@test.com", "agent", secret=TEST_JWT_SECRET)
    identity = authenticate(token, gate_settings)
    assert identity.user_id == USER_ID
    assert identity.role == "agent"
    assert not identity.is_admin


def test_role_gate_without_identity_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        check_role(None, ("agent", "admin"))


def test_role_gate_rejects_role_outside_allow_list():
    identity = CurrentIdentity(user_id=USER_ID, email="u@test.com", role="user")
    with pytest.raises(Forbidden) as exc:
        check_role(identity, ("agent", "admin"))
    assert exc.value.message == "Access denied. Required role: agent or admin"


def test_role_gate_passes_allowed_role():
    identity = CurrentIdentity(user_id=USER_ID, email="a@test.com", role="admin")
    assert check_role(identity, ("agent", "admin")) is identity


# ═══════════════════════════════════════════════════════════
# HTTP: the same rules through the routes
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_credential_is_401(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized", "message": "No token provided"}


@pytest.mark.asyncio
async def test_invalid_credential_is_403(client):
    r = await client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 403
    assert r.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_token_signed_elsewhere_is_403(client, buyer):
    forged = create_access_token(buyer.id, buyer.email, "admin", secret="attacker-secret")
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_missing_credential_on_agent_route_is_401(client):
    r = await client.get("/api/properties/agent/my-properties")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_wrong_role_on_agent_route_is_403(client, buyer):
    r = await client.get("/api/properties/agent/my-properties", headers=buyer.headers)
    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden"


@pytest.mark.asyncio
async def test_auth_runs_before_body_validation(client):
    """No token + invalid body → 401, not 400."""
    r = await client.post("/api/properties", json={"title": ""})
    assert r.status_code == 401
