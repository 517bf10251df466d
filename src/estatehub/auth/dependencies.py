"""FastAPI auth dependencies: the auth gate and the role gate.

Status semantics are asymmetric:
- no bearer credential at all          → 401 Unauthorized
- credential present but doesn't verify → 403 Forbidden
- verified, but role not allowed        → 403 Forbidden

The auth gate stores the identity on request.state; the role gate reads it
from there, so it must be declared after the auth gate. Declared on its
own it reports 401.
"""

import uuid
from typing import Callable, Iterable, Optional

import structlog
from fastapi import Header, Request

from estatehub.auth.jwt import TokenError, verify_token
from estatehub.config import Settings
from estatehub.errors import Forbidden, Unauthenticated

logger = structlog.get_logger()


class CurrentIdentity:
    """The authenticated identity making the request.

    Built from token claims only. The role is whatever it was when the
    token was issued.
    """

    def __init__(self, user_id: str, email: str, role: str):
        self.user_id = user_id
        self.email = email
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def user_uuid(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r}, role={self.role!r})"


def get_settings(request: Request) -> Settings:
    """FastAPI dependency: the Settings the app was built with."""
    return request.app.state.settings


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential part of an Authorization header ("Bearer <token>")."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def authenticate(token: Optional[str], settings: Settings) -> CurrentIdentity:
    """Turn a raw bearer credential into an identity, or raise."""
    if not token:
        raise Unauthenticated("No token provided")
    try:
        claims = verify_token(
            token,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
    except TokenError as e:
        logger.info("auth.token_rejected", reason=type(e).__name__)
        raise Forbidden("Invalid or expired token")
    try:
        uuid.UUID(claims.user_id)
    except ValueError:
        logger.info("auth.token_rejected", reason="BadSubject")
        raise Forbidden("Invalid or expired token")
    return CurrentIdentity(user_id=claims.user_id, email=claims.email, role=claims.role)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Auth gate: verify the bearer token and attach the identity to the request."""
    identity = authenticate(extract_bearer_token(authorization), get_settings(request))
    request.state.identity = identity
    return identity


def check_role(identity: Optional[CurrentIdentity], allowed: Iterable[str]) -> CurrentIdentity:
    """Role gate as a plain function."""
    allowed = tuple(allowed)
    if identity is None:
        raise Unauthenticated("User not authenticated")
    if identity.role not in allowed:
        raise Forbidden(f"Access denied. Required role: {' or '.join(allowed)}")
    return identity


def require_roles(*roles: str) -> Callable[[Request], CurrentIdentity]:
    """Build a role-gate dependency for the given allow-list."""

    def role_gate(request: Request) -> CurrentIdentity:
        return check_role(getattr(request.state, "identity", None), roles)

    return role_gate


require_agent = require_roles("agent", "admin")
require_admin = require_roles("admin")
