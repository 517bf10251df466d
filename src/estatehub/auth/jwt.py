"""JWT token creation and verification.

Tokens are the only session mechanism: nothing is stored server-side, so
verification is a pure function of (token, secret, current time).

Claims: sub (user id), email, role, iat, exp. The role is captured at
issue time; promoting or demoting a user does not touch tokens that are
already out there until they expire.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

ROLES = ("user", "agent", "admin")


class TokenError(Exception):
    """Raised when token verification fails."""


class TokenMalformed(TokenError):
    """Token cannot be parsed into the expected claim shape."""


class TokenExpired(TokenError):
    """Current time is at or after the embedded expiry."""


class TokenInvalidSignature(TokenError):
    """Signature does not match the configured secret."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    *,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60 * 24 * 7,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed JWT for the given identity."""
    issued = now or _utcnow()
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    *,
    secret: str,
    algorithm: str = "HS256",
    now: Optional[datetime] = None,
) -> TokenClaims:
    """Verify a token and return its identity claims.

    Expiry is checked before the signature, so an expired token always
    reports TokenExpired.

    Raises:
        TokenMalformed: unparseable token or unexpected claim shape
        TokenExpired: now >= exp
        TokenInvalidSignature: signature mismatch
    """
    try:
        unverified = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise TokenMalformed(f"Malformed token: {e}")

    exp = unverified.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenMalformed("Token has no numeric expiry")

    current = now or _utcnow()
    if current.timestamp() >= exp:
        raise TokenExpired("Token has expired")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_exp": False, "verify_iat": False},
        )
    except jwt.InvalidSignatureError:
        raise TokenInvalidSignature("Token signature is invalid")
    except jwt.InvalidTokenError as e:
        raise TokenMalformed(f"Malformed token: {e}")

    return _claims_from_payload(payload)


def _claims_from_payload(payload: dict) -> TokenClaims:
    sub = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")
    if not isinstance(sub, str) or not sub:
        raise TokenMalformed("Token is missing a subject")
    if not isinstance(email, str) or not email:
        raise TokenMalformed("Token is missing an email")
    if role not in ROLES:
        raise TokenMalformed("Token carries an unknown role")
    return TokenClaims(user_id=sub, email=email, role=role)
