"""Pydantic schemas for registration, login and the current user."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from estatehub.schemas.common import EMAIL_PATTERN, CamelModel


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    role: str = Field(default="user", pattern=r"^(user|agent|admin)$")


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class UserRead(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    created_at: datetime


class AuthResponse(BaseModel):
    """Returned by register and login: identity summary + bearer token."""
    message: str
    user: UserRead
    token: str


class MeResponse(BaseModel):
    user: UserRead
