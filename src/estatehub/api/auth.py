"""Auth API: registration, login, current user.

- POST /auth/register → create an account, returns user + token
- POST /auth/login → email/password → user + token
- GET /auth/me → the caller's account (bearer token required)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.dependencies import CurrentIdentity, get_current_user, get_settings
from estatehub.config import Settings
from estatehub.db.engine import get_db
from estatehub.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserRead,
)
from estatehub.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _user_svc(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(db, settings)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_user_svc)):
    """Create a new account. Duplicate email → 409."""
    user, token = await svc.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        role=body.role,
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserRead.model_validate(user),
        token=token,
    )


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: UserService = Depends(_user_svc)):
    """Login with email and password → JWT."""
    user, token = await svc.login(body.email, body.password)
    return AuthResponse(
        message="Login successful",
        user=UserRead.model_validate(user),
        token=token,
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=MeResponse)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Get the current authenticated user's account."""
    user = await svc.get_current(identity.user_id)
    return MeResponse(user=UserRead.model_validate(user))
