"""User service: registration, login and identity lookup.

Tokens are issued here at registration and at login, embedding the role
the user has at that moment.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.jwt import create_access_token
from estatehub.auth.password import hash_password, verify_password
from estatehub.config import Settings
from estatehub.db.models import User
from estatehub.errors import Conflict, NotFound, Unauthenticated

logger = structlog.get_logger()


class UserService:
    """Business logic for accounts and credentials."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def issue_token(self, user: User) -> str:
        return create_access_token(
            str(user.id),
            user.email,
            user.role,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            expires_minutes=self.settings.jwt_expire_minutes,
        )

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: str = "user",
    ) -> tuple[User, str]:
        """Create an account and return it with a fresh token."""
        if await self.get_by_email(email):
            raise Conflict(
                "An account with this email already exists",
                error="User already exists",
            )

        user = User(
            email=email,
            password_hash=hash_password(password, rounds=self.settings.bcrypt_rounds),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise Conflict(
                "An account with this email already exists",
                error="User already exists",
            )
        await self.db.refresh(user)

        logger.info("auth.registered", user_id=str(user.id), role=user.role)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials. Unknown email and wrong password look the same."""
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise Unauthenticated(
                "Email or password is incorrect",
                error="Invalid credentials",
            )

        logger.info("auth.login", user_id=str(user.id))
        return user, self.issue_token(user)

    async def get_current(self, user_id: str) -> User:
        try:
            uid = uuid.UUID(user_id)
        except ValueError:
            uid = None
        user = await self.get_user(uid) if uid else None
        if not user:
            raise NotFound("User does not exist", error="User not found")
        return user

    async def set_role(self, email: str, role: str) -> User:
        """Change a user's role. Already-issued tokens keep the old role."""
        user = await self.get_by_email(email)
        if not user:
            raise NotFound(f"No user with email {email}", error="User not found")
        old_role = user.role
        user.role = role
        await self.db.commit()
        logger.info("user.role_changed", user_id=str(user.id), old=old_role, new=role)
        return user
