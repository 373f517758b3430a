"""Credential service: sign-up and login checks.

Learn: The password policy runs before any storage access, so a weak
password never costs a round trip and never leaves a row behind.
Uniqueness is checked up front for a friendly error, and the unique
constraint on users.username catches the race where two sign-ups for the
same name pass the check at the same time.

authenticate() returns the same error for "no such user" and "wrong
password" so the API cannot be used to probe for usernames.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.auth.identity import Role
from taskboard.auth.password import hash_password, validate_password_strength, verify_password
from taskboard.db.models import User
from taskboard.errors import ConflictError, InvalidInputError, UnauthenticatedError

logger = structlog.get_logger()

USERNAME_MAX_LENGTH = 100


class CredentialService:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def enforce_unique_username(self, username: str) -> None:
        async with self.sessions() as db:
            result = await db.execute(select(User.id).where(User.username == username))
            if result.scalar() is not None:
                raise ConflictError(f"Username {username!r} is already taken")

    async def sign_up(self, username: str, password: str) -> User:
        """Register a new USER account."""
        validate_password_strength(password)
        username = username.strip()
        if not username or len(username) > USERNAME_MAX_LENGTH:
            raise InvalidInputError("Username must be 1-100 characters")

        await self.enforce_unique_username(username)

        user = User(
            username=username,
            password_hash=hash_password(password),
            roles=[Role.USER.value],
        )
        async with self.sessions() as db:
            db.add(user)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise ConflictError(f"Username {username!r} is already taken")
            await db.refresh(user)

        logger.info("user.signed_up", user_id=str(user.id), username=username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        async with self.sessions() as db:
            result = await db.execute(select(User).where(User.username == username))
            user = result.scalars().first()

        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", username=username)
            raise UnauthenticatedError("Wrong username or password")
        return user
