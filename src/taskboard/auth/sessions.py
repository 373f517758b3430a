"""Server-side session store.

Learn: Login mints a random token, stores SHA-256(token) with the user id,
a role snapshot and an expiry, and hands the raw token to the client in
the session cookie. Every later request hashes the cookie value and looks
the row up. Logout deletes the row.

Unknown, expired or malformed tokens simply resolve to the anonymous
identity; they are not errors.
"""

import hashlib
import secrets
from datetime import timedelta

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.auth.identity import IdentityContext, parse_roles
from taskboard.config import settings
from taskboard.db.models import User, UserSession, as_utc, utcnow

logger = structlog.get_logger()


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class SessionStore:
    """Create, resolve and destroy login sessions."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def create(self, user: User) -> str:
        """Open a session for ``user`` and return the raw cookie token."""
        token = secrets.token_urlsafe(32)
        row = UserSession(
            id=_hash_token(token),
            user_id=user.id,
            roles=list(user.roles or []),
            expires_at=utcnow() + timedelta(hours=settings.session_ttl_hours),
        )
        async with self.sessions() as db:
            db.add(row)
            await db.commit()

        logger.info("session.created", user_id=str(user.id))
        return token

    async def resolve(self, token: str) -> IdentityContext:
        """Turn a cookie token into the request's identity."""
        async with self.sessions() as db:
            row = await db.get(UserSession, _hash_token(token))

        if row is None:
            return IdentityContext.anonymous()
        if as_utc(row.expires_at) <= utcnow():
            return IdentityContext.anonymous()

        return IdentityContext(user_id=row.user_id, roles=parse_roles(row.roles))

    async def destroy(self, token: str) -> None:
        async with self.sessions() as db:
            await db.execute(
                delete(UserSession).where(UserSession.id == _hash_token(token))
            )
            await db.commit()

    async def prune_expired(self) -> int:
        """Delete every expired session. Returns how many were removed."""
        async with self.sessions() as db:
            result = await db.execute(
                delete(UserSession).where(UserSession.expires_at <= utcnow())
            )
            await db.commit()

        logger.info("session.pruned", count=result.rowcount)
        return result.rowcount
