"""FastAPI auth dependencies.

Learn: Used as Depends() by the GraphQL context getter to resolve the
current identity once per request from the session cookie.

This is the "soft" dependency: it never rejects. Anonymous requests get
an anonymous identity and the guards decide per operation whether that
is acceptable (sign-up and login are; almost nothing else is).

A resolved user id is bound into structlog's contextvars next to the
request id, so service log lines say who they ran for.
"""

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.auth.identity import IdentityContext
from taskboard.auth.sessions import SessionStore
from taskboard.config import settings
from taskboard.db.engine import get_session_factory


def get_session_token(request: Request) -> str | None:
    """Raw session token from the cookie, if any."""
    return request.cookies.get(settings.session_cookie_name) or None


async def get_identity(
    request: Request,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> IdentityContext:
    """Resolve the request's identity (anonymous if no valid session)."""
    token = get_session_token(request)
    if not token:
        return IdentityContext.anonymous()
    identity = await SessionStore(sessions).resolve(token)
    if identity.is_authenticated:
        structlog.contextvars.bind_contextvars(user_id=str(identity.user_id))
    return identity
