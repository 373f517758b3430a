"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode: create_async_engine for connection pooling,
async_sessionmaker for short-lived sessions, dependency injection via FastAPI.

Services receive the *factory*, not a session: each storage operation opens
its own session. GraphQL resolves sibling fields concurrently, and an
AsyncSession must never be shared between concurrent tasks.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import settings

# Connection pool: min 5, max 20 connections.
# echo=True in debug to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=15,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency: the factory every service opens sessions from.

    Tests override this to point at their own database.
    """
    return async_session_factory
