"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and its
dependencies are reachable. The database is required; Redis only backs
rate limiting, so a missing Redis reports "disabled" and the service is
still healthy.
"""

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard import __version__
from taskboard.db.engine import get_session_factory
from taskboard.redis_client import get_redis

router = APIRouter()


@router.get("/health")
async def health_check(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with sessions() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"error: {e}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except RuntimeError:
        checks["redis"] = "disabled"
    except (RedisError, OSError) as e:
        checks["redis"] = f"error: {e}"

    healthy = checks["database"] == "ok" and checks["redis"] in ("ok", "disabled")
    return {"status": "healthy" if healthy else "degraded", **checks}
