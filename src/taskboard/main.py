"""FastAPI application factory.

Learn: App factory pattern: create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis pool, database engine).
Middleware, CORS, the REST router and the GraphQL endpoint are all
registered here; each concern lives in its own module.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from redis.exceptions import RedisError

from taskboard import __version__
from taskboard.api import api_router
from taskboard.api.schema import build_graphql_router
from taskboard.config import settings
from taskboard.middleware.rate_limit import RateLimitMiddleware
from taskboard.middleware.request_id import RequestIdMiddleware
from taskboard.middleware.security import SecurityHeadersMiddleware
from taskboard.redis_client import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    logger.info(
        "taskboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("taskboard.redis_connected", url=settings.redis_url)
    except (RedisError, OSError) as e:
        # Redis only backs rate limiting; run without it
        logger.warning("taskboard.redis_unavailable", error=str(e))

    yield

    logger.info("taskboard.shutdown")
    await close_redis()

    from taskboard.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Taskboard",
        description="Session-authenticated GraphQL API for users, projects and tasks",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: CORS → RequestId → Security → RateLimit → handler
    app.add_middleware(RateLimitMiddleware, rpm=settings.rate_limit_rpm)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(build_graphql_router(), prefix="/graphql")

    # Static frontend, if one was built next to the server
    if Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


# Default app instance (used by uvicorn: taskboard.main:app)
app = create_app()
