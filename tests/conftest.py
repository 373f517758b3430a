"""Test fixtures: a throwaway SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI + strawberry:

1. Each test gets its own SQLite file (tmp_path) and a fresh schema built
   from the ORM metadata, so there is nothing to roll back and no
   cross-test pollution.
2. Services take a session *factory*, so tests build one over that engine
   and pass it in directly.
3. API tests override the app's get_session_factory dependency with the
   same factory and get_identity with a `principal` the test can switch
   between users. Tests don't need to log in before every request.

No Redis in tests: the lifespan never runs under ASGITransport, so the
rate limiter skips itself and /health reports redis as disabled.
"""

from typing import Any, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskboard.auth.dependencies import get_identity
from taskboard.auth.identity import IdentityContext, Role
from taskboard.config import settings
from taskboard.db.engine import get_session_factory
from taskboard.db.models import Base, User
from taskboard.main import app
from taskboard.services.credential_service import CredentialService

# bcrypt at full cost makes every sign-up ~100ms
settings.bcrypt_rounds = 4

STRONG_PASSWORD = "Str0ng!pass"


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessions(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ═══════════════════════════════════════════════════════════
# Users and identities
# ═══════════════════════════════════════════════════════════


def identity_for(user: User, *extra: Role) -> IdentityContext:
    return IdentityContext(user_id=user.id, roles=frozenset({Role.USER, *extra}))


@pytest_asyncio.fixture()
async def alice(sessions) -> User:
    return await CredentialService(sessions).sign_up("alice", STRONG_PASSWORD)


@pytest_asyncio.fixture()
async def bob(sessions) -> User:
    return await CredentialService(sessions).sign_up("bob", STRONG_PASSWORD)


@pytest.fixture
def alice_identity(alice) -> IdentityContext:
    return identity_for(alice)


@pytest.fixture
def bob_identity(bob) -> IdentityContext:
    return identity_for(bob)


class Principal:
    """Who the overridden get_identity says is calling."""

    def __init__(self):
        self.identity = IdentityContext.anonymous()

    def act_as(self, user: Optional[User], *extra: Role) -> None:
        if user is None:
            self.identity = IdentityContext.anonymous()
        else:
            self.identity = identity_for(user, *extra)


@pytest.fixture
def principal() -> Principal:
    return Principal()


# ═══════════════════════════════════════════════════════════
# HTTP clients
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def client(sessions, principal):
    """HTTP client with the session factory and identity overridden."""
    app.dependency_overrides[get_session_factory] = lambda: sessions
    app.dependency_overrides[get_identity] = lambda: principal.identity

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def cookie_client(sessions):
    """HTTP client WITHOUT the identity override, for real login flows.

    Only the session factory is swapped; identity comes from the session
    cookie, which httpx's cookie jar carries between requests.
    """
    app.dependency_overrides[get_session_factory] = lambda: sessions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _post_graphql(
    http: AsyncClient, query: str, variables: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    resp = await http.post("/graphql", json={"query": query, "variables": variables or {}})
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def gql(client):
    """Run a GraphQL operation as the current principal; returns the JSON body."""

    async def run(query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await _post_graphql(client, query, variables)

    return run


@pytest.fixture
def cookie_gql(cookie_client):
    async def run(query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await _post_graphql(cookie_client, query, variables)

    return run


def error_codes(body: dict[str, Any]) -> list[str]:
    return [e["extensions"]["code"] for e in body.get("errors", [])]
