"""Per-request GraphQL context.

Learn: Built by FastAPI (so it can use Depends) once per HTTP request and
handed to every resolver as ``info.context``. It carries the session
factory, the frozen identity and a fresh RelationBatcher. Nothing on it
outlives the request. Strawberry fills in ``request`` and ``response``;
login/logout set and clear the session cookie through ``response``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from strawberry.fastapi import BaseContext
from strawberry.types import Info as _Info

from taskboard.auth.dependencies import get_identity
from taskboard.auth.identity import IdentityContext
from taskboard.db.engine import get_session_factory
from taskboard.services.relation_batcher import RelationBatcher


class RequestContext(BaseContext):
    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        identity: IdentityContext,
    ):
        super().__init__()
        self.sessions = sessions
        self.identity = identity
        self.batcher = RelationBatcher(sessions, identity)


Info = _Info[RequestContext, None]


async def get_context(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: IdentityContext = Depends(get_identity),
) -> RequestContext:
    return RequestContext(sessions, identity)
