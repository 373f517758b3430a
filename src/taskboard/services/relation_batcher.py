"""Per-request relation batcher.

Learn: Resolving ``task.project`` for a list of N tasks naively costs N
queries. The batcher hands out one DataLoader per relation kind; every
key requested while a resolution pass is running is collected and
fetched with a single in-set query, then handed back to each caller by
id. Keys repeated within the request hit the loader's memo.

One batcher lives on each request's GraphQL context and is thrown away
with it, so nothing is cached across requests or principals.

Dangling references (a task pointing at a deleted project) resolve to
None instead of failing the whole response. Project lookups are
owner-scoped, so a project the caller does not own also resolves to None.
"""

import enum
import uuid
from typing import Any, Awaitable, Callable, Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from strawberry.dataloader import DataLoader

from taskboard.auth.identity import IdentityContext
from taskboard.ids import IdLike, as_uuid
from taskboard.services.project_service import ProjectService
from taskboard.services.user_service import UserService

logger = structlog.get_logger()


class Relation(str, enum.Enum):
    OWNER = "owner"
    PROJECT = "project"


def distribute(keys: Sequence[uuid.UUID], records: Sequence[Any]) -> list[Optional[Any]]:
    """Line records up with the requested keys; missing keys get None."""
    by_id = {record.id: record for record in records}
    return [by_id.get(key) for key in keys]


class RelationBatcher:
    """Relation kind -> lazily created DataLoader, scoped to one request."""

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        identity: IdentityContext,
    ):
        self.sessions = sessions
        self.identity = identity
        self._loaders: dict[Relation, DataLoader] = {}
        self._fetchers: dict[
            Relation, Callable[[list[uuid.UUID]], Awaitable[list[Optional[Any]]]]
        ] = {
            Relation.OWNER: self._load_owners,
            Relation.PROJECT: self._load_projects,
        }

    def loader(self, relation: Relation) -> DataLoader:
        if relation not in self._loaders:
            self._loaders[relation] = DataLoader(load_fn=self._fetchers[relation])
        return self._loaders[relation]

    async def load(self, relation: Relation, key: Optional[IdLike]) -> Optional[Any]:
        if key is None:
            return None
        return await self.loader(relation).load(as_uuid(key))

    # ─── Batch functions ─────────────────────────────────

    async def _load_owners(self, keys: list[uuid.UUID]) -> list[Optional[Any]]:
        logger.debug("relation_batcher.dispatch", relation=Relation.OWNER.value, keys=len(keys))
        users = await UserService(self.sessions, self.identity).find_many_by_ids(keys)
        return distribute(keys, users)

    async def _load_projects(self, keys: list[uuid.UUID]) -> list[Optional[Any]]:
        logger.debug("relation_batcher.dispatch", relation=Relation.PROJECT.value, keys=len(keys))
        projects = await ProjectService(self.sessions, self.identity).find_many_by_ids(keys)
        return distribute(keys, projects)
