"""Owner-scoped service base.

Learn: Every project/task service is built *from* an identity, and refuses
to be built without an authenticated one. All reads and writes go through
``_scoped()``, which pins the owner column to the caller's user id. A
record owned by someone else is therefore indistinguishable from a record
that does not exist: both come back as NOT_FOUND.

Services open a short-lived AsyncSession per operation from the factory.
GraphQL resolves sibling fields concurrently, and one AsyncSession must
never be shared between concurrent coroutines.
"""

import uuid
from typing import Any, ClassVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.auth.guards import require_authenticated
from taskboard.auth.identity import IdentityContext


class OwnerScopedService:
    """Base for services whose rows belong to exactly one user."""

    model: ClassVar[Any]

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        identity: IdentityContext,
    ):
        require_authenticated(identity)
        self.sessions = sessions
        self.identity = identity

    @property
    def owner_id(self) -> uuid.UUID:
        return self.identity.user_id

    def _scoped(self, stmt: Select) -> Select:
        return stmt.where(self.model.owner_id == self.owner_id)
