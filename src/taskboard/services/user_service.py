"""User service: guarded reads and out-of-band role management.

Learn: Users are not owner-scoped like projects and tasks. Instead reads
are guarded: a user may read their own record, ADMIN may read anyone and
list everyone. That is the only place ADMIN widens visibility.

Roles are never changed through the API. grant_role/revoke_role exist for
the operator CLI and take effect on the user's next login, since sessions
snapshot roles at login time.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.auth.guards import require_role, require_self_or_role
from taskboard.auth.identity import IdentityContext, Role
from taskboard.db.models import User
from taskboard.errors import NotFoundError
from taskboard.ids import IdLike, as_uuid

logger = structlog.get_logger()


class UserService:
    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        identity: Optional[IdentityContext] = None,
    ):
        self.sessions = sessions
        self.identity = identity or IdentityContext.anonymous()

    # ─── Read ────────────────────────────────────────────

    async def get_by_id(self, user_id: IdLike) -> User:
        target = as_uuid(user_id)
        require_self_or_role(self.identity, target, Role.ADMIN)
        async with self.sessions() as db:
            user = await db.get(User, target)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list(self) -> list[User]:
        require_role(self.identity, Role.ADMIN)
        async with self.sessions() as db:
            result = await db.execute(select(User).order_by(User.created_at))
            return list(result.scalars().all())

    async def find_many_by_ids(self, ids: Iterable[uuid.UUID]) -> list[User]:
        """In-set lookup for relation resolution. Missing ids are absent."""
        wanted = {as_uuid(i) for i in ids}
        if not wanted:
            return []
        async with self.sessions() as db:
            result = await db.execute(select(User).where(User.id.in_(wanted)))
            return list(result.scalars().all())

    # ─── Roles (operator only) ───────────────────────────

    async def grant_role(self, username: str, role: Role) -> User:
        return await self._set_role(username, role, present=True)

    async def revoke_role(self, username: str, role: Role) -> User:
        return await self._set_role(username, role, present=False)

    async def _load_by_username(self, db: AsyncSession, username: str) -> User:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalars().first()
        if user is None:
            raise NotFoundError(f"User {username!r} not found")
        return user

    async def _set_role(self, username: str, role: Role, present: bool) -> User:
        async with self.sessions() as db:
            user = await self._load_by_username(db, username)

            roles = [r for r in (user.roles or []) if r != role.value]
            if present:
                roles.append(role.value)
            # Reassign so the JSON column is flagged dirty.
            user.roles = roles
            await db.commit()
            await db.refresh(user)

        logger.info(
            "user.role_granted" if present else "user.role_revoked",
            username=username,
            role=role.value,
        )
        return user
