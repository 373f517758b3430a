"""Project service: owner-scoped project CRUD."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy import select

from taskboard.db.models import Project
from taskboard.errors import NotFoundError
from taskboard.ids import IdLike, as_uuid
from taskboard.schemas.project import ProjectCreate
from taskboard.services.scoped import OwnerScopedService

logger = structlog.get_logger()


class ProjectService(OwnerScopedService):
    """Projects visible to (and only to) their owner."""

    model = Project

    async def create(self, data: ProjectCreate) -> Project:
        project = Project(name=data.name, owner_id=self.owner_id)
        async with self.sessions() as db:
            db.add(project)
            await db.commit()
            await db.refresh(project)

        logger.info("project.created", project_id=str(project.id), owner_id=str(self.owner_id))
        return project

    async def find_by_id(self, project_id: IdLike) -> Optional[Project]:
        async with self.sessions() as db:
            result = await db.execute(
                self._scoped(select(Project).where(Project.id == as_uuid(project_id)))
            )
            return result.scalars().first()

    async def get_by_id(self, project_id: IdLike) -> Project:
        project = await self.find_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def list(self) -> list[Project]:
        async with self.sessions() as db:
            result = await db.execute(
                self._scoped(select(Project).order_by(Project.created_at))
            )
            return list(result.scalars().all())

    async def find_many_by_ids(self, ids: Iterable[uuid.UUID]) -> list[Project]:
        """One in-set lookup, restricted to the caller's projects.

        Order of the result is unspecified and missing ids are simply absent.
        """
        wanted = {as_uuid(i) for i in ids}
        if not wanted:
            return []
        async with self.sessions() as db:
            result = await db.execute(
                self._scoped(select(Project).where(Project.id.in_(wanted)))
            )
            return list(result.scalars().all())
