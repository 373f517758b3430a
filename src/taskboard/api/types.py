"""GraphQL object types: User, Project, Task.

Learn: These are thin views over the ORM rows. ``from_model`` copies the
columns across (normalizing timestamps to UTC); relation fields (owner,
project) are resolved lazily through the request's RelationBatcher, so
listing N tasks with their projects costs one project query, not N.

owner and project are nullable: a reference to a record that no longer
exists (or, for projects, that the caller can't see) resolves to null
instead of failing the whole response.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import strawberry

from taskboard.api.context import Info
from taskboard.api.scalars import ProjectID, TaskID, UserID
from taskboard.db import models
from taskboard.db.models import as_utc
from taskboard.services.relation_batcher import Relation


async def _load_owner(info: Info, owner_id: uuid.UUID) -> Optional[User]:
    user = await info.context.batcher.load(Relation.OWNER, owner_id)
    return User.from_model(user) if user else None


@strawberry.type
class User:
    id: UserID = strawberry.field(description="User ID")
    username: str
    roles: list[str]
    created_at: datetime

    @classmethod
    def from_model(cls, user: models.User) -> User:
        return cls(
            id=user.id,
            username=user.username,
            roles=list(user.roles or []),
            created_at=as_utc(user.created_at),
        )


@strawberry.type
class Project:
    id: ProjectID = strawberry.field(description="Project ID")
    name: str = strawberry.field(description="Project name")
    owner_id: UserID
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    async def owner(self, info: Info) -> Optional[User]:
        return await _load_owner(info, self.owner_id)

    @classmethod
    def from_model(cls, project: models.Project) -> Project:
        return cls(
            id=project.id,
            name=project.name,
            owner_id=project.owner_id,
            created_at=as_utc(project.created_at),
            updated_at=as_utc(project.updated_at),
        )


@strawberry.type
class Task:
    id: TaskID = strawberry.field(description="Task ID")
    title: str
    is_completed: bool
    is_removed: bool
    due_date: Optional[datetime]
    project_id: ProjectID
    owner_id: UserID
    created_at: datetime
    updated_at: datetime

    @strawberry.field
    async def project(self, info: Info) -> Optional[Project]:
        project = await info.context.batcher.load(Relation.PROJECT, self.project_id)
        return Project.from_model(project) if project else None

    @strawberry.field
    async def owner(self, info: Info) -> Optional[User]:
        return await _load_owner(info, self.owner_id)

    @classmethod
    def from_model(cls, task: models.Task) -> Task:
        return cls(
            id=task.id,
            title=task.title,
            is_completed=task.is_completed,
            is_removed=task.is_removed,
            due_date=as_utc(task.due_date) if task.due_date else None,
            project_id=task.project_id,
            owner_id=task.owner_id,
            created_at=as_utc(task.created_at),
            updated_at=as_utc(task.updated_at),
        )
