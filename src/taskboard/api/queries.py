"""Query root.

Learn: Resolvers are deliberately thin: build the service from the
request's identity, call it, convert the ORM rows to GraphQL types.
Authorization lives in the services (owner scoping) and the guards (role
checks), never here. Errors propagate untouched and are formatted at the
router.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import strawberry

from taskboard.api.context import Info
from taskboard.api.scalars import ProjectID, TaskID, UserID
from taskboard.api.types import Project, Task, User
from taskboard.schemas import parse_input
from taskboard.schemas import task as task_schemas
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService

TaskSort = strawberry.enum(task_schemas.TaskSort, name="TaskSort")


@strawberry.input
class TaskFilter:
    is_completed: Optional[bool] = None
    is_removed: Optional[bool] = None
    due_date: Optional[date] = strawberry.field(
        default=None, description="Matches the whole UTC calendar day"
    )
    project: Optional[ProjectID] = None

    def to_schema(self) -> task_schemas.TaskFilter:
        return parse_input(
            task_schemas.TaskFilter,
            {
                "is_completed": self.is_completed,
                "is_removed": self.is_removed,
                "due_date": self.due_date,
                "project_id": self.project,
            },
        )


@strawberry.type
class Query:
    # ─── Users ───────────────────────────────────────────

    @strawberry.field(description="A single user. Yourself, or anyone for ADMIN.")
    async def user(self, info: Info, id: UserID) -> Optional[User]:
        ctx = info.context
        user = await UserService(ctx.sessions, ctx.identity).get_by_id(id)
        return User.from_model(user)

    @strawberry.field(description="All users. ADMIN only.")
    async def user_collection(self, info: Info) -> list[User]:
        ctx = info.context
        users = await UserService(ctx.sessions, ctx.identity).list()
        return [User.from_model(u) for u in users]

    # ─── Projects ────────────────────────────────────────

    @strawberry.field
    async def project(self, info: Info, id: ProjectID) -> Optional[Project]:
        ctx = info.context
        project = await ProjectService(ctx.sessions, ctx.identity).get_by_id(id)
        return Project.from_model(project)

    @strawberry.field
    async def project_collection(self, info: Info) -> list[Project]:
        ctx = info.context
        projects = await ProjectService(ctx.sessions, ctx.identity).list()
        return [Project.from_model(p) for p in projects]

    # ─── Tasks ───────────────────────────────────────────

    @strawberry.field
    async def task(self, info: Info, id: TaskID) -> Optional[Task]:
        ctx = info.context
        task = await TaskService(ctx.sessions, ctx.identity).get_by_id(id)
        return Task.from_model(task)

    @strawberry.field
    async def task_collection(
        self,
        info: Info,
        filter: Optional[TaskFilter] = None,
        sort: Optional[TaskSort] = None,
    ) -> list[Task]:
        ctx = info.context
        service = TaskService(ctx.sessions, ctx.identity)
        tasks = await service.list(
            filter.to_schema() if filter is not None else None,
            task_schemas.TaskSort(sort) if sort is not None else None,
        )
        return [Task.from_model(t) for t in tasks]
