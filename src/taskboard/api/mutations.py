"""Mutation root, grouped by namespace.

Learn: Mutations are nested one level, so clients write
``mutation { task { add(input: ...) { recordId } } }``. Each namespace is
its own type; the root Mutation only exposes them. Every payload carries a
``query`` field that returns the Query root so a client can refetch in the
same round trip.

Login and logout change the *session* (cookie + server-side row). The
identity of the request that runs them stays what it was.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import strawberry
import structlog

from taskboard.api.context import Info
from taskboard.api.queries import Query
from taskboard.api.scalars import ProjectID, TaskID, UserID, UserPassword
from taskboard.api.types import Project, Task, User
from taskboard.auth.dependencies import get_session_token
from taskboard.auth.sessions import SessionStore
from taskboard.config import settings
from taskboard.schemas import parse_input
from taskboard.schemas.project import ProjectCreate
from taskboard.schemas.task import TaskCreate
from taskboard.services.credential_service import CredentialService
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService

logger = structlog.get_logger()


def _query_root() -> Query:
    return Query()


def _set_session_cookie(info: Info, token: str) -> None:
    response = info.context.response
    if settings.is_production:
        response.set_cookie(
            settings.session_cookie_name,
            token,
            max_age=settings.session_ttl_hours * 3600,
            httponly=True,
            secure=True,
            samesite="none",
        )
    else:
        response.set_cookie(
            settings.session_cookie_name,
            token,
            max_age=settings.session_ttl_hours * 3600,
            httponly=True,
            samesite="lax",
        )


def _unset(value: Any) -> bool:
    return value is strawberry.UNSET


# ═══════════════════════════════════════════════════════════
# auth { login logout }
# ═══════════════════════════════════════════════════════════


@strawberry.input
class AuthLoginInput:
    username: str
    password: str


@strawberry.type
class AuthLoginPayload:
    record: Optional[User] = None
    record_id: Optional[UserID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class AuthLogoutPayload:
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class AuthMutation:
    @strawberry.mutation
    async def login(self, info: Info, input: AuthLoginInput) -> AuthLoginPayload:
        ctx = info.context
        user = await CredentialService(ctx.sessions).authenticate(
            input.username, input.password
        )
        token = await SessionStore(ctx.sessions).create(user)
        _set_session_cookie(info, token)

        logger.info("auth.login", user_id=str(user.id))
        return AuthLoginPayload(record=User.from_model(user), record_id=user.id)

    @strawberry.mutation
    async def logout(self, info: Info) -> AuthLogoutPayload:
        ctx = info.context
        token = get_session_token(ctx.request)
        if token:
            await SessionStore(ctx.sessions).destroy(token)
        ctx.response.delete_cookie(settings.session_cookie_name)

        logger.info("auth.logout", user_id=str(ctx.identity.user_id))
        return AuthLogoutPayload()


# ═══════════════════════════════════════════════════════════
# user { signUp }
# ═══════════════════════════════════════════════════════════


@strawberry.input
class UserSignUpInput:
    username: str = strawberry.field(description="User username")
    password: UserPassword = strawberry.field(description="User password")


@strawberry.type
class UserSignUpPayload:
    record: Optional[User] = None
    record_id: Optional[UserID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class UserMutation:
    @strawberry.mutation
    async def sign_up(self, info: Info, input: UserSignUpInput) -> UserSignUpPayload:
        user = await CredentialService(info.context.sessions).sign_up(
            input.username, input.password
        )
        return UserSignUpPayload(record=User.from_model(user), record_id=user.id)


# ═══════════════════════════════════════════════════════════
# project { add }
# ═══════════════════════════════════════════════════════════


@strawberry.input
class ProjectAddInput:
    name: str = strawberry.field(description="Project name")


@strawberry.type
class ProjectAddPayload:
    record: Optional[Project] = None
    record_id: Optional[ProjectID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class ProjectMutation:
    @strawberry.mutation
    async def add(self, info: Info, input: ProjectAddInput) -> ProjectAddPayload:
        ctx = info.context
        service = ProjectService(ctx.sessions, ctx.identity)
        project = await service.create(parse_input(ProjectCreate, {"name": input.name}))
        return ProjectAddPayload(record=Project.from_model(project), record_id=project.id)


# ═══════════════════════════════════════════════════════════
# task { add edit remove delete }
# ═══════════════════════════════════════════════════════════


@strawberry.input
class TaskAddInput:
    title: str
    project_id: ProjectID
    is_completed: Optional[bool] = False
    is_removed: Optional[bool] = False
    due_date: Optional[datetime] = None


@strawberry.input
class TaskEditInput:
    """Only the fields you send are changed. Send dueDate: null to clear it."""

    id: TaskID
    title: Optional[str] = strawberry.UNSET
    is_completed: Optional[bool] = strawberry.UNSET
    is_removed: Optional[bool] = strawberry.UNSET
    due_date: Optional[datetime] = strawberry.UNSET
    project_id: Optional[ProjectID] = strawberry.UNSET

    def sent_fields(self) -> dict[str, Any]:
        """Raw patch data; the service validates each item on its own."""
        sent = {
            name: getattr(self, name)
            for name in ("title", "is_completed", "is_removed", "due_date", "project_id")
            if not _unset(getattr(self, name))
        }
        return {"id": self.id, **sent}


@strawberry.input
class TaskRemoveInput:
    id: TaskID


@strawberry.input
class TaskDeleteInput:
    id: TaskID


@strawberry.type
class TaskAddPayload:
    record: Optional[Task] = None
    record_id: Optional[TaskID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class TaskEditPayload:
    record: Optional[Task] = None
    record_id: Optional[TaskID] = None
    record_collection: Optional[list[Optional[Task]]] = None
    record_id_collection: Optional[list[Optional[TaskID]]] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class TaskRemovePayload:
    record: Optional[Task] = None
    record_id: Optional[TaskID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class TaskDeletePayload:
    record: Optional[Task] = None
    record_id: Optional[TaskID] = None
    query: Query = strawberry.field(resolver=_query_root)


@strawberry.type
class TaskMutation:
    @strawberry.mutation
    async def add(self, info: Info, input: TaskAddInput) -> TaskAddPayload:
        ctx = info.context
        data = parse_input(
            TaskCreate,
            {
                "title": input.title,
                "project_id": input.project_id,
                "is_completed": bool(input.is_completed),
                "is_removed": bool(input.is_removed),
                "due_date": input.due_date,
            },
        )
        task = await TaskService(ctx.sessions, ctx.identity).create(data)
        return TaskAddPayload(record=Task.from_model(task), record_id=task.id)

    @strawberry.mutation(
        description="Edit one or more tasks. Failed items come back as null."
    )
    async def edit(self, info: Info, input: list[TaskEditInput]) -> TaskEditPayload:
        ctx = info.context
        service = TaskService(ctx.sessions, ctx.identity)
        updated = await service.update_batch([item.sent_fields() for item in input])

        records = [Task.from_model(t) if t else None for t in updated]
        record_ids = [t.id if t else None for t in updated]
        payload = TaskEditPayload(
            record_collection=records,
            record_id_collection=record_ids,
        )
        if len(records) == 1:
            payload.record = records[0]
            payload.record_id = record_ids[0]
        return payload

    @strawberry.mutation(description="Soft-remove a task (sets isRemoved).")
    async def remove(self, info: Info, input: TaskRemoveInput) -> TaskRemovePayload:
        ctx = info.context
        task = await TaskService(ctx.sessions, ctx.identity).soft_remove(input.id)
        return TaskRemovePayload(record=Task.from_model(task), record_id=task.id)

    @strawberry.mutation(description="Delete a task permanently.")
    async def delete(self, info: Info, input: TaskDeleteInput) -> TaskDeletePayload:
        ctx = info.context
        task = await TaskService(ctx.sessions, ctx.identity).delete(input.id)
        return TaskDeletePayload(record=Task.from_model(task), record_id=task.id)


# ═══════════════════════════════════════════════════════════
# Root
# ═══════════════════════════════════════════════════════════


@strawberry.type
class Mutation:
    @strawberry.field
    def auth(self) -> AuthMutation:
        return AuthMutation()

    @strawberry.field
    def user(self) -> UserMutation:
        return UserMutation()

    @strawberry.field
    def project(self) -> ProjectMutation:
        return ProjectMutation()

    @strawberry.field
    def task(self) -> TaskMutation:
        return TaskMutation()
