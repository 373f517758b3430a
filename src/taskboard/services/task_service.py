"""Task service: owner-scoped task CRUD, filtering and batch edits.

Learn: Every statement here goes through ``_scoped()``, so a task id that
belongs to another user behaves exactly like an id that does not exist.
The owner of a task is always the caller at creation time and is never
taken from input. The project a task points at must also belong to the
caller, both on create and when a patch moves the task.

Timestamps are stored in UTC. The due-date filter is day-granular: a
``date`` D matches every due_date in [D 00:00 UTC, D+1 00:00 UTC).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Sequence, Union

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import Project, Task, as_utc, utcnow
from taskboard.errors import InvalidInputError, NotFoundError
from taskboard.ids import IdLike, as_uuid
from taskboard.schemas import parse_input
from taskboard.schemas.task import TaskCreate, TaskFilter, TaskPatch, TaskSort
from taskboard.services.scoped import OwnerScopedService

logger = structlog.get_logger()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC interval covering one calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class TaskService(OwnerScopedService):
    """Business logic for tasks owned by the calling user."""

    model = Task

    # ─── Helpers ─────────────────────────────────────────

    async def _load(self, db: AsyncSession, task_id: IdLike) -> Task:
        result = await db.execute(
            self._scoped(select(Task).where(Task.id == as_uuid(task_id)))
        )
        task = result.scalars().first()
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def _require_project(self, db: AsyncSession, project_id: uuid.UUID) -> None:
        result = await db.execute(
            select(Project.id).where(
                Project.id == project_id, Project.owner_id == self.owner_id
            )
        )
        if result.scalar() is None:
            raise NotFoundError("Project not found")

    # ─── Create ──────────────────────────────────────────

    async def create(self, data: TaskCreate) -> Task:
        """Create a task owned by the caller."""
        task = Task(
            title=data.title,
            project_id=data.project_id,
            is_completed=data.is_completed,
            is_removed=data.is_removed,
            due_date=as_utc(data.due_date) if data.due_date else None,
            owner_id=self.owner_id,
        )
        async with self.sessions() as db:
            await self._require_project(db, data.project_id)
            db.add(task)
            await db.commit()
            await db.refresh(task)

        logger.info("task.created", task_id=str(task.id), project_id=str(task.project_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_by_id(self, task_id: IdLike) -> Task:
        async with self.sessions() as db:
            return await self._load(db, task_id)

    async def list(
        self,
        filters: Optional[TaskFilter] = None,
        sort: Optional[TaskSort] = None,
    ) -> list[Task]:
        """List the caller's tasks.

        Learn: Filters are AND-ed and applied only when set. Without a sort
        the rows come back in storage order.
        """
        query = self._scoped(select(Task))
        if filters is not None:
            if filters.is_completed is not None:
                query = query.where(Task.is_completed == filters.is_completed)
            if filters.is_removed is not None:
                query = query.where(Task.is_removed == filters.is_removed)
            if filters.project_id is not None:
                query = query.where(Task.project_id == filters.project_id)
            if filters.due_date is not None:
                start, end = day_bounds(filters.due_date)
                query = query.where(Task.due_date >= start, Task.due_date < end)

        if sort == TaskSort.DUE_DATE_ASC:
            query = query.order_by(Task.due_date.asc())
        elif sort == TaskSort.DUE_DATE_DESC:
            query = query.order_by(Task.due_date.desc())

        async with self.sessions() as db:
            result = await db.execute(query)
            return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update(self, task_id: IdLike, patch: TaskPatch) -> Task:
        """Apply the fields present in ``patch`` to one owned task."""
        changes = patch.changes()
        if changes.get("due_date") is not None:
            changes["due_date"] = as_utc(changes["due_date"])

        async with self.sessions() as db:
            task = await self._load(db, task_id)
            new_project = changes.get("project_id")
            if new_project is not None and new_project != task.project_id:
                await self._require_project(db, new_project)

            for field, value in changes.items():
                setattr(task, field, value)
            task.updated_at = utcnow()

            await db.commit()
            await db.refresh(task)

        logger.info("task.updated", task_id=str(task.id), fields=sorted(changes))
        return task

    async def update_batch(
        self, patches: Sequence[Union[TaskPatch, dict[str, Any]]]
    ) -> list[Optional[Task]]:
        """Apply each patch on its own; the result lines up with the input.

        Learn: Items may be raw dicts. They are validated one at a time, so
        a malformed item (empty title, say) fails alone like an unknown id,
        someone else's task or a bad project: None at its position, and the
        others still run. Already-applied patches are not rolled back.
        Infrastructure errors still propagate.
        """
        results: list[Optional[Task]] = []
        for item in patches:
            task_id = item.id if isinstance(item, TaskPatch) else item.get("id")
            try:
                patch = item if isinstance(item, TaskPatch) else parse_input(TaskPatch, item)
                results.append(await self.update(patch.id, patch))
            except (NotFoundError, InvalidInputError) as e:
                logger.info("task.batch_item_failed", task_id=str(task_id), code=e.code)
                results.append(None)
        return results

    async def soft_remove(self, task_id: IdLike) -> Task:
        """Mark a task removed. Removing a removed task is a no-op success."""
        async with self.sessions() as db:
            task = await self._load(db, task_id)
            if not task.is_removed:
                task.is_removed = True
                task.updated_at = utcnow()
                await db.commit()
                await db.refresh(task)

        logger.info("task.removed", task_id=str(task.id))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete(self, task_id: IdLike) -> Task:
        """Hard-delete an owned task and return what it looked like."""
        async with self.sessions() as db:
            task = await self._load(db, task_id)
            await db.delete(task)
            await db.commit()

        logger.info("task.deleted", task_id=str(task.id))
        return task
