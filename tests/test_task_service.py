"""Owner-scoped service tests: projects and tasks.

Learn: These exercise the ownership rules directly against the services,
without HTTP in the way:
1. Another user's record is NOT_FOUND, never FORBIDDEN
2. list() returns exactly the caller's records
3. The owner is always the caller, whatever the input says
4. Soft remove is idempotent, hard delete returns the snapshot
5. Due-date filtering is day-granular in UTC
6. Batch edits report per-item failures as None
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from taskboard.auth.identity import IdentityContext
from taskboard.db.models import as_utc
from taskboard.errors import NotFoundError, UnauthenticatedError
from taskboard.schemas import parse_input
from taskboard.schemas.project import ProjectCreate
from taskboard.schemas.task import TaskCreate, TaskFilter, TaskPatch, TaskSort
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService, day_bounds


# ═══════════════════════════════════════════════════════════
# Shared fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def alice_projects(sessions, alice_identity):
    return ProjectService(sessions, alice_identity)


@pytest.fixture
def alice_tasks(sessions, alice_identity):
    return TaskService(sessions, alice_identity)


@pytest.fixture
def bob_tasks(sessions, bob_identity):
    return TaskService(sessions, bob_identity)


@pytest.fixture
async def alice_project(alice_projects):
    return await alice_projects.create(ProjectCreate(name="Home"))


@pytest.fixture
async def bob_project(sessions, bob_identity):
    return await ProjectService(sessions, bob_identity).create(ProjectCreate(name="Work"))


def new_task(project_id, title="Buy milk", **extra) -> TaskCreate:
    return TaskCreate(title=title, project_id=project_id, **extra)


# ═══════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════


def test_services_refuse_anonymous_identity(sessions):
    with pytest.raises(UnauthenticatedError):
        TaskService(sessions, IdentityContext.anonymous())
    with pytest.raises(UnauthenticatedError):
        ProjectService(sessions, IdentityContext.anonymous())


# ═══════════════════════════════════════════════════════════
# Projects
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_project_create_and_get(alice_projects, alice):
    project = await alice_projects.create(ProjectCreate(name="Home"))
    assert project.owner_id == alice.id

    fetched = await alice_projects.get_by_id(project.id)
    assert fetched.name == "Home"


@pytest.mark.asyncio
async def test_project_of_other_owner_is_not_found(alice_projects, bob_project):
    with pytest.raises(NotFoundError):
        await alice_projects.get_by_id(bob_project.id)


@pytest.mark.asyncio
async def test_project_list_is_owner_scoped(alice_projects, alice_project, bob_project):
    projects = await alice_projects.list()
    assert [p.id for p in projects] == [alice_project.id]


@pytest.mark.asyncio
async def test_find_many_by_ids_drops_foreign_and_missing(
    alice_projects, alice_project, bob_project
):
    found = await alice_projects.find_many_by_ids(
        [alice_project.id, bob_project.id, uuid.uuid4()]
    )
    assert [p.id for p in found] == [alice_project.id]


# ═══════════════════════════════════════════════════════════
# Task CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_then_get_round_trip(alice_tasks, alice_project, alice):
    due = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)
    task = await alice_tasks.create(new_task(alice_project.id, due_date=due))

    fetched = await alice_tasks.get_by_id(task.id)
    assert fetched.id == task.id
    assert fetched.title == "Buy milk"
    assert fetched.is_completed is False
    assert fetched.is_removed is False
    assert fetched.project_id == alice_project.id
    assert fetched.owner_id == alice.id
    assert as_utc(fetched.due_date) == due
    assert fetched.created_at is not None
    assert fetched.updated_at is not None


@pytest.mark.asyncio
async def test_get_by_hex_id(alice_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id))
    fetched = await alice_tasks.get_by_id(task.id.hex)
    assert fetched.id == task.id


@pytest.mark.asyncio
async def test_create_ignores_supplied_owner(alice_tasks, alice_project, alice, bob):
    data = parse_input(
        TaskCreate,
        {"title": "Sneaky", "project_id": alice_project.id, "owner_id": bob.id},
    )
    task = await alice_tasks.create(data)
    assert task.owner_id == alice.id


@pytest.mark.asyncio
async def test_create_in_foreign_project_is_not_found(alice_tasks, bob_project):
    with pytest.raises(NotFoundError):
        await alice_tasks.create(new_task(bob_project.id))


@pytest.mark.asyncio
async def test_task_of_other_owner_is_not_found(alice_tasks, bob_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id))

    with pytest.raises(NotFoundError):
        await bob_tasks.get_by_id(task.id)
    with pytest.raises(NotFoundError):
        await bob_tasks.update(task.id, TaskPatch(id=task.id, title="Mine now"))
    with pytest.raises(NotFoundError):
        await bob_tasks.soft_remove(task.id)
    with pytest.raises(NotFoundError):
        await bob_tasks.delete(task.id)

    # Untouched
    assert (await alice_tasks.get_by_id(task.id)).title == "Buy milk"


@pytest.mark.asyncio
async def test_list_returns_exactly_callers_tasks(
    alice_tasks, bob_tasks, alice_project, bob_project
):
    mine = {
        (await alice_tasks.create(new_task(alice_project.id, title=f"a{i}"))).id
        for i in range(3)
    }
    await bob_tasks.create(new_task(bob_project.id, title="b0"))

    listed = await alice_tasks.list()
    assert {t.id for t in listed} == mine


# ═══════════════════════════════════════════════════════════
# Updates
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_writes_only_sent_fields(alice_tasks, alice_project):
    due = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    task = await alice_tasks.create(new_task(alice_project.id, due_date=due))

    patch = parse_input(TaskPatch, {"id": task.id, "is_completed": True})
    updated = await alice_tasks.update(task.id, patch)

    assert updated.is_completed is True
    assert updated.title == "Buy milk"
    assert as_utc(updated.due_date) == due
    assert as_utc(updated.updated_at) >= as_utc(task.updated_at)


@pytest.mark.asyncio
async def test_update_explicit_null_clears_due_date(alice_tasks, alice_project):
    due = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    task = await alice_tasks.create(new_task(alice_project.id, due_date=due))

    updated = await alice_tasks.update(
        task.id, parse_input(TaskPatch, {"id": task.id, "due_date": None})
    )
    assert updated.due_date is None


@pytest.mark.asyncio
async def test_update_ignores_null_for_required_columns(alice_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id))
    updated = await alice_tasks.update(
        task.id, parse_input(TaskPatch, {"id": task.id, "title": None})
    )
    assert updated.title == "Buy milk"


@pytest.mark.asyncio
async def test_move_task_to_foreign_project_is_not_found(
    alice_tasks, alice_project, bob_project
):
    task = await alice_tasks.create(new_task(alice_project.id))
    with pytest.raises(NotFoundError):
        await alice_tasks.update(task.id, TaskPatch(id=task.id, project_id=bob_project.id))


@pytest.mark.asyncio
async def test_move_task_between_own_projects(alice_tasks, alice_projects, alice_project):
    other = await alice_projects.create(ProjectCreate(name="Garden"))
    task = await alice_tasks.create(new_task(alice_project.id))

    moved = await alice_tasks.update(task.id, TaskPatch(id=task.id, project_id=other.id))
    assert moved.project_id == other.id


@pytest.mark.asyncio
async def test_batch_edit_reports_missing_items_as_none(alice_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id))
    missing = uuid.uuid4()

    results = await alice_tasks.update_batch(
        [
            TaskPatch(id=task.id, is_completed=True),
            TaskPatch(id=missing, is_completed=True),
        ]
    )

    assert len(results) == 2
    assert results[0] is not None
    assert results[0].id == task.id
    assert results[0].is_completed is True
    assert results[1] is None


@pytest.mark.asyncio
async def test_batch_edit_does_not_touch_foreign_tasks(
    alice_tasks, bob_tasks, bob_project
):
    theirs = await bob_tasks.create(new_task(bob_project.id))

    results = await alice_tasks.update_batch([TaskPatch(id=theirs.id, title="Hijacked")])

    assert results == [None]
    assert (await bob_tasks.get_by_id(theirs.id)).title == "Buy milk"


@pytest.mark.asyncio
async def test_batch_edit_invalid_item_fails_alone(alice_tasks, alice_project):
    first = await alice_tasks.create(new_task(alice_project.id))
    second = await alice_tasks.create(new_task(alice_project.id))

    results = await alice_tasks.update_batch(
        [
            {"id": first.id, "is_completed": True},
            {"id": second.id, "title": ""},
            {"id": second.id, "title": "x" * 501},
        ]
    )

    assert results[0] is not None
    assert results[0].is_completed is True
    assert results[1:] == [None, None]
    assert (await alice_tasks.get_by_id(second.id)).title == "Buy milk"


# ═══════════════════════════════════════════════════════════
# Remove / delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_soft_remove_is_idempotent(alice_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id))

    first = await alice_tasks.soft_remove(task.id)
    second = await alice_tasks.soft_remove(task.id)

    assert first.is_removed is True
    assert second.is_removed is True
    assert (await alice_tasks.get_by_id(task.id)).is_removed is True


@pytest.mark.asyncio
async def test_delete_returns_snapshot_and_removes_row(alice_tasks, alice_project):
    task = await alice_tasks.create(new_task(alice_project.id, title="Gone soon"))

    snapshot = await alice_tasks.delete(task.id)
    assert snapshot.id == task.id
    assert snapshot.title == "Gone soon"

    with pytest.raises(NotFoundError):
        await alice_tasks.get_by_id(task.id)


# ═══════════════════════════════════════════════════════════
# Filtering and sorting
# ═══════════════════════════════════════════════════════════


def test_day_bounds_are_half_open_utc():
    start, end = day_bounds(date(2024, 3, 15))
    assert start == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert end - start == timedelta(days=1)


@pytest.mark.asyncio
async def test_due_date_filter_is_day_granular(alice_tasks, alice_project):
    late = await alice_tasks.create(
        new_task(
            alice_project.id,
            title="Late evening",
            due_date=datetime(2024, 3, 15, 23, 0, tzinfo=timezone.utc),
        )
    )
    await alice_tasks.create(
        new_task(
            alice_project.id,
            title="Next midnight",
            due_date=datetime(2024, 3, 16, 0, 0, tzinfo=timezone.utc),
        )
    )

    on_15th = await alice_tasks.list(TaskFilter(due_date=date(2024, 3, 15)))
    assert [t.id for t in on_15th] == [late.id]

    on_16th = await alice_tasks.list(TaskFilter(due_date=date(2024, 3, 16)))
    assert [t.title for t in on_16th] == ["Next midnight"]


@pytest.mark.asyncio
async def test_due_date_filter_normalizes_offsets_to_utc(alice_tasks, alice_project):
    # 2024-03-16 01:00 at +02:00 is 2024-03-15 23:00 UTC
    cest = timezone(timedelta(hours=2))
    task = await alice_tasks.create(
        new_task(alice_project.id, due_date=datetime(2024, 3, 16, 1, 0, tzinfo=cest))
    )

    found = await alice_tasks.list(TaskFilter(due_date=date(2024, 3, 15)))
    assert [t.id for t in found] == [task.id]


@pytest.mark.asyncio
async def test_filters_combine(alice_tasks, alice_projects, alice_project):
    other = await alice_projects.create(ProjectCreate(name="Garden"))
    done_home = await alice_tasks.create(new_task(alice_project.id, is_completed=True))
    await alice_tasks.create(new_task(alice_project.id))
    await alice_tasks.create(new_task(other.id, is_completed=True))
    removed = await alice_tasks.create(new_task(alice_project.id, is_removed=True))

    found = await alice_tasks.list(
        TaskFilter(is_completed=True, project_id=alice_project.id)
    )
    assert [t.id for t in found] == [done_home.id]

    found = await alice_tasks.list(TaskFilter(is_removed=True))
    assert [t.id for t in found] == [removed.id]


@pytest.mark.asyncio
async def test_sort_by_due_date(alice_tasks, alice_project):
    for day in (12, 10, 11):
        await alice_tasks.create(
            new_task(
                alice_project.id,
                title=f"day {day}",
                due_date=datetime(2024, 1, day, tzinfo=timezone.utc),
            )
        )

    asc = await alice_tasks.list(sort=TaskSort.DUE_DATE_ASC)
    assert [t.title for t in asc] == ["day 10", "day 11", "day 12"]

    desc = await alice_tasks.list(sort=TaskSort.DUE_DATE_DESC)
    assert [t.title for t in desc] == ["day 12", "day 11", "day 10"]
