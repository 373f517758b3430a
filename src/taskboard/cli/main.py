"""Taskboard operator CLI.

Usage:
    taskboard grant-role alice ADMIN     # Give a user a role
    taskboard revoke-role alice ADMIN    # Take it away again
    taskboard prune-sessions             # Drop expired login sessions
    taskboard serve                      # Run the API with uvicorn

Roles are never changed through the API. These commands talk to the
database directly (TASKBOARD_DATABASE_URL) and take effect on the user's
next login.
"""

from __future__ import annotations

import asyncio
import concurrent.futures

import click

from taskboard import __version__
from taskboard.auth.identity import Role
from taskboard.errors import TaskboardError

ROLE_CHOICE = click.Choice([r.value for r in Role], case_sensitive=False)


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Handles nested event loops (click's CliRunner inside an async test)
    by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _session_factory():
    from taskboard.db.engine import get_session_factory
    return get_session_factory()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
def main():
    """Taskboard: operator commands."""


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


async def _change_role(username: str, role: Role, grant: bool) -> list[str]:
    from taskboard.services.user_service import UserService

    service = UserService(_session_factory())
    if grant:
        user = await service.grant_role(username, role)
    else:
        user = await service.revoke_role(username, role)
    return list(user.roles)


@main.command("grant-role")
@click.argument("username")
@click.argument("role", type=ROLE_CHOICE)
def grant_role(username: str, role: str):
    """Give USERNAME the role ROLE."""
    try:
        roles = _run(_change_role(username, Role(role.upper()), grant=True))
    except TaskboardError as e:
        raise click.ClickException(e.message)
    click.secho(f"{username}: {', '.join(roles) or '-'}", fg="green")


@main.command("revoke-role")
@click.argument("username")
@click.argument("role", type=ROLE_CHOICE)
def revoke_role(username: str, role: str):
    """Remove the role ROLE from USERNAME."""
    try:
        roles = _run(_change_role(username, Role(role.upper()), grant=False))
    except TaskboardError as e:
        raise click.ClickException(e.message)
    click.secho(f"{username}: {', '.join(roles) or '-'}", fg="yellow")


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@main.command("prune-sessions")
def prune_sessions():
    """Delete expired login sessions."""
    from taskboard.auth.sessions import SessionStore

    count = _run(SessionStore(_session_factory()).prune_expired())
    click.echo(f"Pruned {count} expired session(s).")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKBOARD_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: TASKBOARD_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    from taskboard.config import settings

    uvicorn.run(
        "taskboard.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
