"""Authorization guards.

Pure checks against an IdentityContext. They never touch storage and
return nothing; a failed check raises. Call them before any operation
that reads or mutates owner-scoped or role-gated data.
"""

import uuid

from taskboard.auth.identity import IdentityContext, Role
from taskboard.errors import ForbiddenError, UnauthenticatedError


def require_authenticated(identity: IdentityContext) -> None:
    if not identity.is_authenticated:
        raise UnauthenticatedError()


def require_role(identity: IdentityContext, role: Role) -> None:
    """Caller must be logged in and hold ``role``."""
    require_authenticated(identity)
    if not identity.has_role(role):
        raise ForbiddenError()


def require_self_or_role(
    identity: IdentityContext, target_user_id: uuid.UUID, role: Role
) -> None:
    """Caller must be the target user, or hold ``role``.

    Used for single-user reads: a user can always read themselves,
    ADMIN can read anyone.
    """
    require_authenticated(identity)
    if identity.user_id == target_user_id:
        return
    if not identity.has_role(role):
        raise ForbiddenError()
