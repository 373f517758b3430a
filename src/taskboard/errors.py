"""Domain error taxonomy.

Every error a resolver can surface on purpose derives from TaskboardError
and carries a stable ``code`` that the GraphQL layer puts into
``extensions.code``. Anything else reaching the API boundary is treated as
an infrastructure failure and masked.

NotFoundError covers both "record absent" and "record owned by someone
else"; callers must not be able to tell the two apart.
"""


class TaskboardError(Exception):
    """Base class for errors that are reported to API callers verbatim."""

    code = "TASKBOARD_ERROR"
    default_message = "Request failed"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(TaskboardError):
    """No valid identity on the request."""

    code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class ForbiddenError(TaskboardError):
    """Valid identity, insufficient privilege."""

    code = "FORBIDDEN"
    default_message = "You have no rights for this action"


class NotFoundError(TaskboardError):
    """Record absent, or owned by another principal."""

    code = "NOT_FOUND"
    default_message = "Not found"


class ConflictError(TaskboardError):
    """Uniqueness violation."""

    code = "CONFLICT"
    default_message = "Already exists"


class InvalidInputError(TaskboardError):
    """Input fails domain validation (weak password, malformed id, ...)."""

    code = "BAD_USER_INPUT"
    default_message = "Invalid input"
