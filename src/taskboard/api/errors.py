"""GraphQL error formatting.

Learn: graphql-core wraps whatever a resolver raised in a GraphQLError and
keeps the raw exception on ``original_error``. We sort errors into three
buckets by that original:

- TaskboardError: reported as-is, ``extensions.code`` from the class
- no original at all: a syntax/validation error from graphql-core itself,
  message kept, code GRAPHQL_VALIDATION_FAILED
- anything else: an infrastructure failure (database down, a bug). The
  message is masked so internals never leak; the schema logs the real one.
"""

from typing import Any, Optional

from graphql import GraphQLError

from taskboard.errors import TaskboardError

INTERNAL_ERROR_CODE = "INTERNAL_SERVER_ERROR"
VALIDATION_ERROR_CODE = "GRAPHQL_VALIDATION_FAILED"
MASKED_MESSAGE = "Unexpected error."


def original_of(error: GraphQLError) -> Optional[BaseException]:
    """Innermost non-GraphQL exception behind ``error``, if any."""
    original = error.original_error
    while isinstance(original, GraphQLError) and original.original_error is not None:
        original = original.original_error
    if isinstance(original, GraphQLError):
        return None
    return original


def error_code(error: GraphQLError) -> str:
    original = original_of(error)
    if isinstance(original, TaskboardError):
        return original.code
    if original is None:
        return VALIDATION_ERROR_CODE
    return INTERNAL_ERROR_CODE


def format_error(error: GraphQLError) -> dict[str, Any]:
    formatted = dict(error.formatted)
    code = error_code(error)
    if code == INTERNAL_ERROR_CODE:
        formatted["message"] = MASKED_MESSAGE
    extensions = dict(formatted.get("extensions") or {})
    extensions["code"] = code
    formatted["extensions"] = extensions
    return formatted
