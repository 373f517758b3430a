"""Pydantic input schemas for the service layer.

Learn: GraphQL inputs are converted into these before reaching a service,
so services validate the same way no matter who calls them (resolvers,
CLI, tests). Validation failures surface as InvalidInputError.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from taskboard.errors import InvalidInputError

M = TypeVar("M", bound=BaseModel)


def parse_input(model: type[M], data: dict[str, Any]) -> M:
    """Build ``model`` from ``data``, mapping validation errors to InvalidInputError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidInputError(problems or "Invalid input") from e
