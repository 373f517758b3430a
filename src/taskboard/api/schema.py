"""Schema composition and the GraphQL router.

Learn: The schema is assembled explicitly from the Query root and the
namespaced Mutation root, with no global registry. The router subclass
swaps in our error formatter; the schema subclass swaps in structlog for
error logging (domain errors at info, everything else with a traceback).
"""

from typing import Optional

import strawberry
import structlog
from fastapi import Request
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionContext, ExecutionResult

from taskboard.api.context import get_context
from taskboard.api.errors import INTERNAL_ERROR_CODE, error_code, format_error
from taskboard.api.mutations import Mutation
from taskboard.api.queries import Query
from taskboard.config import settings

logger = structlog.get_logger()


class TaskboardSchema(strawberry.Schema):
    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            code = error_code(error)
            if code == INTERNAL_ERROR_CODE:
                logger.error(
                    "graphql.unexpected_error",
                    path=error.path,
                    error=str(error),
                    exc_info=error.original_error,
                )
            else:
                logger.info("graphql.error", code=code, path=error.path, message=error.message)


class TaskboardGraphQLRouter(GraphQLRouter):
    async def process_result(
        self, request: Request, result: ExecutionResult
    ) -> GraphQLHTTPResponse:
        data: GraphQLHTTPResponse = {"data": result.data}
        if result.errors:
            data["errors"] = [format_error(e) for e in result.errors]
        if result.extensions:
            data["extensions"] = result.extensions
        return data


def build_schema() -> strawberry.Schema:
    return TaskboardSchema(query=Query, mutation=Mutation)


def build_graphql_router() -> GraphQLRouter:
    """The /graphql endpoint. GraphiQL is served outside production only."""
    return TaskboardGraphQLRouter(
        build_schema(),
        context_getter=get_context,
        graphql_ide=None if settings.is_production else "graphiql",
    )
