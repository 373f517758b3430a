"""Request ID middleware: one id per request for log correlation.

Learn: The id comes from an incoming X-Request-ID header or is generated.
Client-supplied ids end up in every log line, so anything that is not a
short token of safe characters is replaced with a fresh id instead of
being trusted. The id is bound into structlog's contextvars, kept on
request.state for handlers, and echoed back in the response header.

Who is calling is bound later, by get_identity, once the session cookie
has been resolved.
"""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    """Use the caller's id when it is safe to log, else mint one."""
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
