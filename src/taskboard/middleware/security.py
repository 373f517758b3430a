"""Security headers middleware.

Learn: Adds standard security headers to every response. The GraphiQL
page is served from the same origin, so framing is denied outright and
HSTS is only sent over HTTPS.

GraphQL responses carry per-user data selected by the session cookie, so
they are marked no-store: a shared cache must never hand one user's tasks
to another.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, private_prefixes: tuple[str, ...] = ("/graphql",)):
        super().__init__(app)
        self.private_prefixes = private_prefixes

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith(self.private_prefixes):
            response.headers["Cache-Control"] = "no-store"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
