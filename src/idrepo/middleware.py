"""FastAPI middleware binding per-request context for logging."""

import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from idrepo.security import bind_user, reset_user

REQUEST_ID_HEADER = "X-Request-ID"


def _user_name(request: Request) -> str:
    # scope["user"] is only present when an authentication middleware ran first
    user = request.scope.get("user")
    if user is None or not getattr(user, "is_authenticated", False):
        return ""
    return str(getattr(user, "display_name", ""))


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request id and calling user for every request.

    - Reads X-Request-ID from request headers, or generates a UUID if missing
    - Binds request_id and user to structlog context (auto-included in all logs)
    - Binds the user for idrepo.security.get_user, used by the error handlers
    - Adds X-Request-ID to response headers

    Usage:
        app.add_middleware(RequestContextMiddleware)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        user = _user_name(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, user=user)
        token = bind_user(user)
        try:
            response = await call_next(request)
        finally:
            reset_user(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
