"""
NoteDeck Backend — Request ID Middleware
=========================================

What:  Gives every request a correlation ID and echoes it in `X-Request-ID`.
Why:   Lets a failing request be matched to its log lines: error responses
       carry `request_id`, and every log line for the request can include it.
How:   Reuses a client-supplied X-Request-ID, otherwise generates a short one,
       and stores it in a ContextVar so loggers and error handlers can read it.
When:  Outermost middleware (added last), so every other layer sees the ID.

Why accept client-supplied IDs:
    The frontend can tag a form submission before sending it and quote that
    tag when a user reports "my note did not save".
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns, stores and returns the request correlation ID.

    Behavior:
        1. X-Request-ID header present → use it
        2. Absent → first 8 hex chars of a uuid4 (short enough to read aloud)
        3. Store in request_id_var and request.state
        4. Echo in the response header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
