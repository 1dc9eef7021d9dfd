"""
Teamspace Backend — Request ID Middleware
===========================================

What:  Gives every request a short correlation id and echoes it back as
       `X-Request-ID`.
How:   Reuses a client-supplied `X-Request-ID` when present, otherwise takes
       the first 8 hex chars of a uuid4. The id lives in a ContextVar so the
       access logger and the error handlers in main.py can read it without
       being handed the request.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or new_request_id()
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
