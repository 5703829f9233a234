"""Request ID middleware for request tracing."""

import re
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Incoming IDs are echoed into headers and logs, so keep them short and plain
ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an ID.

    A well-formed ``X-Request-ID`` from the caller or a proxy is reused,
    otherwise a UUID is generated. The ID is stored on
    ``request.state``, bound into the structlog context for everything
    logged while handling the request, and returned in the response.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming = request.headers.get(self.HEADER_NAME, "")
        request_id = incoming if ACCEPTED_REQUEST_ID.match(incoming) else str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response
