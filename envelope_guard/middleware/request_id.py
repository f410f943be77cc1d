"""Request ID middleware.

Propagates the caller's ``X-Request-ID`` or generates a UUID4, so that 500
envelopes can carry a ``requestId`` the client can quote back and log lines
for the same request can be correlated.
"""

from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from envelope_guard.request_context import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID to each request.

    The ID is stored in ``request.state.request_id`` (read by the error
    handlers), bound to ``request_id_var`` for the duration of the request
    (read by the logging filter), and echoed in the ``X-Request-ID``
    response header.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
