"""
Request ID middleware.

Every request gets an id (the client's X-Request-ID header if sent, a new
UUID otherwise). It is stored on request.state, echoed back in the
response headers and attached to every log record emitted while the
request is handled, so one checkout can be followed across tier
fallbacks in the logs.
"""

import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        previous_factory = logging.getLogRecordFactory()

        def record_factory(*args, **kwargs):
            record = previous_factory(*args, **kwargs)
            record.request_id = request_id
            return record

        logging.setLogRecordFactory(record_factory)

        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            logging.setLogRecordFactory(previous_factory)


def get_request_id(request: Request) -> str:
    """Request id of the current request, or "no-request-id" outside the middleware."""
    return getattr(request.state, "request_id", "no-request-id")
