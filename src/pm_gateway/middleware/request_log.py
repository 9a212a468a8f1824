"""Request logging middleware.

Assigns each request an id (reusing a caller-supplied X-Request-ID), stores it
on request.state for ApiResponse, echoes it back as a response header and
logs method, path, status and latency. Server errors log at WARNING.

Log format:
    INFO [POST] /api/v1/markets/{id}/buy → 200 (3ms) req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.pm_common.response import REQUEST_ID_HEADER, new_request_id

logger = logging.getLogger("pm.request")

_MAX_INBOUND_ID_LENGTH = 64


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER, "")
        if inbound and len(inbound) <= _MAX_INBOUND_ID_LENGTH:
            request.state.request_id = inbound
        else:
            request.state.request_id = new_request_id()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request.state.request_id

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
