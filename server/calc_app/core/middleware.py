from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from calc_app.core.context import get_request_id, reset_request_id, set_request_id

logger = logging.getLogger("calc_app.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        token = set_request_id(request.headers.get("x-request-id"))
        request_id = get_request_id() or ""

        started = time.perf_counter()
        extra = {"path": request.url.path, "method": request.method}
        logger.info("request.start", extra=extra)

        try:
            response = await call_next(request)
        finally:
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.info("request.end", extra=extra)
            reset_request_id(token)

        response.headers["X-Request-ID"] = request_id
        return response
