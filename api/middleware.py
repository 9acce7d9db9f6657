import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from utils.logger import format_duration

logger = logging.getLogger("http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration; expose the duration as X-Response-Time."""

    def __init__(self, app, slow_request_ms: int = 500):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Response-Time"] = f"{int(elapsed_ms)}ms"

        message = "%s %s - %s - %s"
        args = (request.method, request.url.path, response.status_code, format_duration(elapsed_ms))
        if elapsed_ms < 100:
            logger.info(message, *args)
        elif elapsed_ms < self.slow_request_ms:
            logger.warning(message, *args)
        else:
            logger.error(message, *args)
        return response
