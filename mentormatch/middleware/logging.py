import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("mentormatch.requests")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and logs method, path, status and timing."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.time() - start_time) * 1000
            logger.exception(
                f"[{correlation_id}] {request.method} {request.url.path} failed after {elapsed_ms:.1f}ms"
            )
            raise

        elapsed_ms = (time.time() - start_time) * 1000
        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            f"[{correlation_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response
