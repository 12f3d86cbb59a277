"""Request ID tracking and access logging"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import structlog


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
QUIET_PATHS = frozenset({"/v1/healthz"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to the request state, the log context and the response"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with status and latency; health probes log at debug"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        log("request_started", method=method, path=path)

        response = await call_next(request)

        log(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            client=request.client.host if request.client else None,
            admin_id=getattr(request.state, "admin_id", None),
        )
        return response
