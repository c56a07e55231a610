"""Request trace_id: stored on the ASGI scope and echoed as X-Trace-Id."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("uvicorn.error")

SCOPE_KEY = "trace_id"


def ensure_trace_id(scope: dict) -> str:
    """Get or set trace_id on ASGI scope. Returns the same trace_id for the request lifecycle."""
    tid = scope.get(SCOPE_KEY)
    if tid and isinstance(tid, str):
        return tid
    tid = str(uuid.uuid4())[:16]
    scope[SCOPE_KEY] = tid
    return tid


class TraceIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        tid = ensure_trace_id(request.scope)
        request.state.trace_id = tid
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Trace-Id"] = tid
        if request.method != "GET" or response.status_code >= 400:
            logger.info(
                "trace_id=%s %s %s -> %s (%.1f ms)",
                tid,
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        return response
