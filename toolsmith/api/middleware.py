"""
HTTP middleware: per-request trace ids with timing, and security headers
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

API_CSP = "default-src 'self'; connect-src 'self' ws: wss:;"
# Swagger and ReDoc load their assets from jsdelivr
DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com;"
)


def _stamp(response: Response, trace_id: str, started: float) -> Response:
    elapsed = time.perf_counter() - started
    response.headers["X-Request-ID"] = trace_id
    response.headers["X-Process-Time"] = f"{elapsed:.3f}"
    return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with a short trace id and logs its outcome"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()
        request.state.request_id = trace_id
        client = request.client.host if request.client else "unknown"
        logger.info(f"[{trace_id}] {request.method} {request.url.path} from {client}")

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[{trace_id}] unhandled error on {request.url.path}")
            failure = JSONResponse(
                status_code=500,
                content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error",
                                   "request_id": trace_id}},
            )
            return _stamp(failure, trace_id, started)

        _stamp(response, trace_id, started)
        logger.info(f"[{trace_id}] {response.status_code} in {response.headers['X-Process-Time']}s")
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        is_docs = request.url.path.startswith(("/docs", "/redoc"))
        response.headers["Content-Security-Policy"] = DOCS_CSP if is_docs else API_CSP
        return response
