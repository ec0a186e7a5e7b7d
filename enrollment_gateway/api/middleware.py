"""FastAPI middleware for request tracing, metrics and CORS headers"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp
from enrollment_gateway.config import settings
from enrollment_gateway.infrastructure.observability.metrics import request_duration_histogram


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request for distributed tracing"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request metrics"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        request_duration_histogram.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code,
        ).observe(duration)

        return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Attach the fixed single-origin CORS headers to every response"""

    def __init__(self, app: ASGIApp, allow_origin: str | None = None):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin or settings.cors_allow_origin,
            "Access-Control-Allow-Methods": "POST,OPTIONS",
            "Access-Control-Allow-Headers": "Accept, Content-Type, Authorization",
            "Access-Control-Allow-Credentials": "true",
        }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(self.headers)
        return response
