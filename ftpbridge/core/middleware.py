"""FastAPI middleware."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from .metrics import REQUEST_COUNT, REQUEST_LATENCY


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Collect Prometheus metrics."""
        method = request.method

        start_time = time.time()
        response = await call_next(request)

        # Route template keeps filenames out of the label values
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)

        REQUEST_COUNT.labels(
            method=method, endpoint=path, status=response.status_code
        ).inc()
        REQUEST_LATENCY.labels(method=method, endpoint=path).observe(
            time.time() - start_time
        )

        return response
