"""Prometheus metrics for the command library API."""

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry
from fastapi import FastAPI, Request, Response
import re
import time
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Dedicated registry so tests and multiple apps don't collide with the default one
linuxcmd_registry = CollectorRegistry()

request_count = Counter(
    'linuxcmd_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=linuxcmd_registry
)

request_duration = Histogram(
    'linuxcmd_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
    registry=linuxcmd_registry
)

db_query_duration = Histogram(
    'linuxcmd_db_query_duration_seconds',
    'Catalog query duration in seconds',
    ['query_type'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=linuxcmd_registry
)

db_query_count = Counter(
    'linuxcmd_db_queries_total',
    'Total number of catalog queries',
    ['query_type', 'status'],
    registry=linuxcmd_registry
)

error_count = Counter(
    'linuxcmd_errors_total',
    'Total number of errors',
    ['error_type', 'component'],
    registry=linuxcmd_registry
)

app_info = Info(
    'linuxcmd_app_info',
    'Command library API information',
    registry=linuxcmd_registry
)

_NUMERIC_SEGMENT = re.compile(r'/\d+(?=/|$)')


def normalize_endpoint(path: str) -> str:
    """Collapse numeric path segments so ids don't explode label cardinality."""
    if path.startswith("/api/category/"):
        return "/api/category/{name}"
    if path.startswith("/api/basic/"):
        return "/api/basic/{name}"
    return _NUMERIC_SEGMENT.sub('/{id}', path)


class PrometheusMiddleware:
    """ASGI middleware recording request counts and durations."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        endpoint = normalize_endpoint(scope.get("path", ""))
        start_time = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            error_count.labels(error_type=type(e).__name__, component="http").inc()
            raise
        finally:
            request_count.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
            request_duration.labels(method=method, endpoint=endpoint).observe(time.perf_counter() - start_time)


def setup_prometheus_metrics(app: FastAPI, version: str = "unknown") -> None:
    """Install the metrics middleware and the ``/metrics`` route."""
    app.add_middleware(PrometheusMiddleware)

    @app.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        return Response(content=generate_latest(linuxcmd_registry), media_type=CONTENT_TYPE_LATEST)

    app_info.info({'version': version})
    logger.info("Prometheus metrics configured")


def record_db_metrics(query_type: str, duration: float, error: Optional[str] = None) -> None:
    """Record catalog query metrics."""
    status = "error" if error else "success"

    db_query_count.labels(query_type=query_type, status=status).inc()

    if error:
        error_count.labels(error_type=error, component="database").inc()
    else:
        db_query_duration.labels(query_type=query_type).observe(duration)
