"""Request access logging for the command library API."""

import time
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("server.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and attach an ``X-Response-Time`` header."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            response_time = time.perf_counter() - start_time
            logger.error(
                f'{client} "{request.method} {request.url.path}" 500 {response_time * 1000:.1f}ms',
                extra={"method": request.method, "path": request.url.path, "status_code": 500}
            )
            raise

        response_time = time.perf_counter() - start_time
        response.headers['X-Response-Time'] = f"{response_time:.3f}s"

        logger.info(
            f'{client} "{request.method} {request.url.path}" {response.status_code} {response_time * 1000:.1f}ms',
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(response_time * 1000, 2),
                "user_agent": request.headers.get('user-agent')
            }
        )
        return response
