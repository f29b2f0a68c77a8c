import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("parafort_core.access")


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        request.state.user_id = None
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["x-correlation-id"] = request.state.correlation_id
        logger.info(
            "http_request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "correlation_id": request.state.correlation_id,
                "user_id": str(request.state.user_id) if request.state.user_id else None,
            },
        )
        return response
