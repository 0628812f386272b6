"""Logging middleware for FastAPI."""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from scopekeeper.helpers.logger import get_logger


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with a generated request id."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger(__name__)

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = request.client.host if request.client else "unknown"

        start_time = time.time()
        self.logger.info("Request received", request_id=request_id, method=request.method,
                         path=request.url.path, client_ip=client_ip)
        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error("Request failed", request_id=request_id, error=str(e),
                              duration_ms=round((time.time() - start_time) * 1000, 2))
            raise

        self.logger.info("Request completed", request_id=request_id, status_code=response.status_code,
                         duration_ms=round((time.time() - start_time) * 1000, 2))
        response.headers["X-Request-ID"] = request_id
        return response
