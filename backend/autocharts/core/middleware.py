"""
Request middleware: correlation ids and request timing.
"""
import uuid
import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fastapi import status
from fastapi.responses import JSONResponse
from autocharts.core.errors import ErrorCodes, get_error_response
from autocharts.core.logging import correlation_id_var
from autocharts.core.performance import PerformanceMonitor

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tag every request and its log records with a correlation id."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        token = correlation_id_var.set(correlation_id)
        start_time = time.time()

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                duration = time.time() - start_time
                logger.error(
                    f"Request failed: {request.method} {request.url.path} - {e} ({duration:.3f}s)",
                    extra={"method": request.method, "path": request.url.path, "duration": duration},
                    exc_info=True
                )
                return JSONResponse(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    content={**get_error_response(ErrorCodes.UNKNOWN_ERROR), "correlation_id": correlation_id},
                    headers={CORRELATION_HEADER: correlation_id}
                )

            duration = time.time() - start_time
            PerformanceMonitor.record_metric(
                "request_duration",
                duration,
                {"path": request.url.path, "status_code": response.status_code}
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            response.headers["X-Response-Time"] = f"{duration:.3f}"
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)",
                extra={"status_code": response.status_code, "duration": duration}
            )
            return response
        finally:
            correlation_id_var.reset(token)
