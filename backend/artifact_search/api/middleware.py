"""
Middleware components for the catalogue search API
Request logging and tracing headers
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import JSONResponse
import logging
import time
import uuid
from typing import Callable


logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Short id for correlating log lines of one request
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        query = f"?{request.url.query}" if request.url.query else ""
        logger.info(
            f"[{request_id}] {request.method} {request.url.path}{query} "
            f"from {request.client.host if request.client else 'unknown'}"
        )

        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"[{request_id}] Request failed in {process_time:.3f}s: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "request_id": request_id
                },
                headers={
                    "X-Request-ID": request_id,
                    "X-Process-Time": f"{process_time:.3f}"
                }
            )

        process_time = time.time() - start_time
        total = response.headers.get("X-Total-Count")
        logger.info(
            f"[{request_id}] {response.status_code} completed in {process_time:.3f}s"
            + (f" (total={total})" if total is not None else "")
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response
