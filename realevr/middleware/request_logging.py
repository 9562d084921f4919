"""
Request logging middleware for API calls.
Logs each /api request with its status and duration and tags the response with
a request id and timing header.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from realevr.services.error_handler import ErrorHandlerService

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Times API requests and marks their responses as non-cacheable so clients
    always see fresh listings. Unexpected errors are turned into a 500 response.
    """

    def __init__(self, app: ASGIApp, api_prefix: str = "/api", slow_request_threshold: float = 1.0):
        super().__init__(app)
        self.api_prefix = api_prefix
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            # Answered here so the error never reaches the server loop
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        duration = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{duration:.4f}"

        path = request.url.path
        if path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store"
            message = f"{request.method} {path} {response.status_code} in {duration * 1000:.0f}ms"
            if duration > self.slow_request_threshold:
                logger.warning(f"Slow request: {message}", extra={"request_id": request_id})
            else:
                logger.info(message, extra={"request_id": request_id})

        return response
