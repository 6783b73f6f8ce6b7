"""
Request tracking middleware.
"""

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dockit.core.logging import actor_id as actor_id_var
from dockit.core.logging import get_logger
from dockit.core.logging import request_id as request_id_var

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a request ID to each request and binds it, with the caller's
    X-Actor-Id, to the logging context.

    An upstream X-Request-ID is reused; otherwise a UUID is generated. The ID
    is stored in ``request.state.request_id`` and echoed in the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        actor_token = actor_id_var.set(request.headers.get("X-Actor-Id"))
        try:
            response = await call_next(request)
        finally:
            actor_id_var.reset(actor_token)
            request_id_var.reset(token)
        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its duration and sets X-Process-Time."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        logger.info(
            "Request completed",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "url": str(request.url.path),
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
            },
        )
        return response


def register_middlewares(app: FastAPI) -> None:
    # Last added runs first; the request ID must exist before timing logs it
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
