"""
Correlation ID management for request tracing.
"""

import uuid
from contextvars import ContextVar
from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Header names for correlation ID propagation
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def get_correlation_id() -> str | None:
    """Get the current correlation ID from context."""
    return _correlation_id_var.get()


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Extract or generate a correlation ID for each request.

    The ID is taken from ``X-Correlation-ID`` (falling back to
    ``X-Request-ID``), stored in a context variable for log records and
    echoed back on the response.
    """

    def __init__(
        self,
        app: Any,
        header_name: str = CORRELATION_ID_HEADER,
        generator: Callable[[], str] = generate_correlation_id,
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.generator = generator

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = (
            request.headers.get(self.header_name)
            or request.headers.get(REQUEST_ID_HEADER)
            or self.generator()
        )

        token = _correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
            response.headers[self.header_name] = correlation_id
            return response
        finally:
            _correlation_id_var.reset(token)
