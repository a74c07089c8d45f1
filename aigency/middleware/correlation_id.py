"""Correlation ID middleware.

Forwards X-Correlation-ID from the caller (the web client or the
automated-task executor), falling back to the request id. Raw ASGI.
"""

import uuid
from collections.abc import Callable

from aigency.middleware._headers import get_header, with_response_header
from aigency.shared.telemetry.request_context import current_correlation_id


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    """Add or forward the correlation id; fall back to request_id on scope state."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        correlation_id = (
            get_header(scope, header_name)
            or scope.get("state", {}).get("request_id")
            or str(uuid.uuid4())
        )
        scope.setdefault("state", {})["correlation_id"] = correlation_id
        token = current_correlation_id.set(correlation_id)
        try:
            await app(scope, receive, with_response_header(send, header_name, correlation_id))
        finally:
            current_correlation_id.reset(token)

    return asgi_app
