"""Request ID middleware.

Generates or forwards X-Request-ID, echoes it on the response and exposes
it to log records. Client-provided values are sanitized (length and
character set) to prevent log injection. Raw ASGI, no BaseHTTPMiddleware.
"""

import re
import uuid
from collections.abc import Callable

from aigency.middleware._headers import get_header, with_response_header
from aigency.shared.telemetry.request_context import current_request_id

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)


def _sanitize_request_id(raw: str | None) -> str:
    """Return raw if safe to log; otherwise a new UUID."""
    if not raw or not REQUEST_ID_ALLOWED_PATTERN.match(raw.strip()):
        return str(uuid.uuid4())
    return raw.strip()


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Add or forward the request id on each request and response."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _sanitize_request_id(get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id
        token = current_request_id.set(request_id)
        try:
            await app(scope, receive, with_response_header(send, header_name, request_id))
        finally:
            current_request_id.reset(token)

    return asgi_app
