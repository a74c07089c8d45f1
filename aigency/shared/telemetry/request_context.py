"""Per-request identifiers for log correlation.

RequestIDMiddleware and CorrelationIDMiddleware set these context
variables; the logging filter reads the request id.
"""

from contextvars import ContextVar

current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)
current_correlation_id: ContextVar[str | None] = ContextVar(
    "current_correlation_id", default=None
)


def get_request_id() -> str | None:
    return current_request_id.get()


def get_correlation_id() -> str | None:
    return current_correlation_id.get()
