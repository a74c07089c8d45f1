"""HTTP middleware: timeout, request ID, correlation ID.

Applied in aigency.main; order matters (first added = outermost).
"""

from aigency.middleware.correlation_id import CorrelationIDMiddleware
from aigency.middleware.request_id import RequestIDMiddleware
from aigency.middleware.timeout import TimeoutMiddleware

__all__ = ["CorrelationIDMiddleware", "RequestIDMiddleware", "TimeoutMiddleware"]
