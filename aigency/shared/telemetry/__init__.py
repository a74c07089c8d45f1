"""Shared telemetry: logging setup and request context."""

from aigency.shared.telemetry.logging import get_logger, setup_logging
from aigency.shared.telemetry.request_context import get_correlation_id, get_request_id

__all__ = ["get_correlation_id", "get_logger", "get_request_id", "setup_logging"]
