"""Domain exceptions for the aigency service.

Business-rule violations and the failure taxonomy of status propagation.
The presentation layer maps error_code to HTTP status in
aigency.core.exception_handlers; the resolver catches the
infrastructure-facing ones (StoreWriteException, TriggerDispatchException,
ScopeLockTimeoutException) and only logs them.
"""

from typing import Any


class AigencyException(Exception):
    """Base exception for all aigency errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. task_id, field).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AigencyException):
    """Raised when input validation fails (e.g. unknown status string)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(AigencyException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'company').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStatusTransitionException(AigencyException):
    """Raised when a status change would move a task backward in its lifecycle."""

    def __init__(self, task_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Task {task_id} cannot move from {current} to {requested}",
            "INVALID_STATUS_TRANSITION",
            {"task_id": task_id, "current_status": current, "requested_status": requested},
        )


class TriggerNotAllowedException(AigencyException):
    """Raised when an automation trigger is requested for a task that cannot run now."""

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(
            f"Cannot trigger automation for task {task_id}: {reason}",
            "TRIGGER_NOT_ALLOWED",
            {"task_id": task_id, "reason": reason},
        )


class StoreWriteException(AigencyException):
    """Raised when the task store fails to read or persist a task."""

    def __init__(self, task_id: str, reason: str) -> None:
        """Initialize with the task being written and the underlying reason.

        Args:
            task_id: Task whose read or write failed.
            reason: Description of the store error (e.g. HTTP status).
        """
        super().__init__(
            f"Task store write failed for {task_id}: {reason}",
            "STORE_WRITE_FAILED",
            {"task_id": task_id, "reason": reason},
        )


class TriggerDispatchException(AigencyException):
    """Raised when the automated-task trigger signal could not be delivered."""

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(
            f"Automation trigger failed for task {task_id}: {reason}",
            "TRIGGER_DISPATCH_FAILED",
            {"task_id": task_id, "reason": reason},
        )


class ScopeLockTimeoutException(AigencyException):
    """Raised when the per-company propagation lock could not be acquired in time."""

    def __init__(self, company_id: str, wait_seconds: float) -> None:
        super().__init__(
            f"Timed out after {wait_seconds}s waiting for task lock of company {company_id}",
            "SCOPE_LOCK_TIMEOUT",
            {"company_id": company_id, "wait_seconds": wait_seconds},
        )
