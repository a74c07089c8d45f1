"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol


class IAutomationTrigger(Protocol):
    """Fire-once signal asking the automated-task executor to start a task."""

    async def dispatch(self, task_id: str, company_id: str) -> None:
        """Send the signal. Raises TriggerDispatchException when delivery fails.

        The caller does not wait for, or observe, the executor's outcome.
        """


class IScopeLock(Protocol):
    """Mutual exclusion for status propagation within one company."""

    def hold(self, company_id: str) -> AbstractAsyncContextManager[None]:
        """Return an async context manager holding the company's lock.

        Raises ScopeLockTimeoutException on entry if the lock is not acquired in time.
        """
