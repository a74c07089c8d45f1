"""Repository interfaces (ports) for the application layer.

Protocols define contracts that the Firestore and in-memory stores fulfill.
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from aigency.domain.entities.task import CompanyTask, TaskTemplate
    from aigency.domain.enums import TaskStatus


class ITaskRepository(Protocol):
    """Protocol for the company task store."""

    async def get_by_id(self, task_id: str) -> CompanyTask | None:
        """Return task by ID, or None if it does not exist."""

    async def list_by_company(
        self, company_id: str, renewal_type: str | None = None
    ) -> list[CompanyTask]:
        """Return all tasks of a company (optionally one renewal type), ordered by sort_order."""

    async def set_status(self, task_id: str, status: TaskStatus) -> CompanyTask:
        """Unconditionally write status; return the updated task.

        Raises ResourceNotFoundException if missing, StoreWriteException on store error.
        """

    async def compare_and_set_status(
        self, task_id: str, expected: TaskStatus, new: TaskStatus
    ) -> bool:
        """Write new status only if the stored status is still expected.

        Returns True if this call performed the write, False if the stored
        status differed (or the task vanished). Raises StoreWriteException
        on store error.
        """

    async def create_many(self, tasks: list[CompanyTask]) -> None:
        """Persist new tasks in one batch (ids already assigned)."""


class ITaskTemplateRepository(Protocol):
    """Protocol for the task template catalogue."""

    async def list_templates(self, policy_type: str | None = None) -> list[TaskTemplate]:
        """Return templates (optionally for one policy type), ordered by sort_order."""
