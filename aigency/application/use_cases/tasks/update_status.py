"""Status updates from people (the "mark task complete" action) and trigger retries."""

from __future__ import annotations

from aigency.application.dtos.task import ResolutionOutcome, StatusUpdateResult
from aigency.application.interfaces.repositories import ITaskRepository
from aigency.application.interfaces.services import IAutomationTrigger
from aigency.application.use_cases.tasks.resolve_dependents import TaskStatusResolver
from aigency.domain.entities.task import CompanyTask
from aigency.domain.enums import TaskStatus
from aigency.domain.exceptions import (
    AigencyException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    TriggerNotAllowedException,
)
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TaskStatusService:
    """Applies a requested status to one task, then propagates completion."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        resolver: TaskStatusResolver,
        trigger: IAutomationTrigger,
    ) -> None:
        self._task_repo = task_repo
        self._resolver = resolver
        self._trigger = trigger

    async def get_task(self, task_id: str) -> CompanyTask:
        task = await self._task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def set_task_status(self, task_id: str, raw_status: str) -> StatusUpdateResult:
        """Persist a status change and, on completion, unblock dependents.

        Args:
            task_id: Task to update.
            raw_status: Requested status; legacy spellings ("Complete") accepted.

        Returns:
            The updated task, its previous status, and what propagation did.

        Raises:
            ValidationException: If raw_status is not a known status.
            ResourceNotFoundException: If the task does not exist.
            InvalidStatusTransitionException: If the change would move the task backward,
                or unblock an upcoming task by hand.
            StoreWriteException: If the task's own status could not be written.
        """
        status = TaskStatus.parse(raw_status)
        task = await self.get_task(task_id)
        previous = task.status
        if status.rank < previous.rank:
            raise InvalidStatusTransitionException(task_id, previous.value, status.value)
        if previous is TaskStatus.UPCOMING and status is TaskStatus.NEEDS_ATTENTION:
            # Only dependency resolution unblocks a task; it also sends the trigger.
            raise InvalidStatusTransitionException(task_id, previous.value, status.value)
        if status is not previous:
            task = await self._task_repo.set_status(task_id, status)
            logger.info("Task %s status %s -> %s", task_id, previous.value, status.value)

        outcome = ResolutionOutcome()
        if status is TaskStatus.COMPLETED:
            # Runs on re-delivery too; the resolver is idempotent.
            outcome = await self._propagate(task_id)
        return StatusUpdateResult(task=task, previous_status=previous, outcome=outcome)

    async def _propagate(self, task_id: str) -> ResolutionOutcome:
        """Run the resolver; its failures never fail the status update itself."""
        try:
            return await self._resolver.on_task_completed(task_id)
        except AigencyException as e:
            logger.error(
                "Dependent resolution for task %s failed (%s): %s",
                task_id,
                e.error_code,
                e.message,
            )
        except Exception:
            logger.exception("Dependent resolution for task %s failed", task_id)
        return ResolutionOutcome()

    async def retrigger_automation(self, task_id: str) -> CompanyTask:
        """Re-send the trigger signal for an automated task waiting in needs_attention.

        Recovery path after a failed dispatch. Unlike propagation this is an
        explicit request, so it sends even if a signal went out before.

        Raises:
            ResourceNotFoundException: If the task does not exist.
            TriggerNotAllowedException: If the task is manual or not in needs_attention.
            TriggerDispatchException: If the signal could not be delivered.
        """
        task = await self.get_task(task_id)
        if not task.is_automated:
            raise TriggerNotAllowedException(task_id, "task is not automated")
        if task.status is not TaskStatus.NEEDS_ATTENTION:
            raise TriggerNotAllowedException(
                task_id, f"task status is {task.status.value}, expected needs_attention"
            )
        await self._trigger.dispatch(task.id, task.company_id)
        logger.info("Automation trigger re-sent for task %s", task_id)
        return task
