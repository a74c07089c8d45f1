"""Task status resolver: propagate completion to dependent tasks.

When a task completes, every `upcoming` task of the same company whose
dependencies are now satisfied moves to `needs_attention`, and each
automated one gets exactly one trigger signal.

Exactly-once rests on two guards:
- the company's scope lock serializes load, evaluation and writes;
- every write is compare-and-set (upcoming -> needs_attention), and a
  trigger is sent only for writes this pass actually performed.
A redelivered completion event therefore finds nothing left to do.
"""

from __future__ import annotations

from collections.abc import Sequence

from aigency.application.dtos.task import ResolutionOutcome
from aigency.application.interfaces.repositories import ITaskRepository
from aigency.application.interfaces.services import IAutomationTrigger, IScopeLock
from aigency.application.services.dependency_evaluator import select_unblocked
from aigency.domain.entities.task import CompanyTask
from aigency.domain.enums import TaskStatus
from aigency.domain.exceptions import StoreWriteException, TriggerDispatchException
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TaskStatusResolver:
    """Decides which tasks a completion unblocks and applies the transitions."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        trigger: IAutomationTrigger,
        scope_lock: IScopeLock,
    ) -> None:
        self._task_repo = task_repo
        self._trigger = trigger
        self._scope_lock = scope_lock

    async def resolve_dependents(
        self, completed_task_id: str, tasks_in_scope: Sequence[CompanyTask]
    ) -> list[str]:
        """Transition the tasks unblocked by completed_task_id; return their ids.

        tasks_in_scope is the caller's full view of the company. Tasks of
        other companies in it are ignored. An unknown completed_task_id is
        logged and yields no transitions.
        """
        completed = next((t for t in tasks_in_scope if t.id == completed_task_id), None)
        if completed is None:
            logger.warning(
                "Completed task %s not found in scope; no dependents resolved",
                completed_task_id,
            )
            return []
        async with self._scope_lock.hold(completed.company_id):
            transitioned, outcome = await self._apply(completed, tasks_in_scope)
        await self._dispatch_triggers(transitioned, outcome)
        return outcome.transitioned_ids

    async def on_task_completed(self, task_id: str) -> ResolutionOutcome:
        """Load the completed task's company and propagate (the completion event handler).

        The caller must already have persisted the task as completed.
        """
        task = await self._task_repo.get_by_id(task_id)
        if task is None:
            logger.warning("Completed task %s not found in store; no dependents resolved", task_id)
            return ResolutionOutcome()
        async with self._scope_lock.hold(task.company_id):
            scope = await self._task_repo.list_by_company(task.company_id)
            transitioned, outcome = await self._apply(task, scope)
        await self._dispatch_triggers(transitioned, outcome)
        return outcome

    async def reconcile(
        self, company_id: str, renewal_type: str | None = None
    ) -> ResolutionOutcome:
        """Sweep a company for stuck upcoming tasks whose dependencies are satisfied.

        Same evaluation as a completion event, without a completed task:
        used to repair tasks left upcoming by a lost event.
        """
        async with self._scope_lock.hold(company_id):
            scope = await self._task_repo.list_by_company(company_id, renewal_type)
            transitioned, outcome = await self._transition(select_unblocked(scope))
        await self._dispatch_triggers(transitioned, outcome)
        logger.info(
            "Reconciled company %s (renewal %s): %d transitioned",
            company_id,
            renewal_type or "*",
            len(outcome.transitioned_ids),
        )
        return outcome

    async def _apply(
        self, completed: CompanyTask, tasks_in_scope: Sequence[CompanyTask]
    ) -> tuple[list[CompanyTask], ResolutionOutcome]:
        scope = [t for t in tasks_in_scope if t.belongs_to_company(completed.company_id)]
        candidates = select_unblocked(scope)
        logger.info(
            "Task %s (template %s) completed: %d of %d tasks in company %s unblocked",
            completed.id,
            completed.template_id,
            len(candidates),
            len(scope),
            completed.company_id,
        )
        return await self._transition(candidates)

    async def _transition(
        self, candidates: Sequence[CompanyTask]
    ) -> tuple[list[CompanyTask], ResolutionOutcome]:
        """Compare-and-set each candidate; a failed write skips only that task."""
        outcome = ResolutionOutcome()
        transitioned: list[CompanyTask] = []
        for task in candidates:
            try:
                won = await self._task_repo.compare_and_set_status(
                    task.id, TaskStatus.UPCOMING, TaskStatus.NEEDS_ATTENTION
                )
            except StoreWriteException as e:
                logger.error("Could not transition task %s: %s", task.id, e.message)
                outcome.write_failed_ids.append(task.id)
                continue
            if not won:
                logger.info("Task %s already left upcoming; skipping", task.id)
                continue
            logger.info("Task %s (%s) -> needs_attention", task.id, task.name)
            outcome.transitioned_ids.append(task.id)
            transitioned.append(task)
        return transitioned, outcome

    async def _dispatch_triggers(
        self, transitioned: Sequence[CompanyTask], outcome: ResolutionOutcome
    ) -> None:
        for task in transitioned:
            if not task.is_automated:
                continue
            try:
                await self._trigger.dispatch(task.id, task.company_id)
            except TriggerDispatchException as e:
                logger.error(
                    "Automation trigger for task %s failed; task stays needs_attention: %s",
                    task.id,
                    e.message,
                )
                outcome.trigger_failed_ids.append(task.id)
                continue
            outcome.triggered_ids.append(task.id)
