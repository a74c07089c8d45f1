"""Initialize a company's renewal: instantiate its tasks from templates."""

from __future__ import annotations

from aigency.application.dtos.task import RenewalInitResult
from aigency.application.interfaces.repositories import (
    ITaskRepository,
    ITaskTemplateRepository,
)
from aigency.application.interfaces.services import IAutomationTrigger
from aigency.application.use_cases.tasks.resolve_dependents import TaskStatusResolver
from aigency.domain.entities.task import CompanyTask, DependencyRef, TaskTemplate
from aigency.domain.enums import TaskStatus
from aigency.domain.exceptions import (
    AigencyException,
    TriggerDispatchException,
    ValidationException,
)
from aigency.shared.telemetry.logging import get_logger
from aigency.shared.utils.datetime import utc_now
from aigency.shared.utils.generators import generate_task_id

logger = get_logger(__name__)


class InitializeRenewalUseCase:
    """Creates one task per template for (company, renewal type).

    Template references in dependencies are rewritten to the new task ids
    at creation, so instances of this renewal reference each other by id
    only. The template id is still stored on each task for older clients.

    Tasks without dependencies start in needs_attention. A reconcile pass
    then unblocks tasks whose only prerequisites are queued automated tasks.
    """

    def __init__(
        self,
        task_repo: ITaskRepository,
        template_repo: ITaskTemplateRepository,
        trigger: IAutomationTrigger,
        resolver: TaskStatusResolver,
    ) -> None:
        self._task_repo = task_repo
        self._template_repo = template_repo
        self._trigger = trigger
        self._resolver = resolver

    async def execute(
        self,
        company_id: str,
        renewal_type: str,
        *,
        policy_type: str | None = None,
    ) -> RenewalInitResult:
        """Create the renewal's tasks, or return the existing ones.

        Args:
            company_id: Owning company.
            renewal_type: Renewal (e.g. "workers-comp") the tasks belong to.
            policy_type: Optional template filter.

        Returns:
            RenewalInitResult; created is False when tasks already existed.

        Raises:
            ValidationException: If no templates match.
        """
        existing = await self._task_repo.list_by_company(company_id, renewal_type)
        if existing:
            logger.info(
                "Renewal %s for company %s already has %d tasks; not re-creating",
                renewal_type,
                company_id,
                len(existing),
            )
            return RenewalInitResult(company_id, renewal_type, existing, created=False)

        templates = await self._template_repo.list_templates(policy_type)
        if not templates:
            raise ValidationException(
                f"No task templates found for policy type {policy_type!r}",
                field="policy_type",
            )

        tasks = self._instantiate(company_id, renewal_type, policy_type, templates)
        await self._task_repo.create_many(tasks)
        logger.info(
            "Created %d tasks for company %s renewal %s", len(tasks), company_id, renewal_type
        )

        triggered: list[str] = []
        for task in tasks:
            if task.status is TaskStatus.NEEDS_ATTENTION and task.is_automated:
                try:
                    await self._trigger.dispatch(task.id, company_id)
                except TriggerDispatchException as e:
                    logger.error("Initial trigger for task %s failed: %s", task.id, e.message)
                    continue
                triggered.append(task.id)

        try:
            outcome = await self._resolver.reconcile(company_id, renewal_type)
        except AigencyException as e:
            # Tasks are created; a later refresh repairs what this pass missed.
            logger.error(
                "Initial reconcile for company %s renewal %s failed (%s): %s",
                company_id,
                renewal_type,
                e.error_code,
                e.message,
            )
        else:
            triggered.extend(outcome.triggered_ids)
            if outcome.transitioned_ids:
                tasks = await self._task_repo.list_by_company(company_id, renewal_type)
        return RenewalInitResult(
            company_id, renewal_type, tasks, created=True, triggered_ids=triggered
        )

    def _instantiate(
        self,
        company_id: str,
        renewal_type: str,
        policy_type: str | None,
        templates: list[TaskTemplate],
    ) -> list[CompanyTask]:
        ids_by_template = {str(t.id): generate_task_id() for t in templates}
        now = utc_now()
        tasks: list[CompanyTask] = []
        for template in templates:
            dependencies = tuple(
                self._canonical_ref(ref, template, ids_by_template)
                for ref in template.dependencies
            )
            tasks.append(
                CompanyTask(
                    id=ids_by_template[str(template.id)],
                    company_id=company_id,
                    name=template.name,
                    # Nothing to wait for: actionable from the start.
                    status=TaskStatus.UPCOMING if dependencies else TaskStatus.NEEDS_ATTENTION,
                    kind=template.kind,
                    dependencies=dependencies,
                    template_id=template.id,
                    renewal_type=renewal_type,
                    policy_type=template.policy_type or policy_type,
                    phase=template.phase,
                    description=template.description,
                    sort_order=template.sort_order,
                    created_at=now,
                    updated_at=now,
                )
            )
        return tasks

    @staticmethod
    def _canonical_ref(
        ref: DependencyRef, template: TaskTemplate, ids_by_template: dict[str, str]
    ) -> DependencyRef:
        task_id = ids_by_template.get(str(ref))
        if task_id is None:
            logger.warning(
                "Template %s depends on unknown template %r; the task will stay blocked on it",
                template.id,
                ref,
            )
            return ref
        return task_id
