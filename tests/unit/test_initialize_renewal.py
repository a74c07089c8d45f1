"""InitializeRenewalUseCase: task instantiation from templates."""

import pytest

from aigency.application.use_cases.tasks import InitializeRenewalUseCase, TaskStatusResolver
from aigency.domain.entities.task import TaskTemplate
from aigency.domain.enums import TaskKind, TaskStatus
from aigency.domain.exceptions import TriggerDispatchException, ValidationException
from aigency.infrastructure.locking import InProcessScopeLock
from aigency.infrastructure.memory import (
    InMemoryTaskRepository,
    InMemoryTaskTemplateRepository,
)


def _use_case(task_repo, templates, trigger) -> InitializeRenewalUseCase:
    resolver = TaskStatusResolver(task_repo, trigger, InProcessScopeLock())
    return InitializeRenewalUseCase(
        task_repo, InMemoryTaskTemplateRepository(templates), trigger, resolver
    )


@pytest.fixture
def use_case(task_repo, templates, trigger) -> InitializeRenewalUseCase:
    return _use_case(task_repo, templates, trigger)


async def test_creates_one_task_per_template(use_case, task_repo) -> None:
    result = await use_case.execute("company-1", "wc-2025", policy_type="workers-comp")

    assert result.created
    assert [t.name for t in result.tasks] == [
        "Collect payroll",
        "Review loss runs",
        "Draft submission",
        "Send submission",
    ]
    stored = await task_repo.list_by_company("company-1", "wc-2025")
    assert [t.id for t in stored] == [t.id for t in result.tasks]


async def test_dependencies_are_rewritten_to_task_ids(use_case) -> None:
    result = await use_case.execute("company-1", "wc-2025", policy_type="workers-comp")
    by_template = {str(t.template_id): t for t in result.tasks}

    collect = by_template["1"]
    assert by_template["2"].dependencies == (collect.id,)
    assert by_template["3"].dependencies == (collect.id,)
    assert by_template["4"].dependencies == (by_template["2"].id, by_template["3"].id)


async def test_initial_statuses(use_case) -> None:
    result = await use_case.execute("company-1", "wc-2025", policy_type="workers-comp")
    statuses = {t.name: t.status for t in result.tasks}

    assert statuses["Collect payroll"] is TaskStatus.NEEDS_ATTENTION
    assert statuses["Review loss runs"] is TaskStatus.UPCOMING
    assert statuses["Send submission"] is TaskStatus.UPCOMING


async def test_zero_dependency_automated_task_is_triggered(use_case, trigger) -> None:
    result = await use_case.execute("company-1", "auto-2025", policy_type="auto")

    assert len(result.tasks) == 1
    assert result.triggered_ids == [result.tasks[0].id]
    assert trigger.calls == [(result.tasks[0].id, "company-1")]


async def test_existing_renewal_is_returned_unchanged(use_case, trigger) -> None:
    first = await use_case.execute("company-1", "auto-2025", policy_type="auto")
    second = await use_case.execute("company-1", "auto-2025", policy_type="auto")

    assert not second.created
    assert [t.id for t in second.tasks] == [t.id for t in first.tasks]
    assert len(trigger.calls) == 1


async def test_no_templates(use_case) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await use_case.execute("company-1", "gl-2025", policy_type="general-liability")
    assert exc_info.value.details == {"field": "policy_type"}


async def test_unknown_template_reference_is_kept(trigger) -> None:
    templates = [
        TaskTemplate(id="1", name="Only", kind=TaskKind.MANUAL, dependencies=("99",)),
    ]
    use_case = _use_case(InMemoryTaskRepository(), templates, trigger)
    result = await use_case.execute("company-1", "r1")

    assert result.tasks[0].dependencies == ("99",)
    assert result.tasks[0].status is TaskStatus.UPCOMING


async def test_trigger_failure_does_not_abort_initialization(use_case, trigger, task_repo) -> None:
    async def failing_dispatch(task_id: str, company_id: str) -> None:
        raise TriggerDispatchException(task_id, "down")

    trigger.dispatch = failing_dispatch
    result = await use_case.execute("company-1", "auto-2025", policy_type="auto")

    assert result.created
    assert result.triggered_ids == []
    assert len(await task_repo.list_by_company("company-1")) == 1


async def test_task_after_queued_automated_task_is_unblocked(trigger) -> None:
    templates = [
        TaskTemplate(id="1", name="Pull loss runs", kind=TaskKind.AUTOMATED, sort_order=1),
        TaskTemplate(
            id="2", name="Review loss runs", kind=TaskKind.MANUAL, dependencies=("1",), sort_order=2
        ),
    ]
    task_repo = InMemoryTaskRepository()
    result = await _use_case(task_repo, templates, trigger).execute("company-1", "wc-2025")

    statuses = {str(t.template_id): t.status for t in result.tasks}
    assert statuses == {"1": TaskStatus.NEEDS_ATTENTION, "2": TaskStatus.NEEDS_ATTENTION}
    stored = await task_repo.list_by_company("company-1", "wc-2025")
    assert all(t.status is TaskStatus.NEEDS_ATTENTION for t in stored)
    automated = next(t for t in result.tasks if t.is_automated)
    assert result.triggered_ids == [automated.id]
    assert trigger.task_ids == [automated.id]


async def test_queued_automated_dependency_is_triggered_once(trigger) -> None:
    templates = [
        TaskTemplate(id="1", name="Pull loss runs", kind=TaskKind.AUTOMATED, sort_order=1),
        TaskTemplate(
            id="2", name="Score loss runs", kind=TaskKind.AUTOMATED, dependencies=("1",), sort_order=2
        ),
    ]
    result = await _use_case(InMemoryTaskRepository(), templates, trigger).execute(
        "company-1", "wc-2025"
    )

    ids = {str(t.template_id): t.id for t in result.tasks}
    assert result.triggered_ids == [ids["1"], ids["2"]]
    assert trigger.task_ids == [ids["1"], ids["2"]]
