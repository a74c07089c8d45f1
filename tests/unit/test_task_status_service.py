"""TaskStatusService: status normalization, monotonic moves, propagation and re-trigger."""

from unittest.mock import AsyncMock

import pytest

from aigency.application.use_cases.tasks import TaskStatusResolver, TaskStatusService
from aigency.domain.enums import TaskKind, TaskStatus
from aigency.domain.exceptions import (
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    ScopeLockTimeoutException,
    TriggerNotAllowedException,
    ValidationException,
)
from aigency.infrastructure.locking import InProcessScopeLock
from aigency.infrastructure.memory import InMemoryTaskRepository


@pytest.fixture
def service_for(trigger):
    def build(tasks) -> tuple[TaskStatusService, InMemoryTaskRepository]:
        repo = InMemoryTaskRepository(tasks)
        resolver = TaskStatusResolver(repo, trigger, InProcessScopeLock())
        return TaskStatusService(repo, resolver, trigger), repo

    return build


async def test_completing_task_unblocks_dependents(service_for, make_task, trigger) -> None:
    svc, repo = service_for(
        [
            make_task("A", TaskStatus.NEEDS_ATTENTION),
            make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        ]
    )
    result = await svc.set_task_status("A", "Complete")

    assert result.changed
    assert result.previous_status is TaskStatus.NEEDS_ATTENTION
    assert result.task.status is TaskStatus.COMPLETED
    assert result.task.completed_at is not None
    assert result.outcome.transitioned_ids == ["B"]
    assert trigger.task_ids == ["B"]


async def test_redelivered_completion_is_safe(service_for, make_task, trigger) -> None:
    svc, _ = service_for(
        [
            make_task("A", TaskStatus.NEEDS_ATTENTION),
            make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        ]
    )
    await svc.set_task_status("A", "completed")
    again = await svc.set_task_status("A", "completed")

    assert not again.changed
    assert again.outcome.transitioned_ids == []
    assert trigger.task_ids == ["B"]


async def test_upcoming_can_complete_directly(service_for, make_task) -> None:
    svc, _ = service_for([make_task("A", TaskStatus.UPCOMING)])
    result = await svc.set_task_status("A", "completed")
    assert result.task.status is TaskStatus.COMPLETED


async def test_same_status_does_not_propagate(service_for, make_task) -> None:
    svc, repo = service_for(
        [make_task("A", TaskStatus.NEEDS_ATTENTION), make_task("B", dependencies=("A",))]
    )
    result = await svc.set_task_status("A", "Needs attention")

    assert not result.changed
    assert result.outcome.transitioned_ids == []
    assert (await repo.get_by_id("B")).status is TaskStatus.UPCOMING


async def test_upcoming_cannot_be_unblocked_by_hand(service_for, make_task, trigger) -> None:
    svc, repo = service_for(
        [make_task("A"), make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED)]
    )
    with pytest.raises(InvalidStatusTransitionException):
        await svc.set_task_status("B", "needs_attention")
    assert (await repo.get_by_id("B")).status is TaskStatus.UPCOMING

    await svc.set_task_status("A", "completed")

    assert (await repo.get_by_id("B")).status is TaskStatus.NEEDS_ATTENTION
    assert trigger.task_ids == ["B"]


async def test_backward_move_is_rejected(service_for, make_task) -> None:
    svc, repo = service_for([make_task("A", TaskStatus.COMPLETED)])
    with pytest.raises(InvalidStatusTransitionException):
        await svc.set_task_status("A", "upcoming")
    assert (await repo.get_by_id("A")).status is TaskStatus.COMPLETED


async def test_unknown_status_is_rejected(service_for, make_task) -> None:
    svc, _ = service_for([make_task("A")])
    with pytest.raises(ValidationException):
        await svc.set_task_status("A", "done")


async def test_missing_task(service_for) -> None:
    svc, _ = service_for([])
    with pytest.raises(ResourceNotFoundException):
        await svc.set_task_status("nope", "completed")


async def test_resolver_failure_does_not_fail_update(make_task, trigger) -> None:
    repo = InMemoryTaskRepository([make_task("A", TaskStatus.NEEDS_ATTENTION)])
    resolver = AsyncMock(spec=TaskStatusResolver)
    resolver.on_task_completed.side_effect = ScopeLockTimeoutException("company-1", 10.0)
    svc = TaskStatusService(repo, resolver, trigger)

    result = await svc.set_task_status("A", "completed")

    assert result.task.status is TaskStatus.COMPLETED
    assert result.outcome.transitioned_ids == []


async def test_unexpected_resolver_error_is_contained(make_task, trigger) -> None:
    repo = InMemoryTaskRepository([make_task("A", TaskStatus.NEEDS_ATTENTION)])
    resolver = AsyncMock(spec=TaskStatusResolver)
    resolver.on_task_completed.side_effect = RuntimeError("boom")
    svc = TaskStatusService(repo, resolver, trigger)

    result = await svc.set_task_status("A", "completed")

    assert result.task.status is TaskStatus.COMPLETED


async def test_retrigger_automated_task(service_for, make_task, trigger) -> None:
    svc, _ = service_for([make_task("B", TaskStatus.NEEDS_ATTENTION, kind=TaskKind.AUTOMATED)])
    await svc.retrigger_automation("B")
    assert trigger.calls == [("B", "company-1")]


@pytest.mark.parametrize(
    "status, kind",
    [
        (TaskStatus.NEEDS_ATTENTION, TaskKind.MANUAL),
        (TaskStatus.UPCOMING, TaskKind.AUTOMATED),
        (TaskStatus.COMPLETED, TaskKind.AUTOMATED),
    ],
)
async def test_retrigger_not_allowed(service_for, make_task, trigger, status, kind) -> None:
    svc, _ = service_for([make_task("B", status, kind=kind)])
    with pytest.raises(TriggerNotAllowedException):
        await svc.retrigger_automation("B")
    assert trigger.calls == []
