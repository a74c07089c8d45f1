"""TaskStatusResolver: transitions, triggers, idempotency and failure isolation."""

import asyncio

import pytest

from aigency.application.use_cases.tasks import TaskStatusResolver
from aigency.domain.enums import TaskKind, TaskStatus
from aigency.domain.exceptions import StoreWriteException
from aigency.infrastructure.locking import InProcessScopeLock
from aigency.infrastructure.memory import InMemoryTaskRepository


class FlakyTaskRepository(InMemoryTaskRepository):
    """In-memory store whose compare-and-set fails for selected task ids."""

    def __init__(self, tasks, failing_ids) -> None:
        super().__init__(tasks)
        self.failing_ids = set(failing_ids)

    async def compare_and_set_status(self, task_id, expected, new) -> bool:
        if task_id in self.failing_ids:
            raise StoreWriteException(task_id, "deadline exceeded")
        return await super().compare_and_set_status(task_id, expected, new)


def _resolver(repo, trigger) -> TaskStatusResolver:
    return TaskStatusResolver(repo, trigger, InProcessScopeLock())


async def _status(repo: InMemoryTaskRepository, task_id: str) -> TaskStatus:
    return (await repo.get_by_id(task_id)).status


@pytest.fixture
def chain(make_task):
    """A completed; B <- A; C <- B; D has no dependencies."""
    return [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",)),
        make_task("C", dependencies=("B",)),
        make_task("D"),
    ]


async def test_completion_unblocks_direct_dependents_only(chain, trigger) -> None:
    repo = InMemoryTaskRepository(chain)
    transitioned = await _resolver(repo, trigger).resolve_dependents("A", chain)

    assert sorted(transitioned) == ["B", "D"]
    assert await _status(repo, "B") is TaskStatus.NEEDS_ATTENTION
    assert await _status(repo, "C") is TaskStatus.UPCOMING
    assert await _status(repo, "D") is TaskStatus.NEEDS_ATTENTION
    assert trigger.calls == []


async def test_second_pass_is_a_no_op(chain, trigger) -> None:
    repo = InMemoryTaskRepository(chain)
    resolver = _resolver(repo, trigger)
    await resolver.resolve_dependents("A", chain)

    scope = await repo.list_by_company("company-1")
    assert await resolver.resolve_dependents("A", scope) == []


async def test_stale_scope_does_not_transition_twice(chain, trigger, make_task) -> None:
    """A replayed event with an outdated snapshot loses the compare-and-set."""
    chain[1] = make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED)
    repo = InMemoryTaskRepository(chain)
    resolver = _resolver(repo, trigger)

    first = await resolver.resolve_dependents("A", chain)
    second = await resolver.resolve_dependents("A", chain)

    assert "B" in first
    assert second == []
    assert trigger.task_ids == ["B"]


async def test_completing_middle_of_chain_unblocks_next(chain, trigger) -> None:
    repo = InMemoryTaskRepository(chain)
    resolver = _resolver(repo, trigger)
    await resolver.resolve_dependents("A", chain)
    await repo.set_status("B", TaskStatus.COMPLETED)

    outcome = await resolver.on_task_completed("B")

    assert outcome.transitioned_ids == ["C"]


async def test_automated_dependent_is_triggered_once(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
    ]
    repo = InMemoryTaskRepository(tasks)
    outcome = await _resolver(repo, trigger).on_task_completed("A")

    assert outcome.triggered_ids == ["B"]
    assert trigger.calls == [("B", "company-1")]


async def test_queued_automated_dependency_satisfies_dependent(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", TaskStatus.NEEDS_ATTENTION, kind=TaskKind.AUTOMATED),
        make_task("C", dependencies=("B",)),
    ]
    repo = InMemoryTaskRepository(tasks)
    assert await _resolver(repo, trigger).resolve_dependents("A", tasks) == ["C"]


async def test_numeric_reference_resolves_against_template_id(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED, template_id="7"),
        make_task("B", dependencies=(7,)),
    ]
    repo = InMemoryTaskRepository(tasks)
    assert await _resolver(repo, trigger).resolve_dependents("A", tasks) == ["B"]


async def test_other_company_is_never_touched(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED, template_id="1"),
        make_task("B", dependencies=("1",)),
        # Same template ids in another company.
        make_task("A2", TaskStatus.COMPLETED, template_id="1", company_id="company-2"),
        make_task("B2", dependencies=("1",), company_id="company-2"),
        make_task("E2", company_id="company-2"),
    ]
    repo = InMemoryTaskRepository(tasks)
    transitioned = await _resolver(repo, trigger).resolve_dependents("A", tasks)

    assert transitioned == ["B"]
    assert await _status(repo, "B2") is TaskStatus.UPCOMING
    assert await _status(repo, "E2") is TaskStatus.UPCOMING


async def test_unknown_completed_task_yields_nothing(chain, trigger) -> None:
    repo = InMemoryTaskRepository(chain)
    resolver = _resolver(repo, trigger)
    assert await resolver.resolve_dependents("missing", chain) == []
    assert (await resolver.on_task_completed("missing")).transitioned_ids == []


async def test_dangling_reference_stays_blocked(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A", "deleted-task")),
    ]
    repo = InMemoryTaskRepository(tasks)
    assert await _resolver(repo, trigger).resolve_dependents("A", tasks) == []
    assert await _status(repo, "B") is TaskStatus.UPCOMING


async def test_store_write_failure_skips_only_that_task(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        make_task("C", dependencies=("A",), kind=TaskKind.AUTOMATED),
    ]
    repo = FlakyTaskRepository(tasks, failing_ids={"B"})
    outcome = await _resolver(repo, trigger).on_task_completed("A")

    assert outcome.write_failed_ids == ["B"]
    assert outcome.transitioned_ids == ["C"]
    assert trigger.task_ids == ["C"]
    assert await _status(repo, "B") is TaskStatus.UPCOMING


async def test_trigger_failure_keeps_transition(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        make_task("C", dependencies=("A",), kind=TaskKind.AUTOMATED),
    ]
    trigger.fail_ids = {"B"}
    repo = InMemoryTaskRepository(tasks)
    outcome = await _resolver(repo, trigger).on_task_completed("A")

    assert outcome.transitioned_ids == ["B", "C"]
    assert outcome.trigger_failed_ids == ["B"]
    assert outcome.triggered_ids == ["C"]
    assert await _status(repo, "B") is TaskStatus.NEEDS_ATTENTION


async def test_concurrent_completions_trigger_once(make_task, trigger) -> None:
    """Two completions arriving together both see D unblocked; only one may move it."""
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", TaskStatus.COMPLETED),
        make_task("D", dependencies=("A", "B"), kind=TaskKind.AUTOMATED),
    ]
    repo = InMemoryTaskRepository(tasks)
    resolver = _resolver(repo, trigger)

    results = await asyncio.gather(
        resolver.on_task_completed("A"),
        resolver.on_task_completed("B"),
        resolver.resolve_dependents("A", tasks),
    )

    transitions = [tid for outcome in results[:2] for tid in outcome.transitioned_ids] + results[2]
    assert transitions == ["D"]
    assert trigger.task_ids == ["D"]


async def test_reconcile_repairs_stuck_tasks(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        make_task("C", dependencies=("B",)),
        make_task("X", renewal_type="auto"),
    ]
    repo = InMemoryTaskRepository(tasks)
    outcome = await _resolver(repo, trigger).reconcile("company-1", "workers-comp")

    assert outcome.transitioned_ids == ["B"]
    assert outcome.triggered_ids == ["B"]
    assert await _status(repo, "X") is TaskStatus.UPCOMING


async def test_reconcile_follows_queued_automation_on_next_sweep(make_task, trigger) -> None:
    tasks = [
        make_task("A", TaskStatus.COMPLETED),
        make_task("B", dependencies=("A",), kind=TaskKind.AUTOMATED),
        make_task("C", dependencies=("B",)),
    ]
    repo = InMemoryTaskRepository(tasks)
    resolver = _resolver(repo, trigger)
    await resolver.reconcile("company-1")

    outcome = await resolver.reconcile("company-1")

    assert outcome.transitioned_ids == ["C"]
    assert trigger.task_ids == ["B"]
