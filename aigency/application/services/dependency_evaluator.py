"""Dependency evaluation over one company's tasks.

Pure functions: given a snapshot of every task in a company's scope, decide
which `upcoming` tasks have all of their prerequisites satisfied. Nothing
here reads or writes the store; the resolver applies the result.
"""

from __future__ import annotations

from collections.abc import Sequence

from aigency.domain.entities.task import CompanyTask, DependencyRef
from aigency.domain.enums import TaskStatus
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def find_dependency(
    ref: DependencyRef, scope: Sequence[CompanyTask]
) -> CompanyTask | None:
    """Return the task a dependency reference points at, or None.

    An exact id match wins over a template id match, so a task id that
    happens to equal some template id still resolves to that task.
    """
    for task in scope:
        if task.id == ref:
            return task
    for task in scope:
        if task.is_referenced_by(ref):
            return task
    return None


def is_dependency_satisfied(dependency: CompanyTask) -> bool:
    """Return whether a prerequisite no longer blocks its dependents.

    Completed tasks satisfy. An automated task that is queued
    (needs_attention) also satisfies, so manual review steps after it are
    shown while the executor runs.
    """
    if dependency.status is TaskStatus.COMPLETED:
        return True
    return dependency.status is TaskStatus.NEEDS_ATTENTION and dependency.is_automated


def is_unblocked(task: CompanyTask, scope: Sequence[CompanyTask]) -> bool:
    """Return whether every dependency of task resolves in scope and is satisfied.

    Evaluation stops at the first unresolved or unsatisfied reference. A
    task without dependencies is unblocked.
    """
    for ref in task.dependencies:
        dependency = find_dependency(ref, scope)
        if dependency is None:
            logger.debug(
                "Dependency %r of task %s not found in company %s; treating as unsatisfied",
                ref,
                task.id,
                task.company_id,
            )
            return False
        if not is_dependency_satisfied(dependency):
            return False
    return True


def select_unblocked(scope: Sequence[CompanyTask]) -> list[CompanyTask]:
    """Return the upcoming tasks of scope whose dependencies are all satisfied.

    Tasks already in needs_attention or completed are never returned, which
    is what makes repeated propagation passes idempotent. Order follows
    scope.
    """
    return [
        task
        for task in scope
        if task.status is TaskStatus.UPCOMING and is_unblocked(task, scope)
    ]
