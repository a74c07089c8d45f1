"""In-memory task and template stores (DATABASE_BACKEND=memory, tests).

Same contracts as the Firestore repositories. Writes happen under one
asyncio.Lock so compare_and_set_status is atomic within the process.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from aigency.domain.entities.task import CompanyTask, TaskTemplate
from aigency.domain.enums import TaskStatus
from aigency.domain.exceptions import ResourceNotFoundException, StoreWriteException
from aigency.shared.utils.datetime import utc_now


class InMemoryTaskRepository:
    """Task store backed by a dict keyed by task id."""

    def __init__(self, tasks: Iterable[CompanyTask] = ()) -> None:
        self._tasks: dict[str, CompanyTask] = {t.id: t for t in tasks}
        self._lock = asyncio.Lock()

    async def get_by_id(self, task_id: str) -> CompanyTask | None:
        return self._tasks.get(task_id)

    async def list_by_company(
        self, company_id: str, renewal_type: str | None = None
    ) -> list[CompanyTask]:
        tasks = [
            t
            for t in self._tasks.values()
            if t.belongs_to_company(company_id)
            and (renewal_type is None or t.renewal_type == renewal_type)
        ]
        return sorted(tasks, key=lambda t: t.sort_order)

    async def set_status(self, task_id: str, status: TaskStatus) -> CompanyTask:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise ResourceNotFoundException("task", task_id)
            updated = task.with_status(status, at=utc_now())
            self._tasks[task_id] = updated
            return updated

    async def compare_and_set_status(
        self, task_id: str, expected: TaskStatus, new: TaskStatus
    ) -> bool:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task is None or task.status is not expected:
                return False
            self._tasks[task_id] = task.with_status(new, at=utc_now())
            return True

    async def create_many(self, tasks: list[CompanyTask]) -> None:
        async with self._lock:
            for task in tasks:
                if task.id in self._tasks:
                    raise StoreWriteException(task.id, "task already exists")
            self._tasks.update({t.id: t for t in tasks})


class InMemoryTaskTemplateRepository:
    """Template catalogue held in memory."""

    def __init__(self, templates: Iterable[TaskTemplate] = ()) -> None:
        self._templates = list(templates)

    async def list_templates(self, policy_type: str | None = None) -> list[TaskTemplate]:
        templates = [
            t for t in self._templates if policy_type is None or t.policy_type == policy_type
        ]
        return sorted(templates, key=lambda t: t.sort_order)
