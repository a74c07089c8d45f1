"""Firestore-backed company task repository (implements ITaskRepository)."""

from __future__ import annotations

from typing import Any

import httpx

from aigency.domain.entities.task import CompanyTask
from aigency.domain.enums import TaskKind, TaskStatus
from aigency.domain.exceptions import (
    ResourceNotFoundException,
    StoreWriteException,
    ValidationException,
)
from aigency.infrastructure.firebase import collections as c
from aigency.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentSnapshot,
    FirestoreRESTClient,
    PreconditionFailedError,
)
from aigency.shared.telemetry.logging import get_logger
from aigency.shared.utils.datetime import coerce_utc, utc_now

logger = get_logger(__name__)


def task_from_snapshot(snapshot: DocumentSnapshot) -> CompanyTask:
    """Map a companyTasks document to a CompanyTask.

    Raises:
        ValidationException: If the stored status is not a known spelling.
    """
    data = snapshot.to_dict()
    return CompanyTask(
        id=snapshot.id,
        company_id=data.get(c.FIELD_COMPANY_ID, ""),
        name=data.get(c.FIELD_TASK_NAME) or "",
        status=TaskStatus.parse(data.get(c.FIELD_STATUS)),
        kind=TaskKind.parse(data.get(c.FIELD_TAG)),
        dependencies=tuple(data.get(c.FIELD_DEPENDENCIES) or ()),
        template_id=data.get(c.FIELD_TEMPLATE_ID),
        renewal_type=data.get(c.FIELD_RENEWAL_TYPE),
        policy_type=data.get(c.FIELD_POLICY_TYPE),
        phase=data.get(c.FIELD_PHASE),
        description=data.get(c.FIELD_DESCRIPTION) or "",
        sort_order=int(data.get(c.FIELD_SORT_ORDER) or 0),
        created_at=coerce_utc(data.get(c.FIELD_CREATED_AT)),
        updated_at=coerce_utc(data.get(c.FIELD_UPDATED_AT)),
        completed_at=coerce_utc(data.get(c.FIELD_COMPLETED_AT)),
    )


def task_to_document(task: CompanyTask) -> dict[str, Any]:
    """Map a CompanyTask to companyTasks document fields."""
    return {
        c.FIELD_COMPANY_ID: task.company_id,
        c.FIELD_TASK_NAME: task.name,
        c.FIELD_STATUS: task.status.value,
        c.FIELD_TAG: task.kind.storage_tag,
        c.FIELD_DEPENDENCIES: list(task.dependencies),
        c.FIELD_TEMPLATE_ID: task.template_id,
        c.FIELD_RENEWAL_TYPE: task.renewal_type,
        c.FIELD_POLICY_TYPE: task.policy_type,
        c.FIELD_PHASE: task.phase,
        c.FIELD_DESCRIPTION: task.description,
        c.FIELD_SORT_ORDER: task.sort_order,
        c.FIELD_CREATED_AT: task.created_at,
        c.FIELD_UPDATED_AT: task.updated_at,
        c.FIELD_COMPLETED_AT: task.completed_at,
    }


class FirestoreTaskRepository:
    """Company tasks in the companyTasks collection."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(c.COLLECTION_COMPANY_TASKS)

    async def get_by_id(self, task_id: str) -> CompanyTask | None:
        try:
            snapshot = await self._coll.document(task_id).get()
        except httpx.HTTPError as e:
            raise StoreWriteException(task_id, f"read failed: {e}") from e
        if snapshot is None:
            return None
        return task_from_snapshot(snapshot)

    async def list_by_company(
        self, company_id: str, renewal_type: str | None = None
    ) -> list[CompanyTask]:
        """Return the company's tasks sorted by sort_order.

        Documents with an unrecognized status are left out (logged); any
        dependency on them then stays unsatisfied.
        """
        query = self._coll.where(c.FIELD_COMPANY_ID, "==", company_id)
        if renewal_type is not None:
            query = query.where(c.FIELD_RENEWAL_TYPE, "==", renewal_type)
        tasks: list[CompanyTask] = []
        async for snapshot in query.stream():
            try:
                tasks.append(task_from_snapshot(snapshot))
            except ValidationException as e:
                logger.warning("Skipping task %s of company %s: %s", snapshot.id, company_id, e.message)
        return sorted(tasks, key=lambda t: t.sort_order)

    async def set_status(self, task_id: str, status: TaskStatus) -> CompanyTask:
        now = utc_now()
        fields: dict[str, Any] = {c.FIELD_STATUS: status.value, c.FIELD_UPDATED_AT: now}
        if status is TaskStatus.COMPLETED:
            fields[c.FIELD_COMPLETED_AT] = now
        try:
            snapshot = await self._coll.document(task_id).update(fields)
        except (httpx.HTTPError, PreconditionFailedError) as e:
            raise StoreWriteException(task_id, str(e)) from e
        if snapshot is None:
            raise ResourceNotFoundException("task", task_id)
        return task_from_snapshot(snapshot)

    async def compare_and_set_status(
        self, task_id: str, expected: TaskStatus, new: TaskStatus
    ) -> bool:
        """Read the task, then write only if nobody modified it since (updateTime precondition)."""
        ref = self._coll.document(task_id)
        try:
            snapshot = await ref.get()
            if snapshot is None:
                logger.warning("Task %s disappeared before its status write", task_id)
                return False
            current = TaskStatus.parse(snapshot.to_dict().get(c.FIELD_STATUS))
            if current is not expected:
                return False
            await ref.update(
                {c.FIELD_STATUS: new.value, c.FIELD_UPDATED_AT: utc_now()},
                last_update_time=snapshot.update_time,
            )
        except PreconditionFailedError:
            logger.info("Task %s changed concurrently; status write skipped", task_id)
            return False
        except (httpx.HTTPError, ValidationException) as e:
            raise StoreWriteException(task_id, str(e)) from e
        return True

    async def create_many(self, tasks: list[CompanyTask]) -> None:
        try:
            await self._client.create_all(
                [(self._coll.document(t.id), task_to_document(t)) for t in tasks]
            )
        except (httpx.HTTPError, DocumentExistsError) as e:
            raise StoreWriteException(",".join(t.id for t in tasks), str(e)) from e
