"""Firestore-backed task template catalogue (implements ITaskTemplateRepository)."""

from __future__ import annotations

from typing import Any

from aigency.domain.entities.task import TaskTemplate
from aigency.domain.enums import TaskKind
from aigency.infrastructure.firebase import collections as c
from aigency.infrastructure.firebase._rest_client import FirestoreRESTClient
from aigency.shared.utils.datetime import utc_now


def template_from_fields(template_id: str, data: dict[str, Any]) -> TaskTemplate:
    """Map template document fields (camelCase, as stored) to a TaskTemplate."""
    return TaskTemplate(
        id=str(template_id),
        name=data.get(c.FIELD_TASK_NAME) or "",
        kind=TaskKind.parse(data.get(c.FIELD_TAG)),
        dependencies=tuple(data.get(c.FIELD_DEPENDENCIES) or ()),
        description=data.get(c.FIELD_DESCRIPTION) or "",
        phase=data.get(c.FIELD_PHASE),
        policy_type=data.get(c.FIELD_POLICY_TYPE),
        sort_order=int(data.get(c.FIELD_SORT_ORDER) or 0),
    )


def template_to_fields(template: TaskTemplate) -> dict[str, Any]:
    return {
        c.FIELD_TASK_NAME: template.name,
        c.FIELD_TAG: template.kind.storage_tag,
        c.FIELD_DEPENDENCIES: list(template.dependencies),
        c.FIELD_DESCRIPTION: template.description,
        c.FIELD_PHASE: template.phase,
        c.FIELD_POLICY_TYPE: template.policy_type,
        c.FIELD_SORT_ORDER: template.sort_order,
        c.FIELD_UPDATED_AT: utc_now(),
    }


class FirestoreTaskTemplateRepository:
    """Templates in the tasks collection."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(c.COLLECTION_TASK_TEMPLATES)

    async def list_templates(self, policy_type: str | None = None) -> list[TaskTemplate]:
        """Return templates sorted by sortOrder, optionally for one policy type."""
        if policy_type is None:
            snapshots = self._coll.stream()
        else:
            snapshots = self._coll.where(c.FIELD_POLICY_TYPE, "==", policy_type).stream()
        templates = [template_from_fields(s.id, s.to_dict()) async for s in snapshots]
        return sorted(templates, key=lambda t: t.sort_order)

    async def upsert(self, template: TaskTemplate) -> None:
        """Create or overwrite the template's fields (other fields are kept)."""
        await self._coll.document(template.id).update(
            template_to_fields(template), must_exist=False
        )
