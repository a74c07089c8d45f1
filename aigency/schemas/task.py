"""Task API schemas.

Wire names are camelCase (taskId, companyId, renewalType) as the web
client sends them; snake_case is accepted on input too.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from aigency.domain.entities.task import CompanyTask


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase aliases, either spelling accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskStatusUpdateRequest(CamelModel):
    """Body of POST /tasks/update-status."""

    task_id: str = Field(..., min_length=1, description="Company task id")
    status: str = Field(..., min_length=1, description="Requested status; legacy spellings accepted")


class TaskResponse(CamelModel):
    """One company task."""

    id: str
    company_id: str
    name: str
    status: str
    kind: str
    tag: str
    dependencies: list[str | int]
    template_id: str | int | None = None
    renewal_type: str | None = None
    policy_type: str | None = None
    phase: str | None = None
    description: str = ""
    sort_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, task: CompanyTask) -> TaskResponse:
        return cls(
            id=task.id,
            company_id=task.company_id,
            name=task.name,
            status=task.status.value,
            kind=task.kind.value,
            tag=task.kind.storage_tag,
            dependencies=list(task.dependencies),
            template_id=task.template_id,
            renewal_type=task.renewal_type,
            policy_type=task.policy_type,
            phase=task.phase,
            description=task.description,
            sort_order=task.sort_order,
            created_at=task.created_at,
            updated_at=task.updated_at,
            completed_at=task.completed_at,
        )


class TaskStatusUpdateResponse(CamelModel):
    """Result of a status update; unblocked ids are the dependents moved to needs_attention."""

    success: bool = True
    message: str
    task: TaskResponse
    unblocked_task_ids: list[str] = Field(default_factory=list)
    triggered_task_ids: list[str] = Field(default_factory=list)


class RefreshStatusesRequest(CamelModel):
    """Body of POST /tasks/refresh-statuses."""

    company_id: str = Field(..., min_length=1)
    renewal_type: str | None = None


class RefreshStatusesResponse(CamelModel):
    """Result of a reconciliation sweep."""

    success: bool = True
    message: str
    updated: int
    tasks: list[str] = Field(default_factory=list, description="Ids moved to needs_attention")
    automated_triggered: int = 0
    triggered_task_ids: list[str] = Field(default_factory=list)
    failed_task_ids: list[str] = Field(
        default_factory=list, description="Ids whose status write failed (still upcoming)"
    )


class TaskTriggerResponse(CamelModel):
    """Result of an explicit automation re-trigger."""

    success: bool = True
    message: str
    task_id: str


class TaskListResponse(CamelModel):
    """Tasks of one company, ordered by sortOrder."""

    company_id: str
    renewal_type: str | None = None
    items: list[TaskResponse]
    total: int


class RenewalInitRequest(CamelModel):
    """Body of POST /companies/{company_id}/renewals."""

    renewal_type: str = Field(..., min_length=1)
    policy_type: str | None = None

    @field_validator("renewal_type")
    @classmethod
    def strip_renewal_type(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("renewalType must not be blank")
        return v


class RenewalInitResponse(CamelModel):
    """Tasks of the renewal; created is False when they already existed."""

    company_id: str
    renewal_type: str
    created: bool
    items: list[TaskResponse]
    triggered_task_ids: list[str] = Field(default_factory=list)
