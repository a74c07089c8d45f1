"""Company task and task template entities.

A template is the reusable definition of a renewal step; a company task is
one instance of it for a company's renewal. Tasks reference their
prerequisites through `dependencies`, where each reference is either
another task's id or its template id (older documents hold numeric
template ids, newer ones strings).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from aigency.domain.enums import TaskKind, TaskStatus

DependencyRef = str | int


@dataclass(frozen=True)
class CompanyTask:
    """One task of a company's renewal workflow."""

    id: str
    company_id: str
    name: str
    status: TaskStatus
    kind: TaskKind
    dependencies: tuple[DependencyRef, ...] = ()
    template_id: DependencyRef | None = None
    renewal_type: str | None = None
    policy_type: str | None = None
    phase: str | None = None
    description: str = ""
    sort_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_automated(self) -> bool:
        return self.kind is TaskKind.AUTOMATED

    def belongs_to_company(self, company_id: str) -> bool:
        """Return whether this task is part of the given company's scope."""
        return self.company_id == company_id

    def is_referenced_by(self, ref: DependencyRef) -> bool:
        """Return whether a dependency reference points at this task.

        A reference matches the task id, or the template id compared both
        as-is and as strings (5 matches "5").
        """
        if ref == self.id:
            return True
        if self.template_id is None:
            return False
        return ref == self.template_id or str(ref) == str(self.template_id)

    def with_status(self, status: TaskStatus, *, at: datetime) -> CompanyTask:
        """Return a copy with a new status; completing stamps completed_at."""
        return replace(
            self,
            status=status,
            updated_at=at,
            completed_at=at if status is TaskStatus.COMPLETED else self.completed_at,
        )


@dataclass(frozen=True)
class TaskTemplate:
    """Definition a company task is instantiated from."""

    id: str
    name: str
    kind: TaskKind
    dependencies: tuple[DependencyRef, ...] = field(default_factory=tuple)
    description: str = ""
    phase: str | None = None
    policy_type: str | None = None
    sort_order: int = 0
