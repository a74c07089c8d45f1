"""Result DTOs for task status use cases (no dependency on the API layer)."""

from __future__ import annotations

from dataclasses import dataclass, field

from aigency.domain.entities.task import CompanyTask
from aigency.domain.enums import TaskStatus


@dataclass
class ResolutionOutcome:
    """What one propagation pass did.

    transitioned_ids: tasks moved upcoming -> needs_attention by this pass.
    triggered_ids: automated tasks whose trigger signal was delivered.
    write_failed_ids: marked tasks whose status write failed (left upcoming).
    trigger_failed_ids: transitioned automated tasks whose signal failed.
    """

    transitioned_ids: list[str] = field(default_factory=list)
    triggered_ids: list[str] = field(default_factory=list)
    write_failed_ids: list[str] = field(default_factory=list)
    trigger_failed_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StatusUpdateResult:
    """Result of setting a task's status through the API."""

    task: CompanyTask
    previous_status: TaskStatus
    outcome: ResolutionOutcome

    @property
    def changed(self) -> bool:
        return self.previous_status is not self.task.status


@dataclass(frozen=True)
class RenewalInitResult:
    """Tasks of an initialized renewal; created is False when they already existed."""

    company_id: str
    renewal_type: str
    tasks: list[CompanyTask]
    created: bool
    triggered_ids: list[str] = field(default_factory=list)
