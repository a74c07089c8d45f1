"""Task API: status updates, reconciliation sweeps and automation re-triggers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from aigency.api.v1.dependencies import (
    get_task_status_resolver,
    get_task_status_service,
)
from aigency.application.use_cases.tasks import TaskStatusResolver, TaskStatusService
from aigency.core.limiter import limit_refresh, limit_writes
from aigency.schemas.task import (
    RefreshStatusesRequest,
    RefreshStatusesResponse,
    TaskResponse,
    TaskStatusUpdateRequest,
    TaskStatusUpdateResponse,
    TaskTriggerResponse,
)

router = APIRouter()


@router.post("/update-status", response_model=TaskStatusUpdateResponse)
@limit_writes
async def update_task_status(
    request: Request,
    body: TaskStatusUpdateRequest,
    service: Annotated[TaskStatusService, Depends(get_task_status_service)],
) -> TaskStatusUpdateResponse:
    """Set a task's status; completing it unblocks and triggers its dependents.

    Failures while propagating are logged and do not change the response.
    """
    result = await service.set_task_status(body.task_id, body.status)
    status = result.task.status.value
    message = (
        f"Task status updated to {status}" if result.changed else f"Task status already {status}"
    )
    return TaskStatusUpdateResponse(
        message=message,
        task=TaskResponse.from_entity(result.task),
        unblocked_task_ids=result.outcome.transitioned_ids,
        triggered_task_ids=result.outcome.triggered_ids,
    )


@router.post("/refresh-statuses", response_model=RefreshStatusesResponse)
@limit_refresh
async def refresh_task_statuses(
    request: Request,
    body: RefreshStatusesRequest,
    resolver: Annotated[TaskStatusResolver, Depends(get_task_status_resolver)],
) -> RefreshStatusesResponse:
    """Move every stuck upcoming task whose dependencies are satisfied to needs_attention."""
    outcome = await resolver.reconcile(body.company_id, body.renewal_type)
    updated = len(outcome.transitioned_ids)
    return RefreshStatusesResponse(
        message=f"Updated {updated} task(s)" if updated else "All task statuses are correct",
        updated=updated,
        tasks=outcome.transitioned_ids,
        automated_triggered=len(outcome.triggered_ids),
        triggered_task_ids=outcome.triggered_ids,
        failed_task_ids=outcome.write_failed_ids,
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    service: Annotated[TaskStatusService, Depends(get_task_status_service)],
) -> TaskResponse:
    task = await service.get_task(task_id)
    return TaskResponse.from_entity(task)


@router.post("/{task_id}/trigger", response_model=TaskTriggerResponse)
@limit_writes
async def trigger_task_automation(
    request: Request,
    task_id: str,
    service: Annotated[TaskStatusService, Depends(get_task_status_service)],
) -> TaskTriggerResponse:
    """Re-send the automation signal for an automated task in needs_attention."""
    task = await service.retrigger_automation(task_id)
    return TaskTriggerResponse(message="Automation triggered", task_id=task.id)
