"""Company API: list a company's tasks and initialize renewals from templates."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from aigency.api.v1.dependencies import get_initialize_renewal_use_case, get_task_repo
from aigency.application.interfaces.repositories import ITaskRepository
from aigency.application.use_cases.tasks import InitializeRenewalUseCase
from aigency.core.limiter import limit_writes
from aigency.schemas.task import (
    RenewalInitRequest,
    RenewalInitResponse,
    TaskListResponse,
    TaskResponse,
)

router = APIRouter()


@router.get("/{company_id}/tasks", response_model=TaskListResponse)
async def list_company_tasks(
    company_id: str,
    task_repo: Annotated[ITaskRepository, Depends(get_task_repo)],
    renewal_type: Annotated[str | None, Query(alias="renewalType")] = None,
) -> TaskListResponse:
    """List the company's tasks ordered by sortOrder, optionally for one renewal."""
    tasks = await task_repo.list_by_company(company_id, renewal_type)
    return TaskListResponse(
        company_id=company_id,
        renewal_type=renewal_type,
        items=[TaskResponse.from_entity(t) for t in tasks],
        total=len(tasks),
    )


@router.post("/{company_id}/renewals", response_model=RenewalInitResponse)
@limit_writes
async def initialize_renewal(
    request: Request,
    company_id: str,
    body: RenewalInitRequest,
    use_case: Annotated[InitializeRenewalUseCase, Depends(get_initialize_renewal_use_case)],
) -> RenewalInitResponse:
    """Create the renewal's tasks from templates; returns existing tasks unchanged if present."""
    result = await use_case.execute(company_id, body.renewal_type, policy_type=body.policy_type)
    return RenewalInitResponse(
        company_id=result.company_id,
        renewal_type=result.renewal_type,
        created=result.created,
        items=[TaskResponse.from_entity(t) for t in result.tasks],
        triggered_task_ids=result.triggered_ids,
    )
