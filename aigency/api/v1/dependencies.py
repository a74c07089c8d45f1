"""Presentation-layer dependency injection.

Use cases are assembled per request from the long-lived ServiceContainer
that create_app() stores on app.state (see aigency.core.container).
Routes depend only on these providers, never on infrastructure directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from aigency.application.interfaces.repositories import ITaskRepository
from aigency.application.use_cases.tasks import (
    InitializeRenewalUseCase,
    TaskStatusResolver,
    TaskStatusService,
)
from aigency.core.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_task_status_resolver(container: ContainerDep) -> TaskStatusResolver:
    return TaskStatusResolver(container.task_repo, container.trigger, container.scope_lock)


def get_task_status_service(
    container: ContainerDep,
    resolver: Annotated[TaskStatusResolver, Depends(get_task_status_resolver)],
) -> TaskStatusService:
    return TaskStatusService(container.task_repo, resolver, container.trigger)


def get_initialize_renewal_use_case(
    container: ContainerDep,
    resolver: Annotated[TaskStatusResolver, Depends(get_task_status_resolver)],
) -> InitializeRenewalUseCase:
    return InitializeRenewalUseCase(
        container.task_repo, container.template_repo, container.trigger, resolver
    )


def get_task_repo(container: ContainerDep) -> ITaskRepository:
    return container.task_repo
