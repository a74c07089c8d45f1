"""Composition root: build repositories, trigger and scope lock from settings.

create_app() builds one ServiceContainer and stores it on app.state;
request dependencies in aigency.api.v1.dependencies read it from there.
The lifespan closes the clients the container opened.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import redis.asyncio as redis

from aigency.application.interfaces.repositories import (
    ITaskRepository,
    ITaskTemplateRepository,
)
from aigency.application.interfaces.services import IAutomationTrigger, IScopeLock
from aigency.core.config import Settings
from aigency.infrastructure.external.automation import (
    HttpAutomationTrigger,
    LoggingAutomationTrigger,
)
from aigency.infrastructure.firebase._rest_client import FirestoreRESTClient
from aigency.infrastructure.locking import InProcessScopeLock, RedisScopeLock
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Long-lived collaborators shared by all requests."""

    task_repo: ITaskRepository
    template_repo: ITaskTemplateRepository
    trigger: IAutomationTrigger
    scope_lock: IScopeLock
    http_client: httpx.AsyncClient | None = None
    redis_client: redis.Redis | None = None
    firestore_client: FirestoreRESTClient | None = None
    _closed: bool = field(default=False, repr=False)

    async def aclose(self) -> None:
        """Close every client this container opened (idempotent)."""
        if self._closed:
            return
        self._closed = True
        if self.firestore_client is not None:
            await self.firestore_client.aclose()
            logger.info("Firestore client closed")
        if self.http_client is not None:
            await self.http_client.aclose()
            logger.info("Automation HTTP client closed")
        if self.redis_client is not None:
            await self.redis_client.aclose()
            logger.info("Redis client closed")


def _build_repositories(
    settings: Settings,
) -> tuple[ITaskRepository, ITaskTemplateRepository, FirestoreRESTClient | None]:
    if settings.database_backend == "memory":
        from aigency.infrastructure.memory import (
            InMemoryTaskRepository,
            InMemoryTaskTemplateRepository,
        )

        logger.warning("Using in-memory task store; tasks are lost on restart")
        return InMemoryTaskRepository(), InMemoryTaskTemplateRepository(), None

    from aigency.infrastructure.firebase import create_firestore_client
    from aigency.infrastructure.firebase.repositories import (
        FirestoreTaskRepository,
        FirestoreTaskTemplateRepository,
    )

    client = create_firestore_client(settings)
    return FirestoreTaskRepository(client), FirestoreTaskTemplateRepository(client), client


def _build_scope_lock(settings: Settings) -> tuple[IScopeLock, redis.Redis | None]:
    if settings.scope_lock_backend == "memory":
        return InProcessScopeLock(), None
    client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password.get_secret_value() if settings.redis_password else None,
        socket_connect_timeout=5,
        socket_keepalive=True,
    )
    logger.info("Scope lock on Redis %s:%s", settings.redis_host, settings.redis_port)
    lock = RedisScopeLock(
        client,
        timeout_seconds=settings.scope_lock_timeout_seconds,
        wait_seconds=settings.scope_lock_wait_seconds,
    )
    return lock, client


def build_container(settings: Settings) -> ServiceContainer:
    """Wire infrastructure for the configured backends.

    Raises:
        ValueError: If Firestore credentials are unusable.
    """
    task_repo, template_repo, firestore_client = _build_repositories(settings)
    scope_lock, redis_client = _build_scope_lock(settings)

    http_client: httpx.AsyncClient | None = None
    trigger: IAutomationTrigger
    if settings.automation_trigger_url:
        http_client = httpx.AsyncClient(timeout=settings.automation_trigger_timeout_seconds)
        trigger = HttpAutomationTrigger(
            http_client,
            settings.automation_trigger_url,
            timeout_seconds=settings.automation_trigger_timeout_seconds,
        )
    else:
        logger.warning("AUTOMATION_TRIGGER_URL not set; automation triggers are only logged")
        trigger = LoggingAutomationTrigger()

    return ServiceContainer(
        task_repo=task_repo,
        template_repo=template_repo,
        trigger=trigger,
        scope_lock=scope_lock,
        http_client=http_client,
        redis_client=redis_client,
        firestore_client=firestore_client,
    )
