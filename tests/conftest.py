"""Pytest configuration and fixtures for aigency.

The app runs on the in-memory task store and the in-process scope lock;
Firestore and the automation executor are replaced by fakes. Env is set
before aigency is imported so the module-level app builds with it.
"""

import os

os.environ["DATABASE_BACKEND"] = "memory"
os.environ["SCOPE_LOCK_BACKEND"] = "memory"
os.environ.pop("AUTOMATION_TRIGGER_URL", None)

from collections.abc import Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from aigency.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from aigency.core.container import ServiceContainer  # noqa: E402
from aigency.core.limiter import limiter  # noqa: E402
from aigency.domain.entities.task import CompanyTask, TaskTemplate  # noqa: E402
from aigency.domain.enums import TaskKind, TaskStatus  # noqa: E402
from aigency.domain.exceptions import TriggerDispatchException  # noqa: E402
from aigency.infrastructure.locking import InProcessScopeLock  # noqa: E402
from aigency.infrastructure.memory import (  # noqa: E402
    InMemoryTaskRepository,
    InMemoryTaskTemplateRepository,
)
from aigency.main import create_app  # noqa: E402

COMPANY_ID = "company-1"


class RecordingTrigger:
    """Automation trigger fake: records dispatches, fails for ids in fail_ids."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_ids: set[str] = set()

    async def dispatch(self, task_id: str, company_id: str) -> None:
        if task_id in self.fail_ids:
            raise TriggerDispatchException(task_id, "executor unavailable")
        self.calls.append((task_id, company_id))

    @property
    def task_ids(self) -> list[str]:
        return [task_id for task_id, _ in self.calls]


def _make_task(
    task_id: str,
    status: TaskStatus = TaskStatus.UPCOMING,
    dependencies: tuple = (),
    *,
    kind: TaskKind = TaskKind.MANUAL,
    template_id: str | int | None = None,
    company_id: str = COMPANY_ID,
    renewal_type: str | None = "workers-comp",
    sort_order: int = 0,
) -> CompanyTask:
    return CompanyTask(
        id=task_id,
        company_id=company_id,
        name=f"Task {task_id}",
        status=status,
        kind=kind,
        dependencies=tuple(dependencies),
        template_id=template_id,
        renewal_type=renewal_type,
        sort_order=sort_order,
    )


@pytest.fixture
def make_task() -> Callable[..., CompanyTask]:
    """Factory for CompanyTask with test defaults (company-1, manual, upcoming)."""
    return _make_task


@pytest.fixture
def trigger() -> RecordingTrigger:
    return RecordingTrigger()


@pytest.fixture
def task_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def templates() -> list[TaskTemplate]:
    """A small workers-comp renewal: collect -> (review, draft[automated]) -> send."""
    return [
        TaskTemplate(id="1", name="Collect payroll", kind=TaskKind.MANUAL, sort_order=1, policy_type="workers-comp"),
        TaskTemplate(
            id="2",
            name="Review loss runs",
            kind=TaskKind.MANUAL,
            dependencies=(1,),
            sort_order=2,
            policy_type="workers-comp",
        ),
        TaskTemplate(
            id="3",
            name="Draft submission",
            kind=TaskKind.AUTOMATED,
            dependencies=("1",),
            sort_order=3,
            policy_type="workers-comp",
        ),
        TaskTemplate(
            id="4",
            name="Send submission",
            kind=TaskKind.MANUAL,
            dependencies=("2", "3"),
            sort_order=4,
            policy_type="workers-comp",
        ),
        TaskTemplate(id="9", name="Gather fleet list", kind=TaskKind.AUTOMATED, sort_order=1, policy_type="auto"),
    ]


@pytest.fixture
def container(
    task_repo: InMemoryTaskRepository,
    templates: list[TaskTemplate],
    trigger: RecordingTrigger,
) -> ServiceContainer:
    return ServiceContainer(
        task_repo=task_repo,
        template_repo=InMemoryTaskTemplateRepository(templates),
        trigger=trigger,
        scope_lock=InProcessScopeLock(),
    )


@pytest.fixture
async def client(container: ServiceContainer) -> AsyncClient:
    """Async HTTP client against a fresh app wired to the test container (ASGI)."""
    limiter.reset()
    app = create_app(container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
