"""In-process stores for local development and tests."""

from aigency.infrastructure.memory.task_repo_memory import (
    InMemoryTaskRepository,
    InMemoryTaskTemplateRepository,
)

__all__ = ["InMemoryTaskRepository", "InMemoryTaskTemplateRepository"]
