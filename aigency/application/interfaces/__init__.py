from aigency.application.interfaces.repositories import (
    ITaskRepository,
    ITaskTemplateRepository,
)
from aigency.application.interfaces.services import IAutomationTrigger, IScopeLock

__all__ = [
    "IAutomationTrigger",
    "IScopeLock",
    "ITaskRepository",
    "ITaskTemplateRepository",
]
