from aigency.application.use_cases.tasks.initialize_renewal import InitializeRenewalUseCase
from aigency.application.use_cases.tasks.resolve_dependents import TaskStatusResolver
from aigency.application.use_cases.tasks.update_status import TaskStatusService

__all__ = ["InitializeRenewalUseCase", "TaskStatusResolver", "TaskStatusService"]
