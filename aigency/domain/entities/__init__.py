from aigency.domain.entities.task import CompanyTask, DependencyRef, TaskTemplate

__all__ = ["CompanyTask", "DependencyRef", "TaskTemplate"]
