from aigency.application.services.dependency_evaluator import (
    find_dependency,
    is_dependency_satisfied,
    is_unblocked,
    select_unblocked,
)

__all__ = [
    "find_dependency",
    "is_dependency_satisfied",
    "is_unblocked",
    "select_unblocked",
]
