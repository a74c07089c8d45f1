from aigency.application.dtos.task import (
    RenewalInitResult,
    ResolutionOutcome,
    StatusUpdateResult,
)

__all__ = ["RenewalInitResult", "ResolutionOutcome", "StatusUpdateResult"]
