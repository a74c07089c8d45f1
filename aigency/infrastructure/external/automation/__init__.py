"""Automated-task executor integration."""

from aigency.infrastructure.external.automation.http_trigger import (
    HttpAutomationTrigger,
    LoggingAutomationTrigger,
)

__all__ = ["HttpAutomationTrigger", "LoggingAutomationTrigger"]
