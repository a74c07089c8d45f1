"""Automated-task executor triggers (implement IAutomationTrigger).

The executor is a callable HTTP function. It takes `{"data": {...}}` and
runs the task out of band; the response only acknowledges receipt.
"""

from __future__ import annotations

import httpx

from aigency.domain.exceptions import TriggerDispatchException
from aigency.shared.telemetry.logging import get_logger
from aigency.shared.telemetry.request_context import get_correlation_id

logger = get_logger(__name__)


class HttpAutomationTrigger:
    """POST a start signal for one task to the executor URL."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        *,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http_client
        self._url = url
        self._timeout = timeout_seconds

    async def dispatch(self, task_id: str, company_id: str) -> None:
        payload = {"data": {"taskId": task_id, "companyId": company_id}}
        headers = {}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id
        try:
            resp = await self._http.post(
                self._url, json=payload, headers=headers, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            raise TriggerDispatchException(task_id, f"{type(e).__name__}: {e}") from e
        if resp.status_code >= 400:
            raise TriggerDispatchException(task_id, f"executor responded {resp.status_code}")
        logger.info("Automation triggered for task %s (company %s)", task_id, company_id)


class LoggingAutomationTrigger:
    """Used when no executor URL is configured: the signal is only logged."""

    async def dispatch(self, task_id: str, company_id: str) -> None:
        logger.info(
            "AUTOMATION_TRIGGER_URL not set; would trigger task %s (company %s)",
            task_id,
            company_id,
        )
