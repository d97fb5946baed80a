# agentaria/infrastructure/external/automation_webhook.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from agentaria.config.settings import settings


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of the one onboarding POST.  Never raised, only logged."""

    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class AutomationWebhookClient:
    """
    Sends the consolidated onboarding record to the automation workflow.

    The call is fire-and-forget from the user's point of view: transport
    errors and non-2xx responses are turned into a failed
    ``SubmissionResult`` and never retried.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = settings.ONBOARDING_WEBHOOK_URL if url is None else url
        self.timeout = settings.ONBOARDING_WEBHOOK_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.url)

    async def submit(self, payload: dict[str, Any]) -> SubmissionResult:
        if not self.is_configured():
            logger.warning("Onboarding webhook URL not configured, submission skipped")
            return SubmissionResult(ok=False, error="webhook not configured")

        logger.info(
            "Onboarding webhook → POST for subscriber {} (document: {})",
            payload.get("subscriber_id"),
            payload.get("pdf_name") or "none",
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Onboarding webhook transport error: {!r}", exc)
            return SubmissionResult(ok=False, error=str(exc) or exc.__class__.__name__)

        if resp.status_code >= 400:
            logger.error(
                "Onboarding webhook HTTP error {}: {}",
                resp.status_code,
                resp.text[:500],
            )
            return SubmissionResult(
                ok=False,
                status_code=resp.status_code,
                error=f"HTTP {resp.status_code}",
            )

        logger.success("Onboarding webhook → accepted ({})", resp.status_code)
        return SubmissionResult(ok=True, status_code=resp.status_code)
