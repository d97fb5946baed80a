# agentaria/domain/services/onboarding_finalizer.py
"""
Submission finalizer. Runs once, after step 7 commits (finish or skip).

  1. resolve branch / "Other" values from the session state
  2. base64-encode the attached document (failure → null, never fatal)
  3. build the flat payload
  4. POST it once to the automation webhook (no retry, outcome only logged)
  5. write the onboarding-complete flag and enter the terminal Done state
  6. after the display delay, redirect to the dashboard

Nothing here raises to the caller: encoding, network and store failures are
represented as result objects and logged.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from agentaria.domain.models.onboarding import (
    Document,
    Identity,
    OnboardingState,
    SubmissionState,
    SubscriberProfile,
)
from agentaria.domain.models.onboarding_payload import OnboardingPayload
from agentaria.domain.services.message_sequencer import MessageSequencer
from agentaria.domain.services.onboarding_script import FINISH_MESSAGE
from agentaria.infrastructure.external.automation_webhook import SubmissionResult

logger = logging.getLogger("onboarding.finalizer")


class ProfileStore(Protocol):
    async def get_profile(self, identity: Identity) -> SubscriberProfile: ...

    async def mark_onboarded(self, user_id: str) -> bool: ...


class WebhookClient(Protocol):
    async def submit(self, payload: dict[str, Any]) -> SubmissionResult: ...


@dataclass(frozen=True)
class EncodedDocument:
    ok: bool
    data: Optional[str] = None
    filename: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class FinalizeOutcome:
    payload: dict[str, Any]
    document: EncodedDocument
    submission: SubmissionResult
    onboarded_flag_written: bool


def encode_document(document: Optional[Document]) -> EncodedDocument:
    if document is None:
        return EncodedDocument(ok=True)
    try:
        data = base64.b64encode(document.content).decode("ascii")
    except (TypeError, ValueError, binascii.Error) as exc:
        logger.warning("Could not encode %r: %s", document.filename, exc)
        return EncodedDocument(ok=False, filename=document.filename, error=str(exc))
    return EncodedDocument(ok=True, data=data, filename=document.filename)


def build_payload(state: OnboardingState, document: EncodedDocument) -> dict[str, Any]:
    return OnboardingPayload(
        subscriber_id=state.identity.user_id,
        goal=state.goal or "",
        business_name=state.business_name,
        industry=state.resolved_industry,
        use_current_phone=state.use_current_phone,
        phone_number=state.phone_number,
        open_time=state.open_time,
        close_time=state.close_time,
        pdf_base64=document.data,
        pdf_name=document.filename,
        review_platform=state.resolved_review_platform,
        review_link=state.resolved_review_link,
    ).model_dump()


class SubmissionFinalizer:
    def __init__(
        self,
        state: OnboardingState,
        sequencer: MessageSequencer,
        *,
        webhook: WebhookClient,
        profile_store: ProfileStore,
        navigate: Callable[[str], None],
        dashboard_path: str = "/dashboard",
        done_display_ms: int = 3500,
        require_delivery: bool = False,
    ) -> None:
        self.state = state
        self.sequencer = sequencer
        self.webhook = webhook
        self.profile_store = profile_store
        self.navigate = navigate
        self.dashboard_path = dashboard_path
        self.done_display_ms = done_display_ms
        self.require_delivery = require_delivery
        self._entered = False

    async def run(self) -> Optional[FinalizeOutcome]:
        if self._entered or self.state.submission_state is not SubmissionState.NOT_SUBMITTED:
            logger.warning("Finalizer re-entered for %s, ignored", self.state.identity.user_id)
            return None
        self._entered = True
        self.state.submission_state = SubmissionState.SUBMITTING

        self.sequencer.disable_input()
        await self.sequencer.play_agent_message(FINISH_MESSAGE.text, FINISH_MESSAGE.delay_ms)

        document = encode_document(self.state.attached_document)
        payload = build_payload(self.state, document)
        submission = await self._submit(payload)
        self.state.submission_state = SubmissionState.SUBMITTED

        flag_written = await self._persist_completion(submission)

        self.state.mark_done()
        logger.info(
            "Onboarding done for %s (submitted=%s, flag=%s)",
            self.state.identity.user_id,
            submission.ok,
            flag_written,
        )

        await self.sequencer.pause(self.done_display_ms)
        self.navigate(self.dashboard_path)

        return FinalizeOutcome(
            payload=payload,
            document=document,
            submission=submission,
            onboarded_flag_written=flag_written,
        )

    async def _submit(self, payload: dict[str, Any]) -> SubmissionResult:
        try:
            result = await self.webhook.submit(payload)
        except Exception as exc:
            logger.exception("Onboarding submission failed unexpectedly")
            return SubmissionResult(ok=False, error=str(exc) or exc.__class__.__name__)
        if not result.ok:
            logger.warning("Onboarding submission not delivered: %s", result.error)
        return result

    async def _persist_completion(self, submission: SubmissionResult) -> bool:
        if self.require_delivery and not submission.ok:
            logger.warning(
                "Completion flag withheld for %s: submission not delivered",
                self.state.identity.user_id,
            )
            return False
        try:
            return await self.profile_store.mark_onboarded(self.state.identity.user_id)
        except Exception:
            logger.exception("Could not persist onboarding flag for %s", self.state.identity.user_id)
            return False
