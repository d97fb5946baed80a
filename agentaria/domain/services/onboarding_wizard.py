# agentaria/domain/services/onboarding_wizard.py
"""
Onboarding wizard. Owns one scripted chat run from bootstrap to Done.

Lifecycle::

    start()  one-shot: resolve identity (redirect to login when absent),
             read the prefilled profile, spawn the run coroutine
    _run()   for each step: play its script, wait for a commit, move on;
             after step 7 hand over to the SubmissionFinalizer
    act()    called by the UI; routes an action to the active step's
             collector and, on a commit, echoes the reply and wakes _run()

A single coroutine drives the steps, so no two steps are ever active at the
same time; user actions only mutate drafts until a collector commits.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol
from uuid import uuid4

from agentaria.domain.models.onboarding import (
    Identity,
    OnboardingState,
    Step,
    SubscriberProfile,
    TOTAL_STEPS,
)
from agentaria.domain.services.message_sequencer import AsyncioClock, Clock, MessageSequencer
from agentaria.domain.services.onboarding_collectors import Commit, InputCollector, build_collectors
from agentaria.domain.services.onboarding_finalizer import (
    FinalizeOutcome,
    ProfileStore,
    SubmissionFinalizer,
    WebhookClient,
)
from agentaria.domain.services.onboarding_script import next_step, script_for

logger = logging.getLogger("onboarding.wizard")


class IdentityProvider(Protocol):
    async def get_current_identity(self) -> Optional[Identity]: ...


@dataclass(frozen=True)
class WizardOptions:
    delay_scale: float = 1.0
    start_delay_ms: int = 600
    settle_ms: int = 280
    transition_ms: int = 400
    done_display_ms: int = 3500
    login_path: str = "/login"
    dashboard_path: str = "/dashboard"
    max_document_bytes: int = 25 * 1024 * 1024
    require_delivery: bool = False
    enforce_hours_order: bool = False

    @classmethod
    def from_settings(cls, settings) -> "WizardOptions":
        return cls(
            delay_scale=settings.TYPING_DELAY_SCALE,
            start_delay_ms=settings.ONBOARDING_START_DELAY_MS,
            settle_ms=settings.ONBOARDING_MESSAGE_SETTLE_MS,
            transition_ms=settings.ONBOARDING_STEP_TRANSITION_MS,
            done_display_ms=settings.ONBOARDING_DONE_DISPLAY_MS,
            login_path=settings.LOGIN_PATH,
            dashboard_path=settings.DASHBOARD_PATH,
            max_document_bytes=settings.MAX_DOCUMENT_BYTES,
            require_delivery=settings.ONBOARDING_REQUIRE_DELIVERY,
            enforce_hours_order=settings.ONBOARDING_ENFORCE_HOURS_ORDER,
        )


class OnboardingWizard:
    def __init__(
        self,
        *,
        identity_provider: IdentityProvider,
        profile_store: ProfileStore,
        webhook: WebhookClient,
        clock: Clock | None = None,
        navigate: Callable[[str], None] | None = None,
        options: WizardOptions | None = None,
    ) -> None:
        self.run_id = uuid4().hex
        self.options = options or WizardOptions()
        self._identity_provider = identity_provider
        self._profile_store = profile_store
        self._webhook = webhook
        self._clock = clock or AsyncioClock()
        self._navigate_hook = navigate

        self.state: Optional[OnboardingState] = None
        self.sequencer: Optional[MessageSequencer] = None
        self.collectors: dict[Step, InputCollector] = {}
        self.finalizer: Optional[SubmissionFinalizer] = None
        self.outcome: Optional[FinalizeOutcome] = None
        self.redirect_to: Optional[str] = None

        self._started = False
        self._commits: asyncio.Queue[Commit] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> bool:
        """Initialise and launch the run.  Only the first call does anything.

        Returns True when this call launched the run; False when the wizard
        was already started or the user is not authenticated (in which case
        ``redirect_to`` holds the login path).
        """
        if self._started:
            logger.debug("Wizard %s already started, ignoring", self.run_id)
            return False
        self._started = True

        identity = await self._identity_provider.get_current_identity()
        if identity is None:
            logger.info("Onboarding %s: no authenticated user, redirecting", self.run_id)
            self._navigate(self.options.login_path)
            return False

        profile = await self._load_profile(identity)
        opts = self.options

        self.state = OnboardingState(identity=identity, profile=profile)
        self.sequencer = MessageSequencer(
            self.state.transcript,
            clock=self._clock,
            settle_ms=opts.settle_ms,
            delay_scale=opts.delay_scale,
        )
        self.collectors = build_collectors(
            self.state,
            max_document_bytes=opts.max_document_bytes,
            enforce_hours_order=opts.enforce_hours_order,
        )
        self.finalizer = SubmissionFinalizer(
            self.state,
            self.sequencer,
            webhook=self._webhook,
            profile_store=self._profile_store,
            navigate=self._navigate,
            dashboard_path=opts.dashboard_path,
            done_display_ms=opts.done_display_ms,
            require_delivery=opts.require_delivery,
        )

        self._task = asyncio.create_task(self._run(), name=f"onboarding-{self.run_id}")
        self._task.add_done_callback(self._on_run_finished)
        logger.info("Onboarding %s started for %s", self.run_id, identity.user_id)
        return True

    async def _load_profile(self, identity: Identity) -> SubscriberProfile:
        try:
            return await self._profile_store.get_profile(identity)
        except Exception:
            logger.exception("Profile lookup failed for %s, using defaults", identity.user_id)
            return SubscriberProfile.from_record(None, None, None, identity.email)

    def _navigate(self, path: str) -> None:
        self.redirect_to = path
        if self._navigate_hook is not None:
            self._navigate_hook(path)

    # ------------------------------------------------------------------
    # Step loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        state, sequencer = self.state, self.sequencer

        await sequencer.pause(self.options.start_delay_ms)

        step: Optional[Step] = Step.GOAL
        while step is not None:
            state.enter_step(step)
            await sequencer.play_script(script_for(step, state))

            commit = await self._commits.get()
            logger.info(
                "Onboarding %s: step %d/%d committed%s",
                self.run_id,
                int(commit.step),
                TOTAL_STEPS,
                " (skipped)" if commit.skipped else "",
            )

            step = next_step(step)
            if step is not None:
                await sequencer.pause(self.options.transition_ms)

        self.outcome = await self.finalizer.run()

    def _on_run_finished(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.info("Onboarding %s cancelled", self.run_id)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Onboarding %s crashed: %r", self.run_id, exc)

    async def wait_until_ready(self) -> None:
        """Wait until the active step accepts input."""
        await self.sequencer.wait_until_ready()

    @property
    def finished(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait_finished(self) -> None:
        if self._task is not None:
            await self._task

    def cancel(self) -> None:
        if self.sequencer is not None:
            self.sequencer.disable_input()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    @property
    def active_collector(self) -> Optional[InputCollector]:
        if self.state is None or self.state.done or self.state.current_step == 0:
            return None
        return self.collectors[Step(self.state.current_step)]

    @property
    def input_ready(self) -> bool:
        return (
            self.sequencer is not None
            and self.sequencer.input_ready
            and not self.state.done
        )

    def act(self, action: str, value: Any = None) -> Optional[Commit]:
        """Apply a UI action to the active step.

        Returns the ``Commit`` when the action finalised the step; ``None``
        when it only changed the draft or was ignored because input is not
        ready (typing, finished, or already committed).
        """
        if not self.input_ready:
            return None

        collector = self.active_collector
        commit = collector.apply(action, value)
        if commit is None:
            return None

        self.sequencer.disable_input()
        self.sequencer.play_user_reply(commit.echo)
        self._commits.put_nowait(commit)
        return commit

    @property
    def advance_enabled(self) -> bool:
        collector = self.active_collector
        return self.input_ready and collector is not None and collector.can_advance()

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        state = self.state
        if state is None:
            return {
                "run_id": self.run_id,
                "started": self._started,
                "redirect_to": self.redirect_to,
                "step": 0,
                "total_steps": TOTAL_STEPS,
                "typing": False,
                "input_ready": False,
                "advance_enabled": False,
                "done": False,
                "submission_state": None,
                "transcript": [],
            }
        return {
            "run_id": self.run_id,
            "started": self._started,
            "redirect_to": self.redirect_to,
            "step": state.current_step,
            "total_steps": TOTAL_STEPS,
            "typing": self.sequencer.typing,
            "input_ready": self.input_ready,
            "advance_enabled": self.advance_enabled,
            "done": state.done,
            "submission_state": state.submission_state.value,
            "transcript": [
                {"speaker": entry.speaker.value, "text": entry.text}
                for entry in state.transcript
            ],
        }
