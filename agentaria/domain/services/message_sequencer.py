# agentaria/domain/services/message_sequencer.py
"""
Message sequencer for the onboarding chat.

Agent utterances are queued as ``Speak`` commands and consumed strictly in
order by a single drain coroutine: typing indicator on, simulated latency,
append to the transcript, short settle pause, next command.  User replies are
appended immediately.

The clock is injected so tests can run the whole script without real timers.
While a script is playing the input affordance is disabled; it is re-enabled
only after the last message of the step has been appended.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Protocol

from agentaria.domain.models.onboarding import OnboardingError, Speaker, Transcript

logger = logging.getLogger("onboarding.sequencer")

DEFAULT_TYPING_DELAY_MS = 1200
DEFAULT_SETTLE_MS = 280


class SequencerBusyError(OnboardingError):
    """Raised when a second drain is started while one is in flight."""


class Clock(Protocol):
    async def sleep(self, seconds: float) -> None: ...


class AsyncioClock:
    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(frozen=True)
class Speak:
    text: str
    delay_ms: int = DEFAULT_TYPING_DELAY_MS


class MessageSequencer:
    def __init__(
        self,
        transcript: Transcript,
        *,
        clock: Clock | None = None,
        settle_ms: int = DEFAULT_SETTLE_MS,
        delay_scale: float = 1.0,
    ) -> None:
        self.transcript = transcript
        self._clock = clock or AsyncioClock()
        self._settle_ms = settle_ms
        self._delay_scale = delay_scale
        self._queue: deque[Speak] = deque()
        self._draining = False
        self._input_ready = asyncio.Event()
        self.typing = False

    # -- input affordance ----------------------------------------------------

    @property
    def input_ready(self) -> bool:
        return self._input_ready.is_set()

    def enable_input(self) -> None:
        self._input_ready.set()

    def disable_input(self) -> None:
        self._input_ready.clear()

    async def wait_until_ready(self) -> None:
        await self._input_ready.wait()

    # -- timing --------------------------------------------------------------

    def _seconds(self, ms: int) -> float:
        return max(ms, 0) * self._delay_scale / 1000.0

    async def pause(self, ms: int) -> None:
        await self._clock.sleep(self._seconds(ms))

    # -- queue ---------------------------------------------------------------

    @property
    def pending(self) -> int:
        return len(self._queue)

    def enqueue(self, text: str, delay_ms: int = DEFAULT_TYPING_DELAY_MS) -> None:
        self._queue.append(Speak(text=text, delay_ms=delay_ms))
        self.disable_input()

    async def drain(self) -> int:
        """Play every queued command in order.  Returns how many were played."""
        if self._draining:
            raise SequencerBusyError("an agent message is already being sequenced")

        self._draining = True
        played = 0
        try:
            while self._queue:
                command = self._queue.popleft()
                await self._speak(command)
                played += 1
        finally:
            self._draining = False
            self.typing = False
        return played

    async def _speak(self, command: Speak) -> None:
        self.typing = True
        await self._clock.sleep(self._seconds(command.delay_ms))
        self.typing = False
        self.transcript.append(Speaker.AGENT, command.text)
        logger.debug("agent message appended (%d chars)", len(command.text))
        await self._clock.sleep(self._seconds(self._settle_ms))

    # -- public contract -----------------------------------------------------

    async def play_agent_message(self, text: str, delay_ms: int = DEFAULT_TYPING_DELAY_MS) -> None:
        self.enqueue(text, delay_ms)
        await self.drain()

    async def play_script(self, commands: Iterable[Speak]) -> None:
        """Play a step's messages, then make the input affordance available."""
        for command in commands:
            self._queue.append(command)
        self.disable_input()
        await self.drain()
        self.enable_input()

    def play_user_reply(self, text: str) -> None:
        self.transcript.append(Speaker.USER, text)
