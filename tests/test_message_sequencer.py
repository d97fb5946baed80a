# tests/test_message_sequencer.py
"""Tests for the ordered agent-message sequencer."""

import pytest

from agentaria.domain.models.onboarding import Speaker, Transcript
from agentaria.domain.services.message_sequencer import (
    MessageSequencer,
    SequencerBusyError,
    Speak,
)


def _sequencer(clock, **kwargs):
    return MessageSequencer(Transcript(), clock=clock, **kwargs)


def test_agent_message_waits_then_appends(event_loop, fake_clock):
    seq = _sequencer(fake_clock, settle_ms=280)

    event_loop.run_until_complete(seq.play_agent_message("Hello", 800))

    assert seq.transcript.texts(Speaker.AGENT) == ["Hello"]
    # typing delay then settle pause
    assert fake_clock.sleeps == [0.8, 0.28]
    assert seq.typing is False


def test_script_messages_are_played_in_order(event_loop, fake_clock):
    seq = _sequencer(fake_clock)

    event_loop.run_until_complete(
        seq.play_script([Speak("one", 100), Speak("two", 200), Speak("three", 300)])
    )

    assert seq.transcript.texts() == ["one", "two", "three"]
    assert seq.pending == 0


def test_input_disabled_while_script_plays(event_loop, fake_clock):
    seq = _sequencer(fake_clock)
    observed = []

    class ObservingClock:
        async def sleep(self, seconds):
            observed.append(seq.input_ready)
            await fake_clock.sleep(seconds)

    seq._clock = ObservingClock()
    seq.enable_input()

    event_loop.run_until_complete(seq.play_script([Speak("a", 10), Speak("b", 10)]))

    assert observed and not any(observed)
    assert seq.input_ready is True


def test_single_agent_message_does_not_enable_input(event_loop, fake_clock):
    seq = _sequencer(fake_clock)
    event_loop.run_until_complete(seq.play_agent_message("done soon", 10))
    assert seq.input_ready is False


def test_typing_flag_is_on_during_delay(event_loop, fake_clock):
    seq = _sequencer(fake_clock, settle_ms=0)
    typing_seen = []

    class ObservingClock:
        async def sleep(self, seconds):
            typing_seen.append(seq.typing)

    seq._clock = ObservingClock()
    event_loop.run_until_complete(seq.play_agent_message("hi", 500))

    assert typing_seen == [True, False]


def test_user_reply_appends_immediately(fake_clock):
    seq = _sequencer(fake_clock)
    seq.play_user_reply("Generate Leads")
    assert [(e.speaker, e.text) for e in seq.transcript] == [(Speaker.USER, "Generate Leads")]
    assert fake_clock.sleeps == []


def test_delay_scale_zero_disables_waiting(event_loop, fake_clock):
    seq = _sequencer(fake_clock, delay_scale=0)
    event_loop.run_until_complete(seq.play_agent_message("fast", 1400))
    assert fake_clock.sleeps == [0, 0]


def test_concurrent_drain_is_rejected(event_loop, fake_clock):
    seq = _sequencer(fake_clock)
    errors = []

    class ReentrantClock:
        async def sleep(self, seconds):
            try:
                await seq.drain()
            except SequencerBusyError as exc:
                errors.append(exc)

    seq._clock = ReentrantClock()
    event_loop.run_until_complete(seq.play_agent_message("only once", 10))

    assert errors
    assert seq.transcript.texts() == ["only once"]


def test_transcript_entries_are_immutable():
    transcript = Transcript()
    entry = transcript.append(Speaker.AGENT, "hi")
    with pytest.raises(AttributeError):
        entry.text = "changed"
    snapshot = transcript.entries
    transcript.append(Speaker.USER, "hello")
    assert len(snapshot) == 1
    assert len(transcript) == 2
