# tests/test_run_registry.py
"""Tests for the in-memory registry of live onboarding runs."""

import asyncio

import pytest

from agentaria.api.routes.onboarding import OnboardingRunRegistry
from agentaria.domain.models.onboarding import Identity


def _start(event_loop, wizard):
    async def scenario():
        await wizard.start()
        await wizard.wait_until_ready()

    event_loop.run_until_complete(scenario())
    return wizard


def test_new_run_replaces_the_users_previous_run(event_loop, make_wizard, webhook):
    registry = OnboardingRunRegistry()
    first = _start(event_loop, make_wizard())
    registry.add(first)
    second = _start(event_loop, make_wizard())

    registry.add(second)

    assert len(registry) == 1
    assert registry.get(first.run_id) is None
    assert registry.get(second.run_id) is second

    with pytest.raises(asyncio.CancelledError):
        event_loop.run_until_complete(first.wait_finished())
    assert first.finished
    # abandoned run no longer accepts input and never submits
    assert first.act("choose", "Generate Leads") is None
    assert first.state.goal is None
    webhook.submit.assert_not_awaited()

    second.cancel()


def test_many_starts_keep_one_live_run(event_loop, make_wizard):
    registry = OnboardingRunRegistry()
    wizards = [_start(event_loop, make_wizard()) for _ in range(5)]

    for wizard in wizards:
        registry.add(wizard)

    assert len(registry) == 1
    assert registry.get(wizards[-1].run_id) is wizards[-1]
    registry.shutdown()


def test_runs_of_different_users_coexist(event_loop, make_wizard, identity_provider):
    registry = OnboardingRunRegistry()
    maya = _start(event_loop, make_wizard())
    identity_provider.get_current_identity.return_value = Identity("other-user")
    other = _start(event_loop, make_wizard())

    registry.add(maya)
    registry.add(other)

    assert len(registry) == 2
    assert maya.input_ready and other.input_ready
    registry.shutdown()
    assert len(registry) == 0
    assert not maya.input_ready
