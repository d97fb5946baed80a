# tests/test_onboarding_wizard.py
"""End-to-end tests for the onboarding wizard run."""

from agentaria.domain.models.onboarding import Document, Speaker, Step, SubmissionState
from agentaria.domain.services.onboarding_script import FINISH_MESSAGE


async def _advance(wizard, *actions):
    """Wait for the input, then apply ``(action, value)`` pairs in order."""
    await wizard.wait_until_ready()
    commit = None
    for action, value in actions:
        commit = wizard.act(action, value)
    return commit


# ── Bootstrap ────────────────────────────────────────────────────

def test_unauthenticated_redirects_before_any_message(event_loop, make_wizard, identity_provider, navigate, profile_store):
    identity_provider.get_current_identity.return_value = None
    wizard = make_wizard()

    started = event_loop.run_until_complete(wizard.start())

    assert started is False
    assert wizard.state is None
    assert wizard.redirect_to == "/login"
    navigate.assert_called_once_with("/login")
    profile_store.get_profile.assert_not_awaited()
    assert wizard.snapshot()["transcript"] == []


def test_start_is_one_shot(event_loop, make_wizard, identity_provider):
    wizard = make_wizard()

    async def scenario():
        first = await wizard.start()
        second = await wizard.start()
        await wizard.wait_until_ready()
        return first, second

    first, second = event_loop.run_until_complete(scenario())

    assert first is True
    assert second is False
    identity_provider.get_current_identity.assert_awaited_once()
    # only one greeting was sequenced
    assert len(wizard.state.transcript.texts(Speaker.AGENT)) == 2
    wizard.cancel()


def test_step_one_greets_by_first_name(event_loop, make_wizard):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await wizard.wait_until_ready()

    event_loop.run_until_complete(scenario())

    agent_lines = wizard.state.transcript.texts(Speaker.AGENT)
    assert agent_lines[0].startswith("Hi Maya!")
    assert wizard.state.current_step == Step.GOAL
    assert wizard.input_ready
    wizard.cancel()


def test_profile_failure_falls_back_to_defaults(event_loop, make_wizard, profile_store):
    profile_store.get_profile.side_effect = ConnectionError("db down")
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await wizard.wait_until_ready()

    event_loop.run_until_complete(scenario())

    assert wizard.state.profile.phone_number == "maya@example.com"
    assert wizard.state.transcript.texts(Speaker.AGENT)[0].startswith("Hi there!")
    wizard.cancel()


# ── Input gating ─────────────────────────────────────────────────

def test_actions_ignored_while_agent_is_typing(event_loop, make_wizard):
    wizard = make_wizard()

    event_loop.run_until_complete(wizard.start())

    # run task has not played the greeting yet
    assert wizard.input_ready is False
    assert wizard.act("choose", "Generate Leads") is None
    assert wizard.state.goal is None
    wizard.cancel()


def test_invalid_input_does_not_transition(event_loop, make_wizard):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Generate Leads"))
        await wizard.wait_until_ready()
        before = len(wizard.state.transcript)
        wizard.act("override", None)
        wizard.act("edit", "   ")
        wizard.act("confirm", None)
        return before

    before = event_loop.run_until_complete(scenario())

    assert wizard.state.current_step == Step.BUSINESS_NAME
    assert len(wizard.state.transcript) == before
    assert wizard.advance_enabled is False
    wizard.cancel()


def test_branch_use_existing_adds_one_reply(event_loop, make_wizard):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Automate Support"))
        await wizard.wait_until_ready()
        users_before = len(wizard.state.transcript.texts(Speaker.USER))
        wizard.act("use_existing", None)
        users_after = len(wizard.state.transcript.texts(Speaker.USER))
        await wizard.wait_until_ready()
        return users_before, users_after

    users_before, users_after = event_loop.run_until_complete(scenario())

    assert users_after - users_before == 1
    assert wizard.state.current_step == Step.INDUSTRY
    assert wizard.state.transcript.texts(Speaker.AGENT)[-1] == (
        "Got it! And what industry does Maya's Studio belong to?"
    )
    wizard.cancel()


# ── Full runs ────────────────────────────────────────────────────

def test_round_trip_payload(event_loop, make_wizard, webhook, profile_store, navigate, user_id):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Generate Leads"))
        await _advance(wizard, ("override", None), ("edit", "Acme Spa"), ("confirm", None))
        await _advance(wizard, ("select", "Salon & Beauty"), ("confirm", None))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("set_open", "09:00"), ("set_close", "18:00"), ("confirm", None))
        await _advance(wizard, ("skip", None))
        await _advance(
            wizard,
            ("select", "Google Reviews"),
            ("edit_link", "https://g.page/r/x"),
            ("finish", None),
        )
        await wizard.wait_finished()

    event_loop.run_until_complete(scenario())

    webhook.submit.assert_awaited_once()
    payload = webhook.submit.await_args.args[0]
    assert payload["subscriber_id"] == user_id
    assert payload["goal"] == "Generate Leads"
    assert payload["business_name"] == "Acme Spa"
    assert payload["industry"] == "Salon & Beauty"
    assert payload["use_current_phone"] is True
    assert payload["phone_number"] == "15551234567"
    assert payload["open_time"] == "09:00"
    assert payload["close_time"] == "18:00"
    assert payload["pdf_base64"] is None
    assert payload["pdf_name"] is None
    assert payload["review_platform"] == "Google Reviews"
    assert payload["review_link"] == "https://g.page/r/x"

    profile_store.mark_onboarded.assert_awaited_once_with(user_id)
    navigate.assert_called_once_with("/dashboard")
    assert wizard.state.done
    assert wizard.redirect_to == "/dashboard"
    assert wizard.state.transcript.texts(Speaker.USER) == [
        "Generate Leads",
        'Use "Acme Spa"',
        "Salon & Beauty",
        "Yes, use 15551234567",
        "09:00 – 18:00",
        "I'll add instructions later.",
        "https://g.page/r/x",
    ]


def test_minimum_input_run_reaches_done(event_loop, make_wizard, webhook):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Automate Support"))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("select", "Education"), ("confirm", None))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("confirm", None))
        await _advance(wizard, ("skip", None))
        await _advance(wizard, ("skip", None))
        await wizard.wait_finished()

    event_loop.run_until_complete(scenario())

    webhook.submit.assert_awaited_once()
    payload = webhook.submit.await_args.args[0]
    assert payload["business_name"] == "Maya's Studio"
    assert payload["review_platform"] == ""
    assert payload["review_link"] == ""
    assert wizard.state.done
    assert wizard.state.submission_state is SubmissionState.SUBMITTED


def test_double_finish_submits_once(event_loop, make_wizard, webhook):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Automate Support"))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("select", "Education"), ("confirm", None))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("confirm", None))
        await _advance(wizard, ("skip", None))
        await wizard.wait_until_ready()
        wizard.act("select", "Yelp")
        wizard.act("edit_link", "https://yelp.com/biz/x")
        first = wizard.act("finish", None)
        second = wizard.act("finish", None)
        third = wizard.act("skip", None)
        await wizard.wait_finished()
        return first, second, third

    first, second, third = event_loop.run_until_complete(scenario())

    assert first is not None
    assert second is None and third is None
    webhook.submit.assert_awaited_once()
    assert wizard.state.transcript.texts(Speaker.AGENT).count(FINISH_MESSAGE.text) == 1
    assert wizard.state.transcript.texts(Speaker.USER).count("https://yelp.com/biz/x") == 1


def test_document_upload_is_encoded(event_loop, make_wizard, webhook):
    wizard = make_wizard()

    async def scenario():
        await wizard.start()
        await _advance(wizard, ("choose", "Automate Support"))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("select", "Education"), ("confirm", None))
        await _advance(wizard, ("use_existing", None))
        await _advance(wizard, ("confirm", None))
        await _advance(wizard, ("attach", Document("rules.pdf", b"%PDF-1.4")))
        await _advance(wizard, ("skip", None))
        await wizard.wait_finished()

    event_loop.run_until_complete(scenario())

    payload = webhook.submit.await_args.args[0]
    assert payload["pdf_name"] == "rules.pdf"
    assert payload["pdf_base64"] == "JVBERi0xLjQ="


def test_steps_are_monotonic(event_loop, make_wizard):
    wizard = make_wizard()
    seen = []

    async def scenario():
        await wizard.start()
        for actions in (
            [("choose", "Automate Support")],
            [("use_existing", None)],
            [("select", "Education"), ("confirm", None)],
            [("use_existing", None)],
            [("confirm", None)],
            [("skip", None)],
            [("skip", None)],
        ):
            await wizard.wait_until_ready()
            seen.append(wizard.state.current_step)
            for action, value in actions:
                wizard.act(action, value)
        await wizard.wait_finished()

    event_loop.run_until_complete(scenario())

    assert seen == [1, 2, 3, 4, 5, 6, 7]
    assert wizard.finished
    assert wizard.snapshot()["done"] is True
