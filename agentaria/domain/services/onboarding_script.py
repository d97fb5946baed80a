# agentaria/domain/services/onboarding_script.py
"""
Agent lines for each onboarding step.

Steps:
  1. GOAL          main goal (support / leads / re-engagement)
  2. BUSINESS_NAME confirm the name on record or override it
  3. INDUSTRY      industry list, "Other" needs free text
  4. PHONE         confirm the WhatsApp number on record or override it
  5. HOURS         open / close time
  6. DOCUMENT      instructions PDF (skippable)
  7. REVIEW_LINK   review platform + link (skippable)

Some lines are parameterised by the prefilled profile or by values already
confirmed earlier in the run.
"""

from __future__ import annotations

from typing import Callable

from agentaria.domain.models.onboarding import OnboardingState, Step
from agentaria.domain.services.message_sequencer import Speak

AGENT_NAME = "Agentaria"

FINISH_MESSAGE = Speak("You're all set! 🎉 Setting up your workspace now…", 1000)


def _goal(state: OnboardingState) -> list[Speak]:
    name = state.profile.first_name or "there"
    return [
        Speak(f"Hi {name}! I'm {AGENT_NAME} — your new digital employee. 👋", 800),
        Speak(
            "I'm excited to start working for you and handling your clients. "
            "First — what is your main goal with me?",
            1400,
        ),
    ]


def _business_name(state: OnboardingState) -> list[Speak]:
    return [
        Speak("Great choice! I can absolutely help with that. 💪", 900),
        Speak(
            f'I have your business registered as "{state.profile.business_name}". '
            "Should I use this name?",
            1400,
        ),
    ]


def _industry(state: OnboardingState) -> list[Speak]:
    # business_name resolves to the override once step 2 committed one
    return [
        Speak(f"Got it! And what industry does {state.business_name} belong to?", 1300),
    ]


def _phone(state: OnboardingState) -> list[Speak]:
    return [
        Speak(
            f"Perfect! One quick question — is {state.profile.phone_number} "
            "the WhatsApp number you'd like me to manage?",
            1400,
        ),
    ]


def _hours(state: OnboardingState) -> list[Speak]:
    return [
        Speak("Understood. Now, what are your standard business hours?", 1000),
        Speak(
            "I need to know when your human team is available so I can handle "
            "things smoothly outside those hours too.",
            1400,
        ),
    ]


def _document(state: OnboardingState) -> list[Speak]:
    return [
        Speak(
            "Almost there! 🎯 To represent your business perfectly, I need to know "
            "your rules — things like services, prices, what to say and what not to say.",
            1400,
        ),
        Speak("Upload a PDF with your instructions, or skip and add it from Settings later.", 1200),
    ]


def _review_link(state: OnboardingState) -> list[Speak]:
    return [
        Speak(
            "Last step! 🌟 Paste your Google or Trustpilot review link and I'll start "
            "collecting 5-star reviews for you automatically.",
            1400,
        ),
        Speak("You can skip this and set it up from the Reviews page anytime.", 1000),
    ]


STEP_SCRIPTS: dict[Step, Callable[[OnboardingState], list[Speak]]] = {
    Step.GOAL: _goal,
    Step.BUSINESS_NAME: _business_name,
    Step.INDUSTRY: _industry,
    Step.PHONE: _phone,
    Step.HOURS: _hours,
    Step.DOCUMENT: _document,
    Step.REVIEW_LINK: _review_link,
}


def script_for(step: Step, state: OnboardingState) -> list[Speak]:
    """Return the agent lines played when ``step`` is entered."""
    return STEP_SCRIPTS[step](state)


def next_step(step: Step) -> Step | None:
    """Forward-only successor; ``None`` after the last step (terminal Done)."""
    if step == Step.REVIEW_LINK:
        return None
    return Step(int(step) + 1)
