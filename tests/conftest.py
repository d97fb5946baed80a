"""Shared test fixtures for the onboarding service test suite."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from agentaria.domain.models.onboarding import Identity, SubscriberProfile
from agentaria.domain.services.onboarding_wizard import OnboardingWizard, WizardOptions
from agentaria.infrastructure.external.automation_webhook import SubmissionResult

USER_ID = "5f0c6a1e-user"
USER_EMAIL = "maya@example.com"


class FakeClock:
    """Records requested delays and only yields control instead of sleeping."""

    def __init__(self):
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def profile() -> SubscriberProfile:
    return SubscriberProfile(
        first_name="Maya",
        business_name="Maya's Studio",
        phone_number="15551234567",
    )


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def identity_provider():
    provider = MagicMock()
    provider.get_current_identity = AsyncMock(return_value=Identity(USER_ID, USER_EMAIL))
    return provider


@pytest.fixture
def profile_store(profile):
    store = MagicMock()
    store.get_profile = AsyncMock(return_value=profile)
    store.mark_onboarded = AsyncMock(return_value=True)
    return store


@pytest.fixture
def webhook():
    client = MagicMock()
    client.submit = AsyncMock(return_value=SubmissionResult(ok=True, status_code=200))
    return client


@pytest.fixture
def navigate():
    return MagicMock()


@pytest.fixture
def make_wizard(identity_provider, profile_store, webhook, navigate, fake_clock):
    """Factory so tests can tweak options while sharing the collaborators."""

    def _make(**option_overrides) -> OnboardingWizard:
        return OnboardingWizard(
            identity_provider=identity_provider,
            profile_store=profile_store,
            webhook=webhook,
            clock=fake_clock,
            navigate=navigate,
            options=WizardOptions(**option_overrides),
        )

    return _make
