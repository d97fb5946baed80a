# agentaria/api/routes/onboarding.py
"""
HTTP surface for the onboarding chat.

The web client starts a run, polls its snapshot (transcript, typing flag,
whether the input is ready / the advance button enabled) and posts the
user's actions.  Runs are kept in an in-memory registry for their lifetime
only; nothing is persisted apart from the completion flag written by the
finalizer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from agentaria.api.deps import BearerTokenIdentityProvider, get_identity_provider, is_browser_request
from agentaria.config.settings import settings
from agentaria.domain.models.onboarding import Document, UnknownActionError
from agentaria.domain.services.onboarding_wizard import (
    IdentityProvider,
    OnboardingWizard,
    WizardOptions,
)

logger = logging.getLogger("api.onboarding")

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


class ActionRequest(BaseModel):
    action: str
    value: Any = None


# ---------------------------------------------------------------------------
# Run registry
# ---------------------------------------------------------------------------

class OnboardingRunRegistry:
    """Live runs, at most one per user.

    Starting a new run abandons the user's previous one: its task is
    cancelled so it can never reach the finalizer.
    """

    def __init__(self) -> None:
        self._runs: dict[str, OnboardingWizard] = {}
        self._run_by_user: dict[str, str] = {}

    def add(self, wizard: OnboardingWizard) -> None:
        self._prune()
        user_id = wizard.state.identity.user_id

        previous_id = self._run_by_user.get(user_id)
        if previous_id is not None:
            previous = self._runs.pop(previous_id, None)
            if previous is not None:
                logger.info("Onboarding %s replaced by %s for %s", previous_id, wizard.run_id, user_id)
                previous.cancel()

        self._runs[wizard.run_id] = wizard
        self._run_by_user[user_id] = wizard.run_id

    def get(self, run_id: str) -> OnboardingWizard | None:
        return self._runs.get(run_id)

    def __len__(self) -> int:
        return len(self._runs)

    def _prune(self) -> None:
        finished = [
            run_id for run_id, wizard in self._runs.items()
            if wizard.finished
        ]
        for run_id in finished:
            wizard = self._runs.pop(run_id)
            user_id = wizard.state.identity.user_id
            if self._run_by_user.get(user_id) == run_id:
                del self._run_by_user[user_id]

    def shutdown(self) -> None:
        for wizard in self._runs.values():
            wizard.cancel()
        self._runs.clear()
        self._run_by_user.clear()


_registry = OnboardingRunRegistry()


def get_run_registry() -> OnboardingRunRegistry:
    return _registry


def get_wizard_factory() -> Callable[[IdentityProvider], OnboardingWizard]:
    from agentaria.infrastructure.db.profile_store import SubscriberProfileStore
    from agentaria.infrastructure.external.automation_webhook import AutomationWebhookClient

    def factory(identity_provider: IdentityProvider) -> OnboardingWizard:
        return OnboardingWizard(
            identity_provider=identity_provider,
            profile_store=SubscriberProfileStore(),
            webhook=AutomationWebhookClient(),
            options=WizardOptions.from_settings(settings),
        )

    return factory


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _owned_run(
    run_id: str,
    identity_provider: BearerTokenIdentityProvider,
    registry: OnboardingRunRegistry,
) -> OnboardingWizard:
    identity = await identity_provider.get_current_identity()
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    wizard = registry.get(run_id)
    if wizard is None or wizard.state is None or wizard.state.identity.user_id != identity.user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding run not found")
    return wizard


def _action_response(wizard: OnboardingWizard, committed: bool) -> dict:
    return {"committed": committed, **wizard.snapshot()}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/runs")
async def start_run(
    request: Request,
    identity_provider: BearerTokenIdentityProvider = Depends(get_identity_provider),
    registry: OnboardingRunRegistry = Depends(get_run_registry),
    factory: Callable[[IdentityProvider], OnboardingWizard] = Depends(get_wizard_factory),
):
    wizard = factory(identity_provider)
    if not await wizard.start():
        target = wizard.redirect_to or settings.LOGIN_PATH
        if is_browser_request(request):
            return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer", "Location": target},
        )

    registry.add(wizard)
    return wizard.snapshot()


@router.get("/runs/{run_id}")
async def get_run(
    run_id: str,
    identity_provider: BearerTokenIdentityProvider = Depends(get_identity_provider),
    registry: OnboardingRunRegistry = Depends(get_run_registry),
):
    wizard = await _owned_run(run_id, identity_provider, registry)
    return wizard.snapshot()


@router.post("/runs/{run_id}/actions")
async def post_action(
    run_id: str,
    body: ActionRequest,
    identity_provider: BearerTokenIdentityProvider = Depends(get_identity_provider),
    registry: OnboardingRunRegistry = Depends(get_run_registry),
):
    wizard = await _owned_run(run_id, identity_provider, registry)
    try:
        commit = wizard.act(body.action, body.value)
    except UnknownActionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return _action_response(wizard, commit is not None)


@router.post("/runs/{run_id}/document")
async def upload_document(
    run_id: str,
    file: UploadFile = File(...),
    identity_provider: BearerTokenIdentityProvider = Depends(get_identity_provider),
    registry: OnboardingRunRegistry = Depends(get_run_registry),
):
    wizard = await _owned_run(run_id, identity_provider, registry)

    max_bytes = wizard.options.max_document_bytes
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Document exceeds {max_bytes} bytes",
        )

    document = Document(
        filename=file.filename or "",
        content=content,
        content_type=file.content_type,
    )
    try:
        commit = wizard.act("attach", document)
    except UnknownActionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return _action_response(wizard, commit is not None)
