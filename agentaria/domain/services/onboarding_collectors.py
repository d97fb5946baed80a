# agentaria/domain/services/onboarding_collectors.py
"""
Input collectors, one per onboarding step, all with the same interface.

``apply(action, value)`` updates the collector's local draft.  When the
draft satisfies the step's rule and the action is a confirming one, the
collector writes the confirmed value into the session state and returns a
``Commit`` carrying the human-readable echo for the transcript.  Anything
else returns ``None``: invalid input simply leaves progression disabled.

Actions per step:

    GOAL           choose
    BUSINESS_NAME  use_existing, override, edit, confirm
    INDUSTRY       select, edit_custom, confirm
    PHONE          use_existing, override, edit, confirm
    HOURS          set_open, set_close, confirm
    DOCUMENT       attach, skip
    REVIEW_LINK    select, edit_custom, edit_link, finish, skip
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from agentaria.domain.models.onboarding import (
    ABSENT,
    DEFAULT_CLOSE_TIME,
    DEFAULT_OPEN_TIME,
    OTHER,
    BranchChoice,
    Document,
    IrreversibleBranchError,
    OnboardingState,
    Step,
    UnknownActionError,
)
from agentaria.domain.services import onboarding_validators as v

logger = logging.getLogger("onboarding.collectors")


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Commit:
    """A validated step value; ``skipped`` marks the sentinel path."""

    step: Step
    echo: str
    skipped: bool = False


class InputCollector:
    step: Step
    actions: frozenset[str] = frozenset()

    def __init__(self, state: OnboardingState) -> None:
        self.state = state

    def can_advance(self) -> bool:
        raise NotImplementedError

    def apply(self, action: str, value: Any = None) -> Optional[Commit]:
        if action not in self.actions:
            raise UnknownActionError(f"step {int(self.step)} has no action {action!r}")
        handler = getattr(self, f"_on_{action}")
        return handler(value)

    def _commit(self, echo: str, *, skipped: bool = False) -> Commit:
        self._write()
        return Commit(step=self.step, echo=echo, skipped=skipped)

    def _write(self) -> None:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Step 1: Goal
# ---------------------------------------------------------------------------

class GoalCollector(InputCollector):
    step = Step.GOAL
    actions = frozenset({"choose"})

    def __init__(self, state: OnboardingState) -> None:
        super().__init__(state)
        self.goal: Optional[str] = None

    def can_advance(self) -> bool:
        return v.is_valid_goal(self.goal)

    def _on_choose(self, value: Any) -> Optional[Commit]:
        self.goal = value
        if not self.can_advance():
            return None
        return self._commit(self.goal)

    def _write(self) -> None:
        self.state.goal = self.goal


# ---------------------------------------------------------------------------
# Steps 2 & 4: confirm on-record value or override it
# ---------------------------------------------------------------------------

class _BranchCollector(InputCollector):
    actions = frozenset({"use_existing", "override", "edit", "confirm"})

    def __init__(self, state: OnboardingState) -> None:
        super().__init__(state)
        self.choice = BranchChoice()

    @property
    def existing(self) -> str:
        raise NotImplementedError

    def _draft_is_valid(self, draft: str) -> bool:
        raise NotImplementedError

    def _normalise(self, text: str) -> str:
        return text

    def _existing_echo(self) -> str:
        raise NotImplementedError

    def _override_echo(self) -> str:
        raise NotImplementedError

    def can_advance(self) -> bool:
        return self.choice.is_override and self._draft_is_valid(self.choice.draft)

    @property
    def override_revealed(self) -> bool:
        return self.choice.is_override

    def _on_use_existing(self, value: Any) -> Optional[Commit]:
        try:
            self.choice.use_existing()
        except IrreversibleBranchError:
            logger.debug("step %d: use_existing ignored after override", int(self.step))
            return None
        return self._commit(self._existing_echo())

    def _on_override(self, value: Any) -> Optional[Commit]:
        self.choice.override()
        return None

    def _on_edit(self, value: Any) -> Optional[Commit]:
        if not self.choice.is_override:
            return None
        self.choice.edit(self._normalise(_text(value)))
        return None

    def _on_confirm(self, value: Any) -> Optional[Commit]:
        if not self.can_advance():
            return None
        return self._commit(self._override_echo())


class BusinessNameCollector(_BranchCollector):
    step = Step.BUSINESS_NAME

    @property
    def existing(self) -> str:
        return self.state.profile.business_name

    def _draft_is_valid(self, draft: str) -> bool:
        return v.is_valid_business_name(draft)

    def _existing_echo(self) -> str:
        return f'Yes, use "{self.existing}"'

    def _override_echo(self) -> str:
        return f'Use "{self.choice.draft.strip()}"'

    def _write(self) -> None:
        self.state.business_name_choice = BranchChoice(self.choice.kind, self.choice.draft)


class PhoneCollector(_BranchCollector):
    step = Step.PHONE

    @property
    def existing(self) -> str:
        return self.state.profile.phone_number

    def _normalise(self, text: str) -> str:
        return v.digits_only(text)

    def _draft_is_valid(self, draft: str) -> bool:
        return v.is_valid_phone_override(draft)

    def _existing_echo(self) -> str:
        return f"Yes, use {self.existing}"

    def _override_echo(self) -> str:
        return f"Use {self.choice.draft}"

    def _write(self) -> None:
        self.state.phone_choice = BranchChoice(self.choice.kind, self.choice.draft)


# ---------------------------------------------------------------------------
# Step 3: Industry
# ---------------------------------------------------------------------------

class IndustryCollector(InputCollector):
    step = Step.INDUSTRY
    actions = frozenset({"select", "edit_custom", "confirm"})

    def __init__(self, state: OnboardingState) -> None:
        super().__init__(state)
        self.industry: Optional[str] = None
        self.custom = ""

    def can_advance(self) -> bool:
        return v.is_valid_industry(self.industry, self.custom)

    def _on_select(self, value: Any) -> Optional[Commit]:
        self.industry = value
        self.custom = ""
        return None

    def _on_edit_custom(self, value: Any) -> Optional[Commit]:
        if self.industry == OTHER:
            self.custom = _text(value)
        return None

    def _on_confirm(self, value: Any) -> Optional[Commit]:
        if not self.can_advance():
            return None
        echo = self.custom.strip() if self.industry == OTHER else self.industry
        return self._commit(echo)

    def _write(self) -> None:
        self.state.industry = self.industry
        self.state.custom_industry = self.custom.strip()


# ---------------------------------------------------------------------------
# Step 5: Business hours
# ---------------------------------------------------------------------------

class HoursCollector(InputCollector):
    step = Step.HOURS
    actions = frozenset({"set_open", "set_close", "confirm"})

    def __init__(self, state: OnboardingState, *, enforce_order: bool = False) -> None:
        super().__init__(state)
        self.open_time = DEFAULT_OPEN_TIME
        self.close_time = DEFAULT_CLOSE_TIME
        self.enforce_order = enforce_order

    def can_advance(self) -> bool:
        return v.is_valid_hours(self.open_time, self.close_time, enforce_order=self.enforce_order)

    def _on_set_open(self, value: Any) -> Optional[Commit]:
        self.open_time = _text(value)
        return None

    def _on_set_close(self, value: Any) -> Optional[Commit]:
        self.close_time = _text(value)
        return None

    def _on_confirm(self, value: Any) -> Optional[Commit]:
        if not self.can_advance():
            return None
        return self._commit(f"{self.open_time} – {self.close_time}")

    def _write(self) -> None:
        self.state.open_time = self.open_time
        self.state.close_time = self.close_time


# ---------------------------------------------------------------------------
# Step 6: Instructions document
# ---------------------------------------------------------------------------

class DocumentCollector(InputCollector):
    step = Step.DOCUMENT
    actions = frozenset({"attach", "skip"})

    def __init__(self, state: OnboardingState, *, max_bytes: int) -> None:
        super().__init__(state)
        self.max_bytes = max_bytes
        self.document: Optional[Document] = None
        self._skipped = False

    def can_advance(self) -> bool:
        # skip is always available; this reflects the upload path only
        doc = self.document
        return doc is not None and v.is_valid_document(doc.filename, doc.content, self.max_bytes)

    def _on_attach(self, value: Any) -> Optional[Commit]:
        if not isinstance(value, Document):
            return None
        if not v.is_valid_document(value.filename, value.content, self.max_bytes):
            logger.info("document %r rejected (%d bytes)", value.filename, value.size)
            return None
        self.document = value
        return self._commit(f"📎 {value.filename}")

    def _on_skip(self, value: Any) -> Optional[Commit]:
        self.document = None
        self._skipped = True
        return self._commit("I'll add instructions later.", skipped=True)

    def _write(self) -> None:
        self.state.document = ABSENT if self._skipped else self.document


# ---------------------------------------------------------------------------
# Step 7: Review platform & link
# ---------------------------------------------------------------------------

class ReviewLinkCollector(InputCollector):
    step = Step.REVIEW_LINK
    actions = frozenset({"select", "edit_custom", "edit_link", "finish", "skip"})

    def __init__(self, state: OnboardingState) -> None:
        super().__init__(state)
        self.platform: Optional[str] = None
        self.custom = ""
        self.link = ""
        self._skipped = False

    def can_advance(self) -> bool:
        return v.is_valid_review_step(self.platform, self.custom, self.link)

    def _on_select(self, value: Any) -> Optional[Commit]:
        self.platform = value
        self.custom = ""
        return None

    def _on_edit_custom(self, value: Any) -> Optional[Commit]:
        if self.platform == OTHER:
            self.custom = _text(value)
        return None

    def _on_edit_link(self, value: Any) -> Optional[Commit]:
        self.link = _text(value)
        return None

    def _on_finish(self, value: Any) -> Optional[Commit]:
        if not self.can_advance():
            return None
        return self._commit(self.link.strip())

    def _on_skip(self, value: Any) -> Optional[Commit]:
        self._skipped = True
        return self._commit("I'll set up reviews later.", skipped=True)

    def _write(self) -> None:
        if self._skipped:
            self.state.review_platform = ABSENT
            self.state.custom_review_platform = ""
            self.state.review_link = ABSENT
            return
        self.state.review_platform = self.platform
        self.state.custom_review_platform = self.custom.strip()
        self.state.review_link = self.link.strip()


def build_collectors(
    state: OnboardingState,
    *,
    max_document_bytes: int,
    enforce_hours_order: bool = False,
) -> dict[Step, InputCollector]:
    return {
        Step.GOAL: GoalCollector(state),
        Step.BUSINESS_NAME: BusinessNameCollector(state),
        Step.INDUSTRY: IndustryCollector(state),
        Step.PHONE: PhoneCollector(state),
        Step.HOURS: HoursCollector(state, enforce_order=enforce_hours_order),
        Step.DOCUMENT: DocumentCollector(state, max_bytes=max_document_bytes),
        Step.REVIEW_LINK: ReviewLinkCollector(state),
    }
