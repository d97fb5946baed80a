# agentaria/domain/models/onboarding.py
"""
In-memory session state for one onboarding run.

The state is created when a wizard run starts and discarded with it; nothing
here is persisted.  Input collectors write confirmed values, the finalizer
reads them to build the outbound payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterator, Optional, Union


class OnboardingError(Exception):
    """Base class for onboarding programming errors (never user input errors)."""


class StepOrderError(OnboardingError):
    """Raised when a run tries to skip, repeat or rewind a step."""


class IrreversibleBranchError(OnboardingError):
    """Raised when an override branch is asked to return to the existing value."""


class UnknownActionError(OnboardingError):
    """Raised when an action name is not understood by the active collector."""


# ---------------------------------------------------------------------------
# Steps & enumerated options
# ---------------------------------------------------------------------------

class Step(IntEnum):
    GOAL = 1
    BUSINESS_NAME = 2
    INDUSTRY = 3
    PHONE = 4
    HOURS = 5
    DOCUMENT = 6
    REVIEW_LINK = 7


TOTAL_STEPS = len(Step)

OTHER = "Other"

GOALS: tuple[str, ...] = (
    "Automate Support",
    "Generate Leads",
    "Re-engage Clients",
)

INDUSTRIES: tuple[str, ...] = (
    "Clinic / Healthcare",
    "Real Estate",
    "Marketing Agency",
    "Salon & Beauty",
    "Fitness / Gym",
    "Home Services",
    "Education",
    "Restaurant / Food",
    "Legal Services",
    OTHER,
)

REVIEW_PLATFORMS: tuple[str, ...] = (
    "Google Reviews",
    "Trustpilot",
    "Yelp",
    "Facebook",
    "Tripadvisor",
    OTHER,
)

DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "18:00"


class Absent(Enum):
    """Placeholder written when a skippable step is bypassed."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent.ABSENT


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------

class Speaker(str, Enum):
    AGENT = "agent"
    USER = "user"


@dataclass(frozen=True)
class TranscriptEntry:
    speaker: Speaker
    text: str


class Transcript:
    """Append-only chat history.  Entries are immutable once appended."""

    def __init__(self) -> None:
        self._entries: list[TranscriptEntry] = []

    def append(self, speaker: Speaker, text: str) -> TranscriptEntry:
        entry = TranscriptEntry(speaker=speaker, text=text)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def texts(self, speaker: Speaker | None = None) -> list[str]:
        return [e.text for e in self._entries if speaker is None or e.speaker == speaker]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(tuple(self._entries))


# ---------------------------------------------------------------------------
# Branch steps (business name, phone)
# ---------------------------------------------------------------------------

class BranchKind(str, Enum):
    UNSET = "unset"
    USE_EXISTING = "use_existing"
    OVERRIDE = "override"


@dataclass
class BranchChoice:
    """Tagged union {Unset, UseExisting, Override(draft)}.

    Allowed edges: Unset -> UseExisting, Unset -> Override, Override -> Override
    (editing the draft).  Override -> UseExisting is rejected.
    """

    kind: BranchKind = BranchKind.UNSET
    draft: str = ""

    def use_existing(self) -> None:
        if self.kind is BranchKind.OVERRIDE:
            raise IrreversibleBranchError("override already chosen for this step")
        self.kind = BranchKind.USE_EXISTING

    def override(self) -> None:
        if self.kind is BranchKind.USE_EXISTING:
            raise IrreversibleBranchError("existing value already confirmed for this step")
        self.kind = BranchKind.OVERRIDE

    def edit(self, text: str) -> None:
        if self.kind is not BranchKind.OVERRIDE:
            raise IrreversibleBranchError("draft can only be edited after choosing override")
        self.draft = text

    @property
    def is_override(self) -> bool:
        return self.kind is BranchKind.OVERRIDE

    def resolve(self, existing: str) -> str:
        if self.kind is BranchKind.OVERRIDE:
            return self.draft.strip()
        return existing


# ---------------------------------------------------------------------------
# Identity, profile & attachments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class SubscriberProfile:
    """Prefilled fields read once when a run starts."""

    first_name: str = ""
    business_name: str = ""
    phone_number: str = "your number"

    @classmethod
    def from_record(
        cls,
        subscriber_name: str | None,
        business_name: str | None,
        service_number: str | None,
        email: str | None = None,
    ) -> "SubscriberProfile":
        full_name = (subscriber_name or "").strip()
        first_name = full_name.split(" ")[0] if full_name else ""
        return cls(
            first_name=first_name,
            business_name=business_name or "",
            phone_number=service_number or email or "your number",
        )


@dataclass(frozen=True)
class Document:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class SubmissionState(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

@dataclass
class OnboardingState:
    identity: Identity
    profile: SubscriberProfile = field(default_factory=SubscriberProfile)

    # 0 until step 1 is entered
    current_step: int = 0
    done: bool = False

    goal: Optional[str] = None
    business_name_choice: BranchChoice = field(default_factory=BranchChoice)
    industry: Optional[str] = None
    custom_industry: str = ""
    phone_choice: BranchChoice = field(default_factory=BranchChoice)
    open_time: str = DEFAULT_OPEN_TIME
    close_time: str = DEFAULT_CLOSE_TIME
    document: Union[Document, Absent, None] = None
    review_platform: Union[str, Absent, None] = None
    custom_review_platform: str = ""
    review_link: Union[str, Absent, None] = None

    transcript: Transcript = field(default_factory=Transcript)
    submission_state: SubmissionState = SubmissionState.NOT_SUBMITTED

    def enter_step(self, step: Step) -> None:
        """Move forward by exactly one step."""
        if self.done:
            raise StepOrderError("onboarding already finished")
        if int(step) != self.current_step + 1:
            raise StepOrderError(f"cannot enter step {int(step)} from step {self.current_step}")
        self.current_step = int(step)

    def mark_done(self) -> None:
        if self.current_step != Step.REVIEW_LINK:
            raise StepOrderError(f"cannot finish from step {self.current_step}")
        self.done = True

    # -- resolved values (consumed by the finalizer) -------------------------

    @property
    def business_name(self) -> str:
        return self.business_name_choice.resolve(self.profile.business_name)

    @property
    def resolved_industry(self) -> str:
        if self.industry == OTHER:
            return self.custom_industry.strip()
        return self.industry or ""

    @property
    def use_current_phone(self) -> Optional[bool]:
        if self.phone_choice.kind is BranchKind.UNSET:
            return None
        return not self.phone_choice.is_override

    @property
    def phone_number(self) -> str:
        return self.phone_choice.resolve(self.profile.phone_number)

    @property
    def resolved_review_platform(self) -> str:
        if self.review_platform is ABSENT or self.review_platform is None:
            return ""
        if self.review_platform == OTHER:
            return self.custom_review_platform.strip()
        return self.review_platform

    @property
    def resolved_review_link(self) -> str:
        if self.review_link is ABSENT or self.review_link is None:
            return ""
        return self.review_link.strip()

    @property
    def attached_document(self) -> Optional[Document]:
        if isinstance(self.document, Document):
            return self.document
        return None
