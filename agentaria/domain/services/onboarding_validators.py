# agentaria/domain/services/onboarding_validators.py

import re

from agentaria.domain.models.onboarding import GOALS, INDUSTRIES, OTHER, REVIEW_PLATFORMS

MIN_PHONE_DIGITS = 7

TIME_OF_DAY_REGEX = re.compile(r"([01][0-9]|2[0-3]):[0-5][0-9]")
_NON_DIGIT_RE = re.compile(r"[^0-9]")

DOCUMENT_SUFFIX = ".pdf"


def is_non_blank(text: str | None) -> bool:
    return bool(text and text.strip())


def digits_only(raw: str | None) -> str:
    """Strip everything but 0-9 (phone override field keeps digits only)."""
    if not raw:
        return ""
    return _NON_DIGIT_RE.sub("", raw)


def is_valid_goal(goal: str | None) -> bool:
    return goal in GOALS


def is_valid_business_name(name: str | None) -> bool:
    return is_non_blank(name)


def is_valid_phone_override(phone: str | None) -> bool:
    if not phone:
        return False
    return len(digits_only(phone)) >= MIN_PHONE_DIGITS


def is_valid_choice_with_other(choice: str | None, custom: str | None, options) -> bool:
    """A choice from ``options``; ``Other`` additionally needs companion text."""
    if not choice or choice not in options:
        return False
    if choice == OTHER:
        return is_non_blank(custom)
    return True


def is_valid_industry(industry: str | None, custom: str | None = None) -> bool:
    return is_valid_choice_with_other(industry, custom, INDUSTRIES)


def is_valid_review_platform(platform: str | None, custom: str | None = None) -> bool:
    return is_valid_choice_with_other(platform, custom, REVIEW_PLATFORMS)


def is_valid_time_of_day(value: str | None) -> bool:
    if not value:
        return False
    return bool(TIME_OF_DAY_REGEX.fullmatch(value))


def is_valid_hours(open_time: str | None, close_time: str | None, *, enforce_order: bool = False) -> bool:
    if not (is_valid_time_of_day(open_time) and is_valid_time_of_day(close_time)):
        return False
    if enforce_order:
        # zero-padded HH:MM compares correctly as text
        return open_time < close_time
    return True


def is_valid_review_link(link: str | None) -> bool:
    return is_non_blank(link)


def is_valid_review_step(platform: str | None, custom: str | None, link: str | None) -> bool:
    return is_valid_review_platform(platform, custom) and is_valid_review_link(link)


def is_valid_document(filename: str | None, content: bytes | None, max_bytes: int) -> bool:
    if not is_non_blank(filename) or not content:
        return False
    if not filename.strip().lower().endswith(DOCUMENT_SUFFIX):
        return False
    return len(content) <= max_bytes
