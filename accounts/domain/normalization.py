"""Canonical forms for user-supplied fields."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from accounts.domain.errors import InvalidDateOfBirth, InvalidPhoneFormat

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class PhonePolicy:
    """Numbering plan used to canonicalize phone numbers."""

    name: str
    calling_prefix: str
    trunk_prefix: str
    national_length: int
    country_code: str


BANGLADESH = PhonePolicy(
    name="Bangladesh",
    calling_prefix="88",
    trunk_prefix="0",
    national_length=10,
    country_code="+880",
)


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()


def normalize_name(raw: str) -> str:
    return (raw or "").strip()


def phone_digits(raw: str) -> str:
    return _NON_DIGITS.sub("", raw or "")


def normalize_phone(raw: str, policy: PhonePolicy = BANGLADESH) -> str:
    """
    Reduce a phone number to ``<country_code><national digits>``.

    ``01711-223344``, ``8801711223344`` and ``+880 1711 223344`` all map to
    ``+8801711223344``. Canonical output normalizes to itself.
    """
    digits = phone_digits(raw)
    if digits.startswith(policy.calling_prefix):
        digits = digits[len(policy.calling_prefix):]
    if digits.startswith(policy.trunk_prefix):
        digits = digits[len(policy.trunk_prefix):]
    if len(digits) != policy.national_length:
        raise InvalidPhoneFormat(f"Invalid phone number format for {policy.name}")
    return f"{policy.country_code}{digits}"


def parse_date(value: date | datetime | str) -> date:
    """Parse a date of birth given as a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise InvalidDateOfBirth(f"Invalid date of birth: {value!r}") from exc
