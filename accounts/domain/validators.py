"""
Field validators and the fail-fast pipeline that runs them.

Every validator exposes ``validate(data, context)`` where ``data`` holds only
the fields supplied by the caller. A validator whose field is absent does
nothing, so the same instances serve full registrations and partial updates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional

from accounts.domain.errors import (
    EmailBelongsToDeletedAccount,
    EmailInUse,
    InvalidName,
    PasswordContainsIdentifier,
    PhoneBelongsToDeletedAccount,
    PhoneInUse,
    UnderageUser,
    WeakPassword,
)
from accounts.domain.normalization import (
    BANGLADESH,
    PhonePolicy,
    normalize_email,
    normalize_phone,
    parse_date,
    phone_digits,
)
from accounts.domain.users import User
from accounts.repositories.base import UserRepository

NAME_PATTERN = re.compile(r"^[A-Za-z\s\-']+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
MINIMUM_AGE = 13
PASSWORD_MIN_LENGTH = 10
PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'
PHONE_SUFFIX_LENGTH = 6
WEAK_PASSWORDS = frozenset({"password", "1234567890", "admin123", "password123"})


@dataclass(frozen=True)
class ValidationContext:
    """Current stored record on update; ``None`` while registering."""

    current: Optional[User] = None

    def is_self(self, other: User) -> bool:
        return self.current is not None and other.id == self.current.id


class NameValidator:
    fields = (("first_name", "First name"), ("last_name", "Last name"))

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> None:
        for key, label in self.fields:
            if data.get(key) is not None:
                self._validate_name(key, label, data[key])

    def _validate_name(self, key: str, label: str, value: str) -> None:
        name = str(value).strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise InvalidName(key, f"{label} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
        if not NAME_PATTERN.match(name):
            raise InvalidName(key, f"{label} contains invalid characters")


class AgeValidator:
    def __init__(self, minimum_age: int = MINIMUM_AGE, today: Callable[[], date] = date.today) -> None:
        self.minimum_age = minimum_age
        self._today = today

    @staticmethod
    def age_on(dob: date, today: date) -> int:
        """Whole years elapsed, counting this year only once the birthday has passed."""
        birthday_pending = (today.month, today.day) < (dob.month, dob.day)
        return today.year - dob.year - int(birthday_pending)

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> None:
        if data.get("dob") is None or data.get("dob") == "":
            return
        dob = parse_date(data["dob"])
        if self.age_on(dob, self._today()) < self.minimum_age:
            raise UnderageUser(f"User must be at least {self.minimum_age} years old")


class PasswordValidator:
    """
    Password strength policy. Rules run in a fixed order and the first one
    violated decides the error: length, character classes, email local part,
    phone suffix, common-password denylist.
    """

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> None:
        password = data.get("password")
        if password is None:
            return
        current = context.current
        email = normalize_email(data.get("email") or (current.email if current else ""))
        phone = data.get("phone_number") or (current.phone_number if current else None)

        if len(password) < PASSWORD_MIN_LENGTH:
            raise WeakPassword(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")

        has_upper = any(ch.isascii() and ch.isupper() for ch in password)
        has_lower = any(ch.isascii() and ch.islower() for ch in password)
        has_digit = any(ch.isascii() and ch.isdigit() for ch in password)
        has_symbol = any(ch in PASSWORD_SYMBOLS for ch in password)
        if not (has_upper and has_lower and has_digit and has_symbol):
            raise WeakPassword("Password must include uppercase, lowercase, number, and special character")

        local_part = email.split("@")[0]
        if local_part and local_part in password.lower():
            raise PasswordContainsIdentifier("Password cannot contain your email identifier")

        if phone:
            # trailing digits are the same before and after canonicalization
            suffix = phone_digits(phone)[-PHONE_SUFFIX_LENGTH:]
            if len(suffix) == PHONE_SUFFIX_LENGTH and suffix in password:
                raise PasswordContainsIdentifier("Password cannot contain part of your phone number")

        if password.lower() in WEAK_PASSWORDS:
            raise WeakPassword("Password is too common. Please choose a stronger one.")


class EmailUniquenessValidator:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> None:
        if data.get("email") is None:
            return
        email = normalize_email(data["email"])
        if context.current is not None and email == context.current.email:
            return
        match = self.repository.find_by_email(email)
        if not match or context.is_self(match):
            return
        if match.is_deleted:
            raise EmailBelongsToDeletedAccount(
                "This email belongs to a deleted account. Please contact an admin to restore it."
            )
        raise EmailInUse("Email already in use")


class PhoneUniquenessValidator:
    def __init__(self, repository: UserRepository, policy: PhonePolicy = BANGLADESH) -> None:
        self.repository = repository
        self.policy = policy

    def validate(self, data: Mapping[str, Any], context: ValidationContext) -> None:
        if not data.get("phone_number"):
            return
        phone = normalize_phone(data["phone_number"], self.policy)
        if context.current is not None and phone == context.current.phone_number:
            return
        match = self.repository.find_by_phone_number(phone)
        if not match or context.is_self(match):
            return
        if match.is_deleted:
            raise PhoneBelongsToDeletedAccount(
                "This phone number belongs to a deleted account. Please contact an admin to restore it."
            )
        raise PhoneInUse("Phone number already in use")


class ValidationPipeline:
    """Runs validators in order and stops at the first failure."""

    def __init__(self, validators: Iterable) -> None:
        self.validators = list(validators)

    def run(self, data: Mapping[str, Any], context: Optional[ValidationContext] = None) -> None:
        context = context or ValidationContext()
        for validator in self.validators:
            validator.validate(data, context)
