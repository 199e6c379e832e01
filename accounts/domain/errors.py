"""
Exceptions raised by the account use cases.

Validation errors carry a stable ``kind`` so the HTTP layer (or any other
caller) can branch on the failure without parsing messages.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for account-related exceptions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AccountError):
    kind = "validation_failed"


class InvalidName(ValidationFailed):
    kind = "invalid_name"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class UnderageUser(ValidationFailed):
    kind = "underage_user"


class InvalidDateOfBirth(ValidationFailed):
    kind = "invalid_dob"


class WeakPassword(ValidationFailed):
    kind = "weak_password"


class PasswordContainsIdentifier(ValidationFailed):
    kind = "password_contains_identifier"


class InvalidPhoneFormat(ValidationFailed):
    kind = "invalid_phone_format"


class ForbiddenField(ValidationFailed):
    """Request tried to write an identity or lifecycle field."""

    kind = "forbidden_field"

    def __init__(self, fields: list[str]):
        super().__init__(f"Fields cannot be updated: {', '.join(fields)}")
        self.fields = fields


class ConflictError(ValidationFailed):
    """Field value already owned by another account."""


class EmailInUse(ConflictError):
    kind = "email_in_use"


class EmailBelongsToDeletedAccount(ConflictError):
    kind = "email_belongs_to_deleted_account"


class PhoneInUse(ConflictError):
    kind = "phone_in_use"


class PhoneBelongsToDeletedAccount(ConflictError):
    kind = "phone_belongs_to_deleted_account"


class UserNotFound(AccountError):
    kind = "user_not_found"


class StoreUnavailable(AccountError):
    kind = "store_unavailable"


class NotificationFailed(AccountError):
    kind = "notification_failed"
