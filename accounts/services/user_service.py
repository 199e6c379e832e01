"""
Account use cases: registration, profile update, lookup and lifecycle.

An account is Active (enabled), Suspended (disabled) or Removed
(soft-deleted). ``toggle_status`` moves between Active and Suspended,
``delete`` moves either of them to Removed, and nothing leaves Removed.
Removed accounts are invisible to reads and to lifecycle operations.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from accounts.core.security import hash_password
from accounts.domain.errors import NotificationFailed, UserNotFound
from accounts.domain.normalization import (
    BANGLADESH,
    PhonePolicy,
    normalize_email,
    normalize_name,
    normalize_phone,
    parse_date,
)
from accounts.domain.users import (
    FORBIDDEN_UPDATE_FIELDS,
    UPDATABLE_FIELDS,
    RegisterRequest,
    UpdateRequest,
    User,
    UserResponse,
)
from accounts.domain.validators import (
    AgeValidator,
    EmailUniquenessValidator,
    NameValidator,
    PasswordValidator,
    PhoneUniquenessValidator,
    ValidationContext,
    ValidationPipeline,
)
from accounts.repositories.base import UserRepository
from accounts.repositories.sql_repository import SQLUserRepository
from accounts.services.notifier import WelcomeNotifier

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = frozenset({"username", "first_name", "last_name"})


class UserService:
    """Coordinates validation, normalization, hashing, storage and notification."""

    def __init__(
        self,
        repository: Optional[UserRepository] = None,
        notifier: Optional[WelcomeNotifier] = None,
        *,
        phone_policy: PhonePolicy = BANGLADESH,
        age_validator: Optional[AgeValidator] = None,
    ) -> None:
        self.repository = repository or SQLUserRepository()
        self.notifier = notifier
        self.phone_policy = phone_policy

        names = NameValidator()
        age = age_validator or AgeValidator()
        password = PasswordValidator()
        email = EmailUniquenessValidator(self.repository)
        phone = PhoneUniquenessValidator(self.repository, phone_policy)
        self.register_pipeline = ValidationPipeline([names, age, password, email, phone])
        self.update_pipeline = ValidationPipeline([names, age, phone])

    # -------------------------------------- helpers --------------------------------------
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _get_active(self, user_id: str) -> User:
        user = self.repository.find_by_id(user_id)
        if not user or user.is_deleted:
            raise UserNotFound("User not found")
        return user

    def _send_welcome(self, user: User) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.send_welcome(user.email, user.display_name or user.first_name)
        except NotificationFailed as exc:
            logger.warning("Welcome notification failed for user %s: %s", user.id, exc.message)
        except Exception:
            logger.exception("Unexpected error sending welcome notification for user %s", user.id)

    def _normalize_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, value in changes.items():
            if key in ("first_name", "last_name"):
                fields[key] = normalize_name(value)
            elif key == "phone_number":
                fields[key] = normalize_phone(value, self.phone_policy) if value else None
            elif key == "dob":
                fields[key] = parse_date(value) if value else None
            elif key == "display_name":
                fields[key] = value or None
            else:
                fields[key] = value
        return fields

    # -------------------------------------- registration --------------------------------------
    def register(self, request: RegisterRequest) -> UserResponse:
        self.register_pipeline.run(request.as_validation_data())

        user = User(
            username=request.username,
            email=normalize_email(request.email),
            phone_number=normalize_phone(request.phone_number, self.phone_policy) if request.phone_number else None,
            first_name=normalize_name(request.first_name),
            last_name=normalize_name(request.last_name),
            dob=parse_date(request.dob) if request.dob else None,
            display_name=request.display_name or None,
            password_hash=hash_password(request.password),
            is_enabled=True,
            is_deleted=False,
            created_at=self._now(),
        )
        created = self.repository.create(user)
        logger.info("Registered user %s", created.id)
        self._send_welcome(created)
        return UserResponse.from_user(created)

    # -------------------------------------- update --------------------------------------
    def update(self, user_id: str, request: UpdateRequest) -> UserResponse:
        current = self._get_active(user_id)

        protected = sorted(key for key in request.changes if key in FORBIDDEN_UPDATE_FIELDS)
        if protected:
            logger.warning("Ignoring protected fields %s on update of user %s", protected, user_id)
        changes = {
            key: value
            for key, value in request.changes.items()
            if key in UPDATABLE_FIELDS and not (value is None and key in _REQUIRED_FIELDS)
        }
        if not changes:
            return UserResponse.from_user(current)

        self.update_pipeline.run(changes, ValidationContext(current=current))
        self.repository.update(user_id, self._normalize_changes(changes))
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(changes)))

        updated = self.repository.find_by_id(user_id)
        if not updated or updated.is_deleted:
            raise UserNotFound("User not found")
        return UserResponse.from_user(updated)

    # -------------------------------------- reads --------------------------------------
    def get_by_id(self, user_id: str) -> Optional[UserResponse]:
        user = self.repository.find_by_id(user_id)
        if not user or user.is_deleted:
            return None
        return UserResponse.from_user(user)

    def list_users(self) -> List[UserResponse]:
        return [UserResponse.from_user(user) for user in self.repository.find_all()]

    # -------------------------------------- lifecycle --------------------------------------
    def toggle_status(self, user_id: str) -> bool:
        user = self._get_active(user_id)
        changed = self.repository.update(user_id, {"is_enabled": not user.is_enabled})
        logger.info("User %s %s", user_id, "suspended" if user.is_enabled else "re-enabled")
        return changed

    def delete(self, user_id: str) -> bool:
        self._get_active(user_id)
        deleted = self.repository.delete(user_id)
        logger.info("Soft-deleted user %s", user_id)
        return deleted
