"""Repository contract consumed by the account use cases."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from accounts.domain.users import User


class UserRepository(ABC):
    """
    Storage for users.

    Lookups by email/phone must also return soft-deleted records. Uniqueness
    of ``email`` and ``phone_number`` has to be enforced by the store itself:
    the service checks before writing but two concurrent registrations can
    both pass that check.
    """

    @abstractmethod
    def create(self, user: User) -> User:
        """Persist a new user and return it with its assigned id."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by id, deleted or not."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive exact match, including soft-deleted users."""

    @abstractmethod
    def find_by_phone_number(self, phone_number: str) -> Optional[User]:
        """Exact match on the canonical phone, including soft-deleted users."""

    @abstractmethod
    def find_all(self) -> List[User]:
        """All users that are not soft-deleted."""

    @abstractmethod
    def update(self, user_id: str, fields: Mapping[str, Any]) -> bool:
        """Apply a sparse update; True when a record was modified."""

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Soft-delete: flag the record deleted and disabled."""
