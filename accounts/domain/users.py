"""User entity and the request/response shapes used by the account use cases."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

FORBIDDEN_UPDATE_FIELDS = frozenset({"email", "password", "is_deleted", "id", "is_enabled", "created_at"})
UPDATABLE_FIELDS = ("username", "first_name", "last_name", "phone_number", "dob", "display_name")


@dataclass
class User:
    username: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    phone_number: Optional[str] = None
    dob: Optional[date] = None
    display_name: Optional[str] = None
    is_enabled: bool = True
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass
class RegisterRequest:
    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    dob: Optional[date | str] = None
    display_name: Optional[str] = None

    def as_validation_data(self) -> dict[str, Any]:
        """Fields that were actually supplied (optional ``None`` values are absent)."""
        data = {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "dob": self.dob,
            "display_name": self.display_name,
        }
        return {key: value for key, value in data.items() if value is not None}


class UpdateRequest:
    """Sparse set of field changes. Fields not passed stay untouched."""

    def __init__(self, **changes: Any) -> None:
        self.changes: dict[str, Any] = dict(changes)

    def __repr__(self) -> str:
        return f"UpdateRequest({sorted(self.changes)})"


@dataclass
class UserResponse:
    """Public projection of a user; never carries password or lifecycle internals."""

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    is_enabled: bool
    phone_number: Optional[str] = field(default=None)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id or "",
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_enabled=user.is_enabled,
            phone_number=user.phone_number,
        )
