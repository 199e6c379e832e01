from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from accounts.domain.errors import ForbiddenField, UserNotFound
from accounts.domain.users import RegisterRequest, UpdateRequest, UserResponse
from accounts.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])

# camelCase as sent by clients, snake_case for internal callers
FORBIDDEN_PAYLOAD_KEYS = frozenset(
    {
        "id",
        "email",
        "password",
        "isDeleted",
        "is_deleted",
        "isEnabled",
        "is_enabled",
        "createdAt",
        "created_at",
    }
)


def _alias(camel: str, snake: str):
    return AliasChoices(camel, snake)


class RegisterPayload(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    first_name: str = Field(validation_alias=_alias("firstName", "first_name"))
    last_name: str = Field(validation_alias=_alias("lastName", "last_name"))
    phone_number: Optional[str] = Field(None, validation_alias=_alias("phoneNumber", "phone_number"))
    dob: Optional[str] = None
    display_name: Optional[str] = Field(None, validation_alias=_alias("displayName", "display_name"))


class UpdatePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    username: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = Field(None, validation_alias=_alias("firstName", "first_name"))
    last_name: Optional[str] = Field(None, validation_alias=_alias("lastName", "last_name"))
    phone_number: Optional[str] = Field(None, validation_alias=_alias("phoneNumber", "phone_number"))
    dob: Optional[str] = None
    display_name: Optional[str] = Field(None, validation_alias=_alias("displayName", "display_name"))


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    phone_number: Optional[str] = Field(None, serialization_alias="phoneNumber")
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    is_enabled: bool = Field(serialization_alias="isEnabled")


def _get_user_service(request: Request) -> UserService:
    svc = getattr(getattr(request.app, "state", None), "user_service", None)
    if not svc:
        raise RuntimeError("UserService not configured")
    return svc


def _out(user: UserResponse) -> UserOut:
    return UserOut.model_validate(user)


@router.post("/register", response_model=UserOut, status_code=201)
def register_user(payload: RegisterPayload, request: Request):
    svc = _get_user_service(request)
    created = svc.register(RegisterRequest(**payload.model_dump()))
    return _out(created)


@router.get("", response_model=List[UserOut])
def list_users(request: Request):
    return [_out(user) for user in _get_user_service(request).list_users()]


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, request: Request):
    user = _get_user_service(request).get_by_id(user_id)
    if not user:
        raise UserNotFound("User not found")
    return _out(user)


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UpdatePayload, request: Request):
    forbidden = sorted(set(payload.model_extra or {}) & FORBIDDEN_PAYLOAD_KEYS)
    if forbidden:
        raise ForbiddenField(forbidden)
    changes = payload.model_dump(exclude_unset=True, exclude=set(payload.model_extra or {}))
    updated = _get_user_service(request).update(user_id, UpdateRequest(**changes))
    return _out(updated)


@router.patch("/{user_id}/status")
def toggle_user_status(user_id: str, request: Request):
    return {"updated": _get_user_service(request).toggle_status(user_id)}


@router.delete("/{user_id}")
def delete_user(user_id: str, request: Request):
    return {"deleted": _get_user_service(request).delete(user_id)}
