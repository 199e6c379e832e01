"""User storage backed by SQLAlchemy."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from accounts.db.models import UserRecord
from accounts.db.session import get_session
from accounts.domain.errors import EmailInUse, PhoneInUse, StoreUnavailable
from accounts.domain.users import User
from accounts.repositories.base import UserRepository

_WRITABLE_COLUMNS = frozenset(
    {"username", "first_name", "last_name", "phone_number", "dob", "display_name", "is_enabled", "password_hash"}
)


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        email=record.email,
        phone_number=record.phone_number,
        first_name=record.first_name,
        last_name=record.last_name,
        dob=record.dob,
        display_name=record.display_name,
        password_hash=record.password_hash,
        is_enabled=bool(record.is_enabled),
        is_deleted=bool(record.is_deleted),
        created_at=record.created_at,
    )


class SQLUserRepository(UserRepository):
    """CRUD helpers wrapping the SQLAlchemy session.

    Driver failures are re-raised as ``StoreUnavailable``; nothing is retried
    here.
    """

    # -------------------------- writes --------------------------
    def create(self, user: User) -> User:
        now = datetime.now(timezone.utc)
        record = UserRecord(
            id=uuid.uuid4().hex,
            username=user.username,
            email=user.email,
            phone_number=user.phone_number,
            first_name=user.first_name,
            last_name=user.last_name,
            dob=user.dob,
            display_name=user.display_name,
            password_hash=user.password_hash,
            is_enabled=user.is_enabled,
            is_deleted=user.is_deleted,
            created_at=user.created_at or now,
            updated_at=now,
        )
        try:
            with get_session() as session:
                session.add(record)
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    self._raise_conflict(user)
                session.refresh(record)
                return _to_user(record)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"User store unavailable: {exc}") from exc

    def _raise_conflict(self, user: User) -> None:
        # another writer won the read-then-write race; report the field it took
        if self.find_by_email(user.email):
            raise EmailInUse("Email already in use")
        raise PhoneInUse("Phone number already in use")

    def update(self, user_id: str, fields: Mapping[str, Any]) -> bool:
        values = {key: value for key, value in fields.items() if key in _WRITABLE_COLUMNS}
        if not values:
            return False
        values["updated_at"] = datetime.now(timezone.utc)
        stmt = update(UserRecord).where(UserRecord.id == user_id).values(**values)
        try:
            with get_session() as session:
                try:
                    result = session.execute(stmt)
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    raise PhoneInUse("Phone number already in use")
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"User store unavailable: {exc}") from exc

    def delete(self, user_id: str) -> bool:
        stmt = (
            update(UserRecord)
            .where(UserRecord.id == user_id, UserRecord.is_deleted.is_(False))
            .values(is_deleted=True, is_enabled=False, updated_at=datetime.now(timezone.utc))
        )
        return self._execute(stmt) > 0

    def purge(self, user_id: str) -> bool:
        """Physically remove a user. Operator tooling only; the service never calls this."""
        return self._execute(delete(UserRecord).where(UserRecord.id == user_id)) > 0

    def _execute(self, stmt) -> int:
        try:
            with get_session() as session:
                result = session.execute(stmt)
                session.commit()
                return result.rowcount
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"User store unavailable: {exc}") from exc

    # -------------------------- reads --------------------------
    def find_by_id(self, user_id: str) -> Optional[User]:
        return self._first(select(UserRecord).where(UserRecord.id == user_id))

    def find_by_email(self, email: str) -> Optional[User]:
        email_norm = (email or "").strip().lower()
        return self._first(select(UserRecord).where(func.lower(UserRecord.email) == email_norm))

    def find_by_phone_number(self, phone_number: str) -> Optional[User]:
        return self._first(select(UserRecord).where(UserRecord.phone_number == phone_number))

    def find_all(self) -> List[User]:
        stmt = select(UserRecord).where(UserRecord.is_deleted.is_(False)).order_by(UserRecord.created_at)
        try:
            with get_session() as session:
                return [_to_user(record) for record in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"User store unavailable: {exc}") from exc

    def _first(self, stmt) -> Optional[User]:
        try:
            with get_session() as session:
                record = session.execute(stmt.limit(1)).scalars().first()
                return _to_user(record) if record else None
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"User store unavailable: {exc}") from exc
