"""SQLAlchemy models for the accounts store."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, String, Text, func

from .session import Base


class UserRecord(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    username = Column(String(150), nullable=False)
    # stored lower-case, so a plain unique index is case-insensitive in practice
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(32), unique=True, nullable=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    dob = Column(Date, nullable=True)
    display_name = Column(String(150), nullable=True)
    password_hash = Column(Text, nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
