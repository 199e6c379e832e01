"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from accounts.core.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    """
    Build the process-wide engine from Settings.

    Connections are pinged before checkout and recycled after
    ``DATABASE_POOL_RECYCLE_SECONDS`` so that a restarted database server
    shows up as a fresh connection instead of a failed request. SQLite
    connections are shared with the request thread pool.
    """
    settings = get_settings()
    url = (settings.database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        future=True,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_recycle=settings.database_pool_recycle_seconds,
        connect_args=connect_args,
    )


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    # repositories hand out plain dataclasses, so loaded rows need not expire
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def get_session() -> Session:
    """Yield a short-lived session; callers commit explicitly."""
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
