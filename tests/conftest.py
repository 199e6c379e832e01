from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the accounts package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts.core import config as core_config  # noqa: E402
from accounts.db import models  # noqa: E402
from accounts.db.create_tables import create_all  # noqa: E402
from accounts.db import session as db_session  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Temporary SQLite database with settings/engine caches reset around the test."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("WELCOME_EMAIL_ENABLED", "0")
    _clear_caches()

    create_all(drop_first=True)
    engine = db_session.get_engine()

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()
