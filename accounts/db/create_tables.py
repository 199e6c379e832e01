"""Create (or, with --drop, recreate) the accounts schema."""
from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from accounts.core.config import get_settings
from accounts.core.logging_config import setup_logging

from .session import Base, get_engine
from . import models  # noqa: F401  # register tables on Base.metadata

logger = logging.getLogger(__name__)


def create_all(drop_first: bool = False) -> None:
    engine = get_engine()
    if drop_first:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Schema ready: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the accounts database schema")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    setup_logging(get_settings().log_level)
    try:
        create_all(drop_first=args.drop)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
