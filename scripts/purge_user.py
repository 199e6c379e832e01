#!/usr/bin/env python3
"""
Remove a user record permanently (hard delete). The API only soft-deletes;
use this for erasure requests once the account is already soft-deleted.

Usage:
  python scripts/purge_user.py --id 3f2a... [--force]
"""
from __future__ import annotations

import argparse
import sys

from accounts.repositories.sql_repository import SQLUserRepository


def main() -> None:
    ap = argparse.ArgumentParser(description="Permanently delete a user record")
    ap.add_argument("--id", required=True, help="User id to purge")
    ap.add_argument("--force", action="store_true", help="Purge even if the account was not soft-deleted first")
    args = ap.parse_args()

    repo = SQLUserRepository()
    user_id = (args.id or "").strip()
    if not user_id:
        raise SystemExit("Invalid user id")
    user = repo.find_by_id(user_id)
    if not user:
        raise SystemExit(f"User '{user_id}' not found")
    if not user.is_deleted and not args.force:
        raise SystemExit("User is still active; soft-delete it first or pass --force")

    repo.purge(user_id)
    print("OK: user purged")
    print(f"  ID: {user_id}")
    print(f"  Email: {user.email}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
