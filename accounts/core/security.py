"""Password hashing helpers."""

from __future__ import annotations

from argon2 import PasswordHasher

# argon2id defaults (t=3, m=64MiB, p=4) sit at interactive-login cost.
_ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Create a salted Argon2id hash in PHC string format (``$argon2id$...``)."""
    return _ph.hash(password)
