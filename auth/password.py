"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting; the work factor
comes from ``config.bcrypt_rounds`` (default 10).  bcrypt only takes 72
bytes of input, so passwords are first reduced to the base64 of their
SHA-256 digest (44 bytes) and any length is accepted.
"""

from __future__ import annotations

import hashlib
from base64 import b64encode

import bcrypt

from config.settings import config


def _prehash(password: str) -> bytes:
    return b64encode(hashlib.sha256(password.encode()).digest())


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode())
    except (ValueError, TypeError):
        return False
