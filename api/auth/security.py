"""
Password hashing.
"""

from __future__ import annotations

import bcrypt


BCRYPT_ROUNDS = 12


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False
