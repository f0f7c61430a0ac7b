"""
Auth persistence helpers: user rows and issued credentials.

Credentials are stored by hash only. `save_token` takes a TokenRecord, which
has no plain value, so the plain value cannot reach this module.
"""

from __future__ import annotations

from datetime import datetime, timezone

import asyncpg

from core import db
from core.errors import EditConflict

from .tokens import Scope, TokenRecord, hash_token

USER_COLUMNS = "id, created_at, name, email, password_hash, activated, version"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    name: str,
    email: str,
    password_hash: str,
    activated: bool = False,
    conn: asyncpg.Connection | None = None,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (name, email, password_hash, activated)
        VALUES ($1, $2, $3, $4)
        RETURNING id, created_at, name, email, activated, version
        """,
        name,
        normalize_email(email),
        password_hash,
        activated,
        conn=conn,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def activate_user(*, user_id: int, version: int) -> dict:
    """
    Mark a user activated, guarded by the version that was read.
    """
    row = await db.fetch_one(
        """
        UPDATE users
        SET activated = true,
            version = version + 1
        WHERE id = $1
          AND version = $2
        RETURNING id, created_at, name, email, activated, version
        """,
        user_id,
        version,
    )
    if row is None:
        raise EditConflict()
    return row


async def get_user_for_token(scope: Scope, token_plaintext: str) -> dict | None:
    """
    Resolve the owner of a presented credential that is unexpired and of the
    given scope.
    """
    return await db.fetch_one(
        """
        SELECT u.id, u.created_at, u.name, u.email, u.password_hash, u.activated, u.version
        FROM users u
        INNER JOIN tokens t ON t.user_id = u.id
        WHERE t.hash = $1
          AND t.scope = $2
          AND t.expiry > $3
        """,
        hash_token(token_plaintext),
        Scope(scope).value,
        datetime.now(timezone.utc),
    )


async def save_token(record: TokenRecord, *, conn: asyncpg.Connection | None = None) -> None:
    expiry = record.expiry
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)

    await db.execute(
        """
        INSERT INTO tokens (hash, user_id, expiry, scope)
        VALUES ($1, $2, $3, $4)
        """,
        record.hash,
        record.user_id,
        expiry,
        Scope(record.scope).value,
        conn=conn,
    )


async def revoke_all_tokens(*, user_id: int, scope: Scope) -> int:
    """
    Delete every credential of one scope for a user. Returns how many went.
    """
    return await db.execute(
        """
        DELETE FROM tokens
        WHERE user_id = $1
          AND scope = $2
        """,
        user_id,
        Scope(scope).value,
    )
