"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every helper runs under a per-call deadline (DB_QUERY_TIMEOUT_S) and turns
driver, network and deadline failures into `BackendFault`. A cancelled caller
(client disconnect) propagates `CancelledError` and asyncpg aborts the query.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Awaitable, Iterator, TypeVar

import asyncpg

from . import config
from .errors import BackendFault, DuplicateRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

_pool: asyncpg.Pool | None = None

BACKEND_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=config.database_url(),
        min_size=config.db_max_idle_conns(),
        max_size=config.db_max_open_conns(),
        max_inactive_connection_lifetime=config.db_max_idle_time_s(),
        command_timeout=config.db_query_timeout_s(),
    )
    logger.info(
        "db_pool_ready min_size=%s max_size=%s",
        config.db_max_idle_conns(),
        config.db_max_open_conns(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _statement_preview(sql: str) -> str:
    return " ".join(sql.split())[:120]


@contextmanager
def backend_call(sql: str) -> Iterator[None]:
    """
    Log the real failure, hand the caller an opaque one.
    """
    try:
        yield
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateRecord(getattr(exc, "constraint_name", None)) from exc
    except BACKEND_ERRORS as exc:
        logger.exception("db_call_failed statement=%r", _statement_preview(sql))
        raise BackendFault() from exc


def rows_affected(status: str) -> int:
    """
    Parse an asyncpg command status such as "DELETE 3" or "INSERT 0 1".
    """
    try:
        return int((status or "").rsplit(" ", 1)[-1])
    except ValueError:
        return 0


def _executor(conn: asyncpg.Connection | None) -> asyncpg.Pool | asyncpg.Connection:
    return conn if conn is not None else pool()


async def _bounded(awaitable: Awaitable[T]) -> T:
    # Covers waiting for a pool connection as well as the statement itself.
    return await asyncio.wait_for(awaitable, config.db_query_timeout_s())


async def fetch_one(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    with backend_call(sql):
        row = await _bounded(_executor(conn).fetchrow(sql, *args))
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    with backend_call(sql):
        rows = await _bounded(_executor(conn).fetch(sql, *args))
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
    """
    with backend_call(sql):
        status = await _bounded(_executor(conn).execute(sql, *args))
    return rows_affected(status)


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Hold one connection in a transaction. Pass it as `conn=` to the helpers
    above; leaving the block with an exception rolls everything back.
    """
    with backend_call("BEGIN"):
        conn = await _bounded(pool().acquire())
    try:
        with backend_call("COMMIT"):
            async with conn.transaction():
                yield conn
    finally:
        await pool().release(conn)
