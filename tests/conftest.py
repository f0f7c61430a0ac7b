"""Shared fixtures."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

import pytest

from core import db


class FakeDB:
    """Stands in for the core.db helpers: records statements, replays scripted results."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.conns: list[Any] = []
        self.results: list[Any] = []
        self.transactions: list[str] = []

    def queue(self, *results: Any) -> None:
        self.results.extend(results)

    def _next(self, default: Any) -> Any:
        result = self.results.pop(0) if self.results else default
        if isinstance(result, BaseException):
            raise result
        return result

    def _record(self, kind: str, sql: str, args: tuple[Any, ...], conn: Any) -> None:
        self.calls.append((kind, sql, args))
        self.conns.append(conn)

    async def fetch_one(self, sql: str, *args: Any, conn: Any = None) -> dict[str, Any] | None:
        self._record("fetch_one", sql, args, conn)
        return self._next(None)

    async def fetch_all(self, sql: str, *args: Any, conn: Any = None) -> list[dict[str, Any]]:
        self._record("fetch_all", sql, args, conn)
        return self._next([])

    async def execute(self, sql: str, *args: Any, conn: Any = None) -> int:
        self._record("execute", sql, args, conn)
        return self._next(0)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[object]:
        conn = object()
        try:
            yield conn
        except BaseException:
            self.transactions.append("rollback")
            raise
        self.transactions.append("commit")

    @property
    def last_sql(self) -> str:
        return " ".join(self.calls[-1][1].split())

    @property
    def last_args(self) -> tuple[Any, ...]:
        return self.calls[-1][2]


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeDB:
    fake = FakeDB()
    monkeypatch.setattr(db, "fetch_one", fake.fetch_one)
    monkeypatch.setattr(db, "fetch_all", fake.fetch_all)
    monkeypatch.setattr(db, "execute", fake.execute)
    monkeypatch.setattr(db, "transaction", fake.transaction)
    return fake


@pytest.fixture
def created_at() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def word_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 1,
        "text_value": "lucid",
        "difficulty": "medium",
        "related_words": [],
        "user_id": 7,
        "created_at": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        "version": 1,
    }
    row.update(overrides)
    return row
