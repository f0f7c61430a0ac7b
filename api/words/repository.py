"""
Word persistence (raw SQL).

Writes use optimistic concurrency: every update is a single conditional
statement on (id, version), so Postgres decides which concurrent writer wins.
Searches return the page and the pre-pagination total from one statement via
a windowed count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from core import db
from core.errors import EditConflict, InvariantViolation, RecordNotFound
from core.filters import Metadata, PageSpec, SortSafelist, SortSpec

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")

# Clients sort by `text`; the column is `text_value`.
SORT_SAFELIST = SortSafelist(
    {
        "id": "id",
        "text": "text_value",
        "difficulty": "difficulty",
    }
)

WORD_COLUMNS = "id, text_value, difficulty, related_words, user_id, created_at, version"


@dataclass
class Word:
    text: str
    difficulty: str
    owner_user_id: int
    related_words: list[str] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None
    version: int | None = None


def _row_to_word(row: dict[str, Any]) -> Word:
    return Word(
        id=int(row["id"]),
        text=str(row["text_value"]),
        difficulty=str(row["difficulty"]),
        related_words=list(row["related_words"] or []),
        owner_user_id=int(row["user_id"]),
        created_at=row["created_at"],
        version=int(row["version"]),
    )


async def insert(word: Word) -> Word:
    """
    Store a new word; id, created_at and version come from the database.
    """
    if word.version is not None:
        raise InvariantViolation("a new word must not carry a version")

    row = await db.fetch_one(
        """
        INSERT INTO words (text_value, difficulty, related_words, user_id)
        VALUES ($1, $2, $3, $4)
        RETURNING id, created_at, version
        """,
        word.text,
        word.difficulty,
        list(word.related_words or []),
        word.owner_user_id,
    )
    if row is None:
        raise RuntimeError("Failed to insert word.")
    return replace(
        word,
        id=int(row["id"]),
        created_at=row["created_at"],
        version=int(row["version"]),
        related_words=list(word.related_words or []),
    )


async def get(word_id: int) -> Word:
    if word_id < 1:
        raise RecordNotFound()

    row = await db.fetch_one(
        f"""
        SELECT {WORD_COLUMNS}
        FROM words
        WHERE id = $1
        """,
        word_id,
    )
    if row is None:
        raise RecordNotFound()
    return _row_to_word(row)


async def update(word: Word) -> Word:
    """
    Write `word` if nobody changed it since `word.version` was read.

    No matching row means either the id is gone or another writer bumped the
    version; both are reported as EditConflict. Callers wanting a 404 must
    get() first.
    """
    row = await db.fetch_one(
        """
        UPDATE words
        SET text_value = $1,
            difficulty = $2,
            related_words = $3,
            user_id = $4,
            version = version + 1
        WHERE id = $5
          AND version = $6
        RETURNING version
        """,
        word.text,
        word.difficulty,
        list(word.related_words or []),
        word.owner_user_id,
        word.id,
        word.version,
    )
    if row is None:
        logger.info("word_edit_conflict id=%s version=%s", word.id, word.version)
        raise EditConflict()
    return replace(word, version=int(row["version"]))


async def delete(word_id: int) -> None:
    if word_id < 1:
        raise RecordNotFound()

    deleted = await db.execute(
        """
        DELETE FROM words
        WHERE id = $1
        """,
        word_id,
    )
    if deleted == 0:
        raise RecordNotFound()


async def search(
    text: str,
    difficulty: str,
    sort: SortSpec,
    page: PageSpec,
) -> tuple[list[Word], Metadata]:
    """
    Filter, sort and page words.

    - `text` is tokenized and matched with Postgres full-text search
      ('simple' config, boolean match, no ranking); empty matches everything.
    - `difficulty` is an exact, case-insensitive match; empty matches everything.
    - rows with equal sort keys are ordered by id so pages never overlap.
    """
    # The ORDER BY comes from the safelist, never from raw client input.
    rows = await db.fetch_all(
        f"""
        SELECT count(*) OVER() AS total_records, {WORD_COLUMNS}
        FROM words
        WHERE (to_tsvector('simple', text_value) @@ plainto_tsquery('simple', $1) OR $1 = '')
          AND (lower(difficulty) = lower($2) OR $2 = '')
        ORDER BY {sort.order_by("id")}
        LIMIT $3 OFFSET $4
        """,
        text or "",
        difficulty or "",
        page.limit,
        page.offset,
    )

    total_records = int(rows[0]["total_records"]) if rows else 0
    words = [_row_to_word(row) for row in rows]
    return words, Metadata.calculate(total_records, page.page, page.page_size)
