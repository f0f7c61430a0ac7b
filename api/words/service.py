"""
Word business logic: validation, partial updates and list filter parsing.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from core import filters
from core.errors import RecordNotFound
from core.validator import Validator, permitted_value

from . import repository, schemas
from .repository import DIFFICULTIES, Word

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 255
DEFAULT_PAGE_SIZE = 20


def validate_word(v: Validator, word: Word) -> None:
    v.check((word.text or "").strip() != "", "text", "must be provided")
    v.check(len(word.text or "") <= MAX_TEXT_CHARS, "text", "must not be more than 255 characters long")
    v.check(
        permitted_value(word.difficulty, DIFFICULTIES),
        "difficulty",
        "must be one of: easy, medium, hard",
    )
    v.check(word.owner_user_id > 0, "user_id", "must be a positive user id")


def to_response(word: Word) -> schemas.WordResponse:
    return schemas.WordResponse(
        id=int(word.id or 0),
        text=word.text,
        difficulty=word.difficulty,
        related_words=list(word.related_words or []),
        user_id=word.owner_user_id,
        created_at=word.created_at,
    )


def metadata_response(metadata: filters.Metadata) -> schemas.MetadataResponse:
    return schemas.MetadataResponse(**asdict(metadata))


async def create_word(payload: schemas.CreateWordRequest) -> Word:
    word = Word(
        text=payload.text,
        difficulty=payload.difficulty,
        related_words=list(payload.related_words or []),
        owner_user_id=payload.user_id,
    )

    v = Validator()
    validate_word(v, word)
    v.raise_if_invalid()

    created = await repository.insert(word)
    logger.info("word_created id=%s user_id=%s", created.id, created.owner_user_id)
    return created


def read_id(raw: int | str) -> int:
    """
    Path ids that are not integers name no record, like ids below 1.
    """
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise RecordNotFound() from exc


async def get_word(word_id: int | str) -> Word:
    return await repository.get(read_id(word_id))


async def update_word(word_id: int | str, payload: schemas.UpdateWordRequest) -> Word:
    """
    Merge the provided fields into the stored word and write it back under
    the version that was read. A concurrent writer makes this an EditConflict.
    """
    word = await repository.get(read_id(word_id))

    if payload.text is not None and payload.text.strip():
        word.text = payload.text
    if payload.difficulty is not None and payload.difficulty.strip():
        word.difficulty = payload.difficulty
    if payload.related_words is not None:
        word.related_words = list(payload.related_words)
    if payload.user_id is not None and payload.user_id > 0:
        word.owner_user_id = payload.user_id

    v = Validator()
    validate_word(v, word)
    v.raise_if_invalid()

    return await repository.update(word)


async def delete_word(word_id: int | str) -> None:
    word_id = read_id(word_id)
    await repository.delete(word_id)
    logger.info("word_deleted id=%s", word_id)


def _read_int(v: Validator, key: str, raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        v.add_error(key, "must be an integer")
        return default


async def list_words(
    *,
    text: str | None = None,
    difficulty: str | None = None,
    page: str | None = None,
    page_size: str | None = None,
    sort: str | None = None,
) -> tuple[list[Word], filters.Metadata]:
    """
    Query-string values arrive as raw strings so a bad integer is reported
    next to every other bad filter instead of on its own.
    """
    v = Validator()
    sort_spec, page_spec = filters.parse_filters(
        page=_read_int(v, "page", page, 1),
        page_size=_read_int(v, "page_size", page_size, DEFAULT_PAGE_SIZE),
        sort=(sort or "").strip() or "id",
        safelist=repository.SORT_SAFELIST,
        validator=v,
    )
    return await repository.search((text or "").strip(), (difficulty or "").strip(), sort_spec, page_spec)
