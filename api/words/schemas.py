"""
Words API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CreateWordRequest(BaseModel):
    text: str = ""
    difficulty: str = ""
    related_words: list[str] | None = None
    user_id: int = 0


class UpdateWordRequest(BaseModel):
    # Omitted or blank fields keep their stored value.
    text: str | None = None
    difficulty: str | None = None
    related_words: list[str] | None = None
    user_id: int | None = None


class WordResponse(BaseModel):
    id: int
    text: str
    difficulty: str
    related_words: list[str] = Field(default_factory=list)
    user_id: int
    created_at: datetime | None = None


class MetadataResponse(BaseModel):
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


class WordEnvelope(BaseModel):
    word: WordResponse


class WordListResponse(BaseModel):
    words: list[WordResponse]
    metadata: MetadataResponse
