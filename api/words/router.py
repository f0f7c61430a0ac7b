"""
Words API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/v1/words")


@router.get("", response_model=schemas.WordListResponse)
async def list_words(
    text: str | None = None,
    difficulty: str | None = None,
    page: str | None = None,
    page_size: str | None = None,
    sort: str | None = None,
    _: dict = Depends(auth_dependencies.require_activated_user),
) -> schemas.WordListResponse:
    words, metadata = await service.list_words(
        text=text,
        difficulty=difficulty,
        page=page,
        page_size=page_size,
        sort=sort,
    )
    return schemas.WordListResponse(
        words=[service.to_response(word) for word in words],
        metadata=service.metadata_response(metadata),
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.WordEnvelope)
async def create_word(
    request: schemas.CreateWordRequest,
    response: Response,
    _: dict = Depends(auth_dependencies.require_activated_user),
) -> schemas.WordEnvelope:
    word = await service.create_word(request)
    response.headers["Location"] = f"/v1/words/{word.id}"
    return schemas.WordEnvelope(word=service.to_response(word))


@router.get("/{word_id}", response_model=schemas.WordEnvelope)
async def get_word(
    word_id: str,
    _: dict = Depends(auth_dependencies.require_activated_user),
) -> schemas.WordEnvelope:
    word = await service.get_word(word_id)
    return schemas.WordEnvelope(word=service.to_response(word))


@router.patch("/{word_id}", response_model=schemas.WordEnvelope)
async def update_word(
    word_id: str,
    request: schemas.UpdateWordRequest,
    _: dict = Depends(auth_dependencies.require_activated_user),
) -> schemas.WordEnvelope:
    word = await service.update_word(word_id, request)
    return schemas.WordEnvelope(word=service.to_response(word))


@router.delete("/{word_id}")
async def delete_word(
    word_id: str,
    _: dict = Depends(auth_dependencies.require_activated_user),
) -> dict:
    await service.delete_word(word_id)
    return {"message": "word successfully deleted"}
