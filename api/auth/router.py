"""
Users and tokens API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import schemas, service

router = APIRouter(prefix="/v1")


@router.post("/users", status_code=status.HTTP_202_ACCEPTED, response_model=schemas.RegisterResponse)
async def register_user(request: schemas.RegisterRequest) -> schemas.RegisterResponse:
    return await service.register(request)


@router.put("/users/activated", response_model=schemas.UserEnvelope)
async def activate_user(request: schemas.ActivateRequest) -> schemas.UserEnvelope:
    return await service.activate(request)


@router.post(
    "/tokens/authentication",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.AuthenticationTokenResponse,
)
async def create_authentication_token(
    request: schemas.AuthenticateRequest,
) -> schemas.AuthenticationTokenResponse:
    return await service.authenticate(request)
