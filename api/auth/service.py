"""
Auth business logic: registration, activation and token login.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import asyncpg
from fastapi import HTTPException, status

from core import config, db
from core.errors import DuplicateRecord, ValidationFailure
from core.validator import EMAIL_RX, Validator, matches

from . import repository, schemas, security, tokens
from .tokens import Scope

logger = logging.getLogger(__name__)

MAX_NAME_CHARS = 500
MIN_PASSWORD_BYTES = 8
MAX_PASSWORD_BYTES = 72


def validate_email(v: Validator, email: str) -> None:
    v.check(email != "", "email", "must be provided")
    v.check(matches(email, EMAIL_RX), "email", "must be a valid email address")


def validate_password(v: Validator, password: str) -> None:
    size = len(password.encode("utf-8"))
    v.check(password != "", "password", "must be provided")
    v.check(size >= MIN_PASSWORD_BYTES, "password", "must be at least 8 bytes long")
    v.check(size <= MAX_PASSWORD_BYTES, "password", "must not be more than 72 bytes long")


def validate_registration(v: Validator, payload: schemas.RegisterRequest) -> None:
    v.check(payload.name.strip() != "", "name", "must be provided")
    v.check(len(payload.name) <= MAX_NAME_CHARS, "name", "must not be more than 500 characters long")
    validate_email(v, payload.email.strip())
    validate_password(v, payload.password)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        name=str(user_row["name"]),
        email=str(user_row["email"]),
        activated=bool(user_row["activated"]),
        created_at=user_row["created_at"],
    )


def _to_token_response(credential: tokens.Credential) -> schemas.TokenResponse:
    return schemas.TokenResponse(token=credential.plaintext, expiry=credential.expiry)


async def _issue_token(
    *,
    user_id: int,
    ttl: timedelta,
    scope: Scope,
    conn: asyncpg.Connection | None = None,
) -> tokens.Credential:
    credential = tokens.generate_token(user_id, ttl, scope)
    await repository.save_token(credential.record, conn=conn)
    return credential


async def register(payload: schemas.RegisterRequest) -> schemas.RegisterResponse:
    v = Validator()
    validate_registration(v, payload)
    v.raise_if_invalid()

    password_hash = security.hash_password(payload.password)
    # The user and its activation token are stored together or not at all.
    try:
        async with db.transaction() as conn:
            user_row = await repository.create_user(
                name=payload.name.strip(),
                email=payload.email,
                password_hash=password_hash,
                conn=conn,
            )
            credential = await _issue_token(
                user_id=int(user_row["id"]),
                ttl=timedelta(hours=config.activation_token_ttl_hours()),
                scope=Scope.ACTIVATION,
                conn=conn,
            )
    except DuplicateRecord as exc:
        raise ValidationFailure({"email": "a user with this email address already exists"}) from exc

    logger.info("user_registered user_id=%s", user_row["id"])
    return schemas.RegisterResponse(
        user=_to_user_response(user_row),
        activation_token=_to_token_response(credential),
    )


async def activate(payload: schemas.ActivateRequest) -> schemas.UserEnvelope:
    plaintext = (payload.token or "").strip()

    v = Validator()
    tokens.validate_token_plaintext(v, plaintext)
    v.raise_if_invalid()

    user_row = await repository.get_user_for_token(Scope.ACTIVATION, plaintext)
    if user_row is None:
        raise ValidationFailure({"token": "invalid or expired activation token"})

    updated = await repository.activate_user(
        user_id=int(user_row["id"]),
        version=int(user_row["version"]),
    )
    # Activation tokens are single use.
    await repository.revoke_all_tokens(user_id=int(updated["id"]), scope=Scope.ACTIVATION)
    logger.info("user_activated user_id=%s", updated["id"])
    return schemas.UserEnvelope(user=_to_user_response(updated))


async def authenticate(payload: schemas.AuthenticateRequest) -> schemas.AuthenticationTokenResponse:
    email = payload.email.strip()

    v = Validator()
    validate_email(v, email)
    v.check(payload.password != "", "password", "must be provided")
    v.raise_if_invalid()

    user_row = await repository.get_user_by_email(email)
    if user_row is None or not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid authentication credentials",
        )

    user_id = int(user_row["id"])
    # A fresh login supersedes every earlier session token.
    await repository.revoke_all_tokens(user_id=user_id, scope=Scope.AUTHENTICATION)
    credential = await _issue_token(
        user_id=user_id,
        ttl=timedelta(hours=config.auth_token_ttl_hours()),
        scope=Scope.AUTHENTICATION,
    )
    logger.info("authentication_token_issued user_id=%s", user_id)
    return schemas.AuthenticationTokenResponse(authentication_token=_to_token_response(credential))


async def get_user_from_token(token_plaintext: str) -> dict:
    v = Validator()
    tokens.validate_token_plaintext(v, token_plaintext)
    if not v.valid:
        raise _invalid_token()

    user_row = await repository.get_user_for_token(Scope.AUTHENTICATION, token_plaintext)
    if user_row is None:
        raise _invalid_token()
    return user_row


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="invalid or missing authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )
