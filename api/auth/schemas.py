"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# Field rules are checked by the service so every violation is reported at once.
class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class ActivateRequest(BaseModel):
    token: str = ""


class AuthenticateRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    activated: bool
    created_at: datetime


class TokenResponse(BaseModel):
    token: str
    expiry: datetime


class RegisterResponse(BaseModel):
    user: UserResponse
    # Shown once; only its hash is kept.
    activation_token: TokenResponse


class UserEnvelope(BaseModel):
    user: UserResponse


class AuthenticationTokenResponse(BaseModel):
    authentication_token: TokenResponse
