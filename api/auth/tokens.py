"""
Opaque credential issuance.

A credential is 16 random bytes rendered as 26 characters of unpadded
base32. Only its SHA-256 digest is ever stored; the plain value exists in the
`Credential` returned to the caller and nowhere else.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from core.errors import CredentialGenerationFault
from core.validator import Validator

TOKEN_BYTES = 16
TOKEN_PLAINTEXT_LENGTH = 26
TOKEN_ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")


class Scope(str, Enum):
    ACTIVATION = "activation"
    AUTHENTICATION = "authentication"


@dataclass(frozen=True)
class TokenRecord:
    """
    The persisted form of a credential. It has no plain value field.
    """

    hash: bytes
    user_id: int
    expiry: datetime
    scope: Scope


@dataclass(frozen=True)
class Credential:
    plaintext: str = field(repr=False)
    record: TokenRecord

    @property
    def expiry(self) -> datetime:
        return self.record.expiry

    @property
    def scope(self) -> Scope:
        return self.record.scope


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_token(plaintext: str) -> bytes:
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def generate_token(user_id: int, ttl: timedelta, scope: Scope) -> Credential:
    try:
        random_bytes = secrets.token_bytes(TOKEN_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise CredentialGenerationFault("random source unavailable") from exc

    plaintext = base64.b32encode(random_bytes).decode("ascii").rstrip("=")
    return Credential(
        plaintext=plaintext,
        record=TokenRecord(
            hash=hash_token(plaintext),
            user_id=user_id,
            expiry=_utc_now() + ttl,
            scope=Scope(scope),
        ),
    )


def validate_token_plaintext(v: Validator, plaintext: str) -> None:
    v.check(plaintext != "", "token", "must be provided")
    v.check(len(plaintext) == TOKEN_PLAINTEXT_LENGTH, "token", "must be 26 bytes long")
