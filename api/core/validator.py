"""
Field-keyed validation that collects every failure before reporting.
"""

from __future__ import annotations

import re
from typing import Hashable, Iterable

from .errors import ValidationFailure

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)


class Validator:
    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        # First message recorded for a field wins.
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ValidationFailure(self.errors)


def permitted_value(value: Hashable, permitted: Iterable[Hashable]) -> bool:
    return value in set(permitted)


def matches(value: str, regex: re.Pattern[str]) -> bool:
    return regex.match(value or "") is not None
