"""
Sorting, paging and result metadata for list endpoints.

Sort tokens are checked against an explicit safelist before any SQL is built.
The safelist also owns the mapping from client field names to storage
columns, so callers never rename columns themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .errors import InvariantViolation
from .validator import Validator

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class SortSafelist:
    """
    Client field name -> storage column. Each field is allowed ascending
    (`name`) and descending (`-name`).
    """

    columns: Mapping[str, str]

    def __post_init__(self) -> None:
        # Private read-only copy: the allow-list is fixed once built.
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @property
    def tokens(self) -> tuple[str, ...]:
        fields = tuple(self.columns)
        return fields + tuple(f"-{name}" for name in fields)

    def permits(self, token: str) -> bool:
        return token in self.tokens

    def column_for(self, token: str) -> str:
        if not self.permits(token):
            raise InvariantViolation(f"unsafe sort parameter: {token!r}")
        return self.columns[token.lstrip("-")]


@dataclass(frozen=True)
class SortSpec:
    token: str
    safelist: SortSafelist = field(repr=False)

    def __post_init__(self) -> None:
        # Reaching this with an unchecked token is a bug in the caller,
        # parse_filters() reports bad input as a validation failure first.
        if not self.safelist.permits(self.token):
            raise InvariantViolation(f"unsafe sort parameter: {self.token!r}")

    def resolve_column(self) -> str:
        return self.safelist.column_for(self.token)

    def resolve_direction(self) -> str:
        return "DESC" if self.token.startswith("-") else "ASC"

    def order_by(self, tie_break: str = "id") -> str:
        """
        ORDER BY body with a deterministic tie-break for stable paging.
        """
        return f"{self.resolve_column()} {self.resolve_direction()}, {tie_break} ASC"


@dataclass(frozen=True)
class PageSpec:
    page: int = 1
    page_size: int = 20

    def __post_init__(self) -> None:
        if not (1 <= self.page <= MAX_PAGE and 1 <= self.page_size <= MAX_PAGE_SIZE):
            raise InvariantViolation(f"page out of bounds: page={self.page} page_size={self.page_size}")

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class Metadata:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    @classmethod
    def calculate(cls, total_records: int, page: int, page_size: int) -> "Metadata":
        if total_records == 0:
            return cls()
        return cls(
            current_page=page,
            page_size=page_size,
            first_page=1,
            last_page=(total_records + page_size - 1) // page_size,
            total_records=total_records,
        )

    @property
    def is_empty(self) -> bool:
        return self == Metadata()


def validate_page(v: Validator, page: int, page_size: int) -> None:
    v.check(page > 0, "page", "must be greater than zero")
    v.check(page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(page_size > 0, "page_size", "must be greater than zero")
    v.check(page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 1000")


def validate_sort(v: Validator, sort: str, safelist: SortSafelist) -> None:
    v.check(safelist.permits(sort), "sort", "invalid sort value")


def parse_filters(
    *,
    page: int,
    page_size: int,
    sort: str,
    safelist: SortSafelist,
    validator: Validator | None = None,
) -> tuple[SortSpec, PageSpec]:
    """
    Validate paging and sorting together and build the query specs.

    Raises ValidationFailure listing every bad field (including any already
    collected on `validator`).
    """
    v = validator if validator is not None else Validator()
    validate_page(v, page, page_size)
    validate_sort(v, sort, safelist)
    v.raise_if_invalid()
    return SortSpec(sort, safelist), PageSpec(page, page_size)
