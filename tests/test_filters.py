import math

import pytest

from core.errors import InvariantViolation, ValidationFailure
from core.filters import Metadata, PageSpec, SortSafelist, SortSpec, parse_filters
from core.validator import Validator

SAFELIST = SortSafelist({"id": "id", "text": "text_value", "difficulty": "difficulty"})


def test_safelist_tokens_are_fields_and_descending_forms():
    assert set(SAFELIST.tokens) == {"id", "text", "difficulty", "-id", "-text", "-difficulty"}


@pytest.mark.parametrize(
    "token, column, direction",
    [
        ("id", "id", "ASC"),
        ("-id", "id", "DESC"),
        ("text", "text_value", "ASC"),
        ("-text", "text_value", "DESC"),
        ("difficulty", "difficulty", "ASC"),
        ("-difficulty", "difficulty", "DESC"),
    ],
)
def test_sort_spec_resolves_column_and_direction(token, column, direction):
    spec = SortSpec(token, SAFELIST)
    assert spec.resolve_column() == column
    assert spec.resolve_direction() == direction
    assert spec.order_by() == f"{column} {direction}, id ASC"


@pytest.mark.parametrize("token", ["text_value", "-text_value", "created_at", "id; DROP TABLE words", "", "--id", "ID"])
def test_unknown_sort_token_is_a_validation_failure(token):
    with pytest.raises(ValidationFailure) as excinfo:
        parse_filters(page=1, page_size=20, sort=token, safelist=SAFELIST)
    assert excinfo.value.errors == {"sort": "invalid sort value"}


def test_unchecked_sort_token_never_builds_a_spec():
    with pytest.raises(InvariantViolation):
        SortSpec("password_hash", SAFELIST)


def test_page_and_sort_errors_are_collected_together():
    with pytest.raises(ValidationFailure) as excinfo:
        parse_filters(page=0, page_size=1001, sort="nope", safelist=SAFELIST)
    assert set(excinfo.value.errors) == {"page", "page_size", "sort"}


def test_existing_validator_errors_are_reported_alongside():
    v = Validator()
    v.add_error("page", "must be an integer")
    with pytest.raises(ValidationFailure) as excinfo:
        parse_filters(page=1, page_size=5000, sort="id", safelist=SAFELIST, validator=v)
    assert excinfo.value.errors == {"page": "must be an integer", "page_size": "must be a maximum of 1000"}


@pytest.mark.parametrize(
    "page, page_size, ok",
    [(1, 1, True), (10_000_000, 1000, True), (0, 20, False), (10_000_001, 20, False), (1, 0, False), (1, 1001, False)],
)
def test_page_bounds(page, page_size, ok):
    if ok:
        _, spec = parse_filters(page=page, page_size=page_size, sort="id", safelist=SAFELIST)
        assert spec.limit == page_size
    else:
        with pytest.raises(ValidationFailure):
            parse_filters(page=page, page_size=page_size, sort="id", safelist=SAFELIST)


def test_limit_and_offset():
    spec = PageSpec(page=3, page_size=25)
    assert spec.limit == 25
    assert spec.offset == 50
    assert PageSpec(page=1, page_size=10).offset == 0


@pytest.mark.parametrize("page_size", [1, 3, 7, 20, 1000])
@pytest.mark.parametrize("total", [1, 2, 19, 20, 21, 999, 1000, 1001, 123457])
def test_last_page_is_ceiling_of_total_over_page_size(total, page_size):
    metadata = Metadata.calculate(total, 2, page_size)
    assert metadata.last_page == math.ceil(total / page_size)
    assert metadata.first_page == 1
    assert metadata.current_page == 2
    assert metadata.total_records == total


def test_zero_records_give_empty_metadata():
    metadata = Metadata.calculate(0, 4, 50)
    assert metadata == Metadata(0, 0, 0, 0, 0)
    assert metadata.is_empty


def test_safelist_cannot_be_widened_after_construction():
    columns = {"id": "id"}
    safelist = SortSafelist(columns)

    with pytest.raises(TypeError):
        safelist.columns["password_hash"] = "password_hash"
    columns["password_hash"] = "password_hash"

    assert set(safelist.tokens) == {"id", "-id"}
    assert not safelist.permits("password_hash")
