import pytest

from core.errors import ValidationFailure
from core.validator import EMAIL_RX, Validator, matches, permitted_value


def test_first_message_per_field_wins():
    v = Validator()
    v.check(False, "text", "must be provided")
    v.check(False, "text", "must not be more than 255 characters long")
    v.check(True, "difficulty", "never recorded")
    assert v.errors == {"text": "must be provided"}
    assert not v.valid


def test_raise_if_invalid_reports_every_field():
    v = Validator()
    v.add_error("a", "bad")
    v.add_error("b", "worse")
    with pytest.raises(ValidationFailure) as excinfo:
        v.raise_if_invalid()
    assert excinfo.value.errors == {"a": "bad", "b": "worse"}


def test_valid_validator_does_not_raise():
    Validator().raise_if_invalid()


def test_helpers():
    assert permitted_value("easy", ("easy", "medium"))
    assert not permitted_value("Easy", ("easy", "medium"))
    assert matches("alice@example.com", EMAIL_RX)
    assert not matches("alice@", EMAIL_RX)
