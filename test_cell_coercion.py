import math

import pytest

from cell_coercion import coerce_cell_value, coerce_number, format_cell_value, is_missing
from table_errors import ValidationError


@pytest.mark.parametrize(
    "value, expected",
    [
        ("42", 42),
        (" 7 ", 7),
        ("-3", -3),
        ("2.5", 2.5),
        ("1e3", 1000.0),
        (12, 12),
        (3.25, 3.25),
    ],
)
def test_coerce_number_accepts_numeric_input(value, expected):
    result = coerce_number(value)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize("value", ["", "   ", "thirty", "12abc", "nan", "inf", None, True])
def test_coerce_number_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        coerce_number(value)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        coerce_number("x")


def test_coerce_cell_value_by_column_type():
    assert coerce_cell_value("number", "5") == 5
    assert coerce_cell_value("text", 5) == "5"
    assert coerce_cell_value("email", None) == ""


def test_format_cell_value():
    assert format_cell_value(None) == ""
    assert format_cell_value(float("nan")) == ""
    assert format_cell_value(30.0) == "30"
    assert format_cell_value(30.5) == "30.5"
    assert format_cell_value(0) == "0"
    assert format_cell_value("Ann") == "Ann"


def test_is_missing():
    assert is_missing(None)
    assert is_missing(math.nan)
    assert not is_missing("")
    assert not is_missing(0)
    assert not is_missing([1, 2])
