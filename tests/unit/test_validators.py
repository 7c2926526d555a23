import pytest

from utils.validators import (
    is_valid_actual_value,
    is_valid_target_value,
    normalize_value_text,
    parse_non_negative_number,
    validate_username,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (" 12.5 ", 12.5),
        ("0", 0.0),
        (7, 7.0),
        ("-1", None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        ("", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_non_negative_number(raw, expected):
    assert parse_non_negative_number(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ""),
        (20.0, "20"),
        (12.5, "12.5"),
        (3, "3"),
        (" 是 ", "是"),
    ],
)
def test_normalize_value_text(raw, expected):
    assert normalize_value_text(raw) == expected


def test_target_value_rules():
    assert is_valid_target_value("number", "100")
    assert is_valid_target_value("number", 0)
    assert not is_valid_target_value("number", "-3")
    assert not is_valid_target_value("number", "")
    assert is_valid_target_value("boolean", "是")
    assert is_valid_target_value("boolean", "否")
    assert not is_valid_target_value("boolean", "yes")
    assert not is_valid_target_value("text", "1")


def test_actual_value_allows_empty():
    assert is_valid_actual_value("number", "")
    assert is_valid_actual_value("boolean", None)
    assert is_valid_actual_value("number", "12")
    assert not is_valid_actual_value("number", "-1")
    assert not is_valid_actual_value("boolean", "maybe")


def test_validate_username():
    assert validate_username("acme")
    assert not validate_username("")
    assert not validate_username("a b")
    assert not validate_username("x" * 51)
