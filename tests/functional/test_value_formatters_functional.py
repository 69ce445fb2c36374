"""Functional tests for answer display formatting."""

from __future__ import annotations

from datetime import date

import pytest

from formengine.logic.value_formatters import INVALID_DATE, format_field_value, format_response_data


@pytest.mark.parametrize(
    "value,kind,expected",
    [
        (["news", "", "events"], "multi_choice", "news, events"),
        ("UK", "single_select", "UK"),
        ("UK", "single_choice", "UK"),
        (42.0, "number", "42"),
        (2.5, "number", "2.5"),
        ("n/a", "number", "n/a"),
        ("2024-05-01T10:30:00", "date", "2024-05-01"),
        (date(2024, 5, 1), "date", "2024-05-01"),
        ("yesterday", "date", INVALID_DATE),
        ("  Ada@Lovelace.IO ", "email", "ada@lovelace.io"),
        ("  hello  ", "short_text", "hello"),
        (None, "short_text", ""),
        (7, "unsupported", "7"),
    ],
)
def test_format_field_value_by_kind(value, kind, expected):
    """Verifies per-kind display formatting."""
    # Assert: formatted string
    assert format_field_value(value, kind) == expected


def test_long_text_is_truncated_with_ellipsis():
    """Verifies max_length truncation."""
    # Assert: truncated to the limit including the ellipsis
    assert format_field_value("abcdefghij", "long_text", max_length=6) == "abc..."


def test_format_response_data_uses_kinds_and_falls_back_to_str():
    """Verifies whole-payload formatting with a custom separator."""
    formatted = format_response_data(
        {"topics": ["a", "b"], "age": 30, "free": 1.5, "none": None},
        {"topics": "multi_choice", "age": "number"},
        separator=" | ",
    )
    # Assert: formatted payload
    assert formatted == {"topics": "a | b", "age": "30", "free": "1.5", "none": ""}
