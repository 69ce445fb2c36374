"""Functional tests for the field validation compiler.

Each field kind is compiled from a definition dict, exactly as a stored
schema would provide it, and the resulting rule is exercised on typical,
boundary and malformed values.
"""

from __future__ import annotations

import pytest

from formengine.logic.field_rules import INVALID_DATE_MESSAGE, INVALID_EMAIL_MESSAGE, compile_field
from formengine.models.fields import UnsupportedField, parse_field


def _rule(definition):
    return compile_field(parse_field(definition))


def test_required_short_text_reports_label_in_message():
    """Verifies a required text field rejects empty and absent values using its label."""
    rule = _rule({"id": "name", "kind": "short_text", "label": "Full name", "required": True})
    # Assert: empty string fails with the labelled message
    assert rule.errors("") == ["Full name is required"]
    # Assert: None is treated as empty
    assert rule.errors(None) == ["Full name is required"]
    # Assert: any text passes
    assert rule.is_valid("Ada")


def test_text_length_bounds_use_singular_and_plural_units():
    """Verifies min/max length messages and that optional blanks skip length checks."""
    rule = _rule({"id": "code", "kind": "short_text", "label": "Code", "minLength": 3, "maxLength": 5})
    # Assert: too short
    assert rule.errors("ab") == ["Code must be at least 3 characters"]
    # Assert: too long
    assert rule.errors("abcdef") == ["Code must be at most 5 characters"]
    # Assert: optional blank is valid
    assert rule.is_valid("")
    single = _rule({"id": "x", "kind": "long_text", "label": "Initial", "maxLength": 1})
    # Assert: singular unit for a bound of one
    assert single.errors("ab") == ["Initial must be at most 1 character"]


def test_unlabelled_field_uses_default_label():
    """Verifies a missing label falls back to 'This field'."""
    rule = _rule({"id": "anon", "kind": "long_text", "required": True})
    # Assert: default label used
    assert rule.errors("") == ["This field is required"]


def test_email_rule_checks_syntax_only_when_answered():
    """Verifies email syntax checking and that optional blanks pass."""
    rule = _rule({"id": "email", "kind": "email", "label": "Email"})
    # Assert: well-formed address passes
    assert rule.is_valid("ada@lovelace.io")
    # Assert: malformed address fails with the fixed message
    assert rule.errors("not-an-email") == [INVALID_EMAIL_MESSAGE]
    # Assert: blank optional email passes
    assert rule.is_valid("")
    required = _rule({"id": "email", "kind": "email", "label": "Email", "required": True})
    # Assert: required email reports only the required message when blank
    assert required.errors("") == ["Email is required"]


@pytest.mark.parametrize(
    "value,expected",
    [
        (30, []),
        (18, []),
        (120.0, []),
        (17, ["Age must be at least 18 and at most 120"]),
        (121, ["Age must be at least 18 and at most 120"]),
        ("30", ["Age must be a number"]),
        (True, ["Age must be a number"]),
        (float("nan"), ["Age must be a number"]),
        ("", []),
    ],
)
def test_number_rule_type_and_range(value, expected):
    """Verifies numbers are type-checked without coercion and bounded inclusively."""
    rule = _rule({"id": "age", "kind": "number", "label": "Age", "min": 18, "max": 120})
    # Assert: messages match expectation for the value
    assert rule.errors(value) == expected


def test_number_rule_with_single_bound():
    """Verifies a one-sided range produces a one-sided message."""
    rule = _rule({"id": "qty", "kind": "number", "label": "Quantity", "min": 0.5})
    # Assert: fractional bound is rendered as given
    assert rule.errors(0.25) == ["Quantity must be at least 0.5"]


def test_date_rule_parses_iso_values_and_enforces_bounds():
    """Verifies date parsing and inclusive bounds."""
    rule = _rule(
        {"id": "start", "kind": "date", "label": "Start", "minDate": "2024-01-01", "maxDate": "2024-12-31"}
    )
    # Assert: in-range plain date passes
    assert rule.is_valid("2024-06-01")
    # Assert: bound itself is accepted
    assert rule.is_valid("2024-01-01")
    # Assert: out of range fails with both bounds in the message
    assert rule.errors("2025-02-01") == ["Date must be after 2024-01-01 and before 2024-12-31"]
    # Assert: unparseable text fails with the fixed message
    assert rule.errors("31/12/2024") == [INVALID_DATE_MESSAGE]


def test_date_rule_ignores_unparseable_bound():
    """Verifies a malformed bound is dropped rather than rejecting every value."""
    rule = _rule({"id": "d", "kind": "date", "label": "When", "minDate": "someday"})
    # Assert: any valid date passes
    assert rule.is_valid("1999-01-01")


def test_required_single_select_uses_lowercased_label():
    """Verifies the select message and that option membership is not enforced."""
    rule = _rule({"id": "country", "kind": "single_select", "label": "Country", "required": True, "options": ["UK"]})
    # Assert: empty selection fails
    assert rule.errors("") == ["Please select a country"]
    # Assert: a value outside the options list is still accepted
    assert rule.is_valid("Narnia")


def test_optional_multi_choice_minimum_exempts_empty_selection():
    """Verifies an optional multi-choice with a minimum of two."""
    rule = _rule({"id": "t", "kind": "multi_choice", "label": "Topics", "minSelections": 2})
    # Assert: no selection passes
    assert rule.is_valid([])
    # Assert: one selection fails
    assert rule.errors(["a"]) == ["Please select at least 2 options"]
    # Assert: two selections pass
    assert rule.is_valid(["a", "b"])


def test_required_multi_choice_needs_one_selection():
    """Verifies required multi-choice fields need at least one selection."""
    rule = _rule({"id": "t", "kind": "multi_choice", "label": "Topics", "required": True})
    # Assert: empty fails
    assert rule.errors([]) == ["Please select at least one topics"]
    # Assert: single selection passes
    assert rule.is_valid(["news"])


def test_multi_choice_maximum_is_checked_independently():
    """Verifies the maximum selection bound."""
    rule = _rule({"id": "t", "kind": "multi_choice", "label": "Topics", "maxSelections": 1})
    # Assert: two selections exceed a maximum of one
    assert rule.errors(["a", "b"]) == ["Please select at most 1 option"]


def test_display_only_and_unsupported_fields_always_pass():
    """Verifies rich text and unknown kinds compile to empty rules."""
    rich = _rule({"id": "intro", "kind": "rich_text", "content": "<p>Hi</p>"})
    unknown_field = parse_field({"id": "sig", "kind": "signature", "label": "Sign"})
    # Assert: unknown kind is kept as an unsupported placeholder
    assert isinstance(unknown_field, UnsupportedField)
    # Assert: both rules have no checks
    assert rich.always_passes and compile_field(unknown_field).always_passes


def test_rule_evaluation_does_not_mutate_value():
    """Verifies rules are pure over list values."""
    rule = _rule({"id": "t", "kind": "multi_choice", "label": "Topics", "required": True, "maxSelections": 2})
    value = ["a", "b", "c"]
    rule.errors(value)
    # Assert: value unchanged after evaluation
    assert value == ["a", "b", "c"]
