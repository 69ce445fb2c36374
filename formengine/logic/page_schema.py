"""Page schema compiler.

Composes per-field rules into a page-level mapping of field id to rule, and
derives the initial working values for a page.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from formengine.logic.field_rules import ValidationRule, compile_field
from formengine.models.fields import FieldDefinition, MultiChoiceField, NumberField, is_fillable
from formengine.models.page import Page
from formengine.models.validation import GENERAL_ERROR_FIELD, FieldError, PageValidationResult


logger = logging.getLogger(__name__)


def compile_page(page: Page) -> Dict[str, ValidationRule]:
    """Compile every field on the page, display-only fields included."""
    return {f.id: compile_field(f) for f in page.fields}


def _number_default(value: Any) -> Any:
    if value is None or value == "":
        return ""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        logger.warning("number_default_unparseable value=%r", value)
        return ""
    return int(number) if number.is_integer() else number


def default_for_field(field: FieldDefinition) -> Any:
    if not is_fillable(field):
        return ""
    value = field.default_value
    if isinstance(field, MultiChoiceField):
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        if isinstance(value, str) and value:
            return [value]
        return []
    if isinstance(field, NumberField):
        return _number_default(value)
    return "" if value is None else value


def defaults_for(page: Page) -> Dict[str, Any]:
    """Default working values: the field default, else an empty value of the right shape."""
    return {f.id: default_for_field(f) for f in page.fields}


def required_field_ids(page: Page) -> List[str]:
    return [f.id for f in page.fields if is_fillable(f) and getattr(f, "required", False)]


def validate_page_data(
    page: Page,
    data: Mapping[str, Any],
    rules: Optional[Dict[str, ValidationRule]] = None,
) -> PageValidationResult:
    """Validate a snapshot of page values against the page's compiled rules.

    Errors follow page field order, then check order within a field. A key
    missing from ``data`` is validated as an absent value.
    """
    compiled = rules if rules is not None else compile_page(page)
    errors: List[FieldError] = []
    try:
        for f in page.fields:
            rule = compiled.get(f.id)
            if rule is None:
                continue
            for message in rule.errors(data.get(f.id)):
                errors.append(FieldError(field_id=f.id, message=message))
    except (TypeError, ValueError):
        logger.error("page_validation_failed page_id=%s", page.id, exc_info=True)
        return PageValidationResult(
            is_valid=False,
            errors=[FieldError(field_id=GENERAL_ERROR_FIELD, message="Validation failed")],
        )
    return PageValidationResult(is_valid=not errors, errors=errors)


def get_field_error(result: PageValidationResult, field_id: str) -> Optional[str]:
    return result.error_for(field_id)


__all__ = [
    "compile_page",
    "default_for_field",
    "defaults_for",
    "required_field_ids",
    "validate_page_data",
    "get_field_error",
]
