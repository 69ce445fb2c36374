"""Field validation compiler.

Compiles one field definition into a :class:`ValidationRule`: an ordered
tuple of checks, each a predicate over a candidate value together with the
message reported when that predicate fails. Rules are pure; evaluating one
never mutates the value or any shared state.

Structural problems fail open: non-fillable and unsupported fields compile
to a rule with no checks.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from formengine.models.fields import (
    DateField,
    EmailField,
    FieldDefinition,
    LongTextField,
    MultiChoiceField,
    NumberField,
    RichTextField,
    ShortTextField,
    SingleChoiceField,
    SingleSelectField,
    UnsupportedField,
)


logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_DATE_MESSAGE = "Please enter a valid date"


@dataclass(frozen=True)
class RuleCheck:
    predicate: Callable[[Any], bool]
    message: str


@dataclass(frozen=True)
class ValidationRule:
    field_id: str
    checks: Tuple[RuleCheck, ...] = ()

    def errors(self, value: Any) -> List[str]:
        """Return every failing message, in check order."""
        return [check.message for check in self.checks if not check.predicate(value)]

    def is_valid(self, value: Any) -> bool:
        return all(check.predicate(value) for check in self.checks)

    @property
    def always_passes(self) -> bool:
        return not self.checks


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _selections(value: Any) -> List[Any]:
    if _is_blank(value):
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def _required_check(label: str) -> RuleCheck:
    return RuleCheck(lambda v: not _is_blank(v), f"{label} is required")


def _length_checks(field: ShortTextField | LongTextField, label: str) -> List[RuleCheck]:
    checks: List[RuleCheck] = []
    if field.min_length is not None:
        low = field.min_length
        checks.append(
            RuleCheck(
                lambda v: _is_blank(v) or len(_as_text(v)) >= low,
                f"{label} must be at least {low} {_plural(low, 'character')}",
            )
        )
    if field.max_length is not None:
        high = field.max_length
        checks.append(
            RuleCheck(
                lambda v: _is_blank(v) or len(_as_text(v)) <= high,
                f"{label} must be at most {high} {_plural(high, 'character')}",
            )
        )
    return checks


def _is_email(value: Any) -> bool:
    try:
        validate_email(_as_text(value), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _number_checks(field: NumberField, label: str) -> List[RuleCheck]:
    checks: List[RuleCheck] = []
    if field.required:
        checks.append(_required_check(label))
    checks.append(RuleCheck(lambda v: _is_blank(v) or _is_number(v), f"{label} must be a number"))
    low, high = field.min, field.max
    if low is not None or high is not None:
        parts = []
        if low is not None:
            parts.append(f"at least {_format_number(low)}")
        if high is not None:
            parts.append(f"at most {_format_number(high)}")

        def in_range(v: Any) -> bool:
            if not _is_number(v):
                return True
            if low is not None and v < low:
                return False
            if high is not None and v > high:
                return False
            return True

        checks.append(RuleCheck(in_range, f"{label} must be {' and '.join(parts)}"))
    return checks


def _date_checks(field: DateField, label: str) -> List[RuleCheck]:
    checks: List[RuleCheck] = []
    if field.required:
        checks.append(_required_check(label))
    checks.append(RuleCheck(lambda v: _is_blank(v) or _parse_date(v) is not None, INVALID_DATE_MESSAGE))

    low = _parse_date(field.min_date) if field.min_date else None
    high = _parse_date(field.max_date) if field.max_date else None
    if field.min_date and low is None:
        logger.warning("date_bound_unparseable field_id=%s min_date=%s", field.id, field.min_date)
    if field.max_date and high is None:
        logger.warning("date_bound_unparseable field_id=%s max_date=%s", field.id, field.max_date)
    if low is not None or high is not None:
        parts = []
        if low is not None:
            parts.append(f"after {field.min_date}")
        if high is not None:
            parts.append(f"before {field.max_date}")

        def in_range(v: Any) -> bool:
            parsed = None if _is_blank(v) else _parse_date(v)
            if parsed is None:
                return True
            if low is not None and parsed < low:
                return False
            if high is not None and parsed > high:
                return False
            return True

        checks.append(RuleCheck(in_range, f"Date must be {' and '.join(parts)}"))
    return checks


def _selection_checks(field: MultiChoiceField, label: str) -> List[RuleCheck]:
    checks: List[RuleCheck] = []
    required = field.required
    minimum = field.min_selections or 0
    if required:
        minimum = max(minimum, 1)
    if minimum > 0:
        if minimum == 1:
            message = f"Please select at least one {label.lower()}"
        else:
            message = f"Please select at least {minimum} options"

        def enough(v: Any) -> bool:
            count = len(_selections(v))
            # Optional fields may be left with no selection at all
            if count == 0 and not required:
                return True
            return count >= minimum

        checks.append(RuleCheck(enough, message))
    if field.max_selections is not None:
        maximum = field.max_selections
        checks.append(
            RuleCheck(
                lambda v: len(_selections(v)) <= maximum,
                f"Please select at most {maximum} {_plural(maximum, 'option')}",
            )
        )
    return checks


def compile_field(field: FieldDefinition) -> ValidationRule:
    """Compile a field definition into its validation rule."""
    label = field.display_label()
    checks: List[RuleCheck]
    match field:
        case ShortTextField() | LongTextField():
            checks = [_required_check(label)] if field.required else []
            checks.extend(_length_checks(field, label))
        case EmailField():
            checks = [_required_check(label)] if field.required else []
            checks.append(RuleCheck(lambda v: _is_blank(v) or _is_email(v), INVALID_EMAIL_MESSAGE))
        case NumberField():
            checks = _number_checks(field, label)
        case DateField():
            checks = _date_checks(field, label)
        case SingleSelectField() | SingleChoiceField():
            # Option membership is not checked; stored answers may predate option edits
            checks = []
            if field.required:
                checks.append(
                    RuleCheck(lambda v: isinstance(v, str) and v != "", f"Please select a {label.lower()}")
                )
        case MultiChoiceField():
            checks = _selection_checks(field, label)
        case RichTextField() | UnsupportedField():
            checks = []
        case _:
            logger.warning("field_rule_fallback field_id=%s kind=%s", getattr(field, "id", None), getattr(field, "kind", None))
            checks = []
    return ValidationRule(field_id=field.id, checks=tuple(checks))


def always_pass(field_id: str) -> ValidationRule:
    return ValidationRule(field_id=field_id)


__all__ = [
    "INVALID_EMAIL_MESSAGE",
    "INVALID_DATE_MESSAGE",
    "RuleCheck",
    "ValidationRule",
    "compile_field",
    "always_pass",
]
