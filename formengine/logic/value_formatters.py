"""Display formatting for stored answers.

Used for review summaries and exports: every value becomes a plain string
appropriate to its field kind. Formatting never raises on odd input; values
that cannot be interpreted are rendered with ``str()``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from formengine.models.fields import FieldKind


INVALID_DATE = "Invalid date"


def format_multi_value(value: Any, separator: str = ", ") -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return separator.join(str(v) for v in value if v)
    return str(value)


def format_number_value(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, bool):
        return str(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def format_date_value(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return datetime.fromisoformat(str(value).strip()).date().isoformat()
    except ValueError:
        return INVALID_DATE


def format_email_value(value: Any) -> str:
    if value is None or value == "":
        return ""
    return str(value).strip().lower()


def format_text_value(value: Any, max_length: Optional[int] = None) -> str:
    if value is None or value == "":
        return ""
    text = str(value).strip()
    if max_length and len(text) > max_length:
        return text[: max(max_length - 3, 0)] + "..."
    return text


def format_field_value(
    value: Any,
    kind: str,
    *,
    separator: str = ", ",
    max_length: Optional[int] = None,
) -> str:
    if value is None:
        return ""
    if kind == FieldKind.MULTI_CHOICE:
        return format_multi_value(value, separator)
    if kind in (FieldKind.SINGLE_SELECT, FieldKind.SINGLE_CHOICE):
        return format_multi_value(value, separator)
    if kind == FieldKind.NUMBER:
        return format_number_value(value)
    if kind == FieldKind.DATE:
        return format_date_value(value)
    if kind == FieldKind.EMAIL:
        return format_email_value(value)
    if kind in (FieldKind.SHORT_TEXT, FieldKind.LONG_TEXT):
        return format_text_value(value, max_length)
    return str(value)


def format_response_data(
    data: Mapping[str, Any],
    kinds: Mapping[str, str],
    *,
    separator: str = ", ",
    max_length: Optional[int] = None,
) -> Dict[str, str]:
    """Format a flattened payload; fields without a known kind use ``str()``."""
    formatted: Dict[str, str] = {}
    for field_id, value in data.items():
        kind = kinds.get(field_id)
        if kind:
            formatted[field_id] = format_field_value(value, kind, separator=separator, max_length=max_length)
        else:
            formatted[field_id] = "" if value is None else str(value)
    return formatted


__all__ = [
    "INVALID_DATE",
    "format_multi_value",
    "format_number_value",
    "format_date_value",
    "format_email_value",
    "format_text_value",
    "format_field_value",
    "format_response_data",
]
