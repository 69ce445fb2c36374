"""Field definitions for form pages.

A field definition is a tagged variant keyed on ``kind``. Known kinds are
modelled as a pydantic discriminated union; anything else (an unknown kind or
a definition that fails validation) is kept as an ``UnsupportedField`` so a
single bad field never prevents the rest of a form from loading.

Definitions accept snake_case or camelCase keys. Builder exports that nest
``required``/``minLength``/``maxLength`` under ``validation`` and that use the
builder's long kind names are normalised by :func:`parse_field`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


logger = logging.getLogger(__name__)


class FieldKind:
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    EMAIL = "email"
    NUMBER = "number"
    SINGLE_SELECT = "single_select"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    DATE = "date"
    RICH_TEXT = "rich_text"


KNOWN_KINDS = frozenset(
    {
        FieldKind.SHORT_TEXT,
        FieldKind.LONG_TEXT,
        FieldKind.EMAIL,
        FieldKind.NUMBER,
        FieldKind.SINGLE_SELECT,
        FieldKind.SINGLE_CHOICE,
        FieldKind.MULTI_CHOICE,
        FieldKind.DATE,
        FieldKind.RICH_TEXT,
    }
)

# Kind names written by the form builder
LEGACY_KIND_ALIASES: Dict[str, str] = {
    "text_input_field": FieldKind.SHORT_TEXT,
    "text_area_field": FieldKind.LONG_TEXT,
    "email_field": FieldKind.EMAIL,
    "number_field": FieldKind.NUMBER,
    "select_field": FieldKind.SINGLE_SELECT,
    "radio_field": FieldKind.SINGLE_CHOICE,
    "checkbox_field": FieldKind.MULTI_CHOICE,
    "date_field": FieldKind.DATE,
    "rich_text_field": FieldKind.RICH_TEXT,
}

DEFAULT_LABEL = "This field"


class _FieldBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    fillable: ClassVar[bool] = True

    id: str = Field(min_length=1)
    label: Optional[str] = None
    default_value: Any = None

    def display_label(self) -> str:
        return self.label or DEFAULT_LABEL


class _FillableField(_FieldBase):
    required: bool = False


class _TextField(_FillableField):
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)


class ShortTextField(_TextField):
    kind: Literal["short_text"] = "short_text"


class LongTextField(_TextField):
    kind: Literal["long_text"] = "long_text"


class EmailField(_FillableField):
    kind: Literal["email"] = "email"


class NumberField(_FillableField):
    kind: Literal["number"] = "number"
    min: Optional[float] = None
    max: Optional[float] = None


class SingleSelectField(_FillableField):
    kind: Literal["single_select"] = "single_select"
    options: List[str] = Field(default_factory=list)


class SingleChoiceField(_FillableField):
    kind: Literal["single_choice"] = "single_choice"
    options: List[str] = Field(default_factory=list)


class MultiChoiceField(_FillableField):
    kind: Literal["multi_choice"] = "multi_choice"
    options: List[str] = Field(default_factory=list)
    min_selections: Optional[int] = Field(default=None, ge=0)
    max_selections: Optional[int] = Field(default=None, ge=0)


class DateField(_FillableField):
    kind: Literal["date"] = "date"
    min_date: Optional[str] = None
    max_date: Optional[str] = None


class RichTextField(_FieldBase):
    """Static content shown between inputs; never validated or stored."""

    fillable: ClassVar[bool] = False

    kind: Literal["rich_text"] = "rich_text"
    content: str = ""


class UnsupportedField(_FieldBase):
    """Placeholder for a definition the engine cannot interpret."""

    fillable: ClassVar[bool] = False

    kind: str = "unsupported"


KnownField = Annotated[
    Union[
        ShortTextField,
        LongTextField,
        EmailField,
        NumberField,
        SingleSelectField,
        SingleChoiceField,
        MultiChoiceField,
        DateField,
        RichTextField,
    ],
    Field(discriminator="kind"),
]

FieldDefinition = Union[
    ShortTextField,
    LongTextField,
    EmailField,
    NumberField,
    SingleSelectField,
    SingleChoiceField,
    MultiChoiceField,
    DateField,
    RichTextField,
    UnsupportedField,
]

_KNOWN_FIELD_ADAPTER: TypeAdapter = TypeAdapter(KnownField)


def _normalise(raw: Mapping[str, Any]) -> Dict[str, Any]:
    data = dict(raw)
    kind = data.get("kind") or data.get("type") or data.get("__type")
    kind = str(kind) if kind is not None else ""
    data["kind"] = LEGACY_KIND_ALIASES.get(kind, kind)
    # Builder exports keep required and length limits under "validation"
    nested = data.pop("validation", None)
    if isinstance(nested, Mapping):
        for key, value in nested.items():
            if key == "type":
                continue
            data.setdefault(key, value)
    return data


def parse_field(raw: Any) -> FieldDefinition:
    """Build a field definition from a mapping, failing open on bad input."""
    if isinstance(raw, _FieldBase):
        return raw  # type: ignore[return-value]
    if not isinstance(raw, Mapping):
        logger.warning("field_definition_not_mapping type=%s", type(raw).__name__)
        return UnsupportedField(id=f"unsupported-{id(raw)}")
    data = _normalise(raw)
    field_id = str(data.get("id") or "")
    label = data.get("label") if isinstance(data.get("label"), str) else None
    if data["kind"] not in KNOWN_KINDS:
        logger.warning("field_kind_unsupported field_id=%s kind=%s", field_id, data["kind"])
        return UnsupportedField(id=field_id or "unsupported", label=label, kind=data["kind"] or "unsupported")
    try:
        return _KNOWN_FIELD_ADAPTER.validate_python(data)
    except ValidationError as exc:
        logger.warning(
            "field_definition_invalid field_id=%s kind=%s errors=%s",
            field_id,
            data["kind"],
            exc.error_count(),
        )
        return UnsupportedField(id=field_id or "unsupported", label=label, kind=data["kind"])


def is_fillable(field: FieldDefinition) -> bool:
    return bool(getattr(field, "fillable", False))


__all__ = [
    "FieldKind",
    "KNOWN_KINDS",
    "LEGACY_KIND_ALIASES",
    "DEFAULT_LABEL",
    "ShortTextField",
    "LongTextField",
    "EmailField",
    "NumberField",
    "SingleSelectField",
    "SingleChoiceField",
    "MultiChoiceField",
    "DateField",
    "RichTextField",
    "UnsupportedField",
    "KnownField",
    "FieldDefinition",
    "parse_field",
    "is_fillable",
]
