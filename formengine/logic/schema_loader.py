"""Form schema loading.

Turns a stored or builder-produced form description into a ``FormSchema``.
Individual field problems fail open (see ``parse_field``); problems with the
form as a whole raise ``SchemaError``.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from formengine.logic.errors import DuplicateFieldIdError, SchemaError
from formengine.models.fields import is_fillable
from formengine.models.page import FormSchema


logger = logging.getLogger(__name__)


def find_duplicate_field_ids(schema: FormSchema) -> List[str]:
    """Return fillable field ids that occur more than once, in first-seen order."""
    counts = Counter(f.id for _page, f in schema.iter_fields() if is_fillable(f))
    seen: List[str] = []
    for _page, f in schema.iter_fields():
        if counts.get(f.id, 0) > 1 and f.id not in seen:
            seen.append(f.id)
    return seen


def load_form_schema(data: Any, *, enforce_unique_field_ids: bool = True) -> FormSchema:
    """Build and check a form schema.

    Accepts a ``FormSchema``, a mapping with a ``pages`` list, or a bare list
    of pages. Duplicate fillable field ids are rejected when
    ``enforce_unique_field_ids`` is set, since flattening answers for
    submission would otherwise lose data.
    """
    if isinstance(data, FormSchema):
        schema = data
    else:
        if isinstance(data, list):
            data = {"pages": data}
        if not isinstance(data, Mapping):
            raise SchemaError("form schema must be an object with a pages list")
        try:
            schema = FormSchema.model_validate(dict(data))
        except PydanticValidationError as exc:
            logger.error("form_schema_invalid errors=%s", exc.error_count())
            raise SchemaError(f"form schema is invalid: {exc.error_count()} error(s)") from exc

    if not schema.pages:
        raise SchemaError("form schema has no pages")

    page_ids = [p.id for p in schema.pages]
    if len(set(page_ids)) != len(page_ids):
        raise SchemaError("page ids must be unique")

    duplicates = find_duplicate_field_ids(schema)
    if duplicates:
        if enforce_unique_field_ids:
            logger.error("form_schema_duplicate_field_ids ids=%s", duplicates)
            raise DuplicateFieldIdError(duplicates)
        logger.warning("form_schema_duplicate_field_ids_tolerated ids=%s", duplicates)

    logger.info(
        "form_schema_loaded form_id=%s pages=%s fields=%s",
        schema.id,
        len(schema.pages),
        sum(len(p.fields) for p in schema.pages),
    )
    return schema


__all__ = ["find_duplicate_field_ids", "load_form_schema"]
