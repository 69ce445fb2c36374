"""Exceptions raised by the form engine.

Validation failures are never raised; they are returned as
``PageValidationResult`` data. These exceptions cover form-level structure,
field addressing, submission and session lookup.
"""

from __future__ import annotations

from typing import List


class FormEngineError(Exception):
    code = "FORM_ENGINE_ERROR"


class SchemaError(FormEngineError, ValueError):
    code = "SCHEMA_INVALID"


class DuplicateFieldIdError(SchemaError):
    code = "SCHEMA_DUPLICATE_FIELD_ID"

    def __init__(self, duplicates: List[str]) -> None:
        self.duplicates = list(duplicates)
        super().__init__(f"duplicate field ids across pages: {', '.join(self.duplicates)}")


class UnknownFieldError(FormEngineError, KeyError):
    code = "FIELD_NOT_ON_PAGE"

    def __init__(self, page_id: str, field_id: str) -> None:
        self.page_id = page_id
        self.field_id = field_id
        super().__init__(f"field {field_id!r} is not an answerable field on page {page_id!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class SubmissionError(FormEngineError):
    code = "SUBMISSION_REJECTED"


class SessionNotFoundError(FormEngineError, LookupError):
    code = "SESSION_NOT_FOUND"


class SessionLimitError(FormEngineError):
    code = "SESSION_LIMIT_REACHED"


__all__ = [
    "FormEngineError",
    "SchemaError",
    "DuplicateFieldIdError",
    "UnknownFieldError",
    "SubmissionError",
    "SessionNotFoundError",
    "SessionLimitError",
]
