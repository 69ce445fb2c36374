"""Validation result models shared by the page compiler and the page form."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


GENERAL_ERROR_FIELD = "general"


class FieldError(BaseModel):
    field_id: str
    message: str


class PageValidationResult(BaseModel):
    is_valid: bool
    errors: List[FieldError] = Field(default_factory=list)

    def error_for(self, field_id: str) -> Optional[str]:
        """Return the first message reported for ``field_id``, if any."""
        for err in self.errors:
            if err.field_id == field_id:
                return err.message
        return None

    def messages(self) -> List[str]:
        return [err.message for err in self.errors]

    def by_field(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for err in self.errors:
            grouped.setdefault(err.field_id, []).append(err.message)
        return grouped


class FormValidationState(BaseModel):
    """Snapshot of a page form's validation, as seen by the host UI."""

    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)
    touched: List[str] = Field(default_factory=list)


__all__ = [
    "GENERAL_ERROR_FIELD",
    "FieldError",
    "PageValidationResult",
    "FormValidationState",
]
