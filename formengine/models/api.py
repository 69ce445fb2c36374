"""Pydantic models for form session request and response bodies."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from formengine.models.navigation import NavigationOutcome, NavigationState
from formengine.models.submission import SubmissionEnvelope, SubmissionMode
from formengine.models.validation import FormValidationState


class OpenSessionRequest(BaseModel):
    form: Dict[str, Any]
    mode: SubmissionMode = SubmissionMode.CREATE
    form_id: Optional[str] = None
    response_id: Optional[str] = None
    # Flattened answers of an earlier submission, for edit mode
    responses: Dict[str, Any] = Field(default_factory=dict)


class ValuesUpdate(BaseModel):
    values: Dict[str, Any]


class GotoRequest(BaseModel):
    target_index: int


class FieldView(BaseModel):
    id: str
    kind: str
    label: Optional[str] = None
    fillable: bool
    required: bool = False
    options: List[str] = Field(default_factory=list)
    content: Optional[str] = None


class PageView(BaseModel):
    page_id: str
    title: str
    index: int
    fields: List[FieldView]
    values: Dict[str, Any]
    errors: Dict[str, str] = Field(default_factory=dict)
    validation: FormValidationState


class SessionView(BaseModel):
    session_id: str
    form_id: Optional[str] = None
    mode: SubmissionMode
    navigation: NavigationState
    page: PageView
    completion: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class NavigationResult(BaseModel):
    outcome: NavigationOutcome
    navigation: NavigationState
    page: PageView
    submission: Optional[SubmissionEnvelope] = None
    error: Optional[str] = None


class SummaryRow(BaseModel):
    page_id: str
    field_id: str
    label: str
    value: Any = None
    display: str


__all__ = [
    "OpenSessionRequest",
    "ValuesUpdate",
    "GotoRequest",
    "FieldView",
    "PageView",
    "SessionView",
    "NavigationResult",
    "SummaryRow",
]
