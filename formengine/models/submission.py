"""Submission mode and backend envelope models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SubmissionMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class SubmissionEnvelope(BaseModel):
    """One completed form instance as handed to a submission backend."""

    mode: SubmissionMode
    form_id: Optional[str] = None
    response_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["SubmissionMode", "SubmissionEnvelope"]
