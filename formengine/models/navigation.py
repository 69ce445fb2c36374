"""Navigation state and outcome models."""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class NavigationOutcome(str, Enum):
    ADVANCED = "advanced"
    RETREATED = "retreated"
    JUMPED = "jumped"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    SUBMISSION_FAILED = "submission_failed"
    NOOP = "noop"


class NavigationState(BaseModel):
    current_page_index: int
    current_page_id: str
    page_count: int
    is_first_page: bool
    is_last_page: bool
    can_go_next: bool = True
    can_go_previous: bool
    current_page_valid: bool
    attempts: int = 0
    is_first_attempt: bool
    show_lenient_validation: bool
    validation_errors: List[str] = Field(default_factory=list)
    completed: bool = False


__all__ = ["NavigationOutcome", "NavigationState"]
