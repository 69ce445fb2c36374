"""Submission inspection endpoint.

Implements:
- GET /submissions
  - Lists envelopes recorded by the in-memory submission backend, oldest first
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Request

from formengine.models.submission import SubmissionEnvelope


router = APIRouter()


@router.get(
    "/submissions",
    summary="List recorded submissions",
    operation_id="listSubmissions",
    response_model=List[SubmissionEnvelope],
)
def list_submissions(request: Request, form_id: Optional[str] = None) -> List[SubmissionEnvelope]:
    envelopes = request.app.state.submissions.envelopes
    if form_id is None:
        return list(envelopes)
    return [e for e in envelopes if e.form_id == form_id]


__all__ = ["router"]
