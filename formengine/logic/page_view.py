"""Page and session view assembly.

Provides reusable functions to assemble the page view returned by every
session endpoint, so reads and post-navigation refreshes share one shape.
"""

from __future__ import annotations

import logging
from typing import Optional

from formengine.logic.session import FormSession
from formengine.models.api import FieldView, NavigationResult, PageView, SessionView
from formengine.models.fields import FieldDefinition, is_fillable
from formengine.models.navigation import NavigationOutcome
from formengine.models.submission import SubmissionEnvelope


logger = logging.getLogger(__name__)


def _field_view(f: FieldDefinition) -> FieldView:
    return FieldView(
        id=f.id,
        kind=f.kind,
        label=f.label,
        fillable=is_fillable(f),
        required=bool(getattr(f, "required", False)),
        options=list(getattr(f, "options", []) or []),
        content=getattr(f, "content", None),
    )


def assemble_page_view(session: FormSession) -> PageView:
    form = session.form
    page = form.page
    return PageView(
        page_id=page.id,
        title=page.title,
        index=session.navigator.current_page_index,
        fields=[_field_view(f) for f in page.fields],
        values=dict(form.values),
        errors=form.visible_errors(),
        validation=form.get_validation_state(),
    )


def assemble_session_view(session: FormSession) -> SessionView:
    return SessionView(
        session_id=session.session_id,
        form_id=session.coordinator.form_id,
        mode=session.coordinator.mode,
        navigation=session.navigator.navigation_state,
        page=assemble_page_view(session),
        completion=session.completion(),
    )


def assemble_navigation_result(session: FormSession, outcome: NavigationOutcome) -> NavigationResult:
    submission: Optional[SubmissionEnvelope] = None
    if outcome is NavigationOutcome.COMPLETED:
        submission = session.coordinator.envelope()
        result = session.coordinator.last_result
        if submission.response_id is None and isinstance(result, str):
            # create sinks answer with the id they assigned
            submission = submission.model_copy(update={"response_id": result})
    logger.info(
        "navigation_result session_id=%s outcome=%s page_index=%s",
        session.session_id,
        outcome.value,
        session.navigator.current_page_index,
    )
    return NavigationResult(
        outcome=outcome,
        navigation=session.navigator.navigation_state,
        page=assemble_page_view(session),
        submission=submission,
        error=session.navigator.submission_error if outcome is NavigationOutcome.SUBMISSION_FAILED else None,
    )


__all__ = ["assemble_page_view", "assemble_session_view", "assemble_navigation_result"]
