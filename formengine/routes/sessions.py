"""Form session endpoints.

Implements:
- POST   /form-sessions                         open a session on page one
- GET    /form-sessions/{id}                    current page view and navigation
- DELETE /form-sessions/{id}                    discard the session
- PATCH  /form-sessions/{id}/values             edit the current page
- POST   /form-sessions/{id}/navigation/next    validate, commit and advance or submit
- POST   /form-sessions/{id}/navigation/previous
- POST   /form-sessions/{id}/navigation/goto
- GET    /form-sessions/{id}/responses          stored answers, grouped by page
- DELETE /form-sessions/{id}/responses          clear one page (?page_id=) or all
- GET    /form-sessions/{id}/summary            formatted answers for review
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request, Response

from formengine.logic.page_view import (
    assemble_navigation_result,
    assemble_page_view,
    assemble_session_view,
)
from formengine.logic.session import FormSession, SessionRegistry
from formengine.models.api import (
    GotoRequest,
    NavigationResult,
    OpenSessionRequest,
    PageView,
    SessionView,
    SummaryRow,
    ValuesUpdate,
)


router = APIRouter()
logger = logging.getLogger(__name__)


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _session(request: Request, session_id: str) -> FormSession:
    return _registry(request).get(session_id)


@router.post(
    "/form-sessions",
    summary="Open a form session",
    operation_id="openFormSession",
    status_code=201,
    response_model=SessionView,
)
def open_form_session(payload: OpenSessionRequest, request: Request, response: Response) -> SessionView:
    cfg = request.app.state.config
    backend = request.app.state.submissions
    session = FormSession.open(
        payload.form,
        enforce_unique_field_ids=cfg.engine.enforce_unique_field_ids,
        mode=payload.mode,
        form_id=payload.form_id,
        response_id=payload.response_id,
        initial_payload=payload.responses,
        create_sink=backend.create,
        update_sink=backend.update,
        realtime_validation=cfg.engine.realtime_validation,
    )
    _registry(request).add(session)
    response.headers["Location"] = f"/api/v1/form-sessions/{session.session_id}"
    return assemble_session_view(session)


@router.get(
    "/form-sessions/{session_id}",
    summary="Get the current page of a form session",
    operation_id="getFormSession",
    response_model=SessionView,
)
def get_form_session(session_id: str, request: Request) -> SessionView:
    return assemble_session_view(_session(request, session_id))


@router.delete(
    "/form-sessions/{session_id}",
    summary="Discard a form session",
    operation_id="closeFormSession",
    status_code=204,
)
def close_form_session(session_id: str, request: Request) -> Response:
    _registry(request).close(session_id)
    return Response(status_code=204)


@router.patch(
    "/form-sessions/{session_id}/values",
    summary="Edit field values on the current page",
    operation_id="updatePageValues",
    response_model=PageView,
)
def update_page_values(session_id: str, payload: ValuesUpdate, request: Request) -> PageView:
    session = _session(request, session_id)
    session.form.set_values(payload.values)
    logger.info(
        "page_values_updated session_id=%s page_id=%s fields=%s",
        session_id,
        session.form.page.id,
        sorted(payload.values),
    )
    return assemble_page_view(session)


@router.post(
    "/form-sessions/{session_id}/navigation/next",
    summary="Validate and leave the current page forward",
    operation_id="navigateNext",
    response_model=NavigationResult,
)
async def navigate_next(session_id: str, request: Request) -> NavigationResult:
    session = _session(request, session_id)
    outcome = await session.navigator.go_to_next()
    return assemble_navigation_result(session, outcome)


@router.post(
    "/form-sessions/{session_id}/navigation/previous",
    summary="Commit the current page and step back",
    operation_id="navigatePrevious",
    response_model=NavigationResult,
)
async def navigate_previous(session_id: str, request: Request) -> NavigationResult:
    session = _session(request, session_id)
    outcome = await session.navigator.go_to_previous()
    return assemble_navigation_result(session, outcome)


@router.post(
    "/form-sessions/{session_id}/navigation/goto",
    summary="Jump to a page by index",
    operation_id="navigateToPage",
    response_model=NavigationResult,
)
async def navigate_to_page(session_id: str, payload: GotoRequest, request: Request) -> NavigationResult:
    session = _session(request, session_id)
    outcome = await session.navigator.go_to_page(payload.target_index)
    return assemble_navigation_result(session, outcome)


@router.get(
    "/form-sessions/{session_id}/responses",
    summary="Stored answers grouped by page",
    operation_id="getResponses",
)
def get_responses(session_id: str, request: Request) -> Dict[str, Dict[str, Any]]:
    return _session(request, session_id).store.get_all()


@router.delete(
    "/form-sessions/{session_id}/responses",
    summary="Clear stored answers for one page or the whole form",
    operation_id="clearResponses",
    status_code=204,
)
def clear_responses(session_id: str, request: Request, page_id: Optional[str] = None) -> Response:
    _session(request, session_id).clear_responses(page_id)
    return Response(status_code=204)


@router.get(
    "/form-sessions/{session_id}/summary",
    summary="Formatted answers in page order",
    operation_id="getResponseSummary",
    response_model=List[SummaryRow],
)
def get_summary(session_id: str, request: Request) -> List[SummaryRow]:
    return [SummaryRow(**row) for row in _session(request, session_id).summary()]


__all__ = ["router"]
