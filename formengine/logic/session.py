"""Form sessions.

A ``FormSession`` is the context object for one opened form instance: it
owns the response store, the page navigator and the submission coordinator,
and is discarded when the form is closed or submitted. ``SessionRegistry``
keeps open sessions by id for the HTTP layer.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from formengine.logic.errors import SessionLimitError, SessionNotFoundError
from formengine.logic.navigation import PageNavigator
from formengine.logic.page_form import PageValidator
from formengine.logic.page_schema import required_field_ids
from formengine.logic.response_store import ResponseStore, page_completion_status
from formengine.logic.schema_loader import load_form_schema
from formengine.logic.submission import CompletionCallback, CreateSink, SubmissionCoordinator, UpdateSink
from formengine.logic.value_formatters import format_field_value
from formengine.models.fields import is_fillable
from formengine.models.page import FormSchema
from formengine.models.submission import SubmissionMode


logger = logging.getLogger(__name__)


def seed_store_from_payload(schema: FormSchema, store: ResponseStore, payload: Mapping[str, Any]) -> List[str]:
    """Place a flattened answer payload back under its pages.

    Returns the field ids that do not belong to any page of the schema; those
    are skipped.
    """
    page_of: Dict[str, str] = {}
    for page, f in schema.iter_fields():
        if is_fillable(f):
            page_of.setdefault(f.id, page.id)
    by_page: Dict[str, Dict[str, Any]] = {}
    unknown: List[str] = []
    for field_id, value in payload.items():
        page_id = page_of.get(field_id)
        if page_id is None:
            unknown.append(field_id)
            continue
        by_page.setdefault(page_id, {})[field_id] = value
    for page_id, values in by_page.items():
        store.set_page(page_id, values)
    if unknown:
        logger.warning("seed_payload_unknown_fields ids=%s", unknown)
    return unknown


class FormSession:
    def __init__(
        self,
        schema: FormSchema,
        *,
        session_id: Optional[str] = None,
        mode: SubmissionMode = SubmissionMode.CREATE,
        form_id: Optional[str] = None,
        response_id: Optional[str] = None,
        initial_payload: Optional[Mapping[str, Any]] = None,
        create_sink: Optional[CreateSink] = None,
        update_sink: Optional[UpdateSink] = None,
        on_complete: Optional[CompletionCallback] = None,
        realtime_validation: bool = True,
        validator: Optional[PageValidator] = None,
        on_page_submit: Optional[Callable[[str, Dict[str, Any]], None]] = None,
        on_validation_error: Optional[Callable[[str, List[str]], None]] = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self.schema = schema
        self.store = ResponseStore()
        if initial_payload:
            seed_store_from_payload(schema, self.store, initial_payload)
        self.coordinator = SubmissionCoordinator(
            self.store,
            mode=mode,
            form_id=form_id if form_id is not None else schema.id,
            response_id=response_id,
            create_sink=create_sink,
            update_sink=update_sink,
            on_complete=on_complete,
        )
        self.navigator = PageNavigator(
            schema,
            self.store,
            self.coordinator,
            realtime_validation=realtime_validation,
            validator=validator,
            on_page_submit=on_page_submit,
            on_validation_error=on_validation_error,
        )
        self.closed = False

    @classmethod
    def open(
        cls,
        schema: Any,
        *,
        enforce_unique_field_ids: bool = True,
        **kwargs: Any,
    ) -> "FormSession":
        """Load ``schema`` (checking it) and start a session on its first page."""
        loaded = load_form_schema(schema, enforce_unique_field_ids=enforce_unique_field_ids)
        session = cls(loaded, **kwargs)
        logger.info(
            "form_session_opened session_id=%s form_id=%s mode=%s pages=%s",
            session.session_id,
            session.coordinator.form_id,
            session.coordinator.mode.value,
            len(loaded.pages),
        )
        return session

    @property
    def form(self):
        return self.navigator.form

    def close(self) -> None:
        if self.closed:
            return
        self.navigator.close()
        self.closed = True
        logger.info("form_session_closed session_id=%s", self.session_id)

    def completion(self) -> Dict[str, Dict[str, Any]]:
        """Per-page completion status keyed by page id."""
        return {
            page.id: page_completion_status(self.store, page.id, required_field_ids(page))
            for page in self.schema.pages
        }

    def clear_responses(self, page_id: Optional[str] = None) -> None:
        """Drop stored answers for one page, or all pages.

        The open page's working copy falls back to its defaults when its own
        answers are cleared.
        """
        if page_id is None:
            self.store.clear_all()
        else:
            self.store.clear_page(page_id)
        if page_id is None or page_id == self.navigator.current_page.id:
            self.form.reset({})
        logger.info("form_session_responses_cleared session_id=%s page_id=%s", self.session_id, page_id)

    def summary(self) -> List[Dict[str, Any]]:
        """Formatted answers in page and field order, for review screens."""
        rows: List[Dict[str, Any]] = []
        for page, f in self.schema.iter_fields():
            if not is_fillable(f):
                continue
            value = self.store.get_field(page.id, f.id)
            rows.append(
                {
                    "page_id": page.id,
                    "field_id": f.id,
                    "label": f.display_label(),
                    "value": value,
                    "display": format_field_value(value, f.kind),
                }
            )
        return rows


class SessionRegistry:
    def __init__(self, max_active: int = 1000) -> None:
        self.max_active = max_active
        self._sessions: Dict[str, FormSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: FormSession) -> FormSession:
        if len(self._sessions) >= self.max_active:
            logger.warning("session_limit_reached max_active=%s", self.max_active)
            raise SessionLimitError(f"at most {self.max_active} form sessions may be open")
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> FormSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"form session {session_id} not found") from None

    def close(self, session_id: str) -> None:
        session = self.get(session_id)
        session.close()
        del self._sessions[session_id]

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)


__all__ = ["seed_store_from_payload", "FormSession", "SessionRegistry"]
