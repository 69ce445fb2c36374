"""Functional tests for form sessions and the session registry."""

from __future__ import annotations

import pytest

from formengine.logic.errors import SessionLimitError, SessionNotFoundError
from formengine.logic.session import FormSession, SessionRegistry, seed_store_from_payload
from formengine.logic.response_store import ResponseStore
from formengine.logic.schema_loader import load_form_schema
from formengine.models.submission import SubmissionMode


def test_seed_store_places_flat_answers_under_their_pages(contact_form):
    """Verifies edit-mode payloads are mapped back to pages."""
    schema = load_form_schema(contact_form)
    store = ResponseStore()
    unknown = seed_store_from_payload(schema, store, {"full_name": "Ada", "email": "a@b.io", "legacy": 1})
    # Assert: answers grouped by owning page
    assert store.get_all() == {"identity": {"full_name": "Ada"}, "contact": {"email": "a@b.io"}}
    # Assert: unknown ids reported
    assert unknown == ["legacy"]


def test_edit_session_starts_from_existing_answers(contact_form):
    """Verifies an update session shows the stored answers on page one."""
    session = FormSession.open(
        contact_form,
        mode=SubmissionMode.UPDATE,
        response_id="resp-1",
        initial_payload={"full_name": "Ada", "age": 36},
    )
    # Assert: working copy seeded
    assert session.form.values == {"full_name": "Ada", "age": 36}
    # Assert: page one already valid
    assert session.navigator.navigation_state.current_page_valid is True


def test_completion_and_summary_follow_page_order(contact_form):
    """Verifies per-page completion and formatted summary rows."""
    session = FormSession.open(contact_form, initial_payload={"full_name": "Ada", "topics": ["news", "events"]})
    completion = session.completion()
    # Assert: page one complete, page two missing its required email
    assert completion["identity"]["is_complete"] is True
    assert completion["contact"]["is_complete"] is False
    rows = session.summary()
    # Assert: one row per answerable field in schema order
    assert [r["field_id"] for r in rows] == ["full_name", "age", "email", "country", "topics", "start"]
    # Assert: multi-choice rendered for display
    assert rows[4]["display"] == "news, events" and rows[4]["label"] == "Topics"


def test_clear_responses_resets_open_page(contact_form):
    """Verifies clearing the open page drops stored and working answers."""
    session = FormSession.open(contact_form, initial_payload={"full_name": "Ada", "email": "a@b.io"})
    session.clear_responses("identity")
    # Assert: identity answers gone from the store
    assert session.store.get_page("identity") == {}
    # Assert: working copy back to defaults
    assert session.form.values == {"full_name": "", "age": ""}
    # Assert: other pages untouched
    assert session.store.get_field("contact", "email") == "a@b.io"
    session.clear_responses()
    # Assert: everything cleared
    assert session.store.get_all() == {}


def test_registry_enforces_limit_and_lookup(contact_form):
    """Verifies registry capacity, lookup and close."""
    registry = SessionRegistry(max_active=1)
    session = registry.add(FormSession.open(contact_form))
    with pytest.raises(SessionLimitError):
        registry.add(FormSession.open(contact_form))
    # Assert: lookup by id
    assert registry.get(session.session_id) is session
    registry.close(session.session_id)
    # Assert: closed sessions are detached from their store and removed
    assert session.closed and session.store.subscriber_count == 0 and len(registry) == 0
    with pytest.raises(SessionNotFoundError):
        registry.get(session.session_id)
