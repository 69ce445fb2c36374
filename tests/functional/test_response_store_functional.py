"""Functional tests for the response store and its helpers."""

from __future__ import annotations

from formengine.logic.response_store import (
    ResponseStore,
    StoreAction,
    flatten_responses,
    initialize_page_from_defaults,
    page_completion_status,
)


def _recording_store(initial=None):
    store = ResponseStore(initial)
    changes = []
    store.subscribe(changes.append)
    return store, changes


def test_repeated_identical_set_field_notifies_once():
    """Verifies an equal write is suppressed entirely."""
    store, changes = _recording_store()
    store.set_field("p1", "name", "Ada")
    store.set_field("p1", "name", "Ada")
    # Assert: exactly one notification
    assert len(changes) == 1
    # Assert: notification describes the write
    assert changes[0].action == StoreAction.SET_FIELD and changes[0].field_id == "name"
    # Assert: snapshot reflects the completed write
    assert changes[0].snapshot == {"p1": {"name": "Ada"}}


def test_set_page_round_trips_and_suppresses_equal_writes():
    """Verifies get_page returns what set_page stored and equal pages are not re-notified."""
    store, changes = _recording_store()
    store.set_page("p1", {"a": 1, "b": ["x"]})
    store.set_page("p1", {"a": 1, "b": ["x"]})
    # Assert: round-trip equality
    assert store.get_page("p1") == {"a": 1, "b": ["x"]}
    # Assert: only the first write notified
    assert [c.action for c in changes] == [StoreAction.SET_PAGE]


def test_reads_are_copies():
    """Verifies callers cannot mutate the store through returned data."""
    store = ResponseStore({"p1": {"topics": ["news"]}})
    page = store.get_page("p1")
    page["topics"].append("offers")
    snapshot = store.get_all()
    snapshot["p1"]["extra"] = 1
    # Assert: store unchanged by either mutation
    assert store.get_page("p1") == {"topics": ["news"]}
    # Assert: unknown page reads as empty
    assert store.get_page("missing") == {} and store.get_field("missing", "x") is None


def test_clear_operations_only_notify_when_something_changes():
    """Verifies clearing missing pages or an empty store is silent."""
    store, changes = _recording_store()
    store.clear_page("nope")
    store.clear_all()
    # Assert: no notifications for no-op clears
    assert changes == []
    store.set_page("p1", {"a": 1})
    store.set_page("p2", {"b": 2})
    store.clear_page("p1")
    # Assert: page removed and others kept
    assert store.page_ids() == ["p2"]
    store.clear_all()
    # Assert: everything removed, with one notification per effective write
    assert store.get_all() == {}
    assert [c.action for c in changes] == [
        StoreAction.SET_PAGE,
        StoreAction.SET_PAGE,
        StoreAction.CLEAR_PAGE,
        StoreAction.CLEAR_ALL,
    ]


def test_unsubscribe_stops_notifications():
    """Verifies the returned unsubscribe function detaches the subscriber."""
    store = ResponseStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.set_field("p1", "a", 1)
    unsubscribe()
    store.set_field("p1", "a", 2)
    # Assert: only the first change seen
    assert len(seen) == 1
    # Assert: no subscribers left
    assert store.subscriber_count == 0


def test_subscriber_may_unsubscribe_during_notification():
    """Verifies notification iterates over a stable list of subscribers."""
    store = ResponseStore()
    calls = []

    def once(change):
        calls.append("once")
        store.unsubscribe(once)

    store.subscribe(once)
    store.subscribe(lambda change: calls.append("other"))
    store.set_field("p1", "a", 1)
    # Assert: both subscribers ran for the write
    assert calls == ["once", "other"]


def test_flatten_merges_pages_into_one_payload():
    """Verifies flattening {p1: {x: 1}, p2: {y: 2}} yields {x: 1, y: 2}."""
    # Assert: flattened payload
    assert flatten_responses({"p1": {"x": 1}, "p2": {"y": 2}}) == {"x": 1, "y": 2}


def test_page_completion_status_counts_answers_and_required_fields():
    """Verifies completion summary for a partially answered page."""
    store = ResponseStore({"p1": {"a": "yes", "b": "", "c": None, "d": ["x"]}})
    status = page_completion_status(store, "p1", ["a", "b"])
    # Assert: counts
    assert status == {
        "total_fields": 4,
        "completed_fields": 2,
        "required_fields": 2,
        "required_completed": 1,
        "is_complete": False,
    }
    # Assert: a page without required fields is complete
    assert page_completion_status(store, "other")["is_complete"] is True


def test_initialize_page_from_defaults_keeps_existing_answers():
    """Verifies defaults never overwrite stored answers."""
    store = ResponseStore({"p1": {"a": "kept"}})
    initialize_page_from_defaults(store, "p1", {"a": "", "b": []})
    # Assert: existing answer kept, missing default added
    assert store.get_page("p1") == {"a": "kept", "b": []}
