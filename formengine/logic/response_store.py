"""Response store: committed answers for one form session.

Answers are keyed by page id then field id. All mutation goes through the
setters below. Every effective write notifies subscribers synchronously,
after the write is complete, with a snapshot copy of the whole store. A write
that would not change anything is suppressed entirely, so a subscriber that
echoes the data it was handed back into the store cannot cause another
notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional


logger = logging.getLogger(__name__)

PageValues = Dict[str, Any]
AllResponses = Dict[str, PageValues]


class StoreAction:
    SET_FIELD = "set_field"
    SET_PAGE = "set_page"
    CLEAR_PAGE = "clear_page"
    CLEAR_ALL = "clear_all"


@dataclass(frozen=True)
class StoreChange:
    action: str
    page_id: Optional[str] = None
    field_id: Optional[str] = None
    snapshot: AllResponses = field(default_factory=dict)


Subscriber = Callable[[StoreChange], None]


def _copy_value(value: Any) -> Any:
    if isinstance(value, list):
        return list(value)
    return value


def _copy_page(values: Mapping[str, Any]) -> PageValues:
    return {k: _copy_value(v) for k, v in values.items()}


def has_answer(value: Any) -> bool:
    return value is not None and value != ""


class ResponseStore:
    def __init__(self, initial: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._responses: AllResponses = {}
        self._subscribers: List[Subscriber] = []
        if initial:
            for page_id, values in initial.items():
                self._responses[str(page_id)] = _copy_page(values)

    # Subscription -------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: Subscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self, action: str, page_id: Optional[str] = None, field_id: Optional[str] = None) -> None:
        logger.debug("store_change action=%s page_id=%s field_id=%s", action, page_id, field_id)
        change = StoreChange(action=action, page_id=page_id, field_id=field_id, snapshot=self.get_all())
        for callback in list(self._subscribers):
            callback(change)

    # Writes --------------------------------------------------------------

    def set_field(self, page_id: str, field_id: str, value: Any) -> None:
        page = self._responses.get(page_id)
        if page is not None and field_id in page and page[field_id] == value:
            return
        updated = dict(page or {})
        updated[field_id] = _copy_value(value)
        self._responses[page_id] = updated
        self._notify(StoreAction.SET_FIELD, page_id, field_id)

    def set_page(self, page_id: str, values: Mapping[str, Any]) -> None:
        """Replace the answers for a page wholesale."""
        if page_id in self._responses and self._responses[page_id] == dict(values):
            return
        self._responses[page_id] = _copy_page(values)
        self._notify(StoreAction.SET_PAGE, page_id)

    def clear_page(self, page_id: str) -> None:
        if page_id not in self._responses:
            return
        del self._responses[page_id]
        self._notify(StoreAction.CLEAR_PAGE, page_id)

    def clear_all(self) -> None:
        if not self._responses:
            return
        self._responses = {}
        self._notify(StoreAction.CLEAR_ALL)

    # Reads ---------------------------------------------------------------

    def get_field(self, page_id: str, field_id: str) -> Any:
        return _copy_value(self._responses.get(page_id, {}).get(field_id))

    def get_page(self, page_id: str) -> PageValues:
        return _copy_page(self._responses.get(page_id, {}))

    def get_all(self) -> AllResponses:
        return {page_id: _copy_page(values) for page_id, values in self._responses.items()}

    def has_value(self, page_id: str, field_id: str) -> bool:
        return has_answer(self._responses.get(page_id, {}).get(field_id))

    def field_value_count(self, page_id: str) -> int:
        return sum(1 for v in self._responses.get(page_id, {}).values() if has_answer(v))

    def page_ids(self) -> List[str]:
        return list(self._responses.keys())


def flatten_responses(responses: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """Collapse ``{page: {field: value}}`` into ``{field: value}``.

    Field ids are form-wide, so no page's answers overwrite another's.
    """
    flat: Dict[str, Any] = {}
    for values in responses.values():
        for field_id, value in values.items():
            flat[field_id] = _copy_value(value)
    return flat


def page_completion_status(store: ResponseStore, page_id: str, required_ids: Iterable[str] = ()) -> Dict[str, Any]:
    """Summarise how much of a page has been answered."""
    page = store.get_page(page_id)
    required = list(required_ids)
    completed = [fid for fid, v in page.items() if has_answer(v)]
    required_completed = [fid for fid in required if store.has_value(page_id, fid)]
    return {
        "total_fields": len(page),
        "completed_fields": len(completed),
        "required_fields": len(required),
        "required_completed": len(required_completed),
        "is_complete": not required or len(required_completed) == len(required),
    }


def initialize_page_from_defaults(store: ResponseStore, page_id: str, defaults: Mapping[str, Any]) -> None:
    """Seed a page with defaults without overwriting existing answers."""
    merged = _copy_page(defaults)
    merged.update(store.get_page(page_id))
    store.set_page(page_id, merged)


__all__ = [
    "StoreAction",
    "StoreChange",
    "ResponseStore",
    "has_answer",
    "flatten_responses",
    "page_completion_status",
    "initialize_page_from_defaults",
]
