"""Two-way synchronisation between a page's working copy and the store.

Each direction keeps its own last-observed snapshot. A direction only acts
when the source differs from its own snapshot AND from the other side, which
guarantees that one logical change is written by exactly one direction and
that an already-consistent pair stays untouched however often it is ticked.
Comparisons are shallow and per key.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from formengine.logic.response_store import ResponseStore, StoreChange


logger = logging.getLogger(__name__)


def shallow_equal(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    if left is right:
        return True
    if len(left) != len(right):
        return False
    for key, value in left.items():
        if key not in right or right[key] != value:
            return False
    return True


class StoreSyncBridge:
    def __init__(
        self,
        store: ResponseStore,
        page_id: str,
        read_working: Callable[[], Mapping[str, Any]],
        reset_working: Callable[[Dict[str, Any]], None],
    ) -> None:
        self.store = store
        self.page_id = page_id
        self._read_working = read_working
        self._reset_working = reset_working
        self._last_working: Dict[str, Any] = dict(read_working())
        self._last_store: Dict[str, Any] = store.get_page(page_id)
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> "StoreSyncBridge":
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.on_store_change)
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def __enter__(self) -> "StoreSyncBridge":
        return self.attach()

    def __exit__(self, *exc_info: Any) -> None:
        self.detach()

    def on_working_change(self, values: Optional[Mapping[str, Any]] = None) -> bool:
        """Commit the working copy if it changed and the store lags behind."""
        current = dict(values) if values is not None else dict(self._read_working())
        wrote = False
        if not shallow_equal(current, self._last_working):
            stored = self.store.get_page(self.page_id)
            if not shallow_equal(current, stored):
                logger.debug("sync_working_to_store page_id=%s keys=%s", self.page_id, len(current))
                self.store.set_page(self.page_id, current)
                wrote = True
        self._last_working = current
        return wrote

    def on_store_change(self, change: Optional[StoreChange] = None) -> bool:
        """Surface an external store change into the working copy."""
        if change is not None and change.page_id is not None and change.page_id != self.page_id:
            return False
        stored = self.store.get_page(self.page_id)
        reset = False
        if stored and not shallow_equal(stored, self._last_store):
            working = dict(self._read_working())
            if not shallow_equal(stored, working):
                logger.debug("sync_store_to_working page_id=%s keys=%s", self.page_id, len(stored))
                self._reset_working(dict(stored))
                # The surface may fill keys the store lacks; track what it now holds.
                self._last_working = dict(self._read_working())
                reset = True
        self._last_store = stored
        return reset

    def tick(self) -> None:
        """Run one full update cycle in both directions."""
        self.on_working_change()
        self.on_store_change()


__all__ = ["shallow_equal", "StoreSyncBridge"]
