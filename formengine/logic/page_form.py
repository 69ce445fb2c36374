"""Working copy of the answers for the page currently being edited.

The page form is the engine's stand-in for a live editing surface: it holds
uncommitted values, tracks which fields the user has touched, validates in
real time, and stays in step with the response store through a
``StoreSyncBridge``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Union

from formengine.logic import events
from formengine.logic.errors import UnknownFieldError
from formengine.logic.page_schema import compile_page, defaults_for, validate_page_data
from formengine.logic.response_store import ResponseStore
from formengine.logic.store_sync import StoreSyncBridge
from formengine.models.page import Page
from formengine.models.validation import FormValidationState, PageValidationResult


logger = logging.getLogger(__name__)

PageValidator = Callable[
    [Page, Mapping[str, Any]],
    Union[PageValidationResult, Awaitable[PageValidationResult]],
]


class PageForm:
    def __init__(
        self,
        page: Page,
        store: ResponseStore,
        *,
        realtime_validation: bool = True,
        validator: Optional[PageValidator] = None,
        on_page_submit: Optional[Callable[[str, Dict[str, Any]], None]] = None,
        on_validation_change: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self.page = page
        self.store = store
        self.rules = compile_page(page)
        self.realtime_validation = realtime_validation
        self._validator = validator
        self._on_page_submit = on_page_submit
        self._on_validation_change = on_validation_change
        self._fillable_ids: List[str] = [f.id for f in page.fillable_fields()]
        self.values: Dict[str, Any] = self.get_initial_values()
        self.touched: Set[str] = set()
        self.result: PageValidationResult = validate_page_data(page, self.values, self.rules)
        self.bridge = StoreSyncBridge(store, page.id, lambda: self.values, self.reset)

    # Lifecycle ------------------------------------------------------------

    def open(self) -> "PageForm":
        self.bridge.attach()
        self._emit_validity()
        return self

    def close(self) -> None:
        self.bridge.detach()

    # Values ---------------------------------------------------------------

    def get_initial_values(self) -> Dict[str, Any]:
        """Page defaults overlaid with whatever the store already holds."""
        values = self._answerable_defaults()
        values.update(self.store.get_page(self.page.id))
        return values

    def _answerable_defaults(self) -> Dict[str, Any]:
        defaults = defaults_for(self.page)
        return {fid: defaults[fid] for fid in self._fillable_ids}

    def set_value(self, field_id: str, value: Any) -> None:
        self.set_values({field_id: value})

    def set_values(self, updates: Mapping[str, Any]) -> None:
        for field_id in updates:
            if field_id not in self._fillable_ids:
                logger.warning("page_form_unknown_field page_id=%s field_id=%s", self.page.id, field_id)
                raise UnknownFieldError(self.page.id, field_id)
        merged = dict(self.values)
        merged.update(updates)
        self.values = merged
        self.touched.update(updates.keys())
        if self.realtime_validation:
            self._revalidate()
        self.bridge.on_working_change(self.values)

    def reset(self, values: Mapping[str, Any]) -> None:
        """Replace the working copy, e.g. when the store changed underneath it."""
        merged = self._answerable_defaults()
        merged.update(values)
        self.values = merged
        self._revalidate()

    # Validation -----------------------------------------------------------

    def _revalidate(self) -> PageValidationResult:
        self.result = validate_page_data(self.page, self.values, self.rules)
        self._emit_validity()
        return self.result

    def _emit_validity(self) -> None:
        if self._on_validation_change is not None:
            self._on_validation_change(self.result.is_valid)

    async def run_validation(self) -> PageValidationResult:
        """Validate the working copy, awaiting a deferred validator if one is set."""
        if self._validator is None:
            return self._revalidate()
        outcome = self._validator(self.page, dict(self.values))
        if inspect.isawaitable(outcome):
            outcome = await outcome
        self.result = outcome
        self._emit_validity()
        return self.result

    async def validate_page(self) -> bool:
        result = await self.run_validation()
        return result.is_valid

    def get_validation_state(self) -> FormValidationState:
        errors: Dict[str, str] = {}
        for err in self.result.errors:
            errors.setdefault(err.field_id, err.message)
        return FormValidationState(
            is_valid=self.result.is_valid,
            errors=errors,
            touched=[fid for fid in self._fillable_ids if fid in self.touched],
        )

    async def show_all_errors(self) -> None:
        """Mark every answerable field touched so all messages become visible."""
        self.touched.update(self._fillable_ids)
        await self.run_validation()

    def visible_errors(self) -> Dict[str, str]:
        state = self.get_validation_state()
        return {fid: msg for fid, msg in state.errors.items() if fid in self.touched}

    # Commit ---------------------------------------------------------------

    def submit_current_values(self) -> Dict[str, Any]:
        """Commit the working copy into the store for this page."""
        committed = dict(self.values)
        self.store.set_page(self.page.id, committed)
        events.publish(events.PAGE_COMMITTED, {"page_id": self.page.id, "fields": len(committed)})
        if self._on_page_submit is not None:
            self._on_page_submit(self.page.id, dict(committed))
        return committed


__all__ = ["PageValidator", "PageForm"]
