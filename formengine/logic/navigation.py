"""Page navigation state machine.

Tracks the current page, how many times the user tried to move forward from
each page, and each page's last known validity. Forward moves are gated by
validation of the working copy; backward moves never validate but always
commit what the user typed. Moving forward from the last page hands over to
the submission coordinator exactly once; a completed navigator no longer
moves and re-reports completion without dispatching again.

Every forward attempt is counted before validation runs and counters never
decrease. Failing validation is always recoverable: there is no lockout.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from formengine.logic import events
from formengine.logic.errors import SubmissionError
from formengine.logic.page_form import PageForm, PageValidator
from formengine.logic.response_store import ResponseStore
from formengine.logic.submission import SubmissionCoordinator
from formengine.models.navigation import NavigationOutcome, NavigationState
from formengine.models.page import FormSchema


logger = logging.getLogger(__name__)

VALIDATION_FAILURE_MESSAGE = "An error occurred during validation"


class PageNavigator:
    def __init__(
        self,
        schema: FormSchema,
        store: ResponseStore,
        coordinator: SubmissionCoordinator,
        *,
        realtime_validation: bool = True,
        validator: Optional[PageValidator] = None,
        on_page_submit: Optional[Callable[[str, Dict[str, Any]], None]] = None,
        on_validation_error: Optional[Callable[[str, List[str]], None]] = None,
    ) -> None:
        if not schema.pages:
            raise ValueError("navigator requires at least one page")
        self.schema = schema
        self.pages = schema.pages
        self.store = store
        self.coordinator = coordinator
        self.realtime_validation = realtime_validation
        self._validator = validator
        self._on_page_submit = on_page_submit
        self._on_validation_error = on_validation_error
        self.current_page_index = 0
        self.attempts: Dict[str, int] = {}
        self.page_validity: Dict[str, bool] = {}
        self.validation_errors: List[str] = []
        self.completed = False
        self.submission_error: Optional[str] = None
        self.form: PageForm = self._open_form(0)

    # Page forms -------------------------------------------------------------

    def _open_form(self, index: int) -> PageForm:
        page = self.pages[index]

        def _record_validity(is_valid: bool) -> None:
            self.page_validity[page.id] = is_valid

        form = PageForm(
            page,
            self.store,
            realtime_validation=self.realtime_validation,
            validator=self._validator,
            on_page_submit=self._on_page_submit,
            on_validation_change=_record_validity,
        )
        return form.open()

    def _move_to(self, index: int) -> None:
        self.form.close()
        self.current_page_index = index
        self.form = self._open_form(index)
        self.validation_errors = []

    def close(self) -> None:
        self.form.close()

    # State ------------------------------------------------------------------

    @property
    def current_page(self):
        return self.pages[self.current_page_index]

    def attempts_for(self, page_id: str) -> int:
        return self.attempts.get(page_id, 0)

    @property
    def navigation_state(self) -> NavigationState:
        page = self.current_page
        attempts = self.attempts_for(page.id)
        valid = self.page_validity.get(page.id, False)
        is_first_attempt = attempts == 0
        return NavigationState(
            current_page_index=self.current_page_index,
            current_page_id=page.id,
            page_count=len(self.pages),
            is_first_page=self.current_page_index == 0,
            is_last_page=self.current_page_index >= len(self.pages) - 1,
            can_go_next=True,
            can_go_previous=self.current_page_index > 0,
            current_page_valid=valid,
            attempts=attempts,
            is_first_attempt=is_first_attempt,
            show_lenient_validation=is_first_attempt and not valid,
            validation_errors=list(self.validation_errors),
            completed=self.completed,
        )

    # Transitions --------------------------------------------------------------

    async def _attempt_forward(self) -> bool:
        """Count an attempt on the current page and validate it.

        Returns True when the page may be left. On failure every field is
        marked touched and the ordered messages are recorded.
        """
        page = self.current_page
        self.attempts[page.id] = self.attempts_for(page.id) + 1
        self.validation_errors = []
        try:
            is_valid = await self.form.validate_page()
            if is_valid:
                return True
            await self.form.show_all_errors()
            messages = self.form.result.messages()
        except Exception:
            # A failing host validator blocks the move rather than letting it through
            logger.error("navigation_validation_error page_id=%s", page.id, exc_info=True)
            self.page_validity[page.id] = False
            messages = [VALIDATION_FAILURE_MESSAGE]
        self.validation_errors = messages
        logger.info(
            "navigation_blocked page_id=%s attempts=%s errors=%s",
            page.id,
            self.attempts[page.id],
            len(messages),
        )
        events.publish(
            events.NAVIGATION_BLOCKED,
            {"page_id": page.id, "attempts": self.attempts[page.id], "errors": list(messages)},
        )
        if self._on_validation_error is not None:
            self._on_validation_error(page.id, list(messages))
        return False

    async def go_to_next(self) -> NavigationOutcome:
        if self.completed:
            logger.info("navigation_already_completed page_id=%s", self.current_page.id)
            return NavigationOutcome.COMPLETED
        if not await self._attempt_forward():
            return NavigationOutcome.BLOCKED
        self.form.submit_current_values()
        next_index = self.current_page_index + 1
        if next_index < len(self.pages):
            logger.info("navigation_advance from=%s to=%s", self.current_page_index, next_index)
            self._move_to(next_index)
            return NavigationOutcome.ADVANCED
        return await self._complete()

    async def go_to_previous(self) -> NavigationOutcome:
        if self.completed or self.current_page_index <= 0:
            return NavigationOutcome.NOOP
        self.form.submit_current_values()
        logger.info("navigation_back from=%s to=%s", self.current_page_index, self.current_page_index - 1)
        self._move_to(self.current_page_index - 1)
        return NavigationOutcome.RETREATED

    async def go_to_page(self, target_index: int) -> NavigationOutcome:
        if self.completed or target_index == self.current_page_index:
            return NavigationOutcome.NOOP
        if target_index < 0 or target_index >= len(self.pages):
            logger.info("navigation_target_out_of_range target=%s pages=%s", target_index, len(self.pages))
            return NavigationOutcome.NOOP
        if target_index > self.current_page_index and not await self._attempt_forward():
            return NavigationOutcome.BLOCKED
        self.form.submit_current_values()
        logger.info("navigation_jump from=%s to=%s", self.current_page_index, target_index)
        self._move_to(target_index)
        return NavigationOutcome.JUMPED

    async def _complete(self) -> NavigationOutcome:
        try:
            await self.coordinator.complete()
        except SubmissionError as exc:
            self.submission_error = str(exc)
            logger.warning("navigation_submission_failed page_id=%s", self.current_page.id)
            return NavigationOutcome.SUBMISSION_FAILED
        self.completed = True
        self.submission_error = None
        return NavigationOutcome.COMPLETED


__all__ = ["VALIDATION_FAILURE_MESSAGE", "PageNavigator"]
