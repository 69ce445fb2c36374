"""Submission coordinator.

Flattens the response store into a single ``{field_id: value}`` payload and
dispatches it to exactly one sink. Sinks may be plain callables or
coroutines. Submission never modifies the store, so a rejected payload can be
retried without the user re-entering anything.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from formengine.logic import events
from formengine.logic.errors import SubmissionError
from formengine.logic.response_store import AllResponses, ResponseStore, flatten_responses
from formengine.models.submission import SubmissionEnvelope, SubmissionMode


logger = logging.getLogger(__name__)

SinkResult = Union[Any, Awaitable[Any]]
CreateSink = Callable[[Optional[str], Dict[str, Any]], SinkResult]
UpdateSink = Callable[[str, Dict[str, Any]], SinkResult]
CompletionCallback = Callable[[AllResponses], SinkResult]


class DispatchTarget:
    UPDATE = "update"
    CREATE = "create"
    COMPLETE = "complete"
    NONE = "none"


class SubmissionCoordinator:
    def __init__(
        self,
        store: ResponseStore,
        *,
        mode: SubmissionMode = SubmissionMode.CREATE,
        form_id: Optional[str] = None,
        response_id: Optional[str] = None,
        create_sink: Optional[CreateSink] = None,
        update_sink: Optional[UpdateSink] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        self.store = store
        self.mode = SubmissionMode(mode)
        self.form_id = form_id
        self.response_id = response_id
        self.create_sink = create_sink
        self.update_sink = update_sink
        self.on_complete = on_complete
        self.last_target: Optional[str] = None
        self.last_result: Any = None

    def flattened(self) -> Dict[str, Any]:
        return flatten_responses(self.store.get_all())

    def envelope(self) -> SubmissionEnvelope:
        return SubmissionEnvelope(
            mode=self.mode,
            form_id=self.form_id,
            response_id=self.response_id,
            payload=self.flattened(),
        )

    def _target(self) -> str:
        if self.mode is SubmissionMode.UPDATE and self.update_sink is not None and self.response_id:
            return DispatchTarget.UPDATE
        if self.create_sink is not None and self.form_id:
            return DispatchTarget.CREATE
        if self.on_complete is not None:
            return DispatchTarget.COMPLETE
        return DispatchTarget.NONE

    async def complete(self) -> Dict[str, Any]:
        """Flatten the store and hand it to the configured sink.

        Returns the flattened payload. Raises ``SubmissionError`` when the
        sink fails; the store is left as it was.
        """
        all_responses = self.store.get_all()
        payload = flatten_responses(all_responses)
        target = self._target()
        logger.info(
            "submission_dispatch target=%s mode=%s form_id=%s response_id=%s fields=%s",
            target,
            self.mode.value,
            self.form_id,
            self.response_id,
            len(payload),
        )
        try:
            if target == DispatchTarget.UPDATE:
                result = self.update_sink(self.response_id, dict(payload))  # type: ignore[misc,arg-type]
            elif target == DispatchTarget.CREATE:
                result = self.create_sink(self.form_id, dict(payload))  # type: ignore[misc]
            elif target == DispatchTarget.COMPLETE:
                result = self.on_complete(all_responses)  # type: ignore[misc]
            else:
                logger.warning("submission_no_sink form_id=%s", self.form_id)
                result = None
            if inspect.isawaitable(result):
                result = await result
        except SubmissionError:
            self._record_failure(target)
            raise
        except Exception as exc:
            logger.error("submission_sink_failed target=%s form_id=%s", target, self.form_id, exc_info=True)
            self._record_failure(target)
            raise SubmissionError(f"submission rejected by {target} sink: {exc}") from exc

        self.last_target = target
        self.last_result = result
        events.publish(
            events.FORM_COMPLETED,
            {"form_id": self.form_id, "response_id": self.response_id, "target": target, "fields": len(payload)},
        )
        return payload

    def _record_failure(self, target: str) -> None:
        self.last_target = target
        events.publish(events.SUBMISSION_FAILED, {"form_id": self.form_id, "target": target})


__all__ = [
    "CreateSink",
    "UpdateSink",
    "CompletionCallback",
    "DispatchTarget",
    "SubmissionCoordinator",
]
