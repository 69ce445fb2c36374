"""In-memory submission backend used by the HTTP surface.

Records one envelope per completed form instance. ``create`` assigns a new
response id; ``update`` replaces the payload stored under an existing id.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from formengine.logic.errors import SubmissionError
from formengine.models.submission import SubmissionEnvelope, SubmissionMode


logger = logging.getLogger(__name__)


class InMemorySubmissionBackend:
    def __init__(self) -> None:
        self.envelopes: List[SubmissionEnvelope] = []
        self.records: Dict[str, Dict[str, Any]] = {}

    def create(self, form_id: Optional[str], payload: Dict[str, Any]) -> str:
        response_id = str(uuid.uuid4())
        self.records[response_id] = dict(payload)
        self.envelopes.append(
            SubmissionEnvelope(mode=SubmissionMode.CREATE, form_id=form_id, response_id=response_id, payload=payload)
        )
        logger.info("submission_created form_id=%s response_id=%s", form_id, response_id)
        return response_id

    def update(self, response_id: str, payload: Dict[str, Any]) -> str:
        if response_id not in self.records:
            raise SubmissionError(f"response {response_id} does not exist")
        self.records[response_id] = dict(payload)
        self.envelopes.append(
            SubmissionEnvelope(mode=SubmissionMode.UPDATE, response_id=response_id, payload=payload)
        )
        logger.info("submission_updated response_id=%s", response_id)
        return response_id


__all__ = ["InMemorySubmissionBackend"]
