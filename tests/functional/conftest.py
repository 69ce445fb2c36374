"""Functional test bootstrap for the form engine.

Provides the anyio backend used by async navigation tests, a clean domain
event buffer per test, and small schema builders shared across modules.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from formengine.logic import events


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_event_buffer():
    events.EVENT_BUFFER.clear()
    yield
    events.EVENT_BUFFER.clear()


def contact_form_dict() -> Dict[str, Any]:
    """Three-page form: identity, contact details, preferences."""
    return {
        "id": "contact-form",
        "title": "Contact",
        "pages": [
            {
                "id": "identity",
                "title": "About you",
                "fields": [
                    {"id": "intro", "kind": "rich_text", "content": "<p>Tell us about yourself</p>"},
                    {"id": "full_name", "kind": "short_text", "label": "Full name", "required": True, "minLength": 2},
                    {"id": "age", "kind": "number", "label": "Age", "min": 18, "max": 120},
                ],
            },
            {
                "id": "contact",
                "title": "Contact details",
                "fields": [
                    {"id": "email", "kind": "email", "label": "Email", "required": True},
                    {"id": "country", "kind": "single_select", "label": "Country", "options": ["UK", "FR"]},
                ],
            },
            {
                "id": "preferences",
                "title": "Preferences",
                "fields": [
                    {
                        "id": "topics",
                        "kind": "multi_choice",
                        "label": "Topics",
                        "options": ["news", "events", "offers"],
                        "maxSelections": 2,
                    },
                    {"id": "start", "kind": "date", "label": "Start", "minDate": "2024-01-01"},
                ],
            },
        ],
    }


@pytest.fixture
def contact_form() -> Dict[str, Any]:
    return contact_form_dict()
