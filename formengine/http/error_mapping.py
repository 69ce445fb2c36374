"""Central error mapping for form engine exceptions.

Single source of truth for mapping engine error codes to problem+json
titles and HTTP statuses. Route modules raise engine exceptions and never
hardcode statuses for them.
"""

from __future__ import annotations

ENGINE_ERROR_MAP = {
    "SCHEMA_INVALID": {"title": "Invalid Form Schema", "status": 422},
    "SCHEMA_DUPLICATE_FIELD_ID": {"title": "Invalid Form Schema", "status": 422},
    "FIELD_NOT_ON_PAGE": {"title": "Unknown Field", "status": 422},
    "SUBMISSION_REJECTED": {"title": "Submission Rejected", "status": 502},
    "SESSION_NOT_FOUND": {"title": "Not Found", "status": 404},
    "SESSION_LIMIT_REACHED": {"title": "Too Many Sessions", "status": 429},
}

DEFAULT_ENGINE_ERROR = {"title": "Form Engine Error", "status": 400}

__all__ = ["ENGINE_ERROR_MAP", "DEFAULT_ENGINE_ERROR"]
