"""Schema-driven multi-page form engine.

This package exposes the form engine core (field validation compiler, page
compiler, response store, store synchronization, page navigation and
submission coordination) plus a small FastAPI application factory that hosts
form sessions over HTTP. Business logic lives in `formengine/logic/` and
route handlers in `formengine/routes/`.
"""

from __future__ import annotations

from formengine.main import create_app

__all__ = ["create_app"]
