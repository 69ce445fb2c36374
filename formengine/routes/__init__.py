"""APIRouter registration for the form engine service."""

from __future__ import annotations

from fastapi import APIRouter

from formengine.routes.sessions import router as sessions_router
from formengine.routes.submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(sessions_router, tags=["FormSessions", "Navigation"])
api_router.include_router(submissions_router, tags=["Submissions"])

__all__ = ["api_router"]
