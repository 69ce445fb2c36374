from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from formengine.config import AppConfig, load_config
from formengine.http.problem import (
    handle_form_engine_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from formengine.http.request_id import RequestIdMiddleware
from formengine.logging_setup import configure_logging
from formengine.logic.errors import FormEngineError
from formengine.logic.session import SessionRegistry
from formengine.logic.submission_backend import InMemorySubmissionBackend
from formengine.routes import api_router
from formengine.routes.test_support import router as test_support_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    cfg = config if config is not None else load_config()
    # Configure global logging before app instantiation so all modules emit
    configure_logging(cfg.logging.level)
    app = FastAPI(title="Form Engine")
    app.state.config = cfg
    app.state.sessions = SessionRegistry(max_active=cfg.sessions.max_active)
    app.state.submissions = InMemorySubmissionBackend()

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(FormEngineError, handle_form_engine_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    # Routers
    app.include_router(api_router, prefix="/api/v1")
    # Test-support router (no prefix) exposes '/__test__/events'
    app.include_router(test_support_router)

    # Health endpoint (out of prefix for simplicity in local runs)
    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "sessions": len(app.state.sessions)}

    logger.info(
        "app_created max_sessions=%s realtime_validation=%s",
        cfg.sessions.max_active,
        cfg.engine.realtime_validation,
    )
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
