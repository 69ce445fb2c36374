"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses for HTTP errors, request validation
errors, form engine errors and unexpected failures.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from formengine.http.error_mapping import DEFAULT_ENGINE_ERROR, ENGINE_ERROR_MAP
from formengine.logic.errors import DuplicateFieldIdError, FormEngineError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = exc.detail
    else:
        detail = {"title": "Error", "status": status, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": jsonable_encoder(exc.errors()),
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_form_engine_error(request: Request, exc: FormEngineError) -> JSONResponse:  # noqa: D401
    mapping = ENGINE_ERROR_MAP.get(exc.code, DEFAULT_ENGINE_ERROR)
    problem = {
        "title": mapping["title"],
        "status": mapping["status"],
        "code": exc.code,
        "detail": str(exc),
    }
    if isinstance(exc, DuplicateFieldIdError):
        problem["duplicates"] = exc.duplicates
    logger.info(
        "engine_problem_emit code=%s status=%s path=%s",
        exc.code,
        mapping["status"],
        getattr(request.url, "path", ""),
    )
    return JSONResponse(problem, status_code=mapping["status"], media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error", exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_form_engine_error",
    "handle_unexpected_error",
]
