"""Configuration utilities for the form engine.

This module loads application configuration with the following rules:
- Primary source: `formengine_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_ENGINE_CONFIG = Path("formengine_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _as_bool(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    enforce_unique_field_ids: bool = Field(default=True)
    realtime_validation: bool = Field(default=True)


class SessionsConfig(BaseModel):
    max_active: int = Field(default=1000, gt=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        upper = str(v).strip().upper()
        if upper not in allowed:
            raise ValueError(f"logging.level must be one of {sorted(allowed)}")
        return upper


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) formengine_config.json at project root (primary base)
    4) Defaults
    """

    base = _read_json_file(ROOT_ENGINE_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    unique_ids_text = (
        _env("ENGINE_ENFORCE_UNIQUE_FIELD_IDS")
        or _read_config_file("engine.enforce_unique_field_ids")
        or _base("engine.enforce_unique_field_ids", "true")
    )
    realtime_text = (
        _env("ENGINE_REALTIME_VALIDATION")
        or _read_config_file("engine.realtime_validation")
        or _base("engine.realtime_validation", "true")
    )
    max_active_text = (
        _env("SESSIONS_MAX_ACTIVE")
        or _read_config_file("sessions.max_active")
        or _base("sessions.max_active", "1000")
    )
    level_text = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")

    try:
        cfg = AppConfig(
            engine=EngineConfig(
                enforce_unique_field_ids=_as_bool(unique_ids_text),
                realtime_validation=_as_bool(realtime_text),
            ),
            sessions=SessionsConfig(max_active=int(str(max_active_text).strip())),
            logging=LoggingConfig(level=str(level_text)),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "EngineConfig",
    "SessionsConfig",
    "LoggingConfig",
    "load_config",
]
