"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local secrets and env overrides (gitignored)
  4. Environment variables       : ``AGRI_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine, the persistence adapter and the CLI receive an ``AppConfig``
(or its ``EngineConfig`` section): never raw dicts or scattered env lookups.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/agri_advisor.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class EngineConfig(BaseModel):
    """Recommendation engine limits and wording.

    The limits reproduce the production policy: a shared slice of the 10 most
    recent analyses, 3 per analysis type, the 10 most recent assistant
    messages, 10 persisted recommendations, and a summary drawn from the top 5.
    """

    model_config = ConfigDict(frozen=True)

    product_name: str = "Agri Advisor"
    analysis_window: int = 10
    per_type_limit: int = 3
    chat_window: int = 10
    max_recommendations: int = 10
    summary_top_n: int = 5
    chat_confidence: float = 0.60

    @field_validator(
        "analysis_window", "per_type_limit", "chat_window",
        "max_recommendations", "summary_top_n",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Engine limits must be >= 1, got {v}.")
        return v

    @field_validator("chat_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"chat_confidence must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("product_name")
    @classmethod
    def validate_product_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("product_name must not be empty.")
        return v.strip()


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/agri_advisor.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration: the single source of truth."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    engine: EngineConfig = EngineConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply AGRI_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      AGRI_ADVISOR_DB_PATH       → raw["database"]["db_path"]
      AGRI_ADVISOR_LOG_LEVEL     → raw["logging"]["level"]
      AGRI_ADVISOR_PRODUCT_NAME  → raw["engine"]["product_name"]
      AGRI_ADVISOR_DEBUG         → raw["debug"]
    """
    if db_path := os.environ.get("AGRI_ADVISOR_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("AGRI_ADVISOR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if product_name := os.environ.get("AGRI_ADVISOR_PRODUCT_NAME"):
        raw.setdefault("engine", {})["product_name"] = product_name

    if debug := os.environ.get("AGRI_ADVISOR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        engine=EngineConfig(**raw.get("engine", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
