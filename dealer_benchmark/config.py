"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``DEALER_BENCHMARK_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and the batch orchestrator receive an ``AppConfig`` (or one of its
sections), never raw dicts or scattered env var lookups.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from dealer_benchmark.ingestion.column_detector import (
    DEFAULT_CLASS_LABEL,
    DEFAULT_NATIONAL_PREFIX,
)

VALID_EXPORT_FORMATS = frozenset({"json", "csv"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class DetectionConfig(BaseModel):
    """Column-detection settings for dealer CSV exports."""

    model_config = ConfigDict(frozen=True)

    national_prefix: str = DEFAULT_NATIONAL_PREFIX
    default_class_label: str = DEFAULT_CLASS_LABEL

    @field_validator("national_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("national_prefix must not be blank.")
        return v.strip()


class ExportConfig(BaseModel):
    """Where and how scored KPI values are written."""

    model_config = ConfigDict(frozen=True)

    export_dir: str = "data/exports"
    default_format: str = "json"

    @field_validator("default_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in VALID_EXPORT_FORMATS:
            raise ValueError(
                f"default_format must be one of {sorted(VALID_EXPORT_FORMATS)}, got '{v}'."
            )
        return v.lower()


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration, constructed by ``load_config()``."""

    model_config = ConfigDict(frozen=True)

    detection: DetectionConfig = DetectionConfig()
    export: ExportConfig = ExportConfig()
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

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config PATH."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply DEALER_BENCHMARK_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
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
    """Apply DEALER_BENCHMARK_* env vars to the raw config dict.

    Supported overrides:
      DEALER_BENCHMARK_LOG_LEVEL        → raw["logging"]["level"]
      DEALER_BENCHMARK_EXPORT_DIR       → raw["export"]["export_dir"]
      DEALER_BENCHMARK_NATIONAL_PREFIX  → raw["detection"]["national_prefix"]
      DEALER_BENCHMARK_DEBUG            → raw["debug"]
    """
    if log_level := os.environ.get("DEALER_BENCHMARK_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if export_dir := os.environ.get("DEALER_BENCHMARK_EXPORT_DIR"):
        raw.setdefault("export", {})["export_dir"] = export_dir

    if prefix := os.environ.get("DEALER_BENCHMARK_NATIONAL_PREFIX"):
        raw.setdefault("detection", {})["national_prefix"] = prefix

    if debug := os.environ.get("DEALER_BENCHMARK_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        detection=DetectionConfig(**raw.get("detection", {})),
        export=ExportConfig(**raw.get("export", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
