"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      : committed static defaults
  2. ``config/local.toml``        : optional local overrides (gitignored)
  3. ``.env``                     : local env overrides (gitignored)
  4. Environment variables        : ``FARM_INSIGHTS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The analysis pipeline and CLI commands receive an ``AppConfig`` (or one of
its sections), never raw dicts or scattered env var lookups.  Rule
thresholds and priorities are not configuration; they are named constants
in ``farm_insights.insights.thresholds``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class AnalysisConfig(BaseModel):
    """Windows and trend settings of one analysis pass."""

    model_config = ConfigDict(frozen=True)

    expiry_window_days:      int = 30
    maintenance_window_days: int = 7
    forecast_days:           int = 3
    trend_jitter:            float = 0.30
    trend_seed:              Optional[int] = None

    @field_validator("expiry_window_days", "maintenance_window_days", "forecast_days")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Window lengths must be > 0, got {v}.")
        return v

    @field_validator("trend_jitter")
    @classmethod
    def validate_jitter(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError(f"trend_jitter must be in [0.0, 1.0), got {v}.")
        return v


class PresentationConfig(BaseModel):
    """CLI display defaults."""

    model_config = ConfigDict(frozen=True)

    top_n:        int = 10
    min_priority: int = 0

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"top_n must be > 0, got {v}.")
        return v

    @field_validator("min_priority")
    @classmethod
    def validate_min_priority(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"min_priority must be in [0, 100], got {v}.")
        return v


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
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + env vars.
    """

    model_config = ConfigDict(frozen=True)

    analysis: AnalysisConfig = AnalysisConfig()
    presentation: PresentationConfig = PresentationConfig()
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
            ``<project_root>/config/default.toml``; when that default file
            is absent (e.g. an installed wheel) built-in defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    explicit = config_path is not None
    config_path = Path(config_path) if explicit else root / "config" / "default.toml"

    raw: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply FARM_INSIGHTS_* environment variable overrides
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
    """Apply FARM_INSIGHTS_* env vars to the raw config dict.

    Supported overrides:
      FARM_INSIGHTS_LOG_LEVEL   → raw["logging"]["level"]
      FARM_INSIGHTS_TREND_SEED  → raw["analysis"]["trend_seed"]
      FARM_INSIGHTS_DEBUG       → raw["debug"]
    """
    if log_level := os.environ.get("FARM_INSIGHTS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if trend_seed := os.environ.get("FARM_INSIGHTS_TREND_SEED"):
        raw.setdefault("analysis", {})["trend_seed"] = int(trend_seed)

    if debug := os.environ.get("FARM_INSIGHTS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        analysis=AnalysisConfig(**raw.get("analysis", {})),
        presentation=PresentationConfig(**raw.get("presentation", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
