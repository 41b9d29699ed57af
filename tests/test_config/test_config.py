"""Tests for farm_insights.config: defaults, TOML layering and env overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from farm_insights.config import AnalysisConfig, AppConfig, LoggingConfig, PresentationConfig, load_config

_ENV_VARS = ("FARM_INSIGHTS_LOG_LEVEL", "FARM_INSIGHTS_TREND_SEED", "FARM_INSIGHTS_DEBUG")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── Defaults ──────────────────────────────────────────────────────────────────


def test_model_defaults():
    cfg = AppConfig()
    assert cfg.analysis.expiry_window_days == 30
    assert cfg.analysis.maintenance_window_days == 7
    assert cfg.analysis.forecast_days == 3
    assert cfg.analysis.trend_seed is None
    assert cfg.presentation.top_n == 10
    assert cfg.logging.level == "INFO"
    assert cfg.debug is False


def test_committed_defaults_match_models():
    assert load_config() == AppConfig()


# ── TOML layering ─────────────────────────────────────────────────────────────


def test_explicit_file_overrides(tmp_path):
    path = _write(tmp_path / "custom.toml", """
[analysis]
expiry_window_days = 14
trend_seed = 7

[presentation]
top_n = 3
""")
    cfg = load_config(path)
    assert cfg.analysis.expiry_window_days == 14
    assert cfg.analysis.trend_seed == 7
    assert cfg.analysis.maintenance_window_days == 7
    assert cfg.presentation.top_n == 3


def test_local_toml_merged_over_base(tmp_path):
    base = _write(tmp_path / "base.toml", "[analysis]\nexpiry_window_days = 14\nforecast_days = 5\n")
    _write(tmp_path / "local.toml", "[analysis]\nforecast_days = 2\n")
    cfg = load_config(base)
    assert cfg.analysis.expiry_window_days == 14
    assert cfg.analysis.forecast_days == 2


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_invalid_value_rejected(tmp_path):
    path = _write(tmp_path / "bad.toml", "[analysis]\nforecast_days = 0\n")
    with pytest.raises(ValidationError):
        load_config(path)


# ── Environment overrides ─────────────────────────────────────────────────────


def test_env_overrides(tmp_path, monkeypatch):
    path = _write(tmp_path / "c.toml", "[logging]\nlevel = \"INFO\"\n")
    monkeypatch.setenv("FARM_INSIGHTS_LOG_LEVEL", "debug")
    monkeypatch.setenv("FARM_INSIGHTS_TREND_SEED", "99")
    monkeypatch.setenv("FARM_INSIGHTS_DEBUG", "true")
    cfg = load_config(path)
    assert cfg.logging.level == "DEBUG"
    assert cfg.analysis.trend_seed == 99
    assert cfg.debug is True


def test_env_debug_false_values(tmp_path, monkeypatch):
    monkeypatch.setenv("FARM_INSIGHTS_DEBUG", "0")
    assert load_config(_write(tmp_path / "c.toml", "")).debug is False


# ── Field validation ──────────────────────────────────────────────────────────


@pytest.mark.parametrize("kwargs", [
    {"expiry_window_days": 0},
    {"maintenance_window_days": -1},
    {"trend_jitter": 1.0},
    {"trend_jitter": -0.1},
])
def test_analysis_config_rejects(kwargs):
    with pytest.raises(ValidationError):
        AnalysisConfig(**kwargs)


def test_presentation_config_rejects():
    with pytest.raises(ValidationError):
        PresentationConfig(top_n=0)
    with pytest.raises(ValidationError):
        PresentationConfig(min_priority=101)


def test_logging_level_validated():
    assert LoggingConfig(level="warning").level == "WARNING"
    with pytest.raises(ValidationError):
        LoggingConfig(level="LOUD")


def test_configs_are_frozen():
    cfg = AnalysisConfig()
    with pytest.raises(ValidationError):
        cfg.forecast_days = 5
