"""
Farm Insights CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Run one analysis pass.
  5. Report result to stdout.

Install and run::

    pip install -e .
    farm-insights --help
    farm-insights validate-config
    farm-insights analyze data/snapshot.json --top 5
    farm-insights analyze data/snapshot.json --json
    farm-insights alerts data/snapshot.json --category pesticides

Input document
--------------
``analyze`` and ``alerts`` read one JSON object::

    {
      "stock":     {"seeds": [{...}, ...], "pesticides": [...], ...},
      "history":   {"seeds": [40, 42, 45, 44, 41, 30]},
      "wallet":    {"total_balance": 2500, "transactions": [...]},
      "weather":   {"forecast": {"forecastday": [...]}},
      "education": {"total_users": 120, "active_users": 30, ...},
      "blog":      {"posts": [{"title": "...", "created_at": "..."}]}
    }

Only ``stock`` is required; every other key may be omitted.  Each ``stock``
value must be a list of records or null, and each ``history`` value a list
of numbers; anything else is reported as ``[ERROR]`` with exit code 1.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="farm-insights",
    help="Farm inventory analytics: alerts, health and ranked insights.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from farm_insights.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from farm_insights.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_document_or_exit(input_path: str) -> dict[str, Any]:
    """Read the input JSON document, exiting with code 1 on any problem."""
    path = Path(input_path)
    if not path.exists():
        typer.echo(f"[ERROR] Input file not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(document, dict) or not isinstance(document.get("stock"), dict):
        typer.echo("[ERROR] Input must be a JSON object with a 'stock' object.", err=True)
        raise typer.Exit(code=1)
    return document


def _parse_now_or_exit(now: Optional[str]) -> Optional[datetime]:
    if now is None:
        return None
    from farm_insights.utils.time_utils import parse_datetime

    parsed = parse_datetime(now)
    if parsed is None:
        typer.echo(f"[ERROR] Invalid --now value: {now!r} (expected ISO-8601).", err=True)
        raise typer.Exit(code=1)
    return parsed


def _is_count(value: Any) -> bool:
    """True for a JSON number that fits a finite float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _run_or_exit(document: dict[str, Any], config, now: Optional[datetime]):
    """Validate sibling snapshots and run one analysis pass."""
    from pydantic import ValidationError as PydanticValidationError

    from farm_insights.models.snapshots import SiblingSnapshots
    from farm_insights.pipeline.orchestrator import run_analysis

    try:
        snapshots = SiblingSnapshots.model_validate({
            key: document[key]
            for key in ("wallet", "weather", "education", "blog")
            if document.get(key) is not None
        })
    except PydanticValidationError as exc:
        typer.echo(f"[ERROR] Snapshot validation failed:\n{exc}", err=True)
        raise typer.Exit(code=1)

    for tag, records in document["stock"].items():
        if records is not None and not isinstance(records, list):
            typer.echo(
                f"[ERROR] stock[{tag!r}] must be a list of records or null, "
                f"got {type(records).__name__}.",
                err=True,
            )
            raise typer.Exit(code=1)

    history = document.get("history")
    if history is not None and not isinstance(history, dict):
        typer.echo("[ERROR] 'history' must be an object keyed by category.", err=True)
        raise typer.Exit(code=1)
    for tag, counts in (history or {}).items():
        if not isinstance(counts, list) or not all(_is_count(v) for v in counts):
            typer.echo(
                f"[ERROR] history[{tag!r}] must be a list of finite numbers.", err=True,
            )
            raise typer.Exit(code=1)

    return run_analysis(
        document["stock"],
        snapshots=snapshots,
        history=history,
        config=config.analysis,
        now=now,
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    analysis = config.analysis

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Expiry window:      {analysis.expiry_window_days}d")
    typer.echo(f"  Maintenance window: {analysis.maintenance_window_days}d")
    typer.echo(f"  Forecast days:      {analysis.forecast_days}")
    typer.echo(f"  Trend seed:         {analysis.trend_seed if analysis.trend_seed is not None else 'random'}")
    typer.echo(f"  Top N insights:     {config.presentation.top_n}")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("analyze")
def analyze(
    input_path: str = typer.Argument(..., help="JSON document with stock and snapshots."),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full analysis result as JSON instead of tables.",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        help="Number of insights to show (default: presentation.top_n).",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601) for date rules; defaults to current UTC time.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run a full analysis pass and print health, stock summary and insights."""
    from farm_insights.presentation.formatters import (
        format_health_banner,
        format_insight_table,
        format_stock_summary_table,
    )
    from farm_insights.presentation.ranker import filter_insights, top_insights

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if top is not None and top <= 0:
        typer.echo("[ERROR] --top must be > 0.", err=True)
        raise typer.Exit(code=1)

    document = _load_document_or_exit(input_path)
    result   = _run_or_exit(document, config, _parse_now_or_exit(now))

    n = top if top is not None else config.presentation.top_n
    shown = top_insights(
        filter_insights(result.insights, min_priority=config.presentation.min_priority),
        n,
    )

    if as_json:
        payload = result.model_copy(update={"insights": shown}).model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo("")
    typer.echo("=== Farm Insights ===")
    typer.echo(f"  Run:          {result.run_slug}")
    typer.echo(f"  Generated at: {result.generated_at.isoformat()}")
    typer.echo(format_health_banner(result.efficiency, result.health))
    typer.echo(format_stock_summary_table(result.stock, result.failed_categories))
    typer.echo(format_insight_table(shown, warnings=result.warnings))
    typer.echo("")
    typer.echo(f"  {len(result.alerts)} alert(s); run 'farm-insights alerts {input_path}' for details.")


@app.command("alerts")
def alerts(
    input_path: str = typer.Argument(..., help="JSON document with stock and snapshots."),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Only show alerts for this category (e.g. seeds, pesticides).",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference instant (ISO-8601) for date rules; defaults to current UTC time.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List item alerts grouped by category, most urgent first."""
    from farm_insights.errors import ValidationError
    from farm_insights.presentation.formatters import format_alert_list
    from farm_insights.taxonomy.category_taxonomy import parse_category

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    wanted = None
    if category is not None:
        try:
            wanted = parse_category(category)
        except ValidationError as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)

    document = _load_document_or_exit(input_path)
    result   = _run_or_exit(document, config, _parse_now_or_exit(now))

    selected = [a for a in result.alerts if wanted is None or a.category == wanted]
    typer.echo(format_alert_list(selected))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
