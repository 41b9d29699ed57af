"""
Analysis orchestration: one synchronous pass from raw payloads to results.

``run_analysis`` coordinates the layers in a fixed, testable sequence:

  Step 1 : Normalize:  Raw records per category tag -> ``StockItem`` lists.
  Step 2 : Aggregate:  Per-category summaries -> complete ``StockData``.
  Step 3 : Evaluate:   Stock efficiency and health label.
  Step 4 : Detect:     Item alerts.
  Step 5 : Generate:   Insights and partial-data warnings.

Failure isolation
-----------------
- Unrecognized category tag:  ``ValidationError`` is caught per tag, logged
                              as a warning and recorded in
                              ``failed_categories``; the category keeps its
                              empty summary and the pass continues.
- Absent sibling snapshot:    Recorded as a ``PartialDataWarning``.
- Anything else:              Propagates to the caller.

The pass is a pure function of its inputs plus ``now`` and
``config.trend_seed``; nothing is persisted.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from farm_insights.analytics.aggregator import build_stock_data
from farm_insights.analytics.alerts import detect_alerts
from farm_insights.analytics.evaluator import health_label, stock_efficiency
from farm_insights.analytics.normalizer import normalize
from farm_insights.config import AnalysisConfig
from farm_insights.errors import ValidationError
from farm_insights.insights.generator import evaluate_rules
from farm_insights.models.analysis import AnalysisResult
from farm_insights.models.snapshots import SiblingSnapshots
from farm_insights.models.stock import StockItem
from farm_insights.taxonomy.category_taxonomy import Category, parse_category
from farm_insights.utils.time_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


def run_analysis(
    raw_stock: Mapping[str, Optional[Sequence[Mapping[str, Any]]]],
    snapshots: Optional[SiblingSnapshots] = None,
    history:   Optional[Mapping[str, Sequence[float]]] = None,
    config:    Optional[AnalysisConfig] = None,
    now:       Optional[datetime] = None,
) -> AnalysisResult:
    """Run one full analysis pass.

    Args:
        raw_stock: Raw item records keyed by category tag (aliases accepted).
        snapshots: Sibling-domain snapshots; ``None`` means all absent.
        history:   Optional real monthly counts keyed by category tag.
        config:    Windows and trend settings (defaults when omitted).
        now:       Reference instant for every date rule.

    Returns:
        ``AnalysisResult`` with insights sorted by priority, descending.
    """
    config    = config or AnalysisConfig()
    now       = ensure_utc(now) if now is not None else utcnow()
    snapshots = snapshots if snapshots is not None else SiblingSnapshots()
    run_slug  = str(uuid4())
    rng       = random.Random(config.trend_seed)

    logger.info(
        "run_analysis | run_slug=%s | categories=%d | now=%s",
        run_slug, len(raw_stock), now.isoformat(),
        extra={"run_slug": run_slug},
    )

    # ── Step 1: Normalize (per tag, isolated) ─────────────────────────────────
    items_by_category: dict[Category, list[StockItem]] = {}
    failed: list[str] = []
    for tag, raw_items in raw_stock.items():
        try:
            items = normalize(raw_items, tag)
        except ValidationError as exc:
            logger.warning("Category %r rejected: %s", tag, exc)
            failed.append(str(tag))
            continue
        if items:
            items_by_category.setdefault(items[0].category, []).extend(items)
        else:
            items_by_category.setdefault(parse_category(tag), [])

    # ── Step 2: Aggregate ─────────────────────────────────────────────────────
    data = build_stock_data(
        items_by_category,
        history_by_category=_parse_history(history),
        now=now,
        rng=rng,
        expiry_window_days=config.expiry_window_days,
        trend_jitter=config.trend_jitter,
    )

    # ── Step 3: Evaluate ──────────────────────────────────────────────────────
    efficiency = stock_efficiency(data)
    health     = health_label(efficiency)

    # ── Step 4: Detect alerts ─────────────────────────────────────────────────
    alerts = detect_alerts(
        data, now,
        expiry_window_days=config.expiry_window_days,
        maintenance_window_days=config.maintenance_window_days,
    )

    # ── Step 5: Generate insights ─────────────────────────────────────────────
    insights, warnings = evaluate_rules(
        data, snapshots, now, alerts,
        expiry_window_days=config.expiry_window_days,
        maintenance_window_days=config.maintenance_window_days,
        forecast_days=config.forecast_days,
    )
    for warning in warnings:
        logger.info("Partial data: %s", warning.message)

    logger.info(
        "run_analysis done | run_slug=%s | items=%d | alerts=%d | insights=%d | efficiency=%.1f",
        run_slug, data.total_items, len(alerts), len(insights), efficiency,
        extra={"run_slug": run_slug},
    )

    return AnalysisResult(
        run_slug=run_slug,
        generated_at=now,
        stock=data,
        alerts=alerts,
        insights=insights,
        efficiency=efficiency,
        health=health,
        warnings=warnings,
        failed_categories=failed,
    )


def _parse_history(
    history: Optional[Mapping[str, Sequence[float]]],
) -> dict[Category, Sequence[float]]:
    """Key real history by ``Category``; unknown tags are logged and dropped."""
    parsed: dict[Category, Sequence[float]] = {}
    for tag, counts in (history or {}).items():
        try:
            parsed[parse_category(tag)] = counts
        except ValidationError as exc:
            logger.warning("History for %r ignored: %s", tag, exc)
    return parsed
