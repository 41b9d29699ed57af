"""
Insight generator: runs the ordered rule table over one snapshot.

Workflow
--------
1. Precompute the shared counters (low stock, expiring, maintenance due,
   efficiency) into a ``RuleContext``.
2. Record a ``PartialDataWarning`` for every absent sibling snapshot.
3. Evaluate each rule whose required snapshots are present; rules are
   independent, so a rule that emits nothing never affects another.
4. Drop ``related_insights`` titles that were not emitted in this pass.
5. Sort by priority, descending.  The sort is stable: equal priorities keep
   rule-table order.

The rule table is data (``RULES``), so adding a rule means adding one
function and one row.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from farm_insights.analytics.aggregator import EXPIRY_WINDOW_DAYS
from farm_insights.analytics.alerts import (
    MAINTENANCE_WINDOW_DAYS,
    count_expiring,
    count_low_stock,
    count_maintenance_due,
    detect_alerts,
)
from farm_insights.analytics.evaluator import stock_efficiency
from farm_insights.insights import domain_rules, stock_rules
from farm_insights.insights.context import RuleContext
from farm_insights.insights.thresholds import FORECAST_DAYS
from farm_insights.models.analysis import PartialDataWarning
from farm_insights.models.insight import Alert, Insight
from farm_insights.models.snapshots import SiblingSnapshots
from farm_insights.models.stock import StockData
from farm_insights.utils.time_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

SNAPSHOT_DOMAINS = ("wallet", "weather", "education", "blog")


@dataclass(frozen=True)
class Rule:
    """One row of the rule table.

    Attributes:
        name:     Stable identifier used in debug logs.
        fn:       ``(RuleContext) -> Insight | None``.
        requires: Snapshot domains that must be present for the rule to run.
    """

    name:     str
    fn:       Callable[[RuleContext], Optional[Insight]]
    requires: tuple[str, ...] = ()


RULES: tuple[Rule, ...] = (
    Rule("low_stock",              stock_rules.low_stock_rule),
    Rule("expiring_items",         stock_rules.expiring_items_rule),
    Rule("value_concentration",    stock_rules.value_concentration_rule),
    Rule("category_decline",       stock_rules.category_decline_rule),
    Rule("expired_pesticides",     stock_rules.expired_pesticides_rule),
    Rule("maintenance_due",        stock_rules.maintenance_due_rule),
    Rule("expenses_exceed_income", domain_rules.expenses_exceed_income_rule, ("wallet",)),
    Rule("strong_income",          domain_rules.strong_income_rule,          ("wallet",)),
    Rule("dominant_expense",       domain_rules.dominant_expense_rule,       ("wallet",)),
    Rule("heavy_rain",             domain_rules.heavy_rain_rule,             ("weather",)),
    Rule("heat",                   domain_rules.heat_rule,                   ("weather",)),
    Rule("optimal_days",           domain_rules.optimal_days_rule,           ("weather",)),
    Rule("frost_risk",             domain_rules.frost_risk_rule,             ("weather",)),
    Rule("low_engagement",         domain_rules.low_engagement_rule,         ("education",)),
    Rule("high_engagement",        domain_rules.high_engagement_rule,        ("education",)),
    Rule("track_imbalance",        domain_rules.track_imbalance_rule,        ("education",)),
    Rule("stale_blog",             domain_rules.stale_blog_rule,             ("blog",)),
    Rule("restock_window",         domain_rules.restock_window_rule,         ("wallet", "weather")),
    Rule("system_overview",        stock_rules.system_overview_rule),
)


def evaluate_rules(
    data:      StockData,
    snapshots: Optional[SiblingSnapshots] = None,
    now:       Optional[datetime] = None,
    alerts:    Optional[list[Alert]] = None,
    expiry_window_days:      int = EXPIRY_WINDOW_DAYS,
    maintenance_window_days: int = MAINTENANCE_WINDOW_DAYS,
    forecast_days:           int = FORECAST_DAYS,
) -> tuple[list[Insight], list[PartialDataWarning]]:
    """Evaluate every applicable rule and report skipped domains.

    Args:
        data:                    Full multi-category snapshot.
        snapshots:               Sibling snapshots; ``None`` means all absent.
        now:                     Reference instant (default: current UTC time).
        alerts:                  Alerts already detected for ``data``; detected
                                 here when omitted.
        expiry_window_days:      Expiring-soon window for the ``expiring`` counts.
        maintenance_window_days: Window for the maintenance-due counts.
        forecast_days:           Leading forecast days for rain/heat/frost.

    Returns:
        ``(insights, warnings)``; insights sorted by priority, descending.
    """
    now = ensure_utc(now) if now is not None else utcnow()
    snapshots = snapshots if snapshots is not None else SiblingSnapshots()
    if alerts is None:
        alerts = detect_alerts(data, now, expiry_window_days, maintenance_window_days)

    ctx = RuleContext(
        data=data,
        snapshots=snapshots,
        now=now,
        low_stock=count_low_stock(data),
        expiring=count_expiring(data, now, expiry_window_days),
        maintenance_due=count_maintenance_due(data, now, maintenance_window_days),
        efficiency=stock_efficiency(data),
        alert_count=len(alerts),
        forecast_days=forecast_days,
    )

    missing = {d for d in SNAPSHOT_DOMAINS if getattr(snapshots, d) is None}
    warnings = [
        PartialDataWarning(
            domain=d,
            message=f"No {d} snapshot supplied; {d} insights were skipped.",
        )
        for d in SNAPSHOT_DOMAINS if d in missing
    ]

    insights: list[Insight] = []
    for rule in RULES:
        if missing.intersection(rule.requires):
            logger.debug("Rule %s skipped: missing %s", rule.name, sorted(missing & set(rule.requires)))
            continue
        insight = rule.fn(ctx)
        if insight is not None:
            insights.append(insight)

    insights = _link_related(insights)
    insights.sort(key=lambda i: -i.priority)
    return insights, warnings


def generate_insights(
    data:      StockData,
    snapshots: Optional[SiblingSnapshots] = None,
    now:       Optional[datetime] = None,
    alerts:    Optional[list[Alert]] = None,
    **windows: int,
) -> list[Insight]:
    """Priority-sorted insights for one snapshot.

    Keyword windows are forwarded to ``evaluate_rules``.
    """
    insights, _ = evaluate_rules(data, snapshots, now, alerts, **windows)
    return insights


def _link_related(insights: list[Insight]) -> list[Insight]:
    emitted = {i.title for i in insights}
    linked: list[Insight] = []
    for insight in insights:
        if insight.related_insights:
            kept = [t for t in insight.related_insights if t in emitted]
            if kept != insight.related_insights:
                insight = insight.model_copy(update={"related_insights": kept})
        linked.append(insight)
    return linked
