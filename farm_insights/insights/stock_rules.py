"""
Stock insight rules.

Each rule is a pure function ``(RuleContext) -> Insight | None`` and emits at
most one insight.  Metrics are always taken from the same numbers the
predicate tested, so every insight justifies itself.

Rules
-----
expiring_items_rule     : expiring.total > 0                      critical 90
expired_pesticides_rule : pesticides expired / count > 10 %       critical 88
low_stock_rule          : low_stock.total > 5                     warning  85
maintenance_due_rule    : maintenance_due.total > 0               warning  78
category_decline_rule   : real-history growth < -10 %             warning  72
value_concentration_rule: one category > 40 % of total value      info     65
system_overview_rule    : always                                  info     50
"""

from __future__ import annotations

from typing import Optional

from farm_insights.analytics.evaluator import health_label, trend_growth
from farm_insights.insights.context import RuleContext
from farm_insights.insights.thresholds import (
    CATEGORY_DECLINE_PCT,
    EXPIRED_PESTICIDE_RATIO,
    LOW_STOCK_ITEM_LIMIT,
    PRIORITY_CATEGORY_DECLINE,
    PRIORITY_EXPIRED_PESTICIDES,
    PRIORITY_EXPIRING_ITEMS,
    PRIORITY_LOW_STOCK,
    PRIORITY_MAINTENANCE_DUE,
    PRIORITY_SYSTEM_OVERVIEW,
    PRIORITY_VALUE_CONCENTRATION,
    VALUE_CONCENTRATION_RATIO,
)
from farm_insights.models.insight import Insight, InsightMetric
from farm_insights.models.stock import CategoryCounts
from farm_insights.taxonomy.category_taxonomy import Category, category_label
from farm_insights.taxonomy.insight_taxonomy import InsightSource, InsightType, TrendDirection

EXPIRING_ITEMS_TITLE     = "Items Expiring Soon"
EXPIRED_PESTICIDES_TITLE = "High Ratio of Expired Pesticides"
LOW_STOCK_TITLE          = "Multiple Items Low in Stock"
MAINTENANCE_DUE_TITLE    = "Maintenance Due"
CATEGORY_DECLINE_SUFFIX  = "Stock Declining"
VALUE_CONCENTRATION_TITLE = "High Value Concentration"
SYSTEM_OVERVIEW_TITLE    = "System Health Overview"


def expiring_items_rule(ctx: RuleContext) -> Optional[Insight]:
    total = ctx.expiring.total
    if total <= 0:
        return None

    affected = _affected(ctx.expiring)
    return Insight(
        type=InsightType.CRITICAL,
        title=EXPIRING_ITEMS_TITLE,
        description=(
            f"{total} item(s) will expire soon "
            f"({_describe_counts(affected)})."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_EXPIRING_ITEMS,
        recommendation=(
            "Use the expiring items first or plan their disposal, "
            "and avoid reordering them until current stock is consumed."
        ),
        metrics=[
            InsightMetric(label="Expiring Items", value=total),
            InsightMetric(label="Categories Affected", value=len(affected)),
        ],
    )


def expired_pesticides_rule(ctx: RuleContext) -> Optional[Insight]:
    summary = ctx.data[Category.PESTICIDES]
    if summary.expiry_status is None or summary.count == 0:
        return None

    ratio = summary.expiry_status.expired / summary.count
    if ratio <= EXPIRED_PESTICIDE_RATIO:
        return None

    return Insight(
        type=InsightType.CRITICAL,
        title=EXPIRED_PESTICIDES_TITLE,
        description=(
            f"{summary.expiry_status.expired} of {summary.count} pesticides "
            f"({ratio:.1%}) are past their expiry date."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_EXPIRED_PESTICIDES,
        recommendation=(
            "Remove expired pesticides from use and dispose of them "
            "according to local regulations."
        ),
        metrics=[
            InsightMetric(label="Expired Pesticides", value=summary.expiry_status.expired),
            InsightMetric(label="Total Pesticides", value=summary.count),
            InsightMetric(label="Expired Ratio", value=round(ratio * 100, 1), unit="%"),
        ],
    )


def low_stock_rule(ctx: RuleContext) -> Optional[Insight]:
    total = ctx.low_stock.total
    if total <= LOW_STOCK_ITEM_LIMIT:
        return None

    affected = _affected(ctx.low_stock)
    worst    = max(affected, key=lambda c: affected[c])
    return Insight(
        type=InsightType.WARNING,
        title=LOW_STOCK_TITLE,
        description=(
            f"{total} items are at or below their reorder threshold "
            f"({_describe_counts(affected)})."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_LOW_STOCK,
        recommendation=(
            f"Place restock orders, starting with {category_label(worst).lower()} "
            f"({affected[worst]} item(s) low)."
        ),
        metrics=[
            InsightMetric(label="Low Stock Items", value=total),
            InsightMetric(label="Categories Affected", value=len(affected)),
            InsightMetric(label="Most Affected", value=category_label(worst)),
        ],
    )


def maintenance_due_rule(ctx: RuleContext) -> Optional[Insight]:
    total = ctx.maintenance_due.total
    if total <= 0:
        return None

    affected = _affected(ctx.maintenance_due)
    return Insight(
        type=InsightType.WARNING,
        title=MAINTENANCE_DUE_TITLE,
        description=(
            f"{total} item(s) are due for scheduled maintenance this week "
            f"({_describe_counts(affected)})."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_MAINTENANCE_DUE,
        recommendation="Book the service slots now to avoid downtime during field work.",
        metrics=[
            InsightMetric(label="Maintenance Due", value=total),
        ],
    )


def category_decline_rule(ctx: RuleContext) -> Optional[Insight]:
    """Flag categories whose real history dropped more than 10 % last month.

    Synthesized trends are skipped: their month-over-month movement is
    jitter, not a measurement.
    """
    declines: dict[Category, float] = {}
    for cat in Category:
        summary = ctx.data[cat]
        if summary.trend_synthesized:
            continue
        growth = trend_growth(summary)
        if growth < CATEGORY_DECLINE_PCT:
            declines[cat] = growth

    if not declines:
        return None

    steepest = min(declines, key=lambda c: declines[c])
    names    = ", ".join(category_label(c) for c in declines)
    return Insight(
        type=InsightType.WARNING,
        title=f"{category_label(steepest)} {CATEGORY_DECLINE_SUFFIX}",
        description=(
            f"Stock fell month over month in: {names}. "
            f"{category_label(steepest)} dropped the most "
            f"({abs(declines[steepest]):.1f}%)."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_CATEGORY_DECLINE,
        recommendation=(
            "Check whether the drop reflects planned consumption; "
            "otherwise review losses and reorder levels."
        ),
        metrics=[
            InsightMetric(label="Declining Categories", value=len(declines)),
            InsightMetric(
                label=f"{category_label(steepest)} Change",
                value=round(declines[steepest], 1),
                unit="%",
                trend=TrendDirection.DOWN,
            ),
        ],
    )


def value_concentration_rule(ctx: RuleContext) -> Optional[Insight]:
    total_value = ctx.data.total_value
    if total_value <= 0:
        return None

    top   = max(Category, key=lambda c: ctx.data[c].value)
    share = ctx.data.value_share(top)
    if share <= VALUE_CONCENTRATION_RATIO:
        return None

    return Insight(
        type=InsightType.INFO,
        title=VALUE_CONCENTRATION_TITLE,
        description=(
            f"{category_label(top)} holds {share:.1%} of total inventory value "
            f"({ctx.data[top].value:,.2f} of {total_value:,.2f})."
        ),
        source=InsightSource.STOCK,
        priority=PRIORITY_VALUE_CONCENTRATION,
        recommendation="Diversify inventory to reduce exposure to a single category.",
        metrics=[
            InsightMetric(label="Category", value=category_label(top)),
            InsightMetric(label="Value Share", value=round(share * 100, 1), unit="%"),
            InsightMetric(label="Category Value", value=round(ctx.data[top].value, 2)),
            InsightMetric(label="Total Value", value=round(total_value, 2)),
        ],
    )


def system_overview_rule(ctx: RuleContext) -> Insight:
    """Baseline insight, emitted on every pass regardless of data."""
    label = health_label(ctx.efficiency).label
    if label == "good":
        recommendation = "Inventory is in good shape; keep monitoring alerts weekly."
    elif label == "warning":
        recommendation = "Review flagged items and clear low or expired stock."
    else:
        recommendation = "Act on expired and low items now; stock health is critical."

    return Insight(
        type=InsightType.INFO,
        title=SYSTEM_OVERVIEW_TITLE,
        description=(
            f"Tracking {ctx.data.total_items} item(s) worth "
            f"{ctx.data.total_value:,.2f}. Stock efficiency is "
            f"{ctx.efficiency:.1f}% ({label}) with {ctx.alert_count} active alert(s)."
        ),
        source=InsightSource.SYSTEM,
        priority=PRIORITY_SYSTEM_OVERVIEW,
        recommendation=recommendation,
        metrics=[
            InsightMetric(label="Total Items", value=ctx.data.total_items),
            InsightMetric(label="Inventory Value", value=round(ctx.data.total_value, 2)),
            InsightMetric(label="Stock Efficiency", value=ctx.efficiency, unit="%"),
            InsightMetric(label="Active Alerts", value=ctx.alert_count),
        ],
    )


# ── Helpers ───────────────────────────────────────────────────────────────────


def _affected(counts: CategoryCounts) -> dict[Category, int]:
    return {c: n for c, n in counts.by_category.items() if n > 0}


def _describe_counts(affected: dict[Category, int]) -> str:
    return ", ".join(f"{category_label(c)}: {n}" for c, n in affected.items())
