"""
Health and turnover evaluation for stock summaries.

Stock efficiency (0–100)
------------------------
Share of items, across all categories, that are not flagged by the backend
as ``expired`` or ``low`` (case-insensitive status match).  An empty
inventory is 100 % efficient.

Health label thresholds (fixed, not configurable per category)
--------------------------------------------------------------
    good      : efficiency >= 80
    warning   : 60 <= efficiency < 80
    critical  : efficiency < 60

Turnover
--------
``value / (value / count)``: how many average-value units the category's
total value represents.  Under normal pricing this equals ``count``; the
division form is kept so that a zero value or zero count yields 0 instead
of ``NaN``.

Growth rate
-----------
Signed month-over-month percentage:
    previous == 0 : 100 if current > 0 else 0
    otherwise     : (current - previous) / previous * 100
"""

from __future__ import annotations

import math
from typing import Optional

from farm_insights.models.analysis import CategoryPerformance, HealthLabel
from farm_insights.models.stock import CategorySummary, StockData, StockItem

# Health status constants
HEALTH_GOOD     = "good"
HEALTH_WARNING  = "warning"
HEALTH_CRITICAL = "critical"

# Efficiency thresholds for health status
GOOD_EFFICIENCY    = 80.0
WARNING_EFFICIENCY = 60.0

_UNHEALTHY_STATUSES = frozenset({"expired", "low"})

# Status → colour tag buckets used by the admin tables.
_SUCCESS_STATUSES = frozenset({
    "excellent", "good", "healthy", "working", "operational", "available", "new",
})
_WARNING_STATUSES = frozenset({
    "fair", "maintenance", "in_use", "standard", "sick", "quarantine",
})
_DANGER_STATUSES = frozenset({
    "poor", "critical", "broken", "retired", "expired", "low",
})


def stock_efficiency(data: StockData) -> float:
    """Percentage of items not flagged ``expired`` or ``low``.

    Args:
        data: Full multi-category snapshot.

    Returns:
        Float in [0, 100], rounded to one decimal; 100 when there are no items.
    """
    items = data.all_items()
    if not items:
        return 100.0
    healthy = sum(1 for item in items if not _is_flagged(item))
    return round(100.0 * healthy / len(items), 1)


def health_label(efficiency: float) -> HealthLabel:
    """Classify an efficiency percentage.

    Returns:
        ``HealthLabel`` with label ``good`` / ``warning`` / ``critical``
        and the matching colour tag.
    """
    if efficiency >= GOOD_EFFICIENCY:
        return HealthLabel(label=HEALTH_GOOD, color_tag="success")
    if efficiency >= WARNING_EFFICIENCY:
        return HealthLabel(label=HEALTH_WARNING, color_tag="warning")
    return HealthLabel(label=HEALTH_CRITICAL, color_tag="danger")


def turnover(summary: CategorySummary) -> float:
    """Turnover ratio of one category; 0 for degenerate summaries.

    Never returns ``NaN`` or ``inf``.
    """
    if summary.count <= 0 or summary.value == 0:
        return 0.0
    average_value = summary.value / summary.count
    if average_value == 0 or not math.isfinite(average_value):
        return 0.0
    result = summary.value / average_value
    return result if math.isfinite(result) else 0.0


def growth_rate(current: float, previous: float) -> float:
    """Signed percentage change from ``previous`` to ``current``."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100.0


def trend_growth(summary: CategorySummary) -> float:
    """Month-over-month growth over the last two trend points."""
    return growth_rate(summary.trend[-1], summary.trend[-2])


def category_performance(summary: CategorySummary) -> CategoryPerformance:
    """Growth and direction of a category's latest month.

    ``synthesized`` mirrors the summary's flag so callers can decide
    whether the movement is meaningful.
    """
    growth = trend_growth(summary)
    if growth > 0:
        direction = "positive"
    elif growth < 0:
        direction = "negative"
    else:
        direction = "neutral"
    return CategoryPerformance(
        growth=round(growth, 2),
        direction=direction,
        synthesized=summary.trend_synthesized,
    )


def stock_level_status(item: StockItem) -> str:
    """Classify an item's quantity against its reorder threshold.

    Rules:
        low    : quantity <= min_quantity_alert
        medium : quantity <= 2 * min_quantity_alert
        high   : otherwise

    Returns:
        One of ``"low"``, ``"medium"``, ``"high"``.
    """
    if item.quantity <= item.min_quantity_alert:
        return "low"
    if item.quantity <= item.min_quantity_alert * 2:
        return "medium"
    return "high"


def status_color(status: Optional[str]) -> str:
    """Map a free-form status string to a colour tag for display."""
    if not status:
        return "secondary"
    key = status.strip().lower()
    if key in _SUCCESS_STATUSES:
        return "success"
    if key in _WARNING_STATUSES:
        return "warning"
    if key in _DANGER_STATUSES:
        return "danger"
    return "secondary"


def _is_flagged(item: StockItem) -> bool:
    return item.status is not None and item.status.strip().lower() in _UNHEALTHY_STATUSES
