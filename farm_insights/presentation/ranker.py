"""
Insight ranking and alert ordering for display.

Usage flow
----------
1. rank_insights(insights)
   -> list[Insight]  (priority descending, ties keep input order)

2. filter_insights(ranked, types=..., sources=..., min_priority=...)
   -> list[Insight]  (order preserved)

3. top_insights(filtered, n=10)
   -> list[Insight]  (first n after ranking)

Alerts are ordered by severity bucket, then by how soon the deadline is:

    expired -> expiring_soon -> low_stock -> maintenance_due

Within a bucket, alerts with a ``days_until`` come first (ascending); the
rest keep detection order.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Optional

from farm_insights.models.insight import Alert, Insight
from farm_insights.taxonomy.category_taxonomy import Category
from farm_insights.taxonomy.insight_taxonomy import AlertType, InsightSource, InsightType

_ALERT_ORDER: dict[AlertType, int] = {
    AlertType.EXPIRED:         0,
    AlertType.EXPIRING_SOON:   1,
    AlertType.LOW_STOCK:       2,
    AlertType.MAINTENANCE_DUE: 3,
}


def rank_insights(insights: Iterable[Insight]) -> list[Insight]:
    """Sort by priority, descending.  Python's sort is stable."""
    return sorted(insights, key=lambda i: -i.priority)


def filter_insights(
    insights:     Iterable[Insight],
    types:        Optional[Iterable[InsightType]] = None,
    sources:      Optional[Iterable[InsightSource]] = None,
    min_priority: int = 0,
) -> list[Insight]:
    """Keep insights matching every given criterion.

    Args:
        insights:     Insights to filter (order preserved).
        types:        Allowed severity classes; ``None`` allows all.
        sources:      Allowed source domains; ``None`` allows all.
        min_priority: Inclusive lower bound on ``priority``.

    Returns:
        Filtered list.
    """
    type_set   = set(types) if types is not None else None
    source_set = set(sources) if sources is not None else None
    return [
        i for i in insights
        if i.priority >= min_priority
        and (type_set is None or i.type in type_set)
        and (source_set is None or i.source in source_set)
    ]


def top_insights(insights: Iterable[Insight], n: int = 10) -> list[Insight]:
    """The ``n`` highest-priority insights; empty when ``n <= 0``."""
    if n <= 0:
        return []
    return rank_insights(insights)[:n]


def sort_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Order alerts by severity bucket, then by ``days_until`` ascending."""
    return sorted(alerts, key=_alert_key)


def group_alerts_by_category(alerts: Sequence[Alert]) -> dict[Category, list[Alert]]:
    """Group alerts per category, categories in declaration order.

    Categories without alerts are omitted.  Each group is sorted with
    ``sort_alerts``.
    """
    groups: dict[Category, list[Alert]] = defaultdict(list)
    for alert in alerts:
        groups[alert.category].append(alert)
    return {cat: sort_alerts(groups[cat]) for cat in Category if cat in groups}


def _alert_key(alert: Alert) -> tuple[int, int, int]:
    has_days = 0 if alert.days_until is not None else 1
    days     = alert.days_until if alert.days_until is not None else 0
    return (_ALERT_ORDER[alert.type], has_days, days)
