"""
Shared, precomputed inputs handed to every insight rule.

Rules are plain functions ``(RuleContext) -> Insight | None``.  Anything two
or more rules need (low-stock counts, expiring counts, efficiency) is
computed once by the generator and carried here, so rules stay cheap and
agree with each other on the numbers they report.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from farm_insights.insights.thresholds import FORECAST_DAYS
from farm_insights.models.snapshots import SiblingSnapshots
from farm_insights.models.stock import CategoryCounts, StockData


@dataclass(frozen=True)
class RuleContext:
    """Inputs of one insight-generation pass.

    Attributes:
        data:            Full multi-category stock snapshot.
        snapshots:       Sibling-domain snapshots (each may be ``None``).
        now:             Reference instant for every date rule.
        low_stock:       Low-stock counts (the dashboard ``lowStock`` block).
        expiring:        Expiring-soon counts (the dashboard ``expiring`` block).
        maintenance_due: Items whose maintenance falls inside the window.
        efficiency:      Stock efficiency percentage.
        alert_count:     Number of item alerts raised this pass.
        forecast_days:   Leading forecast days considered by weather rules.
    """

    data:            StockData
    snapshots:       SiblingSnapshots
    now:             datetime
    low_stock:       CategoryCounts
    expiring:        CategoryCounts
    maintenance_due: CategoryCounts
    efficiency:      float
    alert_count:     int
    forecast_days:   int = FORECAST_DAYS
