"""
Alert and insight output models.

``Alert`` is a per-item threshold violation (low stock, expiring, expired,
maintenance due).  ``Insight`` is a synthesized, human-readable observation
with a priority and a recommendation, built from one or more domain rules.

Both are derived on every analysis pass and never stored.  Ordering is not
a property of either model; the presentation layer sorts by ``priority``.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from farm_insights.models.stock import StockItem
from farm_insights.taxonomy.category_taxonomy import Category
from farm_insights.taxonomy.insight_taxonomy import (
    AlertType,
    InsightSource,
    InsightType,
    TrendDirection,
)


class Alert(BaseModel):
    """A threshold violation for one stock item.

    Attributes:
        category:   Category of the offending item.
        item:       The normalized item.
        type:       Violation kind.
        message:    Human-readable banner text.
        days_until: Days to the relevant deadline (expiry / maintenance);
                    ``None`` for low-stock alerts.
    """

    model_config = ConfigDict(frozen=True)

    category:   Category
    item:       StockItem
    type:       AlertType
    message:    str
    days_until: Optional[int] = None


class InsightMetric(BaseModel):
    """One labeled value justifying an insight, e.g. ``Low Stock Items: 6``."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: Union[int, float, str]
    unit:  Optional[str] = None
    trend: Optional[TrendDirection] = None


class Insight(BaseModel):
    """A prioritized observation with a recommendation.

    Attributes:
        type:             Severity class (critical / warning / info / success).
        title:            Short headline; unique per rule.
        description:      One or two sentences with the concrete numbers.
        source:           Domain that produced the insight.
        priority:         0–100; higher is shown first.
        recommendation:   Suggested action.
        metrics:          Labeled values taken from the rule's own inputs.
        related_insights: Titles of other insights emitted in the same pass
                          that this one builds on.
    """

    model_config = ConfigDict(frozen=True)

    type:             InsightType
    title:            str
    description:      str
    source:           InsightSource
    priority:         int
    recommendation:   str
    metrics:          list[InsightMetric] = []
    related_insights: list[str] = []

    @field_validator("priority")
    @classmethod
    def validate_priority_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"priority must be in [0, 100], got {v}.")
        return v

    @field_validator("title", "recommendation")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title and recommendation must not be empty.")
        return v.strip()
