"""
Analysis-pass result models.

``AnalysisResult`` bundles everything one pass hands to the presentation
layer: the full ``StockData``, the alert list, the priority-sorted insight
list, the overall health label, and a record of what was skipped.

Nothing here is persisted: a pass is a pure function of its inputs, and
``run_slug`` / ``generated_at`` only exist so that callers can correlate
log lines with a rendered result.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from farm_insights.models.insight import Alert, Insight
from farm_insights.models.stock import StockData

HealthLevel = Literal["good", "warning", "critical"]
ColorTag = Literal["success", "warning", "danger", "secondary"]
GrowthDirection = Literal["positive", "negative", "neutral"]


class HealthLabel(BaseModel):
    """Stock-health classification of an efficiency percentage."""

    model_config = ConfigDict(frozen=True)

    label:     HealthLevel
    color_tag: ColorTag


class CategoryPerformance(BaseModel):
    """Month-over-month movement of one category's trend."""

    model_config = ConfigDict(frozen=True)

    growth:      float
    direction:   GrowthDirection
    synthesized: bool


class PartialDataWarning(BaseModel):
    """A rule group skipped because its sibling snapshot was absent.

    Attributes:
        domain:  Snapshot name (``"wallet"``, ``"weather"``, ...).
        message: Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True)

    domain:  str
    message: str


class AnalysisResult(BaseModel):
    """Output of one ``run_analysis()`` pass.

    Attributes:
        run_slug:          UUID4 string identifying the pass in logs.
        generated_at:      ``now`` used for every date rule of the pass.
        stock:             Complete per-category summaries.
        alerts:            Item alerts in detection order.
        insights:          Insights sorted by priority, descending (stable).
        efficiency:        Stock efficiency percentage (0–100).
        health:            Label for ``efficiency``.
        warnings:          Skipped rule groups.
        failed_categories: Category tags that failed validation and were
                           replaced by empty summaries.
    """

    model_config = ConfigDict(frozen=True)

    run_slug:          str
    generated_at:      datetime
    stock:             StockData
    alerts:            list[Alert] = []
    insights:          list[Insight] = []
    efficiency:        float = 100.0
    health:            HealthLabel
    warnings:          list[PartialDataWarning] = []
    failed_categories: list[str] = []
