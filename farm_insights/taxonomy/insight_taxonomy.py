"""
Insight and alert taxonomy.

Three enums describe every synthesized record:
  - ``InsightType``  : *how serious*, critical / warning / info / success.
  - ``InsightSource``: *where from*, which domain produced the insight.
  - ``AlertType``    : the per-item threshold violation kind.

``TrendDirection`` tags individual insight metrics for display arrows.

This module has NO imports from any other ``farm_insights`` package.
"""

from enum import StrEnum


class InsightType(StrEnum):
    """Severity class of an insight, used for colour coding."""

    CRITICAL = "critical"
    """Needs action now: stock expiring, money at risk."""

    WARNING = "warning"
    """Trending the wrong way; act within days."""

    INFO = "info"
    """Context worth knowing; no immediate action."""

    SUCCESS = "success"
    """Favourable condition or opportunity."""


class InsightSource(StrEnum):
    """Domain tag identifying which data produced an insight."""

    STOCK = "stock"
    WALLET = "wallet"
    WEATHER = "weather"
    EDUCATION = "education"
    BLOG = "blog"
    CROSS_DOMAIN = "cross_domain"
    SYSTEM = "system"


class AlertType(StrEnum):
    """Per-item threshold violations raised by the alert detector."""

    LOW_STOCK = "low_stock"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    MAINTENANCE_DUE = "maintenance_due"


class TrendDirection(StrEnum):
    """Direction arrow attached to an insight metric."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"
