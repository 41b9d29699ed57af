"""
Alert detector: scans normalized items for threshold violations.

Rules, evaluated per item in this fixed order (an item may match several):

    1. low_stock       : quantity <= min_quantity_alert
                         (never for animals: a head of livestock has no
                         meaningful reorder threshold)
    2. expiring_soon   : now <= expiry_date and days_until(expiry) <= 30
    3. expired         : expiry_date < now
    4. maintenance_due : now <= next_maintenance_date and
                         days_until(maintenance) <= 7

``expiring_soon`` and ``expired`` are mutually exclusive, so an item that
is short *and* past its date yields exactly ``low_stock`` + ``expired``.

Alerts are regenerated on every pass; nothing is deduplicated or stored.
The ``count_*`` helpers share the same predicates and feed the insight
rules (the dashboard's ``lowStock`` / ``expiring`` totals).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Optional

from farm_insights.analytics.aggregator import EXPIRY_WINDOW_DAYS
from farm_insights.models.insight import Alert
from farm_insights.models.stock import CategoryCounts, StockData, StockItem
from farm_insights.taxonomy.category_taxonomy import Category
from farm_insights.taxonomy.insight_taxonomy import AlertType
from farm_insights.utils.time_utils import days_until, ensure_utc, format_date, utcnow

MAINTENANCE_WINDOW_DAYS = 7

# Categories excluded from low-stock detection.
_NO_REORDER_CATEGORIES = frozenset({Category.ANIMALS})


# ── Predicates ────────────────────────────────────────────────────────────────


def is_low_stock(item: StockItem) -> bool:
    if item.category in _NO_REORDER_CATEGORIES:
        return False
    return item.quantity <= item.min_quantity_alert


def is_expired(item: StockItem, now: datetime) -> bool:
    return item.expiry_date is not None and item.expiry_date < now


def is_expiring_soon(
    item: StockItem, now: datetime, window_days: int = EXPIRY_WINDOW_DAYS
) -> bool:
    if item.expiry_date is None or item.expiry_date < now:
        return False
    return days_until(item.expiry_date, now) <= window_days


def is_maintenance_due(
    item: StockItem, now: datetime, window_days: int = MAINTENANCE_WINDOW_DAYS
) -> bool:
    due = item.next_maintenance_date
    if due is None or due < now:
        return False
    return days_until(due, now) <= window_days


# ── Detection ─────────────────────────────────────────────────────────────────


def detect_alerts(
    data: StockData,
    now:  Optional[datetime] = None,
    expiry_window_days:      int = EXPIRY_WINDOW_DAYS,
    maintenance_window_days: int = MAINTENANCE_WINDOW_DAYS,
) -> list[Alert]:
    """Scan every item of ``data`` and emit alerts in rule order.

    Args:
        data:                    Full multi-category snapshot.
        now:                     Reference instant (default: current UTC time).
        expiry_window_days:      Upper bound of the expiring-soon window.
        maintenance_window_days: Upper bound of the maintenance-due window.

    Returns:
        Alerts grouped by item, items in ``Category`` declaration order.
    """
    now = ensure_utc(now) if now is not None else utcnow()
    alerts: list[Alert] = []

    for item in data.all_items():
        if is_low_stock(item):
            alerts.append(_alert(
                item, AlertType.LOW_STOCK,
                f"Low stock: {item.name} ({_format_quantity(item)} remaining)",
            ))
        if is_expiring_soon(item, now, expiry_window_days):
            alerts.append(_alert(
                item, AlertType.EXPIRING_SOON,
                f"Expiring soon: {item.name} ({format_date(item.expiry_date)})",
                days_until(item.expiry_date, now),
            ))
        if is_expired(item, now):
            alerts.append(_alert(
                item, AlertType.EXPIRED,
                f"Expired: {item.name} ({format_date(item.expiry_date)})",
                days_until(item.expiry_date, now),
            ))
        if is_maintenance_due(item, now, maintenance_window_days):
            alerts.append(_alert(
                item, AlertType.MAINTENANCE_DUE,
                f"Maintenance due: {item.name} ({format_date(item.next_maintenance_date)})",
                days_until(item.next_maintenance_date, now),
            ))

    return alerts


# ── Counters ──────────────────────────────────────────────────────────────────


def count_low_stock(data: StockData) -> CategoryCounts:
    """Low-stock item counts per category (animals always 0)."""
    return _count(data, is_low_stock)


def count_expiring(
    data: StockData,
    now:  Optional[datetime] = None,
    window_days: int = EXPIRY_WINDOW_DAYS,
) -> CategoryCounts:
    """Counts of not-yet-expired items expiring within ``window_days``."""
    now = ensure_utc(now) if now is not None else utcnow()
    return _count(data, lambda item: is_expiring_soon(item, now, window_days))


def count_maintenance_due(
    data: StockData,
    now:  Optional[datetime] = None,
    window_days: int = MAINTENANCE_WINDOW_DAYS,
) -> CategoryCounts:
    """Counts of items whose next maintenance falls within ``window_days``."""
    now = ensure_utc(now) if now is not None else utcnow()
    return _count(data, lambda item: is_maintenance_due(item, now, window_days))


def _count(data: StockData, predicate: Callable[[StockItem], bool]) -> CategoryCounts:
    by_category = {
        cat: sum(1 for item in data[cat].items if predicate(item))
        for cat in Category
    }
    return CategoryCounts(by_category=by_category, total=sum(by_category.values()))


def _alert(
    item: StockItem,
    alert_type: AlertType,
    message: str,
    days: Optional[int] = None,
) -> Alert:
    return Alert(
        category=item.category,
        item=item,
        type=alert_type,
        message=message,
        days_until=days,
    )


def _format_quantity(item: StockItem) -> str:
    text = f"{item.quantity:g}"
    return f"{text} {item.unit}" if item.unit else text
