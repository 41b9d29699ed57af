"""
Aggregator: reduces one category's normalized items to a ``CategorySummary``
and assembles the full ``StockData`` for an analysis pass.

Summary fields
--------------
count, value   : ``len(items)`` and ``Σ item.value``.
types          : tally of ``item.type``; untyped items count as ``"unknown"``.
expiry_status  : only when at least one item has an expiry date.
                 expired      expiry <  now
                 near_expiry  now <= expiry < now + expiry_window_days
                 valid        everything else (including undated items)
health_status  : only for categories with a status vocabulary; statuses are
                 matched case-insensitively, mapped through ``STATUS_SYNONYMS``,
                 and anything unrecognized lands in the first bucket.

Trend series
------------
When the caller supplies real monthly history it is used verbatim (last
``TREND_MONTHS`` values, left-padded with zeros).

Otherwise the series is a PSEUDO-HISTORICAL APPROXIMATION kept only for
chart continuity, and the summary is flagged ``trend_synthesized=True``:

    trend[-1]          = count
    trend[-1 - offset] = round(max(0, count * seasonal(offset) * jitter))
    seasonal(offset)   = 0.9 + 0.1 * sin(2π * offset / 12)
    jitter             ~ Uniform(1 - trend_jitter, 1 + trend_jitter)

where ``offset`` is the number of months before the current one.  Draws
come from the ``random.Random`` passed in, so a seeded generator gives a
reproducible series.  Rules that interpret month-over-month movement must
ignore synthesized trends.
"""

from __future__ import annotations

import logging
import math
import random
from collections import Counter
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Optional

from farm_insights.models.stock import (
    TREND_MONTHS,
    CategorySummary,
    ExpiryStatus,
    StockData,
    StockItem,
)
from farm_insights.taxonomy.category_taxonomy import (
    CATEGORY_SPECS,
    STATUS_SYNONYMS,
    Category,
    parse_category,
)
from farm_insights.utils.time_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

EXPIRY_WINDOW_DAYS = 30
TREND_JITTER       = 0.30
UNKNOWN_TYPE       = "unknown"


def aggregate(
    items:              Sequence[StockItem],
    category:           Optional[Category | str] = None,
    history:            Optional[Sequence[float]] = None,
    now:                Optional[datetime] = None,
    rng:                Optional[random.Random] = None,
    expiry_window_days: int = EXPIRY_WINDOW_DAYS,
    trend_jitter:       float = TREND_JITTER,
) -> CategorySummary:
    """Summarize the items of a single category.

    Args:
        items:              Normalized items, all of the same category.
        category:           Category being summarized.  Required when
                            ``items`` is empty; inferred otherwise.
        history:            Real monthly counts, oldest first.  When given,
                            the trend is not synthesized.
        now:                Reference instant for expiry classification.
        rng:                Random source for the synthesized trend.
        expiry_window_days: Width of the near-expiry window.
        trend_jitter:       Half-width of the synthesized jitter factor.

    Returns:
        ``CategorySummary`` satisfying all counting invariants.

    Raises:
        ValueError: If ``items`` is empty and no ``category`` is given, or
            if items span more than one category.
        ValidationError: If ``category`` is not a recognized tag.
    """
    if category is not None:
        cat = parse_category(category)
    elif items:
        cat = items[0].category
    else:
        raise ValueError("category is required when aggregating an empty item list.")

    if any(item.category != cat for item in items):
        raise ValueError(f"aggregate() received items outside category '{cat}'.")

    now   = ensure_utc(now) if now is not None else utcnow()
    count = len(items)

    if history is not None:
        trend, synthesized = _history_trend(history), False
    else:
        trend, synthesized = synthesize_trend(count, rng=rng, jitter=trend_jitter), True

    return CategorySummary(
        category=cat,
        count=count,
        value=sum(item.value for item in items),
        types=dict(Counter(item.type or UNKNOWN_TYPE for item in items)),
        trend=trend,
        trend_synthesized=synthesized,
        expiry_status=_expiry_status(items, now, expiry_window_days),
        health_status=_health_status(items, cat),
        items=tuple(items),
    )


def empty_summary(category: Category | str) -> CategorySummary:
    """Return the zero summary substituted for missing or failed categories."""
    return CategorySummary(category=parse_category(category))


def build_stock_data(
    items_by_category:   Mapping[Category, Sequence[StockItem]],
    history_by_category: Optional[Mapping[Category, Sequence[float]]] = None,
    now:                 Optional[datetime] = None,
    rng:                 Optional[random.Random] = None,
    expiry_window_days:  int = EXPIRY_WINDOW_DAYS,
    trend_jitter:        float = TREND_JITTER,
) -> StockData:
    """Aggregate every category into a complete ``StockData``.

    Categories absent from both mappings get an empty summary, so the
    result always covers all 8 categories.

    Args:
        items_by_category:   Normalized items keyed by category.
        history_by_category: Optional real monthly counts keyed by category.
        now:                 Reference instant shared by every category.
        rng:                 Random source shared by every synthesized trend.
        expiry_window_days:  Width of the near-expiry window.
        trend_jitter:        Half-width of the synthesized jitter factor.

    Returns:
        ``StockData`` covering all categories.
    """
    history_by_category = history_by_category or {}
    summaries: dict[Category, CategorySummary] = {}

    for cat in Category:
        if cat not in items_by_category and cat not in history_by_category:
            summaries[cat] = empty_summary(cat)
            continue
        summaries[cat] = aggregate(
            items_by_category.get(cat, ()),
            category=cat,
            history=history_by_category.get(cat),
            now=now,
            rng=rng,
            expiry_window_days=expiry_window_days,
            trend_jitter=trend_jitter,
        )

    return StockData(summaries=summaries)


def synthesize_trend(
    count:  int,
    rng:    Optional[random.Random] = None,
    jitter: float = TREND_JITTER,
) -> list[float]:
    """Build the pseudo-historical 6-month series ending at ``count``.

    This is an approximation for presentation continuity, not a
    measurement.  Prefer real history whenever the backend has it.

    Args:
        count:  Current month's value.
        rng:    Random source; a fresh unseeded generator when ``None``.
        jitter: Half-width of the uniform jitter factor.

    Returns:
        ``TREND_MONTHS`` non-negative whole numbers, oldest first.
    """
    rng = rng or random.Random()
    trend: list[float] = []
    for offset in range(TREND_MONTHS - 1, 0, -1):
        seasonal = 0.9 + 0.1 * math.sin(2 * math.pi * offset / 12)
        factor   = rng.uniform(1 - jitter, 1 + jitter)
        trend.append(float(round(max(0.0, count * seasonal * factor))))
    trend.append(float(count))
    return trend


# ── Breakdown helpers ─────────────────────────────────────────────────────────


def _history_trend(history: Sequence[float]) -> list[float]:
    values = [max(0.0, float(v)) for v in history][-TREND_MONTHS:]
    return [0.0] * (TREND_MONTHS - len(values)) + values


def _expiry_status(
    items: Sequence[StockItem],
    now:   datetime,
    window_days: int,
) -> Optional[ExpiryStatus]:
    if not any(item.expiry_date is not None for item in items):
        return None

    horizon = now + timedelta(days=window_days)
    expired = near = valid = 0
    for item in items:
        expiry = item.expiry_date
        if expiry is None:
            valid += 1
        elif expiry < now:
            expired += 1
        elif expiry < horizon:
            near += 1
        else:
            valid += 1
    return ExpiryStatus(expired=expired, near_expiry=near, valid=valid)


def _health_status(items: Sequence[StockItem], category: Category) -> Optional[dict[str, int]]:
    vocabulary = CATEGORY_SPECS[category].status_vocabulary
    if not vocabulary:
        return None

    tally = {bucket: 0 for bucket in vocabulary}
    for item in items:
        tally[_status_bucket(item.status, vocabulary)] += 1
    return tally


def _status_bucket(status: Optional[str], vocabulary: tuple[str, ...]) -> str:
    if not status:
        return vocabulary[0]
    key = status.strip().lower().replace(" ", "_").replace("-", "_")
    key = STATUS_SYNONYMS.get(key, key)
    return key if key in vocabulary else vocabulary[0]
