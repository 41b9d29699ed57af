"""
Shared pytest fixtures for the Farm Insights test suite.

Provides:
  - ``NOW``: a fixed reference instant so every date rule is deterministic.
  - Factories for ``StockItem`` and ``StockData`` used across test modules.
  - Sample sibling snapshots (wallet, weather, education, blog).
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from farm_insights.analytics.aggregator import build_stock_data
from farm_insights.models.snapshots import (
    BlogSnapshot,
    EducationSnapshot,
    SiblingSnapshots,
    WalletSnapshot,
    WeatherSnapshot,
)
from farm_insights.models.stock import StockData, StockItem
from farm_insights.taxonomy.category_taxonomy import Category

NOW = datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


# ── Factories ─────────────────────────────────────────────────────────────────

def make_item(
    category: Category = Category.SEEDS,
    item_id: str = "item-1",
    **overrides: Any,
) -> StockItem:
    """A healthy, well-stocked ``StockItem``; override any field by keyword."""
    fields: dict[str, Any] = {
        "id": item_id,
        "name": f"Item {item_id}",
        "category": category,
        "quantity": 50.0,
        "unit_price": 2.0,
        "min_quantity_alert": 5.0,
    }
    fields.update(overrides)
    return StockItem(**fields)


def make_stock_data(
    items: Sequence[StockItem] = (),
    history: dict[Category, Sequence[float]] | None = None,
    now: datetime = NOW,
) -> StockData:
    """Build a complete ``StockData`` from a flat item list (seeded trends)."""
    by_category: dict[Category, list[StockItem]] = {}
    for item in items:
        by_category.setdefault(item.category, []).append(item)
    return build_stock_data(
        by_category,
        history_by_category=history,
        now=now,
        rng=random.Random(7),
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def empty_stock() -> StockData:
    return make_stock_data()


@pytest.fixture
def sample_wallet() -> WalletSnapshot:
    """Balanced wallet: income 3000, expenses 1000 (feed 600, seeds 400)."""
    return WalletSnapshot(
        total_balance=5000.0,
        transactions=[
            {"amount": 3000, "type": "income", "category": "harvest sales",
             "date": NOW - timedelta(days=3)},
            {"amount": -600, "type": "expense", "category": "feed",
             "date": NOW - timedelta(days=5)},
            {"amount": 400, "type": "expense", "category": "seeds",
             "date": NOW - timedelta(days=10)},
        ],
    )


@pytest.fixture
def sample_weather() -> WeatherSnapshot:
    """Three mild days; the second one is optimal for field work."""
    return WeatherSnapshot.from_api({
        "location": {"name": "Tunis"},
        "forecast": {"forecastday": [
            {"date": "2025-03-15", "day": {"maxtemp_c": 17.0, "mintemp_c": 9.0,
                                           "daily_chance_of_rain": 20}},
            {"date": "2025-03-16", "day": {"maxtemp_c": 22.0, "mintemp_c": 11.0,
                                           "daily_chance_of_rain": 10}},
            {"date": "2025-03-17", "day": {"maxtemp_c": 24.0, "mintemp_c": 12.0,
                                           "daily_chance_of_rain": 50}},
        ]},
    })


@pytest.fixture
def sample_education() -> EducationSnapshot:
    """50 % engagement, balanced tracks: triggers no education rule."""
    return EducationSnapshot(
        total_users=100,
        active_users=50,
        animal_lessons_completed=40,
        crop_lessons_completed=45,
    )


@pytest.fixture
def sample_blog() -> BlogSnapshot:
    """Newest post 3 days old."""
    return BlogSnapshot(posts=[
        {"title": "Spring sowing", "created_at": NOW - timedelta(days=3)},
        {"title": "Winter feed", "created_at": NOW - timedelta(days=40)},
    ])


@pytest.fixture
def all_snapshots(sample_wallet, sample_weather, sample_education, sample_blog) -> SiblingSnapshots:
    return SiblingSnapshots(
        wallet=sample_wallet,
        weather=sample_weather,
        education=sample_education,
        blog=sample_blog,
    )
