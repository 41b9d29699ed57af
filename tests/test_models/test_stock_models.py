"""Tests for stock models: computed value, summary invariants, StockData coverage."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from conftest import make_item, make_stock_data
from farm_insights.analytics.aggregator import empty_summary
from farm_insights.models.stock import (
    TREND_MONTHS,
    CategoryCounts,
    CategorySummary,
    ExpiryStatus,
    StockData,
)
from farm_insights.taxonomy.category_taxonomy import Category


class TestStockItemValue:
    def test_value_is_quantity_times_price(self):
        item = make_item(Category.FEED, quantity=10, unit_price=3.5)
        assert item.value == pytest.approx(35.0)

    @pytest.mark.parametrize("cat", [Category.ANIMALS, Category.EQUIPMENT, Category.TOOLS])
    def test_discrete_value_is_unit_price(self, cat):
        item = make_item(cat, quantity=7, unit_price=1200.0)
        assert item.value == 1200.0

    def test_value_in_dump(self):
        dumped = make_item(quantity=2, unit_price=4).model_dump(mode="json")
        assert dumped["value"] == 8.0

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError, match=">= 0"):
            make_item(quantity=-1)

    def test_naive_dates_become_utc(self):
        item = make_item(expiry_date=datetime(2025, 4, 1))
        assert item.expiry_date.tzinfo is not None

    def test_frozen(self):
        item = make_item()
        with pytest.raises(ValidationError):
            item.quantity = 3  # type: ignore[misc]


class TestCategorySummary:
    def test_empty_summary_defaults(self):
        summary = empty_summary(Category.SEEDS)
        assert summary.count == 0
        assert summary.value == 0.0
        assert summary.types == {}
        assert summary.trend == [0.0] * TREND_MONTHS
        assert summary.expiry_status is None

    def test_count_must_match_items(self):
        with pytest.raises(ValidationError, match="count"):
            CategorySummary(category=Category.SEEDS, count=2, types={"unknown": 2})

    def test_types_must_sum_to_count(self):
        item = make_item()
        with pytest.raises(ValidationError, match="types"):
            CategorySummary(
                category=Category.SEEDS, count=1, items=(item,), types={"a": 2},
            )

    def test_expiry_partition_must_sum_to_count(self):
        item = make_item()
        with pytest.raises(ValidationError, match="expiry_status"):
            CategorySummary(
                category=Category.SEEDS, count=1, items=(item,), types={"unknown": 1},
                expiry_status=ExpiryStatus(expired=1, valid=1),
            )

    def test_trend_length_enforced(self):
        with pytest.raises(ValidationError, match="trend"):
            CategorySummary(category=Category.SEEDS, trend=[1.0, 2.0])

    def test_items_must_share_category(self):
        item = make_item(Category.FEED)
        with pytest.raises(ValidationError, match="category"):
            CategorySummary(
                category=Category.SEEDS, count=1, items=(item,), types={"unknown": 1},
            )


class TestStockData:
    def test_must_cover_all_categories(self):
        with pytest.raises(ValidationError, match="missing"):
            StockData(summaries={Category.SEEDS: empty_summary(Category.SEEDS)})

    def test_key_must_match_summary(self):
        summaries = {c: empty_summary(c) for c in Category}
        summaries[Category.FEED] = empty_summary(Category.SEEDS)
        with pytest.raises(ValidationError, match="stored under"):
            StockData(summaries=summaries)

    def test_totals(self):
        data = make_stock_data([
            make_item(Category.SEEDS, "s1", quantity=10, unit_price=2),
            make_item(Category.FEED, "f1", quantity=5, unit_price=4),
        ])
        assert data.total_items == 2
        assert data.total_value == pytest.approx(40.0)

    def test_lookup_by_alias(self):
        data = make_stock_data([make_item(Category.FEED, "f1")])
        assert data["feeds"].count == 1

    def test_value_share(self):
        data = make_stock_data([
            make_item(Category.SEEDS, "s1", quantity=30, unit_price=1),
            make_item(Category.FEED, "f1", quantity=10, unit_price=1),
        ])
        assert data.value_share(Category.SEEDS) == pytest.approx(0.75)

    def test_value_share_of_empty_data_is_zero(self, empty_stock):
        assert empty_stock.value_share(Category.SEEDS) == 0.0

    def test_all_items_in_category_order(self):
        data = make_stock_data([
            make_item(Category.HARVEST, "h1"),
            make_item(Category.ANIMALS, "a1"),
        ])
        assert [i.id for i in data.all_items()] == ["a1", "h1"]


class TestCategoryCounts:
    def test_total_must_match(self):
        with pytest.raises(ValidationError, match="total"):
            CategoryCounts(by_category={Category.SEEDS: 2}, total=3)

    def test_valid(self):
        counts = CategoryCounts(by_category={Category.SEEDS: 2, Category.FEED: 1}, total=3)
        assert counts.total == 3
