"""Tests for the category normalizer's field-mapping table."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from farm_insights.analytics.normalizer import normalize
from farm_insights.errors import ValidationError
from farm_insights.taxonomy.category_taxonomy import Category


class TestFieldResolution:
    def test_seed_record(self):
        [item] = normalize([{
            "_id": "abc", "name": "Durum wheat", "quantity": "120", "unit": "kg",
            "price": 3.2, "minQuantityAlert": 20, "expiryDate": "2025-09-01T00:00:00Z",
            "type": "cereal",
        }], "seeds")
        assert item.id == "abc"
        assert item.category == Category.SEEDS
        assert item.quantity == 120.0
        assert item.unit == "kg"
        assert item.unit_price == 3.2
        assert item.min_quantity_alert == 20
        assert item.expiry_date == datetime(2025, 9, 1, tzinfo=timezone.utc)
        assert item.type == "cereal"
        assert item.value == pytest.approx(384.0)

    def test_animals_use_count_and_health_status(self):
        [item] = normalize([{"id": 1, "type": "cow", "count": 3, "price": 900,
                             "healthStatus": "sick"}], "animals")
        assert item.quantity == 3
        assert item.status == "sick"
        assert item.name == "cow"
        assert item.value == 900

    def test_animals_prefer_quantity_over_count(self):
        [item] = normalize([{"id": 1, "quantity": 3, "count": 7}], "animals")
        assert item.quantity == 3

    def test_count_used_when_quantity_missing(self):
        [item] = normalize([{"id": 1, "count": 4}], "feed")
        assert item.quantity == 4

    def test_explicit_zero_does_not_fall_through(self):
        [item] = normalize([{"id": 1, "quantity": 0, "count": 9}], "feed")
        assert item.quantity == 0

    def test_harvest_named_by_crop(self):
        [item] = normalize([{"id": "h1", "cropName": "Olives", "quantity": 200}], "harvest")
        assert item.name == "Olives"

    def test_name_last_resort(self):
        [item] = normalize([{"id": "t9"}], "tools")
        assert item.name == "Tools #t9"

    def test_generated_id(self):
        items = normalize([{"name": "a"}, {"name": "b"}], "fertilizer")
        assert [i.id for i in items] == ["fertilizer-0", "fertilizer-1"]

    def test_pesticide_without_price(self):
        [item] = normalize([{"id": 1, "quantity": 5}], "pesticides")
        assert item.unit_price == 0
        assert item.value == 0

    def test_maintenance_date(self):
        [item] = normalize([{"id": 1, "nextMaintenanceDate": "2025-03-20"}], "equipment")
        assert item.next_maintenance_date == datetime(2025, 3, 20, tzinfo=timezone.utc)


class TestDefaults:
    @pytest.mark.parametrize("cat, expected", [
        ("seeds", 5.0), ("feed", 5.0), ("equipment", 1.0), ("tools", 1.0), ("animals", 0.0),
    ])
    def test_default_min_quantity(self, cat, expected):
        [item] = normalize([{"id": 1}], cat)
        assert item.min_quantity_alert == expected

    def test_missing_fields_default(self):
        [item] = normalize([{}], "seeds")
        assert item.quantity == 0
        assert item.unit_price == 0
        assert item.expiry_date is None


class TestTolerance:
    def test_negative_quantity_clamped(self):
        [item] = normalize([{"id": 1, "quantity": -5}], "seeds")
        assert item.quantity == 0

    def test_non_numeric_quantity_defaults(self):
        [item] = normalize([{"id": 1, "quantity": "lots"}], "seeds")
        assert item.quantity == 0

    @pytest.mark.parametrize("raw", ["Infinity", "1e400", float("inf"), float("nan"), 10 ** 400])
    def test_non_finite_numbers_default(self, raw):
        [item] = normalize([{"id": 1, "quantity": raw, "price": raw}], "seeds")
        assert item.quantity == 0
        assert item.unit_price == 0
        assert item.value == 0

    def test_non_finite_quantity_keeps_totals_finite(self):
        items = normalize([
            {"id": 1, "quantity": "Infinity", "price": 0},
            {"id": 2, "quantity": 4, "price": 2.5},
        ], "seeds")
        assert sum(item.value for item in items) == 10.0

    def test_bad_date_dropped(self):
        [item] = normalize([{"id": 1, "expiryDate": "someday"}], "seeds")
        assert item.expiry_date is None

    def test_non_mapping_records_skipped(self):
        items = normalize([{"id": 1}, "garbage", None, {"id": 2}], "seeds")
        assert [i.id for i in items] == ["1", "2"]

    def test_none_payload_is_empty(self):
        assert normalize(None, "seeds") == []


class TestCategoryTag:
    def test_alias_accepted(self):
        [item] = normalize([{"id": 1}], "Feeds")
        assert item.category == Category.FEED

    def test_unknown_category_raises(self):
        with pytest.raises(ValidationError, match="Unrecognized stock category"):
            normalize([{"id": 1}], "spaceships")

    def test_unknown_category_raises_even_when_empty(self):
        with pytest.raises(ValidationError):
            normalize([], "spaceships")
