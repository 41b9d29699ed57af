"""Tests for the category taxonomy: enum, mapping table, tag parsing."""

from __future__ import annotations

import pytest

from farm_insights.errors import ValidationError
from farm_insights.taxonomy.category_taxonomy import (
    CATEGORY_ALIASES,
    CATEGORY_SPECS,
    DISCRETE_CATEGORIES,
    STATUS_SYNONYMS,
    Category,
    category_label,
    parse_category,
)
from farm_insights.taxonomy.insight_taxonomy import (
    AlertType,
    InsightSource,
    InsightType,
    TrendDirection,
)


class TestCategoryEnum:
    def test_exactly_eight_categories(self):
        assert {c.value for c in Category} == {
            "animals", "pesticides", "seeds", "fertilizer",
            "equipment", "feed", "tools", "harvest",
        }

    def test_slug_format(self):
        for member in Category:
            assert member.value == member.value.lower()
            assert " " not in member.value


class TestCategorySpecs:
    def test_every_category_has_field_rules(self):
        assert set(CATEGORY_SPECS) == set(Category)

    def test_spec_keyed_by_own_category(self):
        for cat, spec in CATEGORY_SPECS.items():
            assert spec.category == cat

    def test_discrete_categories(self):
        assert DISCRETE_CATEGORIES == {Category.ANIMALS, Category.EQUIPMENT, Category.TOOLS}

    def test_quantity_read_before_count_everywhere(self):
        for spec in CATEGORY_SPECS.values():
            assert spec.quantity_fields == ("quantity", "count")

    def test_harvest_falls_back_to_crop_name(self):
        assert "cropName" in CATEGORY_SPECS[Category.HARVEST].name_fallbacks

    def test_default_reorder_thresholds(self):
        assert CATEGORY_SPECS[Category.SEEDS].default_min_quantity == 5.0
        assert CATEGORY_SPECS[Category.EQUIPMENT].default_min_quantity == 1.0
        assert CATEGORY_SPECS[Category.ANIMALS].default_min_quantity == 0.0

    def test_only_animals_equipment_tools_have_vocabulary(self):
        with_vocab = {c for c, s in CATEGORY_SPECS.items() if s.status_vocabulary}
        assert with_vocab == {Category.ANIMALS, Category.EQUIPMENT, Category.TOOLS}

    def test_synonyms_target_known_buckets(self):
        buckets = {b for s in CATEGORY_SPECS.values() for b in s.status_vocabulary}
        for target in STATUS_SYNONYMS.values():
            assert target in buckets


class TestParseCategory:
    def test_enum_passes_through(self):
        assert parse_category(Category.FEED) is Category.FEED

    def test_canonical_string(self):
        assert parse_category("pesticides") == Category.PESTICIDES

    def test_case_and_whitespace_insensitive(self):
        assert parse_category("  Seeds ") == Category.SEEDS

    @pytest.mark.parametrize("alias", sorted(CATEGORY_ALIASES))
    def test_aliases(self, alias):
        assert parse_category(alias) == CATEGORY_ALIASES[alias]

    def test_backend_plurals(self):
        assert parse_category("feeds") == Category.FEED
        assert parse_category("fertilizers") == Category.FERTILIZER
        assert parse_category("harvests") == Category.HARVEST

    def test_unknown_tag_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_category("spaceships")
        assert exc_info.value.value == "spaceships"

    def test_non_string_raises(self):
        with pytest.raises(ValidationError):
            parse_category(42)  # type: ignore[arg-type]

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_category("nope")


def test_category_label():
    assert category_label(Category.FERTILIZER) == "Fertilizer"


class TestInsightTaxonomy:
    def test_insight_types(self):
        assert {m.value for m in InsightType} == {"critical", "warning", "info", "success"}

    def test_insight_sources(self):
        assert {m.value for m in InsightSource} == {
            "stock", "wallet", "weather", "education", "blog", "cross_domain", "system",
        }

    def test_alert_types(self):
        assert {m.value for m in AlertType} == {
            "low_stock", "expiring_soon", "expired", "maintenance_due",
        }

    def test_trend_directions(self):
        assert {m.value for m in TrendDirection} == {"up", "down", "stable"}
