"""Tests for Alert / Insight models and sibling snapshot parsing."""

from __future__ import annotations

from datetime import timezone

import pytest
from pydantic import ValidationError

from farm_insights.models.insight import Insight, InsightMetric
from farm_insights.models.snapshots import (
    EducationSnapshot,
    Transaction,
    WeatherSnapshot,
)
from farm_insights.taxonomy.insight_taxonomy import InsightSource, InsightType


def _insight(**overrides) -> Insight:
    fields = dict(
        type=InsightType.INFO,
        title="Title",
        description="Description",
        source=InsightSource.STOCK,
        priority=50,
        recommendation="Do something.",
    )
    fields.update(overrides)
    return Insight(**fields)


class TestInsight:
    def test_valid_construction(self):
        insight = _insight(metrics=[InsightMetric(label="Low Stock Items", value=6)])
        assert insight.metrics[0].value == 6
        assert insight.related_insights == []

    @pytest.mark.parametrize("priority", [-1, 101])
    def test_priority_out_of_range(self, priority):
        with pytest.raises(ValidationError, match="priority"):
            _insight(priority=priority)

    @pytest.mark.parametrize("priority", [0, 100])
    def test_priority_bounds_inclusive(self, priority):
        assert _insight(priority=priority).priority == priority

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            _insight(title="   ")

    def test_empty_recommendation_rejected(self):
        with pytest.raises(ValidationError):
            _insight(recommendation="")

    def test_title_stripped(self):
        assert _insight(title="  Frost Risk ").title == "Frost Risk"

    def test_json_roundtrip_of_enum_fields(self):
        dumped = _insight().model_dump(mode="json")
        assert dumped["type"] == "info"
        assert dumped["source"] == "stock"


class TestSnapshots:
    def test_transaction_amount_is_magnitude(self):
        tx = Transaction(amount=-250, type="expense", date="2025-03-01T00:00:00Z")
        assert tx.amount == 250
        assert tx.date.tzinfo == timezone.utc

    def test_transaction_type_restricted(self):
        with pytest.raises(ValidationError):
            Transaction(amount=10, type="refund", date="2025-03-01T00:00:00Z")

    def test_weather_accepts_full_api_payload(self):
        snap = WeatherSnapshot.model_validate({
            "location": {"name": "Sfax"},
            "forecast": {"forecastday": [{"day": {"maxtemp_c": 25}}]},
        })
        assert len(snap.forecastday) == 1
        assert snap.forecastday[0].day.daily_chance_of_rain == 0.0

    def test_weather_accepts_bare_forecastday(self):
        snap = WeatherSnapshot.model_validate({"forecastday": []})
        assert snap.forecastday == []

    def test_rain_chance_bounds(self):
        with pytest.raises(ValidationError, match="daily_chance_of_rain"):
            WeatherSnapshot.model_validate(
                {"forecastday": [{"day": {"maxtemp_c": 20, "daily_chance_of_rain": 120}}]}
            )

    def test_education_active_cannot_exceed_total(self):
        with pytest.raises(ValidationError, match="active_users"):
            EducationSnapshot(total_users=5, active_users=6)

    def test_education_negative_counts(self):
        with pytest.raises(ValidationError, match=">= 0"):
            EducationSnapshot(total_users=5, active_users=1, crop_lessons_completed=-1)
