"""
Sibling-domain snapshot models consumed by the insight generator.

Each snapshot is a read-only summary handed over by the surrounding
application after it has fetched the wallet, weather, education and blog
endpoints.  Every snapshot is optional: rules whose snapshot is absent are
skipped and reported as a ``PartialDataWarning``.

``WeatherSnapshot`` accepts the weather API payload as-is: either the full
response (``{"forecast": {"forecastday": [...]}, ...}``) or just the
``forecastday`` structure.  Unknown keys are ignored everywhere.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from farm_insights.utils.time_utils import ensure_utc

TransactionType = Literal["income", "expense"]


# ── Wallet ────────────────────────────────────────────────────────────────────


class Transaction(BaseModel):
    """One wallet movement.

    ``amount`` is always stored as a magnitude; the direction is carried by
    ``type``.  The mobile app records expenses with either sign.
    """

    model_config = ConfigDict(frozen=True)

    amount:   float
    type:     TransactionType
    category: Optional[str] = None
    date:     datetime

    @field_validator("amount")
    @classmethod
    def to_magnitude(cls, v: float) -> float:
        return abs(v)

    @field_validator("date")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class WalletSnapshot(BaseModel):
    """Wallet totals and recent transactions."""

    model_config = ConfigDict(frozen=True)

    total_balance: float = 0.0
    transactions:  list[Transaction] = []


# ── Weather ───────────────────────────────────────────────────────────────────


class DayConditions(BaseModel):
    """Daily aggregate of one forecast day (weather API ``day`` block)."""

    model_config = ConfigDict(frozen=True)

    maxtemp_c:            float
    mintemp_c:            Optional[float] = None
    avgtemp_c:            Optional[float] = None
    daily_chance_of_rain: float = 0.0

    @field_validator("daily_chance_of_rain")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"daily_chance_of_rain must be in [0, 100], got {v}.")
        return v


class ForecastDay(BaseModel):
    """One entry of ``forecast.forecastday``."""

    model_config = ConfigDict(frozen=True)

    date: Optional[str] = None
    day:  DayConditions


class WeatherSnapshot(BaseModel):
    """Multi-day forecast, nearest day first."""

    model_config = ConfigDict(frozen=True)

    forecastday: list[ForecastDay] = []

    @model_validator(mode="before")
    @classmethod
    def unwrap_api_payload(cls, data: Any) -> Any:
        if isinstance(data, dict) and "forecastday" not in data:
            forecast = data.get("forecast")
            if isinstance(forecast, dict) and "forecastday" in forecast:
                return {"forecastday": forecast["forecastday"]}
        return data

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot from a raw weather API response."""
        return cls.model_validate(payload)


# ── Education ─────────────────────────────────────────────────────────────────


class EducationSnapshot(BaseModel):
    """Learner engagement and lesson completion totals."""

    model_config = ConfigDict(frozen=True)

    total_users:              int = 0
    active_users:             int = 0
    animal_lessons_completed: int = 0
    crop_lessons_completed:   int = 0

    @model_validator(mode="after")
    def validate_counts(self) -> "EducationSnapshot":
        fields = (
            self.total_users, self.active_users,
            self.animal_lessons_completed, self.crop_lessons_completed,
        )
        if any(v < 0 for v in fields):
            raise ValueError("Education counts must be >= 0.")
        if self.active_users > self.total_users:
            raise ValueError(
                f"active_users ({self.active_users}) cannot exceed "
                f"total_users ({self.total_users})."
            )
        return self


# ── Blog ──────────────────────────────────────────────────────────────────────


class BlogPost(BaseModel):
    model_config = ConfigDict(frozen=True)

    title:      str = ""
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class BlogSnapshot(BaseModel):
    """Published posts; order is not significant."""

    model_config = ConfigDict(frozen=True)

    posts: list[BlogPost] = []


# ── Bundle ────────────────────────────────────────────────────────────────────


class SiblingSnapshots(BaseModel):
    """All non-stock inputs of one analysis pass.  Every field is optional."""

    model_config = ConfigDict(frozen=True)

    wallet:    Optional[WalletSnapshot] = None
    weather:   Optional[WeatherSnapshot] = None
    education: Optional[EducationSnapshot] = None
    blog:      Optional[BlogSnapshot] = None
