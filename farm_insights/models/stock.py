"""
Stock models: normalized items, per-category summaries, and the full
multi-category snapshot.

``StockItem`` is one inventory unit after normalization.  Its ``value`` is a
computed field, never stored: it is always ``unit_price`` for discrete
categories (animals, equipment, tools) and ``quantity * unit_price``
otherwise.

``CategorySummary`` is the aggregate of one category for one analysis run.
Its counting invariants are enforced at construction time so a summary
that does not add up can never reach the evaluators.

``StockData`` covers exactly the 8 categories.  It is built fresh on every
analysis run and never mutated.

All models are frozen.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field, field_validator, model_validator

from farm_insights.taxonomy.category_taxonomy import (
    DISCRETE_CATEGORIES,
    Category,
    parse_category,
)
from farm_insights.utils.time_utils import ensure_utc

TREND_MONTHS = 6


class StockItem(BaseModel):
    """One normalized inventory unit.

    Attributes:
        id:                    Backend record ID (stringified).
        name:                  Display name; derived from ``type`` / ``cropName``
                               when the record has no name.
        category:              One of the 8 ``Category`` values.
        quantity:              Units on hand (>= 0).
        unit:                  Unit label, e.g. ``"kg"``; optional.
        unit_price:            Price per unit (>= 0).
        min_quantity_alert:    Reorder threshold (>= 0).
        expiry_date:           UTC expiry instant, if the item is perishable.
        next_maintenance_date: UTC date of the next scheduled service.
        status:                Free-form status string from the backend.
        type:                  Sub-type used for breakdowns (e.g. ``"cow"``).
    """

    model_config = ConfigDict(frozen=True)

    id:                    str
    name:                  str
    category:              Category
    quantity:              float = 0.0
    unit:                  Optional[str] = None
    unit_price:            float = 0.0
    min_quantity_alert:    float = 0.0
    expiry_date:           Optional[datetime] = None
    next_maintenance_date: Optional[datetime] = None
    status:                Optional[str] = None
    type:                  Optional[str] = None

    @field_validator("quantity", "unit_price", "min_quantity_alert")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Stock quantities and prices must be >= 0, got {v}.")
        return v

    @field_validator("expiry_date", "next_maintenance_date")
    @classmethod
    def to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def value(self) -> float:
        """Monetary value of the record (recomputed on every access)."""
        if self.category in DISCRETE_CATEGORIES:
            return self.unit_price
        return self.quantity * self.unit_price


class ExpiryStatus(BaseModel):
    """Expiry partition of a perishable category.

    Items without an expiry date count as ``valid``.
    """

    model_config = ConfigDict(frozen=True)

    expired:     int = 0
    near_expiry: int = 0
    valid:       int = 0

    @property
    def total(self) -> int:
        return self.expired + self.near_expiry + self.valid


class CategorySummary(BaseModel):
    """Aggregate of one category for one analysis run.

    Attributes:
        category:          Category summarized.
        count:             Number of records (``len(items)``).
        value:             Sum of item values.
        types:             Sub-type → record count; ``"unknown"`` for untyped.
        trend:             Exactly ``TREND_MONTHS`` record counts, oldest first.
        trend_synthesized: ``True`` when ``trend`` is the pseudo-historical
                           approximation rather than real history.
        expiry_status:     Expiry partition, present only when at least one
                           item carries an expiry date.
        health_status:     Status bucket → count, present only for categories
                           with a status vocabulary.
        items:             The normalized items the summary was built from.
    """

    model_config = ConfigDict(frozen=True)

    category:          Category
    count:             int = 0
    value:             float = 0.0
    types:             dict[str, int] = {}
    trend:             list[float] = [0.0] * TREND_MONTHS
    trend_synthesized: bool = True
    expiry_status:     Optional[ExpiryStatus] = None
    health_status:     Optional[dict[str, int]] = None
    items:             tuple[StockItem, ...] = ()

    @field_validator("trend")
    @classmethod
    def validate_trend_length(cls, v: list[float]) -> list[float]:
        if len(v) != TREND_MONTHS:
            raise ValueError(f"trend must have exactly {TREND_MONTHS} points, got {len(v)}.")
        return v

    @model_validator(mode="after")
    def validate_counts(self) -> "CategorySummary":
        if self.count != len(self.items):
            raise ValueError(
                f"count ({self.count}) must equal the number of items ({len(self.items)})."
            )
        if sum(self.types.values()) != self.count:
            raise ValueError(
                f"types counts sum to {sum(self.types.values())}, expected {self.count}."
            )
        if self.expiry_status is not None and self.expiry_status.total != self.count:
            raise ValueError(
                f"expiry_status sums to {self.expiry_status.total}, expected {self.count}."
            )
        if self.health_status is not None and sum(self.health_status.values()) != self.count:
            raise ValueError(
                f"health_status sums to {sum(self.health_status.values())}, "
                f"expected {self.count}."
            )
        if any(item.category != self.category for item in self.items):
            raise ValueError(f"All items must belong to category '{self.category}'.")
        return self


class StockData(BaseModel):
    """Complete multi-category snapshot for one analysis run.

    Always holds a summary for every ``Category``; callers substitute
    empty summaries for categories that failed or returned nothing.
    """

    model_config = ConfigDict(frozen=True)

    summaries: dict[Category, CategorySummary]

    @field_validator("summaries")
    @classmethod
    def validate_all_categories(
        cls, v: dict[Category, CategorySummary]
    ) -> dict[Category, CategorySummary]:
        missing = set(Category) - set(v)
        if missing:
            raise ValueError(
                f"StockData must cover all categories; missing {sorted(missing)}."
            )
        for key, summary in v.items():
            if summary.category != key:
                raise ValueError(
                    f"Summary for '{summary.category}' stored under key '{key}'."
                )
        return v

    def __getitem__(self, category: Category | str) -> CategorySummary:
        return self.summaries[parse_category(category)]

    @property
    def total_items(self) -> int:
        return sum(s.count for s in self.summaries.values())

    @property
    def total_value(self) -> float:
        return sum(s.value for s in self.summaries.values())

    def all_items(self) -> list[StockItem]:
        """Every item across all categories, in ``Category`` declaration order."""
        return [item for c in Category for item in self.summaries[c].items]

    def value_share(self, category: Category | str) -> float:
        """Fraction (0–1) of total inventory value held by ``category``."""
        total = self.total_value
        if total <= 0:
            return 0.0
        return self[category].value / total


class CategoryCounts(BaseModel):
    """Per-category counter with a grand total.

    Mirrors the ``lowStock`` / ``expiring`` blocks of the dashboard summary.
    """

    model_config = ConfigDict(frozen=True)

    by_category: dict[Category, int] = {}
    total:       int = 0

    @model_validator(mode="after")
    def validate_total(self) -> "CategoryCounts":
        if sum(self.by_category.values()) != self.total:
            raise ValueError(
                f"total ({self.total}) must equal the per-category sum "
                f"({sum(self.by_category.values())})."
            )
        return self
