"""
Stock category taxonomy and the per-category field-mapping table.

The backend stores each inventory kind in its own table, and the raw
payloads disagree on field names: animals often carry ``count`` rather
than ``quantity`` (``quantity`` still wins when both are present), pesticides have no ``price``, harvests are named by
``cropName``, animal health lives in ``healthStatus``.  Rather than
repeating fallback chains at every call site, every difference is
declared once here in ``CATEGORY_SPECS`` and consumed by the normalizer.

``CATEGORY_SPECS`` is the integrity contract:
  - Every ``Category`` has exactly one ``CategorySpec``.
  - Discrete categories (one record = one non-fungible unit) are animals,
    equipment and tools.
  - Only categories with a ``status_vocabulary`` get a health breakdown.

Run ``tests/test_taxonomy/test_category_taxonomy.py`` to verify this contract.

This module has NO imports from any other ``farm_insights`` package
except ``farm_insights.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from farm_insights.errors import ValidationError


class Category(StrEnum):
    """The fixed set of inventory kinds tracked by the farm."""

    ANIMALS = "animals"
    PESTICIDES = "pesticides"
    SEEDS = "seeds"
    FERTILIZER = "fertilizer"
    EQUIPMENT = "equipment"
    FEED = "feed"
    TOOLS = "tools"
    HARVEST = "harvest"


@dataclass(frozen=True)
class CategorySpec:
    """Field resolution rules for one category's raw records.

    Attributes:
        category:             The category these rules apply to.
        quantity_fields:      Raw keys tried in order for the quantity.
        price_fields:         Raw keys tried in order for the unit price.
        name_fallbacks:       Raw keys tried when ``name`` is missing.
        status_fields:        Raw keys tried in order for the status string.
        discrete:             ``True`` when each record is one unit, so the
                              record's value is its price (quantity ignored).
        perishable:           ``True`` when items may carry an expiry date.
        default_min_quantity: Reorder threshold used when the record has none.
        status_vocabulary:    Health buckets, first entry is the default.
    """

    category:             Category
    quantity_fields:      tuple[str, ...] = ("quantity", "count")
    price_fields:         tuple[str, ...] = ("price",)
    name_fallbacks:       tuple[str, ...] = ("type",)
    status_fields:        tuple[str, ...] = ("status",)
    discrete:             bool = False
    perishable:           bool = True
    default_min_quantity: float = 5.0
    status_vocabulary:    tuple[str, ...] = ()


_EQUIPMENT_VOCABULARY = ("working", "maintenance", "broken")

CATEGORY_SPECS: dict[Category, CategorySpec] = {
    Category.ANIMALS: CategorySpec(
        category=Category.ANIMALS,
        status_fields=("status", "healthStatus", "health_status", "health"),
        discrete=True,
        perishable=False,
        default_min_quantity=0.0,
        status_vocabulary=("healthy", "sick", "quarantine"),
    ),
    Category.PESTICIDES: CategorySpec(category=Category.PESTICIDES),
    Category.SEEDS:      CategorySpec(category=Category.SEEDS),
    Category.FERTILIZER: CategorySpec(category=Category.FERTILIZER),
    Category.FEED:       CategorySpec(category=Category.FEED),
    Category.HARVEST: CategorySpec(
        category=Category.HARVEST,
        name_fallbacks=("cropName", "crop_name", "type"),
    ),
    Category.EQUIPMENT: CategorySpec(
        category=Category.EQUIPMENT,
        discrete=True,
        perishable=False,
        default_min_quantity=1.0,
        status_vocabulary=_EQUIPMENT_VOCABULARY,
    ),
    Category.TOOLS: CategorySpec(
        category=Category.TOOLS,
        discrete=True,
        perishable=False,
        default_min_quantity=1.0,
        status_vocabulary=_EQUIPMENT_VOCABULARY,
    ),
}

# Status strings seen in the mobile and admin apps that map onto a bucket
# other than the default one.
STATUS_SYNONYMS: dict[str, str] = {
    "ill":            "sick",
    "injured":        "sick",
    "quarantined":    "quarantine",
    "isolated":       "quarantine",
    "repair":         "maintenance",
    "in_maintenance": "maintenance",
    "needs_repair":   "maintenance",
    "damaged":        "broken",
    "retired":        "broken",
    "out_of_order":   "broken",
}

# Backend table names and singular forms accepted as category tags.
CATEGORY_ALIASES: dict[str, Category] = {
    "animal":      Category.ANIMALS,
    "livestock":   Category.ANIMALS,
    "pesticide":   Category.PESTICIDES,
    "seed":        Category.SEEDS,
    "fertilizers": Category.FERTILIZER,
    "feeds":       Category.FEED,
    "tool":        Category.TOOLS,
    "harvests":    Category.HARVEST,
}

DISCRETE_CATEGORIES: frozenset[Category] = frozenset(
    c for c, spec in CATEGORY_SPECS.items() if spec.discrete
)


def parse_category(value: Category | str) -> Category:
    """Resolve a category tag to a ``Category``.

    Accepts enum members, canonical values (case-insensitive) and the
    aliases in ``CATEGORY_ALIASES``.

    Args:
        value: Category tag from the caller.

    Returns:
        The matching ``Category``.

    Raises:
        ValidationError: If ``value`` is not a recognized tag.
    """
    if isinstance(value, Category):
        return value
    if not isinstance(value, str):
        raise ValidationError(value)

    key = value.strip().lower()
    try:
        return Category(key)
    except ValueError:
        pass
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    raise ValidationError(
        value,
        f"Unrecognized stock category {value!r}. "
        f"Must be one of {sorted(c.value for c in Category)}.",
    )


def category_label(category: Category) -> str:
    """Return a display label, e.g. ``"Fertilizer"``."""
    return category.value.replace("_", " ").title()
