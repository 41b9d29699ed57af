"""
Category normalizer: converts raw per-category API records into ``StockItem``.

Field resolution is driven entirely by ``CATEGORY_SPECS``:

    quantity           := first present of spec.quantity_fields, else 0
    unit_price         := first present of spec.price_fields, else 0
    min_quantity_alert := raw minQuantityAlert, else spec.default_min_quantity
    name               := raw name, else first of spec.name_fallbacks,
                          else "<Category> #<id>"
    status             := first present of spec.status_fields

"Present" means the key exists and is not ``None``; an explicit ``0`` is
kept, it does not fall through to the next key.

Tolerance policy
----------------
Missing or malformed optional fields are defaulted, never rejected:
non-numeric or non-finite quantities and prices become 0, negative
quantities are clamped to 0, and unparseable dates are dropped.  Records
that are not mappings at all are skipped with a warning.  The only failure
is an unrecognized category tag, which raises ``ValidationError`` before
any record is touched.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from farm_insights.models.stock import StockItem
from farm_insights.taxonomy.category_taxonomy import (
    CATEGORY_SPECS,
    Category,
    CategorySpec,
    category_label,
    parse_category,
)
from farm_insights.utils.time_utils import parse_datetime

logger = logging.getLogger(__name__)

_MIN_QUANTITY_FIELDS = ("minQuantityAlert", "min_quantity_alert", "lowStockThreshold")
_EXPIRY_FIELDS       = ("expiryDate", "expiry_date", "expirationDate")
_MAINTENANCE_FIELDS  = ("nextMaintenanceDate", "next_maintenance_date")


def normalize(
    raw_items: Optional[Sequence[Mapping[str, Any]]],
    category:  Category | str,
) -> list[StockItem]:
    """Map raw records of one category to ``StockItem`` objects.

    Args:
        raw_items: Records as returned by the category's API endpoint.
            ``None`` is treated as an empty list.
        category:  Category tag (enum, canonical string, or alias).

    Returns:
        One ``StockItem`` per mapping record, in input order.

    Raises:
        ValidationError: If ``category`` is not a recognized tag.
    """
    cat  = parse_category(category)
    spec = CATEGORY_SPECS[cat]

    items: list[StockItem] = []
    skipped = 0
    for index, raw in enumerate(raw_items or []):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        items.append(_normalize_record(raw, spec, index))

    if skipped:
        logger.warning(
            "Normalizer [%s]: skipped %d non-mapping record(s)", cat, skipped,
        )
    logger.debug("Normalizer [%s]: %d item(s) normalized", cat, len(items))
    return items


# ── Record helpers ────────────────────────────────────────────────────────────


def _normalize_record(raw: Mapping[str, Any], spec: CategorySpec, index: int) -> StockItem:
    record_id = _first_present(raw, ("id", "_id"))
    item_id   = str(record_id) if record_id is not None else f"{spec.category}-{index}"

    min_alert = _to_number(_first_present(raw, _MIN_QUANTITY_FIELDS))

    return StockItem(
        id=item_id,
        name=_resolve_name(raw, spec, item_id),
        category=spec.category,
        quantity=_to_number(_first_present(raw, spec.quantity_fields)) or 0.0,
        unit=_to_text(raw.get("unit")),
        unit_price=_to_number(_first_present(raw, spec.price_fields)) or 0.0,
        min_quantity_alert=(
            min_alert if min_alert is not None else spec.default_min_quantity
        ),
        expiry_date=parse_datetime(_first_present(raw, _EXPIRY_FIELDS)),
        next_maintenance_date=parse_datetime(_first_present(raw, _MAINTENANCE_FIELDS)),
        status=_to_text(_first_present(raw, spec.status_fields)),
        type=_to_text(raw.get("type")),
    )


def _resolve_name(raw: Mapping[str, Any], spec: CategorySpec, item_id: str) -> str:
    for key in ("name", *spec.name_fallbacks):
        text = _to_text(raw.get(key))
        if text:
            return text
    return f"{category_label(spec.category)} #{item_id}"


def _first_present(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key that exists and is not ``None``."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _to_number(value: Any) -> Optional[float]:
    """Coerce a raw numeric field; ``None`` when absent, not a number, or
    not finite (``inf``, ``nan``).

    Negative values are clamped to 0.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return max(0.0, number)


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
