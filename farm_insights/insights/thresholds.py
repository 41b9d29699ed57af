"""
Named thresholds and priority bands for every insight rule.

Keeping these in one table makes the rule set auditable: each rule module
reads its predicate limits and its priority from here, and tests can
assert against the names rather than repeating magic numbers.

Priority bands (0–100, higher first)
------------------------------------
    90  expiring stock                    (critical)
    88  expired pesticide ratio           (critical)
    85  many low-stock items              (warning)
    80  expenses exceed income            (warning)
    78  maintenance due                   (warning)
    75  restock window (cross-domain)     (success)
    75  frost risk                        (warning)
    72  category stock declining          (warning)
    70  heat ahead / optimal days / low engagement
    65  value concentration / strong income
    60  heavy rain / dominant expense / high engagement
    55  unbalanced learning tracks / stale blog
    50  system health overview            (always present)
"""

from __future__ import annotations

# ── Stock ─────────────────────────────────────────────────────────────────────

LOW_STOCK_ITEM_LIMIT      = 5       # insight when low_stock.total exceeds this
VALUE_CONCENTRATION_RATIO = 0.40    # one category's share of total value
CATEGORY_DECLINE_PCT      = -10.0   # month-over-month growth below this
EXPIRED_PESTICIDE_RATIO   = 0.10    # expired / count for pesticides

PRIORITY_EXPIRING_ITEMS     = 90
PRIORITY_EXPIRED_PESTICIDES = 88
PRIORITY_LOW_STOCK          = 85
PRIORITY_MAINTENANCE_DUE    = 78
PRIORITY_CATEGORY_DECLINE   = 72
PRIORITY_VALUE_CONCENTRATION = 65

# ── Wallet ────────────────────────────────────────────────────────────────────

WALLET_WINDOW_DAYS          = 30
INCOME_TO_EXPENSE_MULTIPLE  = 2.0
EXPENSE_CONCENTRATION_RATIO = 0.40

PRIORITY_EXPENSES_EXCEED_INCOME = 80
PRIORITY_STRONG_INCOME          = 65
PRIORITY_DOMINANT_EXPENSE       = 60

# ── Weather ───────────────────────────────────────────────────────────────────

FORECAST_DAYS          = 3       # window for rain / heat / frost maxima
HEAVY_RAIN_CHANCE_PCT  = 70.0
HEAT_MAX_TEMP_C        = 32.0
FROST_MIN_TEMP_C       = 5.0
OPTIMAL_MIN_TEMP_C     = 18.0    # inclusive
OPTIMAL_MAX_TEMP_C     = 30.0    # inclusive
OPTIMAL_MAX_RAIN_PCT   = 40.0    # exclusive

PRIORITY_FROST_RISK   = 75
PRIORITY_HEAT         = 70
PRIORITY_OPTIMAL_DAYS = 70
PRIORITY_HEAVY_RAIN   = 60

# ── Education ─────────────────────────────────────────────────────────────────

LOW_ENGAGEMENT_PCT  = 30.0
HIGH_ENGAGEMENT_PCT = 70.0
TRACK_IMBALANCE_PCT = 30.0

PRIORITY_LOW_ENGAGEMENT  = 70
PRIORITY_HIGH_ENGAGEMENT = 60
PRIORITY_TRACK_IMBALANCE = 55

# ── Blog ──────────────────────────────────────────────────────────────────────

BLOG_STALE_DAYS      = 14
PRIORITY_STALE_BLOG  = 55

# ── Cross-domain ──────────────────────────────────────────────────────────────

RESTOCK_MIN_BALANCE     = 1000.0
PRIORITY_RESTOCK_WINDOW = 75

# ── Baseline ──────────────────────────────────────────────────────────────────

PRIORITY_SYSTEM_OVERVIEW = 50
