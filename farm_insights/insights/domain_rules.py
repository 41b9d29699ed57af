"""
Sibling-domain insight rules: wallet, weather, education, blog, and the
cross-domain restock window.

Every rule returns ``None`` when its snapshot is absent; the generator is
responsible for reporting the gap as a ``PartialDataWarning``.

Wallet (trailing 30 days, ``now - 30d <= date <= now``)
-------------------------------------------------------
    expenses > income                  -> Expenses Exceed Income     warning 80
    income > 2 * expenses              -> Strong Income Performance  success 65
    top expense category > 40 %        -> Dominant Expense Category  info    60

Weather
-------
Rain, heat and frost look at the first ``forecast_days`` entries; optimal
days are counted over the whole forecast.

    max rain chance > 70 %             -> Heavy Rain Expected        info    60
    max temperature > 32 °C            -> High Temperatures Ahead    warning 70
    min temperature < 5 °C             -> Frost Risk                 warning 75
    18 <= max temp <= 30, rain < 40 %  -> Optimal Field Work Days    success 70

Education
---------
    engagement < 30 %                  -> Low Learner Engagement     warning 70
    engagement > 70 %                  -> High Learner Engagement    success 60
    |animal % - crop %| > 30           -> Unbalanced Learning Tracks info    55

Blog
----
    days since newest post > 14        -> Blog Content Is Stale      info    55

Cross-domain
------------
    low stock > 0 and an optimal day and balance > 1000
                                       -> Good Window to Restock     success 75
"""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta
from typing import Optional

from farm_insights.insights.context import RuleContext
from farm_insights.insights.stock_rules import LOW_STOCK_TITLE
from farm_insights.insights.thresholds import (
    BLOG_STALE_DAYS,
    EXPENSE_CONCENTRATION_RATIO,
    FROST_MIN_TEMP_C,
    HEAT_MAX_TEMP_C,
    HEAVY_RAIN_CHANCE_PCT,
    HIGH_ENGAGEMENT_PCT,
    INCOME_TO_EXPENSE_MULTIPLE,
    LOW_ENGAGEMENT_PCT,
    OPTIMAL_MAX_RAIN_PCT,
    OPTIMAL_MAX_TEMP_C,
    OPTIMAL_MIN_TEMP_C,
    PRIORITY_DOMINANT_EXPENSE,
    PRIORITY_EXPENSES_EXCEED_INCOME,
    PRIORITY_FROST_RISK,
    PRIORITY_HEAT,
    PRIORITY_HEAVY_RAIN,
    PRIORITY_HIGH_ENGAGEMENT,
    PRIORITY_LOW_ENGAGEMENT,
    PRIORITY_OPTIMAL_DAYS,
    PRIORITY_RESTOCK_WINDOW,
    PRIORITY_STALE_BLOG,
    PRIORITY_STRONG_INCOME,
    PRIORITY_TRACK_IMBALANCE,
    RESTOCK_MIN_BALANCE,
    TRACK_IMBALANCE_PCT,
    WALLET_WINDOW_DAYS,
)
from farm_insights.models.insight import Insight, InsightMetric
from farm_insights.models.snapshots import ForecastDay, WalletSnapshot, WeatherSnapshot
from farm_insights.taxonomy.insight_taxonomy import InsightSource, InsightType, TrendDirection
from farm_insights.utils.time_utils import days_since

EXPENSES_EXCEED_INCOME_TITLE = "Expenses Exceed Income"
STRONG_INCOME_TITLE          = "Strong Income Performance"
DOMINANT_EXPENSE_TITLE       = "Dominant Expense Category"
HEAVY_RAIN_TITLE             = "Heavy Rain Expected"
HEAT_TITLE                   = "High Temperatures Ahead"
FROST_RISK_TITLE             = "Frost Risk"
OPTIMAL_DAYS_TITLE           = "Optimal Field Work Days"
LOW_ENGAGEMENT_TITLE         = "Low Learner Engagement"
HIGH_ENGAGEMENT_TITLE        = "High Learner Engagement"
TRACK_IMBALANCE_TITLE        = "Unbalanced Learning Tracks"
STALE_BLOG_TITLE             = "Blog Content Is Stale"
RESTOCK_WINDOW_TITLE         = "Good Window to Restock"

UNCATEGORIZED = "uncategorized"


# ── Wallet ────────────────────────────────────────────────────────────────────


def expenses_exceed_income_rule(ctx: RuleContext) -> Optional[Insight]:
    wallet = ctx.snapshots.wallet
    if wallet is None:
        return None

    income, expenses, _ = wallet_window_totals(wallet, ctx)
    if expenses <= income:
        return None

    return Insight(
        type=InsightType.WARNING,
        title=EXPENSES_EXCEED_INCOME_TITLE,
        description=(
            f"Over the last {WALLET_WINDOW_DAYS} days expenses ({expenses:,.2f}) "
            f"exceeded income ({income:,.2f}) by {expenses - income:,.2f}."
        ),
        source=InsightSource.WALLET,
        priority=PRIORITY_EXPENSES_EXCEED_INCOME,
        recommendation="Review recent purchases and postpone non-essential spending.",
        metrics=[
            InsightMetric(label="Income", value=round(income, 2), trend=TrendDirection.DOWN),
            InsightMetric(label="Expenses", value=round(expenses, 2), trend=TrendDirection.UP),
            InsightMetric(label="Net", value=round(income - expenses, 2)),
        ],
    )


def strong_income_rule(ctx: RuleContext) -> Optional[Insight]:
    wallet = ctx.snapshots.wallet
    if wallet is None:
        return None

    income, expenses, _ = wallet_window_totals(wallet, ctx)
    if income <= INCOME_TO_EXPENSE_MULTIPLE * expenses:
        return None

    return Insight(
        type=InsightType.SUCCESS,
        title=STRONG_INCOME_TITLE,
        description=(
            f"Income over the last {WALLET_WINDOW_DAYS} days ({income:,.2f}) is "
            f"more than {INCOME_TO_EXPENSE_MULTIPLE:g}x expenses ({expenses:,.2f})."
        ),
        source=InsightSource.WALLET,
        priority=PRIORITY_STRONG_INCOME,
        recommendation="Consider setting part of the surplus aside for equipment or seed investment.",
        metrics=[
            InsightMetric(label="Income", value=round(income, 2), trend=TrendDirection.UP),
            InsightMetric(label="Expenses", value=round(expenses, 2)),
        ],
    )


def dominant_expense_rule(ctx: RuleContext) -> Optional[Insight]:
    wallet = ctx.snapshots.wallet
    if wallet is None:
        return None

    _, expenses, by_category = wallet_window_totals(wallet, ctx)
    if expenses <= 0:
        return None

    top   = max(by_category, key=lambda c: by_category[c])
    share = by_category[top] / expenses
    if share <= EXPENSE_CONCENTRATION_RATIO:
        return None

    return Insight(
        type=InsightType.INFO,
        title=DOMINANT_EXPENSE_TITLE,
        description=(
            f"'{top}' accounts for {share:.1%} of expenses over the last "
            f"{WALLET_WINDOW_DAYS} days."
        ),
        source=InsightSource.WALLET,
        priority=PRIORITY_DOMINANT_EXPENSE,
        recommendation=f"Compare suppliers or bulk prices for '{top}' purchases.",
        metrics=[
            InsightMetric(label="Category", value=top),
            InsightMetric(label="Share of Expenses", value=round(share * 100, 1), unit="%"),
            InsightMetric(label="Category Expenses", value=round(by_category[top], 2)),
        ],
    )


def wallet_window_totals(
    wallet: WalletSnapshot, ctx: RuleContext
) -> tuple[float, float, dict[str, float]]:
    """Income, expenses and expenses-by-category inside the trailing window.

    Transactions dated in the future are ignored.  Insertion order of the
    category dict follows transaction order, so ties resolve to the first
    category seen.
    """
    start = ctx.now - timedelta(days=WALLET_WINDOW_DAYS)
    income = 0.0
    expenses = 0.0
    by_category: dict[str, float] = defaultdict(float)

    for tx in wallet.transactions:
        if not start <= tx.date <= ctx.now:
            continue
        if tx.type == "income":
            income += tx.amount
        else:
            expenses += tx.amount
            by_category[tx.category or UNCATEGORIZED] += tx.amount

    return income, expenses, dict(by_category)


# ── Weather ───────────────────────────────────────────────────────────────────


def heavy_rain_rule(ctx: RuleContext) -> Optional[Insight]:
    days = _forecast_window(ctx)
    if not days:
        return None

    max_rain = max(d.day.daily_chance_of_rain for d in days)
    if max_rain <= HEAVY_RAIN_CHANCE_PCT:
        return None

    return Insight(
        type=InsightType.INFO,
        title=HEAVY_RAIN_TITLE,
        description=(
            f"Chance of rain reaches {max_rain:.0f}% within the next "
            f"{len(days)} day(s)."
        ),
        source=InsightSource.WEATHER,
        priority=PRIORITY_HEAVY_RAIN,
        recommendation="Postpone spraying and fertilizing; check drainage and covered storage.",
        metrics=[
            InsightMetric(label="Max Rain Chance", value=max_rain, unit="%"),
            InsightMetric(label="Days Checked", value=len(days)),
        ],
    )


def heat_rule(ctx: RuleContext) -> Optional[Insight]:
    days = _forecast_window(ctx)
    if not days:
        return None

    max_temp = max(d.day.maxtemp_c for d in days)
    if max_temp <= HEAT_MAX_TEMP_C:
        return None

    return Insight(
        type=InsightType.WARNING,
        title=HEAT_TITLE,
        description=(
            f"Temperatures up to {max_temp:.1f} °C are forecast within the next "
            f"{len(days)} day(s)."
        ),
        source=InsightSource.WEATHER,
        priority=PRIORITY_HEAT,
        recommendation="Plan extra irrigation and shade and water for livestock.",
        metrics=[
            InsightMetric(label="Max Temperature", value=max_temp, unit="°C", trend=TrendDirection.UP),
        ],
    )


def frost_risk_rule(ctx: RuleContext) -> Optional[Insight]:
    lows = [d.day.mintemp_c for d in _forecast_window(ctx) if d.day.mintemp_c is not None]
    if not lows:
        return None

    min_temp = min(lows)
    if min_temp >= FROST_MIN_TEMP_C:
        return None

    return Insight(
        type=InsightType.WARNING,
        title=FROST_RISK_TITLE,
        description=f"Night temperatures may drop to {min_temp:.1f} °C.",
        source=InsightSource.WEATHER,
        priority=PRIORITY_FROST_RISK,
        recommendation="Protect sensitive crops and seedlings and move young animals under cover.",
        metrics=[
            InsightMetric(label="Min Temperature", value=min_temp, unit="°C", trend=TrendDirection.DOWN),
        ],
    )


def optimal_days_rule(ctx: RuleContext) -> Optional[Insight]:
    weather = ctx.snapshots.weather
    if weather is None:
        return None

    good = optimal_days(weather)
    if not good:
        return None

    dates = ", ".join(d.date for d in good if d.date)
    description = f"{len(good)} forecast day(s) are well suited to field work"
    description += f": {dates}." if dates else "."
    return Insight(
        type=InsightType.SUCCESS,
        title=OPTIMAL_DAYS_TITLE,
        description=description,
        source=InsightSource.WEATHER,
        priority=PRIORITY_OPTIMAL_DAYS,
        recommendation="Schedule planting, spraying and harvest work on these days.",
        metrics=[
            InsightMetric(label="Optimal Days", value=len(good)),
            InsightMetric(label="Forecast Days", value=len(weather.forecastday)),
        ],
    )


def optimal_days(weather: WeatherSnapshot) -> list[ForecastDay]:
    """Forecast days with moderate heat and a low chance of rain."""
    return [
        d for d in weather.forecastday
        if OPTIMAL_MIN_TEMP_C <= d.day.maxtemp_c <= OPTIMAL_MAX_TEMP_C
        and d.day.daily_chance_of_rain < OPTIMAL_MAX_RAIN_PCT
    ]


def _forecast_window(ctx: RuleContext) -> list[ForecastDay]:
    weather = ctx.snapshots.weather
    if weather is None:
        return []
    return weather.forecastday[: ctx.forecast_days]


# ── Education ─────────────────────────────────────────────────────────────────


def low_engagement_rule(ctx: RuleContext) -> Optional[Insight]:
    engagement = _engagement(ctx)
    if engagement is None or engagement >= LOW_ENGAGEMENT_PCT:
        return None

    edu = ctx.snapshots.education
    return Insight(
        type=InsightType.WARNING,
        title=LOW_ENGAGEMENT_TITLE,
        description=(
            f"Only {edu.active_users} of {edu.total_users} learners "
            f"({engagement:.1f}%) are active."
        ),
        source=InsightSource.EDUCATION,
        priority=PRIORITY_LOW_ENGAGEMENT,
        recommendation="Send reminders or publish short seasonal lessons to re-engage learners.",
        metrics=[
            InsightMetric(label="Engagement", value=round(engagement, 1), unit="%", trend=TrendDirection.DOWN),
            InsightMetric(label="Active Users", value=edu.active_users),
            InsightMetric(label="Total Users", value=edu.total_users),
        ],
    )


def high_engagement_rule(ctx: RuleContext) -> Optional[Insight]:
    engagement = _engagement(ctx)
    if engagement is None or engagement <= HIGH_ENGAGEMENT_PCT:
        return None

    edu = ctx.snapshots.education
    return Insight(
        type=InsightType.SUCCESS,
        title=HIGH_ENGAGEMENT_TITLE,
        description=(
            f"{edu.active_users} of {edu.total_users} learners "
            f"({engagement:.1f}%) are active."
        ),
        source=InsightSource.EDUCATION,
        priority=PRIORITY_HIGH_ENGAGEMENT,
        recommendation="Add advanced lessons to keep active learners progressing.",
        metrics=[
            InsightMetric(label="Engagement", value=round(engagement, 1), unit="%", trend=TrendDirection.UP),
            InsightMetric(label="Active Users", value=edu.active_users),
        ],
    )


def track_imbalance_rule(ctx: RuleContext) -> Optional[Insight]:
    edu = ctx.snapshots.education
    if edu is None:
        return None

    completed = edu.animal_lessons_completed + edu.crop_lessons_completed
    if completed == 0:
        return None

    animal_pct = edu.animal_lessons_completed / completed * 100.0
    crop_pct   = edu.crop_lessons_completed / completed * 100.0
    gap        = abs(animal_pct - crop_pct)
    if gap <= TRACK_IMBALANCE_PCT:
        return None

    weaker = "crop" if crop_pct < animal_pct else "animal"
    return Insight(
        type=InsightType.INFO,
        title=TRACK_IMBALANCE_TITLE,
        description=(
            f"Completed lessons are split {animal_pct:.0f}% animal / "
            f"{crop_pct:.0f}% crop."
        ),
        source=InsightSource.EDUCATION,
        priority=PRIORITY_TRACK_IMBALANCE,
        recommendation=f"Promote the {weaker} track to balance learner skills.",
        metrics=[
            InsightMetric(label="Animal Lessons", value=round(animal_pct, 1), unit="%"),
            InsightMetric(label="Crop Lessons", value=round(crop_pct, 1), unit="%"),
            InsightMetric(label="Gap", value=round(gap, 1), unit="%"),
        ],
    )


def _engagement(ctx: RuleContext) -> Optional[float]:
    edu = ctx.snapshots.education
    if edu is None or edu.total_users == 0:
        return None
    return edu.active_users / edu.total_users * 100.0


# ── Blog ──────────────────────────────────────────────────────────────────────


def stale_blog_rule(ctx: RuleContext) -> Optional[Insight]:
    blog = ctx.snapshots.blog
    if blog is None or not blog.posts:
        return None

    newest = max(blog.posts, key=lambda p: p.created_at)
    age    = days_since(newest.created_at, ctx.now)
    if age <= BLOG_STALE_DAYS:
        return None

    return Insight(
        type=InsightType.INFO,
        title=STALE_BLOG_TITLE,
        description=f"The latest post was published {age} days ago.",
        source=InsightSource.BLOG,
        priority=PRIORITY_STALE_BLOG,
        recommendation="Publish a short update, for example a seasonal tip or a market note.",
        metrics=[
            InsightMetric(label="Days Since Last Post", value=age, unit="days"),
        ],
    )


# ── Cross-domain ──────────────────────────────────────────────────────────────


def restock_window_rule(ctx: RuleContext) -> Optional[Insight]:
    """Low stock, good weather and enough cash at the same time."""
    wallet  = ctx.snapshots.wallet
    weather = ctx.snapshots.weather
    if wallet is None or weather is None:
        return None

    low = ctx.low_stock.total
    good_days = optimal_days(weather)
    if low <= 0 or not good_days or wallet.total_balance <= RESTOCK_MIN_BALANCE:
        return None

    return Insight(
        type=InsightType.SUCCESS,
        title=RESTOCK_WINDOW_TITLE,
        description=(
            f"{low} item(s) are low while the forecast has {len(good_days)} "
            f"good day(s) and the balance is {wallet.total_balance:,.2f}."
        ),
        source=InsightSource.CROSS_DOMAIN,
        priority=PRIORITY_RESTOCK_WINDOW,
        recommendation="Restock now and use the good-weather days for deliveries and field work.",
        metrics=[
            InsightMetric(label="Low Stock Items", value=low),
            InsightMetric(label="Optimal Days", value=len(good_days)),
            InsightMetric(label="Balance", value=round(wallet.total_balance, 2)),
        ],
        related_insights=[LOW_STOCK_TITLE, OPTIMAL_DAYS_TITLE],
    )
