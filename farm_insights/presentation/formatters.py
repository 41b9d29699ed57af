"""
ASCII terminal formatters for CLI commands.

All formatters accept models from one analysis pass and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Health banner
-------------
Every ``analyze`` output starts with a health banner so readers can tell
at a glance how the inventory is doing::

  [GOOD] Stock efficiency 92.5%
  [WARNING] Stock efficiency 71.0%
  [CRITICAL] Stock efficiency 40.0%  <- act on expired and low stock first

Synthesized trends
------------------
Categories without real history show an illustrative trend; the summary
table marks their growth column with ``*`` so it is not read as a
measurement.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from farm_insights.analytics.evaluator import trend_growth, turnover
from farm_insights.models.analysis import HealthLabel, PartialDataWarning
from farm_insights.models.insight import Alert, Insight, InsightMetric
from farm_insights.models.stock import StockData
from farm_insights.presentation.ranker import group_alerts_by_category
from farm_insights.taxonomy.category_taxonomy import Category, category_label

_TITLE_WIDTH = 36


# ── Health banner ─────────────────────────────────────────────────────────────


def format_health_banner(efficiency: float, health: HealthLabel) -> str:
    """Return a one-line stock health indicator."""
    tag  = f"[{health.label.upper()}]"
    line = f"  {tag} Stock efficiency {efficiency:.1f}%"
    if health.label == "critical":
        line += "  <- act on expired and low stock first"
    return line


# ── Insights ──────────────────────────────────────────────────────────────────


def format_insight_table(
    insights:     Sequence[Insight],
    generated_at: Optional[datetime] = None,
    warnings:     Sequence[PartialDataWarning] = (),
) -> str:
    """Format ranked insights as an ASCII table with detail lines.

    Each row is followed by the recommendation and the insight's metrics::

        Prio  Type      Source        Title
        ------------------------------------------------------------
          90  critical  stock         Items Expiring Soon
                -> Use the expiring items first ...
                   Expiring Items: 2 | Categories Affected: 1

    Args:
        insights:     Insights in display order (already ranked).
        generated_at: Reference instant of the pass (header).
        warnings:     Skipped domains, listed under the table.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Insights ===")
    if generated_at is not None:
        lines.append(f"  Generated at: {generated_at.isoformat()}")

    if not insights:
        lines.append("")
        lines.append("  (no insights)")
    else:
        header = f"  {'Prio':>4}  {'Type':<8}  {'Source':<12}  {'Title':<{_TITLE_WIDTH}}"
        lines.append("")
        lines.append(header)
        lines.append("  " + "-" * (len(header) - 2))
        for insight in insights:
            title = insight.title[:_TITLE_WIDTH]
            lines.append(
                f"  {insight.priority:>4}  {insight.type.value:<8}  "
                f"{insight.source.value:<12}  {title:<{_TITLE_WIDTH}}"
            )
            lines.append(f"        -> {insight.recommendation}")
            if insight.metrics:
                lines.append("           " + " | ".join(_format_metric(m) for m in insight.metrics))
            if insight.related_insights:
                lines.append("           Related: " + ", ".join(insight.related_insights))

    if warnings:
        lines.append("")
        lines.append("  Partial data:")
        for warning in warnings:
            lines.append(f"    [{warning.domain}] {warning.message}")

    return "\n".join(lines)


def _format_metric(metric: InsightMetric) -> str:
    value = metric.value
    if isinstance(value, float):
        text = f"{value:,.2f}".rstrip("0").rstrip(".")
    else:
        text = str(value)
    if metric.unit == "%":
        text += "%"
    elif metric.unit:
        text += f" {metric.unit}"
    return f"{metric.label}: {text}"


# ── Alerts ────────────────────────────────────────────────────────────────────


def format_alert_list(alerts: Sequence[Alert]) -> str:
    """Format alerts grouped per category, most urgent first.

    Args:
        alerts: Alerts of one pass, in any order.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Alerts ({len(alerts)}) ===")

    if not alerts:
        lines.append("")
        lines.append("  (no alerts)")
        return "\n".join(lines)

    for category, group in group_alerts_by_category(alerts).items():
        lines.append("")
        lines.append(f"  [{category.value.upper()}]")
        for alert in group:
            days = _format_days(alert.days_until)
            lines.append(f"    {alert.type.value:<16} {alert.message}{days}")

    return "\n".join(lines)


def _format_days(days: Optional[int]) -> str:
    if days is None:
        return ""
    if days < 0:
        return f"  ({-days}d ago)"
    if days == 0:
        return "  (today)"
    return f"  (in {days}d)"


# ── Stock summary ─────────────────────────────────────────────────────────────


def format_stock_summary_table(
    data: StockData,
    failed_categories: Sequence[str] = (),
) -> str:
    """Format one row per category with count, value, turnover and growth.

    Args:
        data:              Full multi-category snapshot.
        failed_categories: Tags replaced by empty summaries (footer note).

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Stock Summary ===")
    header = (
        f"  {'Category':<12}  {'Items':>6}  {'Value':>12}  {'Turnover':>8}  "
        f"{'Growth':>8}  {'Expired':>7}  {'Near':>5}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    synthesized = False
    for cat in Category:
        summary = data[cat]
        growth  = f"{trend_growth(summary):+.1f}%"
        if summary.trend_synthesized:
            growth += "*"
            synthesized = True
        expired = str(summary.expiry_status.expired) if summary.expiry_status else "-"
        near    = str(summary.expiry_status.near_expiry) if summary.expiry_status else "-"
        lines.append(
            f"  {category_label(cat):<12}  {summary.count:>6}  {summary.value:>12,.2f}  "
            f"{turnover(summary):>8.1f}  {growth:>8}  {expired:>7}  {near:>5}"
        )

    lines.append("  " + "-" * (len(header) - 2))
    lines.append(f"  {'Total':<12}  {data.total_items:>6}  {data.total_value:>12,.2f}")

    if synthesized:
        lines.append("")
        lines.append("  * illustrative trend (no recorded history)")
    if failed_categories:
        lines.append("")
        lines.append("  Rejected categories: " + ", ".join(failed_categories))

    return "\n".join(lines)
