"""
farm_insights.presentation: ordering, filtering and terminal rendering.

This package never computes new analytics.  It takes the alerts and
insights of one pass and shapes them for display.

Modules:
  ranker     : Stable insight ranking, filters, alert ordering and grouping.
  formatters : ASCII terminal formatters for the Typer CLI commands.
"""
