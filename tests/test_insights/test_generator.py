"""Tests for the insight generator: rule table, ordering, warnings, linking."""

from __future__ import annotations

from datetime import timedelta

from conftest import NOW, make_item, make_stock_data
from farm_insights.analytics.alerts import detect_alerts
from farm_insights.insights import generator
from farm_insights.insights.domain_rules import OPTIMAL_DAYS_TITLE, RESTOCK_WINDOW_TITLE
from farm_insights.insights.generator import (
    RULES,
    SNAPSHOT_DOMAINS,
    Rule,
    evaluate_rules,
    generate_insights,
)
from farm_insights.insights.stock_rules import LOW_STOCK_TITLE, SYSTEM_OVERVIEW_TITLE
from farm_insights.models.insight import Insight
from farm_insights.models.snapshots import SiblingSnapshots
from farm_insights.taxonomy.category_taxonomy import Category
from farm_insights.taxonomy.insight_taxonomy import InsightSource, InsightType


def _fixed(title: str, priority: int):
    def rule(ctx):
        return Insight(
            type=InsightType.INFO, title=title, description="d",
            source=InsightSource.SYSTEM, priority=priority, recommendation="r",
        )
    return rule


class TestRuleTable:
    def test_rule_names_unique(self):
        names = [r.name for r in RULES]
        assert len(names) == len(set(names))

    def test_requirements_are_known_domains(self):
        for rule in RULES:
            assert set(rule.requires) <= set(SNAPSHOT_DOMAINS)

    def test_baseline_rule_has_no_requirements(self):
        [overview] = [r for r in RULES if r.name == "system_overview"]
        assert overview.requires == ()


class TestEmptyData:
    def test_only_baseline_insight(self, empty_stock):
        insights, warnings = evaluate_rules(empty_stock, now=NOW)
        assert [i.title for i in insights] == [SYSTEM_OVERVIEW_TITLE]
        assert [w.domain for w in warnings] == list(SNAPSHOT_DOMAINS)

    def test_no_warnings_when_all_snapshots_present(self, empty_stock, all_snapshots):
        _, warnings = evaluate_rules(empty_stock, all_snapshots, now=NOW)
        assert warnings == []


class TestLowStockScenario:
    def test_six_low_items(self):
        items = [make_item(Category.SEEDS, f"s{i}", quantity=1) for i in range(6)]
        insights = generate_insights(make_stock_data(items), now=NOW)
        [low] = [i for i in insights if i.title == LOW_STOCK_TITLE]
        assert low.priority == 85
        assert {m.label: m.value for m in low.metrics}["Low Stock Items"] == 6
        assert insights[0].title == LOW_STOCK_TITLE


class TestOrdering:
    def test_stable_sort_by_priority(self, monkeypatch, empty_stock):
        rules = (
            Rule("a", _fixed("A", 90)),
            Rule("b", _fixed("B", 85)),
            Rule("c", _fixed("C", 90)),
            Rule("d", _fixed("D", 60)),
        )
        monkeypatch.setattr(generator, "RULES", rules)
        insights = generate_insights(empty_stock, now=NOW)
        assert [(i.title, i.priority) for i in insights] == [
            ("A", 90), ("C", 90), ("B", 85), ("D", 60),
        ]

    def test_priorities_descending(self, all_snapshots):
        items = [make_item(Category.SEEDS, f"s{i}", quantity=1) for i in range(6)]
        items.append(make_item(Category.FEED, "f1", expiry_date=NOW + timedelta(days=4)))
        insights = generate_insights(make_stock_data(items), all_snapshots, now=NOW)
        priorities = [i.priority for i in insights]
        assert priorities == sorted(priorities, reverse=True)


class TestSkipping:
    def test_rules_needing_missing_snapshot_not_called(self, monkeypatch, empty_stock):
        calls: list[str] = []

        def wallet_rule(ctx):
            calls.append("wallet")
            return None

        monkeypatch.setattr(generator, "RULES", (Rule("w", wallet_rule, ("wallet",)),))
        insights, warnings = evaluate_rules(empty_stock, now=NOW)
        assert calls == []
        assert insights == []
        assert "wallet" in {w.domain for w in warnings}

    def test_missing_snapshots_never_raise(self):
        data = make_stock_data([make_item(quantity=1)])
        insights = generate_insights(data, SiblingSnapshots(), now=NOW)
        assert SYSTEM_OVERVIEW_TITLE in {i.title for i in insights}


class TestRelatedInsights:
    def test_links_dropped_when_target_not_emitted(self, sample_wallet, sample_weather):
        # One low item: the restock window fires, the low-stock insight (> 5) does not.
        data = make_stock_data([make_item(Category.SEEDS, quantity=1)])
        snapshots = SiblingSnapshots(wallet=sample_wallet, weather=sample_weather)
        insights = generate_insights(data, snapshots, now=NOW)
        [restock] = [i for i in insights if i.title == RESTOCK_WINDOW_TITLE]
        assert restock.related_insights == [OPTIMAL_DAYS_TITLE]

    def test_links_kept_when_all_emitted(self, sample_wallet, sample_weather):
        items = [make_item(Category.SEEDS, f"s{i}", quantity=1) for i in range(6)]
        snapshots = SiblingSnapshots(wallet=sample_wallet, weather=sample_weather)
        insights = generate_insights(make_stock_data(items), snapshots, now=NOW)
        [restock] = [i for i in insights if i.title == RESTOCK_WINDOW_TITLE]
        assert restock.related_insights == [LOW_STOCK_TITLE, OPTIMAL_DAYS_TITLE]


def test_precomputed_alerts_drive_alert_count():
    data = make_stock_data([make_item(quantity=1)])
    alerts = detect_alerts(data, NOW)
    insights = generate_insights(data, now=NOW, alerts=alerts + alerts)
    [overview] = [i for i in insights if i.title == SYSTEM_OVERVIEW_TITLE]
    assert {m.label: m.value for m in overview.metrics}["Active Alerts"] == 2
