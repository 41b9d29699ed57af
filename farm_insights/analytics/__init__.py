"""
Farm insights: stock analytics package.

Pure functions over normalized stock records; no I/O, no shared state.

Modules:
    normalizer : Raw per-category payloads → ``StockItem`` list.
    aggregator : ``StockItem`` list → ``CategorySummary``; assembles ``StockData``.
    evaluator  : Efficiency, health label, turnover, growth rate.
    alerts     : Low stock / expiry / maintenance detection and counters.
"""
