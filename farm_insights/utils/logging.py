"""
Root-logger setup for the ``farm-insights`` CLI.

Only the CLI calls ``configure_logging``; library modules just log through
``logging.getLogger(__name__)``.  Every handler writes to stderr (or a
file), never stdout, because stdout carries the command's report or its
``--json`` payload.

With ``[logging] json_format = true`` each record becomes one JSON line.
Anything passed through ``extra=`` lands at the top level, which is how the
orchestrator tags its lines with the pass's ``run_slug``::

    {"ts": "2025-03-15T12:00:00Z", "level": "INFO",
     "logger": "farm_insights.pipeline.orchestrator",
     "msg": "run_analysis done | items=12 ...", "run_slug": "3f1c..."}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from farm_insights.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TS_FORMAT   = "%Y-%m-%dT%H:%M:%SZ"

# Keys present on a bare LogRecord; the rest were supplied via ``extra=``.
_STANDARD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``,
    plus ``exc`` on errors and any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts":     created.strftime(TS_FORMAT),
            "level":  record.levelname,
            "logger": record.name,
            "msg":    record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val) for key, val in record.__dict__.items()
            if key not in _STANDARD_KEYS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optionally file) handlers on the root logger.

    Replaces any handlers from an earlier call, so repeated CLI
    invocations in one process do not duplicate output.
    """
    level     = logging.getLevelName(config.level)
    formatter = _build_formatter(config)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _build_formatter(config: "LoggingConfig") -> logging.Formatter:
    if config.json_format:
        return _JsonFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TS_FORMAT)
    formatter.converter = time.gmtime
    return formatter
