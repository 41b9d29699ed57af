"""
Exception types raised by the farm insights engine.

The engine performs no I/O, so there is a single exception type:

  - ``ValidationError``: an unrecognized category tag reached the
    normalizer.  Fatal to that single ``normalize()`` call only; the
    orchestrator substitutes an empty summary and continues the pass.

Absent sibling snapshots (wallet, weather, education, blog) are not
errors.  They are reported as ``PartialDataWarning`` records on the
analysis result (see ``farm_insights.models.analysis``).
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a category tag is not one of the 8 recognized categories.

    Attributes:
        value: The offending tag as received from the caller.
    """

    def __init__(self, value: object, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Unrecognized stock category: {value!r}.")
