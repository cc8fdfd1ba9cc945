from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .status import ErrorKind

"""Processing result models for the bulk action updater.

UpdateOutcome is the single per-row result; RunReport wraps the outcome list
of one finished run together with its timing, and RunSummary holds the counts
derived from it.
"""

__all__ = [
    "UpdateOutcome",
    "RunReport",
    "RunSummary",
]


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of processing one spreadsheet row.

    record_label is the resolved action id, or a synthetic "Row <n>" label
    when the id cell was empty.
    """
    record_label: str
    succeeded: bool
    message: str
    partial: bool = False  # status changed, notes failed
    row_number: int | None = None  # spreadsheet line (header = line 1)
    error_kind: ErrorKind | None = None  # None on clean success


@dataclass(frozen=True)
class RunSummary:
    """Counts derived from an outcome list."""
    total: int
    success_count: int
    fail_count: int
    partial_count: int = 0


@dataclass(frozen=True)
class RunReport:
    """Aggregated result of one finished run."""
    outcomes: tuple[UpdateOutcome, ...]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    source_name: str | None = None  # uploaded file name, when known

    @property
    def total_rows(self) -> int:
        return len(self.outcomes)
