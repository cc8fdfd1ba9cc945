from __future__ import annotations

import sys
from typing import Any, Protocol

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import UpdateOutcome

"""Progress display service with tqdm (TTY only).

The orchestrator notifies a progress observer immediately before each row
starts, so an observer sees a monotonically increasing row counter. In
non-TTY environments (CI, pipes) the bar is disabled to avoid ANSI control
sequence spam; the counter is still maintained.
"""

__all__ = [
    "ProgressObserver",
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressObserver(Protocol):
    def start_row(self, index: int, total: int) -> None: ...

    def finish_row(self, outcome: UpdateOutcome) -> None: ...


class ProgressTracker:
    """Row progress bar using tqdm.

    Shows "<processed>/<total>" rows with running success/failed counts as
    postfix.
    """

    def __init__(self, total_rows: int, *, description: str = "Updating actions") -> None:
        """Initialize progress tracker.

        Args:
            total_rows: Total number of rows to process
            description: Description for the progress bar
        """
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0
        self.success = 0
        self.failed = 0

        # Create tqdm instance only if TTY is enabled
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_row(self, index: int, total: int) -> None:
        """Mark row ``index`` (0-based) as in flight."""
        self.current_row = index + 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({self.current_row}/{total})")

    def finish_row(self, outcome: UpdateOutcome) -> None:
        if outcome.succeeded:
            self.success += 1
        else:
            self.failed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(success=self.success, failed=self.failed)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
