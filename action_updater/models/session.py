from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from .processing_result import RunReport, UpdateOutcome

"""RunSession aggregate and RunState enum for the update orchestrator.

State transitions: idle → running → finished (running → idle on abort_run)

The session is the only owner of the cursor and the outcome list during a
run. It is mutated exclusively through start_run / begin_row /
record_outcome / finish_run / abort_run; every other reader gets immutable views.
"""

__all__ = [
    "ProcessingError",
    "InvalidTransitionError",
    "RunState",
    "RunContext",
    "RunSession",
]


class ProcessingError(Exception):
    """Base exception for processing errors."""
    pass


class InvalidTransitionError(ProcessingError):
    """Raised when a state machine is driven through an illegal transition."""


class RunState(Enum):
    """Status enum for the row-processing lifecycle.

    - IDLE: no run started yet, or the previous run was discarded
    - RUNNING: rows are being processed one at a time
    - FINISHED: every row produced an outcome; the outcome list is read-only
    """
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class RunContext:
    """Inputs captured when a run starts; unchanged until the run finishes."""
    api_key: str
    total_rows: int
    source_name: str | None = None


class RunSession:
    """Single session aggregate tracking one run at a time.

    Starting a new run discards the outcomes of the previous one.
    """

    def __init__(self) -> None:
        self._state = RunState.IDLE
        self._context: RunContext | None = None
        self._cursor = 0
        self._outcomes: list[UpdateOutcome] = []
        self._start_time: datetime | None = None
        self._end_time: datetime | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def context(self) -> RunContext:
        if self._context is None:
            raise InvalidTransitionError("no run has been started")
        return self._context

    @property
    def cursor(self) -> int:
        """Index of the row currently (or last) in flight."""
        return self._cursor

    @property
    def outcomes(self) -> tuple[UpdateOutcome, ...]:
        return tuple(self._outcomes)

    def start_run(self, api_key: str, total_rows: int, *, source_name: str | None = None) -> RunContext:
        """Reset the session and enter RUNNING.

        Args:
            api_key: Credential used for every call of this run
            total_rows: Number of input rows the run will visit
            source_name: Uploaded file name, for reporting

        Returns:
            The frozen context of the new run
        """
        if self._state is RunState.RUNNING:
            raise InvalidTransitionError("a run is already in progress")
        self._context = RunContext(api_key=api_key, total_rows=total_rows, source_name=source_name)
        self._cursor = 0
        self._outcomes = []
        self._start_time = datetime.now(UTC)
        self._end_time = None
        self._state = RunState.RUNNING
        return self._context

    def begin_row(self, index: int) -> None:
        """Move the cursor to the row about to be processed."""
        self._require(RunState.RUNNING)
        if index != len(self._outcomes):
            raise InvalidTransitionError(
                f"row {index} started out of order (expected {len(self._outcomes)})"
            )
        self._cursor = index

    def record_outcome(self, outcome: UpdateOutcome) -> None:
        """Append the outcome of the row under the cursor."""
        self._require(RunState.RUNNING)
        if len(self._outcomes) != self._cursor:
            raise InvalidTransitionError(f"row {self._cursor} already has an outcome")
        self._outcomes.append(outcome)

    def finish_run(self) -> RunReport:
        """Enter FINISHED once every row has exactly one outcome."""
        self._require(RunState.RUNNING)
        context = self.context
        if len(self._outcomes) != context.total_rows:
            raise InvalidTransitionError(
                f"run finished with {len(self._outcomes)} outcomes for {context.total_rows} rows"
            )
        self._end_time = datetime.now(UTC)
        self._state = RunState.FINISHED
        return self.report()

    def abort_run(self) -> None:
        """Drop a run that ended with an exception and return to IDLE."""
        self._context = None
        self._cursor = 0
        self._outcomes = []
        self._start_time = None
        self._end_time = None
        self._state = RunState.IDLE

    def report(self) -> RunReport:
        self._require(RunState.FINISHED)
        assert self._start_time is not None and self._end_time is not None
        return RunReport(
            outcomes=tuple(self._outcomes),
            start_time=self._start_time,
            end_time=self._end_time,
            elapsed_seconds=(self._end_time - self._start_time).total_seconds(),
            source_name=self.context.source_name,
        )

    def _require(self, state: RunState) -> None:
        if self._state is not state:
            raise InvalidTransitionError(
                f"expected run state {state.value}, current state is {self._state.value}"
            )
