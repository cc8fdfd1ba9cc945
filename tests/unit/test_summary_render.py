from __future__ import annotations

from datetime import UTC, datetime, timedelta

from action_updater.models.processing_result import RunReport, RunSummary, UpdateOutcome
from action_updater.models.status import ErrorKind
from action_updater.services.summary import (
    failed_outcomes,
    render_report,
    render_summary_line,
    summarize,
)

OUTCOMES = (
    UpdateOutcome("A1", True, 'Updated to "Complete" with notes', row_number=2),
    UpdateOutcome("Row 3", False, "Missing Action ID", row_number=3, error_kind=ErrorKind.MISSING_IDENTIFIER),
    UpdateOutcome("A3", True, 'Updated to "To Do", but failed to add notes', partial=True, row_number=4,
                  error_kind=ErrorKind.PARTIAL_NOTES_FAILURE),
    UpdateOutcome("A4", False, "Action not found", row_number=5, error_kind=ErrorKind.UPSTREAM_NOT_FOUND),
)


def _report(outcomes=OUTCOMES, source_name: str | None = "actions.xlsx") -> RunReport:
    start = datetime(2026, 1, 1, tzinfo=UTC)
    return RunReport(
        outcomes=tuple(outcomes),
        start_time=start,
        end_time=start + timedelta(seconds=1.5),
        elapsed_seconds=1.5,
        source_name=source_name,
    )


def test_summarize_counts():
    summary = summarize(OUTCOMES)
    assert summary == RunSummary(total=4, success_count=2, fail_count=2, partial_count=1)
    assert summary.success_count + summary.fail_count == summary.total


def test_summarize_empty():
    assert summarize([]) == RunSummary(total=0, success_count=0, fail_count=0)


def test_failed_outcomes_keep_order():
    assert [o.record_label for o in failed_outcomes(OUTCOMES)] == ["Row 3", "A4"]


def test_summary_line_format():
    line = render_summary_line(summarize(OUTCOMES), 1.5)
    assert line == "SUMMARY rows=4 success=2 failed=2 partial=1 elapsed_sec=1.5"


def test_summary_line_small_elapsed_not_scientific():
    line = render_summary_line(RunSummary(total=1, success_count=1, fail_count=0), 0.000012)
    assert line.endswith("elapsed_sec=0.000012")
    assert "e-" not in line


def test_report_lines():
    lines = render_report(_report())
    assert lines[0] == "Processed 4 rows from actions.xlsx"
    assert lines[1] == '  [ OK ] A1: Updated to "Complete" with notes'
    assert lines[2] == "  [FAIL] Row 3: Missing Action ID"
    assert lines[3].startswith("  [PART] A3:")
    assert "Successful: 2  Failed: 2" in lines
    idx = lines.index("Failed rows:")
    assert lines[idx + 1:] == ["  Row 3: Missing Action ID", "  A4: Action not found"]


def test_report_without_failures_has_no_failed_section():
    lines = render_report(_report(OUTCOMES[:1], source_name=None))
    assert lines[0] == "Processed 1 rows"
    assert "Failed rows:" not in lines
    assert lines[-1] == "Successful: 1  Failed: 0"
