from __future__ import annotations

from collections.abc import Iterable

from ..models.processing_result import RunReport, RunSummary, UpdateOutcome

"""Result aggregation and SUMMARY line rendering for the bulk action updater.

Pure derivations over the outcome list: counts, the failed-rows view and the
text report. Nothing here is persisted or exported.
"""

__all__ = [
    "summarize",
    "failed_outcomes",
    "render_summary_line",
    "render_report",
]


def summarize(outcomes: Iterable[UpdateOutcome]) -> RunSummary:
    """Count successes and failures.

    success_count + fail_count always equals the number of outcomes; partial
    outcomes are included in success_count and also counted separately.
    """
    items = list(outcomes)
    success = sum(1 for o in items if o.succeeded)
    partial = sum(1 for o in items if o.succeeded and o.partial)
    return RunSummary(
        total=len(items),
        success_count=success,
        fail_count=len(items) - success,
        partial_count=partial,
    )


def failed_outcomes(outcomes: Iterable[UpdateOutcome]) -> list[UpdateOutcome]:
    """Outcomes with succeeded == False, in input order."""
    return [o for o in outcomes if not o.succeeded]


def _format_seconds(value: float) -> str:
    # Handle very small numbers and integer values appropriately
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(summary: RunSummary, elapsed_seconds: float = 0.0) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY rows={total} success={success} failed={failed} partial={partial} elapsed_sec={elapsed}

    Examples:
        >>> render_summary_line(RunSummary(total=3, success_count=1, fail_count=2), 2.0)
        'SUMMARY rows=3 success=1 failed=2 partial=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={summary.total} "
        f"success={summary.success_count} "
        f"failed={summary.fail_count} "
        f"partial={summary.partial_count} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )


def render_report(report: RunReport) -> list[str]:
    """Render the operator report: one line per row, then the failures.

    Failure messages are reproduced verbatim.
    """
    summary = summarize(report.outcomes)
    lines: list[str] = []
    header = f"Processed {summary.total} rows"
    if report.source_name:
        header += f" from {report.source_name}"
    lines.append(header)
    for outcome in report.outcomes:
        if not outcome.succeeded:
            mark = "FAIL"
        elif outcome.partial:
            mark = "PART"
        else:
            mark = " OK "
        lines.append(f"  [{mark}] {outcome.record_label}: {outcome.message}")

    lines.append(f"Successful: {summary.success_count}  Failed: {summary.fail_count}")
    failures = failed_outcomes(report.outcomes)
    if failures:
        lines.append("Failed rows:")
        for outcome in failures:
            lines.append(f"  {outcome.record_label}: {outcome.message}")
    return lines
