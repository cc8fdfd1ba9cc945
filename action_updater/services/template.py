from __future__ import annotations

from pathlib import Path

"""Downloadable sample spreadsheet (CSV) showing the expected layout.

Documentation only: the orchestrator never parses this template specially.
"""

__all__ = [
    "SAMPLE_HEADER",
    "SAMPLE_TEMPLATE",
    "write_sample_template",
]

SAMPLE_HEADER = ("Action_ID", "Title", "Status", "Notes")

SAMPLE_TEMPLATE = """Action_ID,Title,Status,Notes
ff9e1a9d-944b-41b2-af34-38eef77471b6,"Audit PPE inventory levels",In Progress,"Inventory count underway - awaiting final tally"
ff47a58e-1fc4-48e7-b7f3-d2267308f8c4,"Schedule safety training session",Complete,"Training scheduled for Jan 25th with 15 attendees"
6c0249cb-9da0-435b-a18b-dff133804f72,"Install eye wash station",In Progress,"Plumber scheduled for installation on Monday"
"""


def write_sample_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the sample CSV to ``path``.

    Raises:
        FileExistsError: If ``path`` exists and overwrite is False
    """
    if path.exists() and not overwrite:
        raise FileExistsError(f"refusing to overwrite existing file: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_TEMPLATE, encoding="utf-8")
    return path
