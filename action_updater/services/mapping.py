from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..models.session import ProcessingError

"""Field mapping resolution: which spreadsheet column feeds which role.

The operator picks a column for the action id, the status and (optionally)
the notes. The resolver only records choices and answers is_ready(); it
never reads row data. cell_text() is the one place row values are turned
into text for the orchestrator.
"""

__all__ = [
    "MappingRole",
    "FieldMapping",
    "MappingNotReadyError",
    "MappingResolver",
    "cell_text",
]


class MappingNotReadyError(ProcessingError):
    """Raised when a run is started with an incomplete column mapping."""


class MappingRole(Enum):
    RECORD_ID = "record_id"
    STATUS = "status"
    NOTES = "notes"


@dataclass(frozen=True)
class FieldMapping:
    """Column mapping frozen for the duration of a run."""
    record_id_column: str
    status_column: str
    notes_column: str | None = None


class MappingResolver:
    """Collects the operator's column choices against the known header."""

    def __init__(self, columns: Iterable[str]) -> None:
        self.columns: list[str] = [str(c) for c in columns]
        self._choices: dict[MappingRole, str] = {}

    def set_column(self, role: MappingRole, column_name: str | None) -> None:
        """Record the column for ``role``; an empty value clears the choice."""
        name = (column_name or "").strip()
        if name:
            self._choices[role] = name
        else:
            self._choices.pop(role, None)

    def get_column(self, role: MappingRole) -> str:
        return self._choices.get(role, "")

    def apply(
        self,
        record_id_column: str | None = None,
        status_column: str | None = None,
        notes_column: str | None = None,
    ) -> MappingResolver:
        """Set any non-None roles at once (config / CLI flags)."""
        for role, value in (
            (MappingRole.RECORD_ID, record_id_column),
            (MappingRole.STATUS, status_column),
            (MappingRole.NOTES, notes_column),
        ):
            if value is not None:
                self.set_column(role, value)
        return self

    def is_ready(self) -> bool:
        known = set(self.columns)
        for role in (MappingRole.RECORD_ID, MappingRole.STATUS):
            chosen = self._choices.get(role, "")
            if not chosen or chosen not in known:
                return False
        return True

    def missing_roles(self) -> list[MappingRole]:
        """Required roles that are unset or point at an unknown column."""
        known = set(self.columns)
        return [
            role
            for role in (MappingRole.RECORD_ID, MappingRole.STATUS)
            if self._choices.get(role, "") not in known
        ]

    def freeze(self) -> FieldMapping:
        if not self.is_ready():
            missing = ", ".join(r.value for r in self.missing_roles())
            raise MappingNotReadyError(f"column mapping not ready (missing: {missing})")
        notes = self._choices.get(MappingRole.NOTES) or None
        return FieldMapping(
            record_id_column=self._choices[MappingRole.RECORD_ID],
            status_column=self._choices[MappingRole.STATUS],
            notes_column=notes,
        )


def cell_text(row: Mapping[str, Any], column: str | None) -> str:
    """Resolve one cell to text ("" for unmapped, missing or empty cells).

    Integral floats (pandas reads numeric id columns as float64) are rendered
    without the trailing ".0".
    """
    if not column:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)
