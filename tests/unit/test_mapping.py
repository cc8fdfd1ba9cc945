from __future__ import annotations

import math

import pytest

from action_updater.services.mapping import (
    FieldMapping,
    MappingNotReadyError,
    MappingResolver,
    MappingRole,
    cell_text,
)

COLUMNS = ["Action_ID", "Title", "Status", "Notes"]


def test_not_ready_initially():
    resolver = MappingResolver(COLUMNS)
    assert resolver.is_ready() is False
    assert resolver.missing_roles() == [MappingRole.RECORD_ID, MappingRole.STATUS]


def test_ready_with_required_roles_only():
    resolver = MappingResolver(COLUMNS)
    resolver.set_column(MappingRole.RECORD_ID, "Action_ID")
    assert resolver.is_ready() is False
    resolver.set_column(MappingRole.STATUS, "Status")
    assert resolver.is_ready() is True
    assert resolver.freeze() == FieldMapping("Action_ID", "Status", None)


def test_unknown_column_keeps_not_ready():
    resolver = MappingResolver(COLUMNS).apply(record_id_column="Action_ID", status_column="New_Status")
    assert resolver.is_ready() is False
    assert resolver.missing_roles() == [MappingRole.STATUS]


def test_empty_value_clears_choice():
    resolver = MappingResolver(COLUMNS).apply(record_id_column="Action_ID", status_column="Status")
    resolver.set_column(MappingRole.STATUS, "")
    assert resolver.get_column(MappingRole.STATUS) == ""
    assert resolver.is_ready() is False


def test_apply_ignores_none_and_later_values_override():
    resolver = MappingResolver(COLUMNS).apply(record_id_column="Action_ID", status_column="Title")
    resolver.apply(status_column="Status", notes_column=None)
    assert resolver.freeze() == FieldMapping("Action_ID", "Status", None)


def test_notes_role_is_frozen_when_set():
    resolver = MappingResolver(COLUMNS).apply("Action_ID", "Status", "Notes")
    assert resolver.freeze().notes_column == "Notes"


def test_freeze_not_ready_raises():
    resolver = MappingResolver(COLUMNS).apply(record_id_column="Action_ID")
    with pytest.raises(MappingNotReadyError, match="status"):
        resolver.freeze()


def test_frozen_mapping_is_immutable():
    mapping = MappingResolver(COLUMNS).apply("Action_ID", "Status").freeze()
    with pytest.raises(AttributeError):
        mapping.status_column = "Title"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("abc", "abc"),
        (None, ""),
        (math.nan, ""),
        (123.0, "123"),
        (12.5, "12.5"),
        (7, "7"),
        ("  padded ", "  padded "),
    ],
)
def test_cell_text(value, expected):
    assert cell_text({"c": value}, "c") == expected


def test_cell_text_missing_or_unmapped_column():
    assert cell_text({"c": "x"}, "other") == ""
    assert cell_text({"c": "x"}, None) == ""
