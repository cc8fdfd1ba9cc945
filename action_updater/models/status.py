from __future__ import annotations

from enum import Enum

"""Canonical action statuses and the row-level error taxonomy.

The status set is closed and known at build time: it is not discovered from
the upstream service. Each member carries the opaque identifier the upstream
API expects plus the label shown to operators.
"""

__all__ = [
    "CanonicalStatus",
    "ErrorKind",
]


class CanonicalStatus(Enum):
    """Fixed set of action statuses understood by the upstream service.

    Member order is significant: the status normalizer checks statuses in
    this order within each matching rule.
    """
    TO_DO = ("17e793a1-26a3-4ecd-99ca-f38ecc6eaa2e", "To Do")
    IN_PROGRESS = ("20ce0cb1-387a-47d4-8c34-bc6fd3be0e27", "In Progress")
    COMPLETE = ("7223d809-553e-4714-a038-62dc98f3fbf3", "Complete")
    CANT_DO = ("06308884-41c2-4ee0-9da7-5676647d3d75", "Can't Do")

    def __init__(self, status_id: str, label: str) -> None:
        self.status_id = status_id
        self.label = label


class ErrorKind(Enum):
    """Classification of row outcomes that are not a clean success.

    Every kind is row-local: none of them aborts a run.
    PARTIAL_NOTES_FAILURE still counts as a success (status was changed).
    """
    MISSING_IDENTIFIER = "MISSING_IDENTIFIER"
    UNRESOLVABLE_STATUS = "UNRESOLVABLE_STATUS"
    NETWORK_FAILURE = "NETWORK_FAILURE"
    UPSTREAM_NOT_FOUND = "UPSTREAM_NOT_FOUND"
    UPSTREAM_UNAUTHORIZED = "UPSTREAM_UNAUTHORIZED"
    UPSTREAM_FORBIDDEN = "UPSTREAM_FORBIDDEN"
    UPSTREAM_OTHER = "UPSTREAM_OTHER"
    PARTIAL_NOTES_FAILURE = "PARTIAL_NOTES_FAILURE"
    LOCAL_UNEXPECTED_ERROR = "LOCAL_UNEXPECTED_ERROR"
