from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.status import CanonicalStatus

"""Status normalization: free-text spreadsheet cell -> CanonicalStatus.

Spreadsheet authors write "Done", "COMPLETE", "completed", "in progress -
blocked" and so on. Resolution walks an ordered rule list and returns the
status of the first rule whose predicate matches:

1. exact       - lower-cased, trimmed text equals a label, or the raw text
                 equals an external status id verbatim
2. substring   - text contains the label with spaces removed, or the label
                 contains the text
3. keyword     - fixed heuristics ("todo", "progress", "complete"/"done",
                 "can't"/"cant")

Within rules 1 and 2 statuses are tried in CanonicalStatus declaration order.
The order of DEFAULT_RULES is the resolution priority; keep it that way.
"""

__all__ = [
    "StatusText",
    "StatusRule",
    "build_rules",
    "DEFAULT_RULES",
    "normalize_status",
    "match_rule",
]


@dataclass(frozen=True)
class StatusText:
    """A status cell prepared for matching."""
    raw: str  # cell text as found in the sheet
    normalized: str  # lower-cased and trimmed

    @classmethod
    def of(cls, value: Any) -> StatusText:
        raw = "" if value is None else str(value)
        return cls(raw=raw, normalized=raw.lower().strip())


@dataclass(frozen=True)
class StatusRule:
    """One entry of the ordered rule list: predicate + resulting status."""
    name: str
    predicate: Callable[[StatusText], bool]
    status: CanonicalStatus


def _exact_rule(status: CanonicalStatus) -> StatusRule:
    label = status.label.lower()
    return StatusRule(
        name=f"exact:{status.name}",
        predicate=lambda t: t.normalized == label or t.raw == status.status_id,
        status=status,
    )


def _substring_rule(status: CanonicalStatus) -> StatusRule:
    label = status.label.lower()
    compact = label.replace(" ", "")
    return StatusRule(
        name=f"substring:{status.name}",
        predicate=lambda t: compact in t.normalized or t.normalized in label,
        status=status,
    )


def _keyword_rule(
    status: CanonicalStatus,
    contains: Sequence[str] = (),
    equals: Sequence[str] = (),
) -> StatusRule:
    return StatusRule(
        name=f"keyword:{status.name}",
        predicate=lambda t: any(k in t.normalized for k in contains) or t.normalized in equals,
        status=status,
    )


def build_rules(statuses: Iterable[CanonicalStatus] = CanonicalStatus) -> tuple[StatusRule, ...]:
    """Build the ordered rule list for the given status set.

    Args:
        statuses: Statuses to match, in tie-break order

    Returns:
        Tuple of rules in resolution priority order
    """
    ordered = list(statuses)
    rules: list[StatusRule] = []
    rules.extend(_exact_rule(s) for s in ordered)
    rules.extend(_substring_rule(s) for s in ordered)
    keywords = [
        _keyword_rule(CanonicalStatus.TO_DO, contains=("todo",), equals=("to do",)),
        _keyword_rule(CanonicalStatus.IN_PROGRESS, contains=("progress",), equals=("in progress",)),
        _keyword_rule(CanonicalStatus.COMPLETE, contains=("complete",), equals=("done", "completed")),
        _keyword_rule(CanonicalStatus.CANT_DO, contains=("can't", "cant"), equals=("cannot do",)),
    ]
    rules.extend(r for r in keywords if r.status in ordered)
    return tuple(rules)


DEFAULT_RULES: tuple[StatusRule, ...] = build_rules()


def match_rule(value: Any, rules: Sequence[StatusRule] = DEFAULT_RULES) -> StatusRule | None:
    """Return the first rule matching ``value`` (None when nothing matches)."""
    text = StatusText.of(value)
    for rule in rules:
        if rule.predicate(text):
            return rule
    return None


def normalize_status(value: Any, rules: Sequence[StatusRule] = DEFAULT_RULES) -> CanonicalStatus | None:
    """Resolve a free-text status cell to a canonical status.

    Examples:
        >>> normalize_status("DONE") is CanonicalStatus.COMPLETE
        True
        >>> normalize_status("Unknown") is None
        True
    """
    rule = match_rule(value, rules)
    return rule.status if rule is not None else None
