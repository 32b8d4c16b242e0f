"""Queries over an item's HistoryLog.

All lookups are built on :func:`most_recent_match`, which scans newest
first and returns the first entry that satisfies a predicate.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Reversible

from .models import ApprovalDecision, HistoryEntry, Status

HistoryPredicate = Callable[[HistoryEntry], bool]


def most_recent_match(
    history: Reversible[HistoryEntry],
    predicate: HistoryPredicate,
) -> HistoryEntry | None:
    """Return the newest entry satisfying ``predicate``, or None."""
    for entry in reversed(history):
        if predicate(entry):
            return entry
    return None


def completion_entry(history: Reversible[HistoryEntry]) -> HistoryEntry | None:
    """Return the entry that marks when the item was last completed.

    Prefers the last approved completion. Items outside the approval
    workflow never record a decision, so fall back to the last entry
    that reached ``completed`` at all.
    """
    approved = most_recent_match(
        history,
        lambda e: e.status == Status.COMPLETED
        and e.approval_decision == ApprovalDecision.APPROVED,
    )
    if approved is not None:
        return approved
    return most_recent_match(history, lambda e: e.status == Status.COMPLETED)


def completion_date(history: Reversible[HistoryEntry]) -> datetime | None:
    entry = completion_entry(history)
    return entry.date if entry is not None else None


def approval_request_entry(history: Reversible[HistoryEntry]) -> HistoryEntry | None:
    """Return the entry of the most recent approval request."""
    return most_recent_match(history, lambda e: e.status == Status.PENDING_APPROVAL)


def approval_request_date(history: Reversible[HistoryEntry]) -> datetime | None:
    entry = approval_request_entry(history)
    return entry.date if entry is not None else None


def last_decision(history: Reversible[HistoryEntry]) -> HistoryEntry | None:
    """Return the most recent approve/reject entry."""
    return most_recent_match(history, lambda e: e.approval_decision is not None)


def decisions_by(history: Iterable[HistoryEntry], actor: str) -> list[HistoryEntry]:
    """Return the approval decisions recorded by ``actor``, oldest first."""
    return [
        e for e in history
        if e.approval_decision is not None and e.actor == actor
    ]
