"""Read-only views over item collections.

Pure functions of their inputs: nothing here mutates an item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Sequence

from taskboard.ordering.engine import column_items
from taskboard.status.history import completion_entry
from taskboard.status.models import (
    ApprovalStatus,
    ItemKey,
    Status,
    WorkItem,
)

STANDALONE_GROUP = "Standalone"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class DelegatedItem:
    item: WorkItem
    parent_title: str


def delegated_by(user: str, items: Iterable[WorkItem]) -> list[DelegatedItem]:
    """Subtasks whose parent ``user`` is responsible for, newest first."""
    pool = list(items)
    index = {item.key: item for item in pool}
    delegated: list[DelegatedItem] = []
    for item in pool:
        if item.parent_id is None:
            continue
        parent = index.get(ItemKey(item.type, item.parent_id))
        if parent is not None and parent.responsible == user:
            delegated.append(DelegatedItem(item=item, parent_title=parent.title))
    delegated.sort(key=lambda d: d.item.created_at or _EPOCH, reverse=True)
    return delegated


@dataclass
class BoardColumns:
    not_started: list[WorkItem] = field(default_factory=list)
    in_progress: list[WorkItem] = field(default_factory=list)
    completed: list[WorkItem] = field(default_factory=list)
    completed_total: int = 0

    def as_dict(self) -> dict[Status, list[WorkItem]]:
        return {
            Status.NOT_STARTED: self.not_started,
            Status.IN_PROGRESS: self.in_progress,
            Status.COMPLETED: self.completed,
        }


def board_columns(
    items: Sequence[WorkItem],
    *,
    show_all_completed: bool = False,
) -> BoardColumns:
    """Group items into the three board columns.

    The completed column grows without bound, so by default it lists only
    cards waiting for completion approval; ``completed_total`` still
    counts every card in that column.
    """
    completed = column_items(items, Status.COMPLETED)
    shown = completed if show_all_completed else [i for i in completed if i.is_pending]
    return BoardColumns(
        not_started=column_items(items, Status.NOT_STARTED),
        in_progress=column_items(items, Status.IN_PROGRESS),
        completed=shown,
        completed_total=len(completed),
    )


def pending_approvals(items: Iterable[WorkItem], approver: str) -> dict[str, list[WorkItem]]:
    """Requests waiting on ``approver``, grouped by owning project."""
    groups: dict[str, list[WorkItem]] = {}
    for item in items:
        if item.is_pending and item.approver == approver:
            groups.setdefault(item.parent_name or STANDALONE_GROUP, []).append(item)
    return groups


@dataclass(frozen=True)
class CompletedItem:
    item: WorkItem
    completed_at: datetime | None


def completed_items(items: Iterable[WorkItem]) -> list[CompletedItem]:
    """Completed items with the date they were (finally) completed."""
    result = []
    for item in items:
        if item.status != Status.COMPLETED:
            continue
        entry = completion_entry(item.history)
        result.append(CompletedItem(item=item, completed_at=entry.date if entry else None))
    return result


def _is_complete(item: WorkItem, use_workflow: bool) -> bool:
    if item.status != Status.COMPLETED:
        return False
    return not use_workflow or item.approval_status == ApprovalStatus.APPROVED


def _is_active(item: WorkItem, use_workflow: bool) -> bool:
    if _is_complete(item, use_workflow):
        return True
    if item.status != Status.IN_PROGRESS:
        return False
    return not use_workflow or item.approval_status == ApprovalStatus.APPROVED


def project_status(activities: Sequence[WorkItem], use_workflow: bool) -> Status:
    """Roll a project's activities up into the project's own status.

    With the workflow on, only approved starts and completions count.
    """
    if not activities:
        return Status.NOT_STARTED
    if all(_is_complete(a, use_workflow) for a in activities):
        return Status.COMPLETED
    if any(_is_active(a, use_workflow) for a in activities):
        return Status.IN_PROGRESS
    return Status.NOT_STARTED


def is_delayed(item: WorkItem, today: date | None = None) -> bool:
    """True when the item is past its end date and not completed."""
    if item.underlying_status == Status.COMPLETED or item.end_date is None:
        return False
    today = today or date.today()
    return item.end_date < today
