"""Collaborator surface the workflow core calls out to.

The core validates and applies changes in memory first, then hands the
result to a :class:`WorkflowHooks` implementation for persistence.
Hook failures are logged and never undo the in-memory change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence

if TYPE_CHECKING:
    from taskboard.status.models import ApprovalDecision, ItemType, Status, WorkItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderUpdate:
    """One row of an order batch: the new kanban_order for an item."""

    id: int
    type: ItemType
    new_order: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": str(self.type), "new_order": self.new_order}


class ItemIndex(Protocol):
    """Read hook that supplies the flat collection of one kind of item."""

    def fetch_item_index(self, kind: ItemType) -> list[WorkItem]:
        ...


class WorkflowHooks(ItemIndex, Protocol):
    """Persistence and lookup hooks implemented outside the core."""

    def request_status_change(self, item: WorkItem, target: Status) -> None:
        ...

    def commit_order_batch(self, updates: Sequence[OrderUpdate]) -> None:
        ...

    def record_approval_decision(
        self,
        item: WorkItem,
        decision: ApprovalDecision,
        comment: str | None,
        file_url: str | None,
    ) -> None:
        ...


class NullHooks:
    """Hooks that persist nothing and know no items."""

    def request_status_change(self, item: WorkItem, target: Status) -> None:
        pass

    def commit_order_batch(self, updates: Sequence[OrderUpdate]) -> None:
        pass

    def record_approval_decision(
        self,
        item: WorkItem,
        decision: ApprovalDecision,
        comment: str | None,
        file_url: str | None,
    ) -> None:
        pass

    def fetch_item_index(self, kind: ItemType) -> list[WorkItem]:
        return []


@dataclass
class RecordingHooks:
    """Hooks that remember every call. Used by the CLI and tests."""

    items: list[WorkItem] = field(default_factory=list)
    status_changes: list[tuple[WorkItem, Status]] = field(default_factory=list)
    order_batches: list[list[OrderUpdate]] = field(default_factory=list)
    decisions: list[tuple[WorkItem, ApprovalDecision, str | None, str | None]] = field(
        default_factory=list
    )

    def request_status_change(self, item: WorkItem, target: Status) -> None:
        self.status_changes.append((item, target))

    def commit_order_batch(self, updates: Sequence[OrderUpdate]) -> None:
        self.order_batches.append(list(updates))

    def record_approval_decision(
        self,
        item: WorkItem,
        decision: ApprovalDecision,
        comment: str | None,
        file_url: str | None,
    ) -> None:
        self.decisions.append((item, decision, comment, file_url))

    def fetch_item_index(self, kind: ItemType) -> list[WorkItem]:
        return [item for item in self.items if item.type == kind]


def notify(hook_name: str, fn: Callable[..., Any], *args: Any) -> None:
    """Invoke a persistence hook; a failing hook never blocks the caller."""
    try:
        fn(*args)
    except Exception:
        logger.warning(
            "Hook %s failed; in-memory state is unaffected",
            hook_name,
            exc_info=True,
        )
