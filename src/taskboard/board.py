"""Board facade.

Holds the locally loaded snapshot of items together with the
collaborator hooks and configuration, and is the boundary at which the
workflow errors are recovered:

- ``InvalidTransition`` on an explicit edit comes back as a
  :class:`StatusChange` carrying the message; on a drop it is silent.
- ``NoPendingApproval`` is logged and answered with ``None``.
- ``CyclicHierarchy`` is logged and answered with a partial tree.
- ``MalformedGesturePayload`` aborts the gesture inside its session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from taskboard.config import BoardConfig
from taskboard.errors import InvalidTransition, NoPendingApproval
from taskboard.hierarchy import ChainNode, chain_for
from taskboard.hooks import NullHooks, OrderUpdate, WorkflowHooks
from taskboard.ordering.engine import (
    MoveOutcome,
    commit_reorder,
    cross_column_move,
    next_order,
)
from taskboard.ordering.gesture import DragSession
from taskboard.status.machine import check_transition, request_transition, resolve_approval
from taskboard.status.models import (
    ApprovalDecision,
    HistoryEntry,
    ItemKey,
    ItemType,
    Status,
    WorkItem,
)
from taskboard.views import BoardColumns, board_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChange:
    ok: bool
    message: str | None = None
    entry: HistoryEntry | None = None


class Board:
    """A column board over one snapshot of items."""

    def __init__(
        self,
        items: Iterable[WorkItem] = (),
        *,
        hooks: WorkflowHooks | None = None,
        config: BoardConfig | None = None,
    ) -> None:
        self.items: list[WorkItem] = list(items)
        self.hooks: WorkflowHooks = hooks or NullHooks()
        self.config = config or BoardConfig()
        self.dragging: DragSession | None = None

    # ── lookup ───────────────────────────────────────────────

    def find(self, key: ItemKey | tuple) -> WorkItem | None:
        wanted = ItemKey(*key)
        return next((item for item in self.items if item.key == wanted), None)

    def get(self, key: ItemKey | tuple) -> WorkItem:
        item = self.find(key)
        if item is None:
            raise KeyError(f"No item {ItemKey(*key)} on this board")
        return item

    def fetch_item_index(self, kind: ItemType) -> list[WorkItem]:
        return [item for item in self.items if item.type == kind]

    # ── lifecycle ────────────────────────────────────────────

    def add(self, item: WorkItem) -> WorkItem:
        """Place a new item at the end of its column."""
        if self.find(item.key) is not None:
            raise ValueError(f"{item.key} is already on this board")
        item.kanban_order = next_order(
            self.items, item.effective_status, step=self.config.order_step
        )
        self.items.append(item)
        return item

    def change_status(
        self,
        item: WorkItem,
        target: str | Status,
        *,
        comment: str | None = None,
        file_url: str | None = None,
        actor: str | None = None,
    ) -> StatusChange:
        """Explicit status edit; an illegal target comes back as a message."""
        ok, message = check_transition(item, target)
        if not ok:
            logger.info("Status edit on %s refused: %s", item.key, message)
            return StatusChange(ok=False, message=message)
        try:
            entry = request_transition(
                item,
                target,
                comment=comment,
                file_url=file_url,
                actor=actor,
                hooks=self.hooks,
            )
        except InvalidTransition as exc:
            return StatusChange(ok=False, message=str(exc))
        return StatusChange(ok=True, entry=entry)

    def decide(
        self,
        item: WorkItem,
        decision: str | ApprovalDecision,
        *,
        comment: str | None = None,
        file_url: str | None = None,
        actor: str | None = None,
    ) -> HistoryEntry | None:
        """Record an approver's decision; None when nothing was pending."""
        try:
            return resolve_approval(
                item,
                decision,
                comment=comment,
                file_url=file_url,
                actor=actor,
                hooks=self.hooks,
            )
        except NoPendingApproval as exc:
            logger.error("Approval decision ignored: %s", exc)
            return None

    # ── ordering ─────────────────────────────────────────────

    def reorder(self, item: WorkItem, drop_index: int | None) -> list[OrderUpdate]:
        return commit_reorder(
            self.items,
            item.effective_status,
            item.key,
            drop_index,
            step=self.config.order_step,
            hooks=self.hooks,
        )

    def drop_item(
        self,
        item: WorkItem,
        target_column: str | Status,
        drop_index: int | None = None,
    ) -> MoveOutcome:
        return cross_column_move(
            self.items,
            item,
            target_column,
            drop_index=drop_index,
            step=self.config.order_step,
            hooks=self.hooks,
        )

    def drag(self, item: WorkItem) -> DragSession:
        """Open the gesture session for dragging ``item``.

        A session still open from an earlier gesture is closed first.
        """
        if self.dragging is not None:
            logger.debug("Closing stale drag of %s", self.dragging.item.key)
            self.dragging.close()
        return DragSession(self, item)

    # ── views ────────────────────────────────────────────────

    def chain(self, item: WorkItem) -> ChainNode:
        return chain_for(item, self, max_depth=self.config.max_depth)

    def columns(self, *, show_all_completed: bool | None = None) -> BoardColumns:
        if show_all_completed is None:
            show_all_completed = self.config.show_all_completed
        return board_columns(self.items, show_all_completed=show_all_completed)
