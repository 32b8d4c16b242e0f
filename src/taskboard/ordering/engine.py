"""Kanban ordering engine.

Keeps ``kanban_order`` dense within each column (multiples of the order
step, 10 by default) and turns drag-and-drop gestures into the minimal
batch of changed items. Orders are computed against the snapshot passed
in; conflict detection between concurrent editors belongs to whoever
persists the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from taskboard.errors import InvalidTransition, NoPendingApproval
from taskboard.hooks import NullHooks, OrderUpdate, WorkflowHooks, notify
from taskboard.status.machine import request_transition
from taskboard.status.models import BASE_STATUSES, ItemKey, Status, WorkItem
from taskboard.status.transitions import resolve_status

logger = logging.getLogger(__name__)

ORDER_STEP = 10

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class MoveOutcome:
    """Result of dropping a card on a column."""

    accepted: bool
    kind: str  # "reorder", "status_change" or "rejected"
    updates: tuple[OrderUpdate, ...] = field(default_factory=tuple)
    reason: str | None = None


def _column_sort_key(item: WorkItem) -> tuple[int, datetime, int]:
    # Equal orders fall back to creation order.
    return (item.kanban_order, item.created_at or _EPOCH, item.id)


def column_items(items: Iterable[WorkItem], column: str | Status) -> list[WorkItem]:
    """Items whose effective column is ``column``, in display order."""
    resolved = resolve_status(column)
    return sorted(
        (item for item in items if item.effective_status == resolved),
        key=_column_sort_key,
    )


def drop_index_from_pointer(midpoints: Sequence[float], pointer_y: float) -> int:
    """Translate a pointer position into an insertion index.

    ``midpoints`` are the vertical card midpoints of the column with the
    dragged card already removed, top to bottom. The card goes before the
    first card whose midpoint is below the pointer, else at the end.
    """
    for index, midpoint in enumerate(midpoints):
        if pointer_y < midpoint:
            return index
    return len(midpoints)


def reorder(
    items: Iterable[WorkItem],
    column: str | Status,
    dragged_key: ItemKey | tuple,
    drop_index: int | None,
    *,
    step: int = ORDER_STEP,
) -> list[OrderUpdate]:
    """Compute the order batch for moving a card within its column.

    Only items whose order actually changes are returned, so dropping a
    card where it already sits in a dense column yields an empty list.

    Raises:
        ValueError: If the dragged item is not in ``column``.
    """
    ordered = column_items(items, column)
    key = ItemKey(*dragged_key)
    dragged = next((item for item in ordered if item.key == key), None)
    if dragged is None:
        raise ValueError(f"{key} is not in column {resolve_status(column)}")

    remaining = [item for item in ordered if item.key != key]
    if drop_index is None or drop_index > len(remaining):
        insert_at = len(remaining)
    else:
        insert_at = max(drop_index, 0)
    remaining.insert(insert_at, dragged)

    updates: list[OrderUpdate] = []
    for position, item in enumerate(remaining):
        new_order = position * step
        if item.kanban_order != new_order:
            updates.append(OrderUpdate(id=item.id, type=item.type, new_order=new_order))
    return updates


def apply_updates(items: Iterable[WorkItem], updates: Sequence[OrderUpdate]) -> None:
    """Write an order batch into the matching items."""
    by_key = {(u.type, u.id): u.new_order for u in updates}
    for item in items:
        new_order = by_key.get(item.key)
        if new_order is not None:
            item.kanban_order = new_order


def next_order(
    items: Iterable[WorkItem],
    column: str | Status,
    *,
    exclude: ItemKey | None = None,
    step: int = ORDER_STEP,
) -> int:
    """Order value that places a card at the end of ``column``."""
    orders = [
        item.kanban_order
        for item in column_items(items, column)
        if exclude is None or item.key != exclude
    ]
    if not orders:
        return 0
    return max(orders) + step


def commit_reorder(
    items: Sequence[WorkItem],
    column: str | Status,
    dragged_key: ItemKey | tuple,
    drop_index: int | None,
    *,
    step: int = ORDER_STEP,
    hooks: WorkflowHooks | None = None,
) -> list[OrderUpdate]:
    """Reorder, apply the batch to ``items`` and hand it to the hooks."""
    updates = reorder(items, column, dragged_key, drop_index, step=step)
    if updates:
        apply_updates(items, updates)
        hooks = hooks or NullHooks()
        notify("commit_order_batch", hooks.commit_order_batch, updates)
    return updates


def cross_column_move(
    items: Sequence[WorkItem],
    item: WorkItem,
    target_column: str | Status,
    *,
    drop_index: int | None = None,
    step: int = ORDER_STEP,
    hooks: WorkflowHooks | None = None,
    actor: str | None = None,
) -> MoveOutcome:
    """Handle a card dropped on ``target_column``.

    Dropping on the card's own column is a reorder. Any other column is
    a status change request; an illegal one is rejected without error or
    mutation, since exploratory drags hit illegal columns all the time.
    On success the card goes to the end of the target column whatever
    the drop position.
    """
    try:
        target = resolve_status(target_column)
    except ValueError as exc:
        logger.debug("Drop on unknown column %r rejected: %s", target_column, exc)
        return MoveOutcome(accepted=False, kind="rejected", reason=str(exc))

    if target not in BASE_STATUSES:
        return MoveOutcome(
            accepted=False,
            kind="rejected",
            reason=f"{target} is not a board column",
        )

    if item.effective_status == target:
        updates = commit_reorder(
            items, target, item.key, drop_index, step=step, hooks=hooks
        )
        return MoveOutcome(accepted=True, kind="reorder", updates=tuple(updates))

    hooks = hooks or NullHooks()
    try:
        request_transition(item, target, actor=actor, hooks=hooks)
    except (InvalidTransition, NoPendingApproval) as exc:
        logger.debug("Drop of %s on %s rejected: %s", item.key, target, exc)
        return MoveOutcome(accepted=False, kind="rejected", reason=str(exc))

    new_order = next_order(items, target, exclude=item.key, step=step)
    update = OrderUpdate(id=item.id, type=item.type, new_order=new_order)
    item.kanban_order = new_order
    notify("commit_order_batch", hooks.commit_order_batch, [update])
    return MoveOutcome(accepted=True, kind="status_change", updates=(update,))
