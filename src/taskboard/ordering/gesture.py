"""Drag gesture sessions and the drag payload codec.

A :class:`DragSession` lives for exactly one gesture: drag start, any
number of drag-overs, then one drop or cancel. The owning board's
``dragging`` marker is set when the session opens and cleared on every
exit path, including a payload that fails to parse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from taskboard.errors import MalformedGesturePayload
from taskboard.status.models import ItemKey, ItemType, Status, WorkItem

if TYPE_CHECKING:
    from .engine import MoveOutcome

logger = logging.getLogger(__name__)


class DragPayload(BaseModel):
    """Serialized card reference carried by a drag gesture.

    ``column`` is the card's effective column when the drag started.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    type: ItemType
    column: Status

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.type, self.id)


def encode_payload(item: WorkItem) -> str:
    return DragPayload(id=item.id, type=item.type, column=item.effective_status).model_dump_json()


def decode_payload(raw: str | bytes | None) -> DragPayload:
    """Parse a drag payload.

    Raises:
        MalformedGesturePayload: If ``raw`` is empty, not JSON, or does not
            describe a card.
    """
    if not raw:
        raise MalformedGesturePayload("Drag payload is empty")
    try:
        return DragPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedGesturePayload(f"Invalid drag payload: {exc}") from exc


DropStatus = Literal["moved", "rejected", "cancelled", "aborted"]


@dataclass(frozen=True)
class DropOutcome:
    status: DropStatus
    move: MoveOutcome | None = None
    reason: str | None = None


class DropTarget(Protocol):
    """What a session needs from the board that opened it."""

    dragging: DragSession | None

    def find(self, key: ItemKey) -> WorkItem | None:
        ...

    def drop_item(
        self, item: WorkItem, target_column: str | Status, drop_index: int | None
    ) -> MoveOutcome:
        ...


class DragSession:
    """Scoped state for one drag gesture.

    Use as a context manager; leaving the block without a drop behaves
    like a cancel. After ``drop`` or ``cancel`` the session is closed and
    further drops are cancelled outright.
    """

    def __init__(self, board: DropTarget, item: WorkItem) -> None:
        self._board = board
        self.item = item
        self.payload = encode_payload(item)
        self._closed = False
        board.dragging = self

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> DragSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._board.dragging is self:
            self._board.dragging = None
        self._closed = True

    def cancel(self) -> DropOutcome:
        self.close()
        return DropOutcome(status="cancelled", reason="Gesture cancelled")

    def drop(
        self,
        target_column: str | Status | None,
        *,
        raw_payload: str | bytes | None = None,
        drop_index: int | None = None,
    ) -> DropOutcome:
        """Finish the gesture on ``target_column``.

        ``target_column=None`` means the card was released outside any
        column. ``raw_payload`` defaults to the payload written at drag
        start; pass the transport's copy to decode what actually arrived.
        """
        try:
            if self._closed:
                return DropOutcome(status="cancelled", reason="Gesture already finished")
            if target_column is None:
                return DropOutcome(status="cancelled", reason="Dropped outside any column")

            payload = decode_payload(self.payload if raw_payload is None else raw_payload)
            item = self._board.find(payload.key)
            if item is None:
                raise MalformedGesturePayload(f"Drag payload refers to unknown item {payload.key}")

            move = self._board.drop_item(item, target_column, drop_index)
            if not move.accepted:
                return DropOutcome(status="rejected", move=move, reason=move.reason)
            return DropOutcome(status="moved", move=move)
        except MalformedGesturePayload as exc:
            logger.error("Drop aborted: %s", exc)
            return DropOutcome(status="aborted", reason=str(exc))
        finally:
            self.close()
