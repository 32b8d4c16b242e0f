"""Canonical models for the work item lifecycle.

Defines the status enums, the tagged item state (``Settled`` or
``AwaitingApproval``), the immutable HistoryEntry record with its
append-only HistoryLog, and the WorkItem itself.

The four status-related fields the rest of the system reads
(``status``, ``underlying_status``, ``requested_status``,
``approval_status``) are derived from ``WorkItem.state`` so they can
never disagree with each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any, Iterator, NamedTuple


class Status(StrEnum):
    """Item status, including the pending-approval overlay."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PENDING_APPROVAL = "pending_approval"


BASE_STATUSES: tuple[Status, ...] = (
    Status.NOT_STARTED,
    Status.IN_PROGRESS,
    Status.COMPLETED,
)


class ApprovalStatus(StrEnum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalDecision(StrEnum):
    APPROVED = "approved"
    REJECTED = "rejected"


class ItemType(StrEnum):
    PROJECT = "project"
    ACTIVITY = "activity"
    ACTION = "action"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ItemKey(NamedTuple):
    """Identity of a work item: ``(type, id)``. Text form is ``type:id``."""

    type: ItemType
    id: int

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"

    @classmethod
    def parse(cls, text: str) -> ItemKey:
        kind, sep, raw_id = text.strip().partition(":")
        if not sep:
            raise ValueError(f"Item key must look like 'type:id', got {text!r}")
        return cls(ItemType(kind.lower()), int(raw_id))


def _require_base(value: Status, role: str) -> None:
    if value not in BASE_STATUSES:
        raise ValueError(f"{role} must be a base status, got {value!r}")


# ── Item state variant ───────────────────────────────────────


@dataclass(frozen=True)
class Settled:
    """Item rests in a confirmed base status.

    ``approval`` remembers the outcome of the last approval request
    (``none`` when there never was one).
    """

    status: Status
    approval: ApprovalStatus = ApprovalStatus.NONE

    def __post_init__(self) -> None:
        _require_base(self.status, "Settled status")
        if self.approval == ApprovalStatus.PENDING:
            raise ValueError("A settled item cannot carry a pending approval")


@dataclass(frozen=True)
class AwaitingApproval:
    """Item waits for an approver to accept ``requested``.

    ``underlying`` is the status the item reverts to on rejection.
    """

    requested: Status
    underlying: Status

    def __post_init__(self) -> None:
        _require_base(self.requested, "Requested status")
        _require_base(self.underlying, "Underlying status")


ItemState = Settled | AwaitingApproval


# ── History ──────────────────────────────────────────────────


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable record of one status or approval event."""

    event_id: str  # ULID
    date: datetime
    status: Status
    requested_status: Status | None = None
    approval_decision: ApprovalDecision | None = None
    comment: str | None = None
    file_url: str | None = None
    actor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "event_id": self.event_id,
            "date": self.date.isoformat(),
            "status": str(self.status),
        }
        if self.requested_status is not None:
            d["requested_status"] = str(self.requested_status)
        if self.approval_decision is not None:
            d["approval_decision"] = str(self.approval_decision)
        if self.comment:
            d["comment"] = self.comment
        if self.file_url:
            d["file_url"] = self.file_url
        if self.actor:
            d["actor"] = self.actor
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        from .transitions import resolve_status

        requested = _pick(data, "requested_status", "requestedStatus")
        decision = _pick(data, "approval_decision", "approvalDecision")
        return cls(
            event_id=str(data.get("event_id") or ""),
            date=_parse_datetime(data["date"]),
            status=resolve_status(data["status"]),
            requested_status=resolve_status(requested) if requested else None,
            approval_decision=ApprovalDecision(decision) if decision else None,
            comment=data.get("comment"),
            file_url=_pick(data, "file_url", "fileUrl"),
            actor=_pick(data, "actor", "user"),
        )


class HistoryLog:
    """Append-only, insertion-ordered sequence of HistoryEntry records.

    The backing tuple is replaced on append, never edited, so a
    reference taken earlier keeps seeing the entries it saw.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: tuple[HistoryEntry, ...] | list[HistoryEntry] = ()) -> None:
        self._entries: tuple[HistoryEntry, ...] = tuple(entries)

    def append(self, entry: HistoryEntry) -> None:
        self._entries = self._entries + (entry,)

    def entries(self) -> tuple[HistoryEntry, ...]:
        return self._entries

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[HistoryEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"HistoryLog({len(self._entries)} entries)"


# ── Work item ────────────────────────────────────────────────


@dataclass
class WorkItem:
    """A project, activity or action shown on the board.

    Status and approval fields are read-only views over ``state``; only
    ``taskboard.status.machine`` assigns ``state`` and only
    ``taskboard.ordering.engine`` assigns ``kanban_order``.
    """

    id: int
    type: ItemType
    title: str
    responsible: str = ""
    approver: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    priority: Priority = Priority.MEDIUM
    use_workflow: bool = False
    parent_id: int | None = None
    kanban_order: int = 0
    created_at: datetime | None = None
    parent_name: str | None = None
    state: ItemState = field(default_factory=lambda: Settled(Status.NOT_STARTED))
    history: HistoryLog = field(default_factory=HistoryLog)

    def __post_init__(self) -> None:
        if self.created_at is not None:
            self.created_at = _as_utc(self.created_at)

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.type, self.id)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state, AwaitingApproval)

    @property
    def status(self) -> Status:
        if isinstance(self.state, AwaitingApproval):
            return Status.PENDING_APPROVAL
        return self.state.status

    @property
    def underlying_status(self) -> Status:
        if isinstance(self.state, AwaitingApproval):
            return self.state.underlying
        return self.state.status

    @property
    def requested_status(self) -> Status | None:
        if isinstance(self.state, AwaitingApproval):
            return self.state.requested
        return None

    @property
    def approval_status(self) -> ApprovalStatus:
        if isinstance(self.state, AwaitingApproval):
            return ApprovalStatus.PENDING
        return self.state.approval

    @property
    def effective_status(self) -> Status:
        """The column this item is grouped under."""
        if isinstance(self.state, AwaitingApproval):
            return self.state.requested
        return self.state.status

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": str(self.type),
            "title": self.title,
            "responsible": self.responsible,
            "approver": self.approver,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "priority": str(self.priority),
            "use_workflow": self.use_workflow,
            "parent_id": self.parent_id,
            "kanban_order": self.kanban_order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "parent_name": self.parent_name,
            "status": str(self.status),
            "underlying_status": str(self.underlying_status),
            "requested_status": str(self.requested_status) if self.requested_status else None,
            "approval_status": str(self.approval_status),
            "history": [entry.to_dict() for entry in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkItem:
        """Build an item from its dict form.

        Accepts both snake_case keys and the camelCase keys used by the
        tracker's hosted tables (``underlyingStatus``, ``kanban_order``,
        ``use_workflow`` ...). Raises ValueError or KeyError on data that
        would break the status invariants.
        """
        start = _pick(data, "start_date", "startDate")
        end = _pick(data, "end_date", "endDate")
        created = _pick(data, "created_at", "createdAt")
        parent_id = _pick(data, "parent_id", "parentId")
        return cls(
            id=int(data["id"]),
            type=ItemType(data["type"]),
            title=data.get("title", ""),
            responsible=data.get("responsible") or "",
            approver=data.get("approver"),
            start_date=_parse_date(start) if start else None,
            end_date=_parse_date(end) if end else None,
            priority=Priority(data.get("priority") or Priority.MEDIUM),
            use_workflow=bool(_pick(data, "use_workflow", "useWorkflow") or False),
            parent_id=int(parent_id) if parent_id is not None else None,
            kanban_order=int(_pick(data, "kanban_order", "kanbanOrder") or 0),
            created_at=_parse_datetime(created) if created else None,
            parent_name=_pick(data, "parent_name", "parentName"),
            state=_state_from_dict(data),
            history=_history_from_dict(data.get("history")),
        )


def _state_from_dict(data: dict[str, Any]) -> ItemState:
    from .transitions import resolve_status

    status = resolve_status(data.get("status") or Status.NOT_STARTED)
    approval = _pick(data, "approval_status", "approvalStatus")
    requested = _pick(data, "requested_status", "requestedStatus")
    underlying = _pick(data, "underlying_status", "underlyingStatus")

    if status == Status.PENDING_APPROVAL or approval == ApprovalStatus.PENDING:
        if not requested or not underlying:
            raise ValueError(
                f"Item {data.get('type')}:{data.get('id')} is pending approval "
                "but lacks requested_status or underlying_status"
            )
        return AwaitingApproval(
            requested=resolve_status(requested),
            underlying=resolve_status(underlying),
        )
    return Settled(
        status=status,
        approval=ApprovalStatus(approval) if approval else ApprovalStatus.NONE,
    )


def _history_from_dict(raw: Any) -> HistoryLog:
    if raw is None:
        return HistoryLog()
    if not isinstance(raw, list):
        raise ValueError(f"history must be a list, got {type(raw).__name__}")
    entries = []
    for position, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"history entry {position} must be an object, got {type(entry).__name__}")
        entries.append(HistoryEntry.from_dict(entry))
    return HistoryLog(entries)


def _pick(data: dict[str, Any], *names: str) -> Any:
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps so all item times compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(str(value)))
