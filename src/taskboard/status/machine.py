"""Status/approval state machine.

Single entry point for every status change on a WorkItem.

Pipeline order for ``request_transition``:
    1. resolve the target alias
    2. validate against the item's confirmed base status
    3. build the HistoryEntry with a ULID event_id
    4. swap ``item.state`` and append the entry
    5. notify ``request_status_change``

Validation failures raise BEFORE anything is mutated. Hook failures are
logged and never undo the change.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from ulid import ULID

from taskboard.errors import InvalidTransition, NoPendingApproval
from taskboard.hooks import NullHooks, WorkflowHooks, notify

from .models import (
    ApprovalDecision,
    ApprovalStatus,
    AwaitingApproval,
    HistoryEntry,
    Settled,
    Status,
    WorkItem,
)
from .transitions import resolve_status, validate_transition

logger = logging.getLogger(__name__)


def _generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def check_transition(item: WorkItem, target: str | Status) -> tuple[bool, str | None]:
    """Validate ``item -> target`` without touching the item.

    Returns (ok, error_message) so an edit form can show the message
    before anything happens.
    """
    if isinstance(item.state, AwaitingApproval):
        return (
            False,
            f"{item.key} is awaiting approval for {item.state.requested}; "
            "resolve that request first",
        )
    return validate_transition(item.underlying_status, target)


def request_transition(
    item: WorkItem,
    target: str | Status,
    *,
    comment: str | None = None,
    file_url: str | None = None,
    actor: str | None = None,
    hooks: WorkflowHooks | None = None,
) -> HistoryEntry:
    """Move ``item`` toward ``target``.

    Items outside the approval workflow switch immediately. Workflow
    items enter ``pending_approval`` with ``target`` as the requested
    status and keep their current base status as the rollback target.

    Returns:
        The appended HistoryEntry.

    Raises:
        InvalidTransition: If the move is not legal; the item is untouched.
    """
    ok, error_msg = check_transition(item, target)
    if not ok:
        raise InvalidTransition(error_msg)
    resolved = resolve_status(target)

    if item.use_workflow:
        entry = HistoryEntry(
            event_id=_generate_ulid(),
            date=_now_utc(),
            status=Status.PENDING_APPROVAL,
            requested_status=resolved,
            comment=comment,
            file_url=file_url,
            actor=actor,
        )
        new_state = AwaitingApproval(requested=resolved, underlying=item.underlying_status)
    else:
        entry = HistoryEntry(
            event_id=_generate_ulid(),
            date=_now_utc(),
            status=resolved,
            comment=comment,
            file_url=file_url,
            actor=actor,
        )
        new_state = Settled(resolved)

    previous = item.status
    item.state = new_state
    item.history.append(entry)
    logger.info("%s: %s -> %s", item.key, previous, item.status)

    hooks = hooks or NullHooks()
    notify("request_status_change", hooks.request_status_change, item, resolved)
    return entry


def resolve_approval(
    item: WorkItem,
    decision: str | ApprovalDecision,
    *,
    comment: str | None = None,
    file_url: str | None = None,
    actor: str | None = None,
    hooks: WorkflowHooks | None = None,
) -> HistoryEntry:
    """Apply an approver's decision to a pending request.

    ``approved`` confirms the requested status; ``rejected`` reverts to
    the underlying status. Either way the request is consumed, so a
    second call for the same request raises NoPendingApproval.

    Raises:
        NoPendingApproval: If the item has no pending request.
        ValueError: If ``decision`` is not approved/rejected.
    """
    state = item.state
    if not isinstance(state, AwaitingApproval):
        raise NoPendingApproval(
            f"{item.key} has no pending approval (approval status: {item.approval_status})"
        )
    resolved_decision = ApprovalDecision(decision)

    if resolved_decision == ApprovalDecision.APPROVED:
        final_status = state.requested
        new_state = Settled(final_status, ApprovalStatus.APPROVED)
    else:
        final_status = state.underlying
        new_state = Settled(final_status, ApprovalStatus.REJECTED)

    entry = HistoryEntry(
        event_id=_generate_ulid(),
        date=_now_utc(),
        status=final_status,
        approval_decision=resolved_decision,
        comment=comment,
        file_url=file_url,
        actor=actor,
    )
    item.state = new_state
    item.history.append(entry)
    logger.info(
        "%s: request for %s %s; now %s",
        item.key,
        state.requested,
        resolved_decision,
        final_status,
    )

    hooks = hooks or NullHooks()
    notify(
        "record_approval_decision",
        hooks.record_approval_decision,
        item,
        resolved_decision,
        comment,
        file_url,
    )
    return entry
