"""Status and approval lifecycle for work items.

Public API surface -- all consumers import from this package.
"""

from .models import (
    BASE_STATUSES,
    ApprovalDecision,
    ApprovalStatus,
    AwaitingApproval,
    HistoryEntry,
    HistoryLog,
    ItemKey,
    ItemState,
    ItemType,
    Priority,
    Settled,
    Status,
    WorkItem,
)
from .transitions import (
    ALLOWED_TRANSITIONS,
    CANONICAL_STATUSES,
    STATUS_ALIASES,
    TERMINAL_STATUSES,
    is_terminal,
    resolve_status,
    resolve_status_alias,
    validate_transition,
)
from .history import (
    approval_request_date,
    approval_request_entry,
    completion_date,
    completion_entry,
    decisions_by,
    last_decision,
    most_recent_match,
)
from .machine import (
    check_transition,
    request_transition,
    resolve_approval,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ApprovalDecision",
    "ApprovalStatus",
    "AwaitingApproval",
    "BASE_STATUSES",
    "CANONICAL_STATUSES",
    "HistoryEntry",
    "HistoryLog",
    "ItemKey",
    "ItemState",
    "ItemType",
    "Priority",
    "STATUS_ALIASES",
    "Settled",
    "Status",
    "TERMINAL_STATUSES",
    "WorkItem",
    "approval_request_date",
    "approval_request_entry",
    "check_transition",
    "completion_date",
    "completion_entry",
    "decisions_by",
    "is_terminal",
    "last_decision",
    "most_recent_match",
    "request_transition",
    "resolve_approval",
    "resolve_status",
    "resolve_status_alias",
    "validate_transition",
]
