"""Transition matrix, alias resolution, and validation.

Three base statuses move forward only: ``not_started -> in_progress``,
``not_started -> completed`` (skipping the middle is allowed) and
``in_progress -> completed``. ``completed`` is terminal. The
``pending_approval`` overlay is never a transition target; it is entered
by requesting a transition on a workflow-enabled item.
"""

from __future__ import annotations

from .models import BASE_STATUSES, Status

CANONICAL_STATUSES: tuple[str, ...] = tuple(str(s) for s in Status)

# Labels written by the hosted tracker tables and common shorthands.
STATUS_ALIASES: dict[str, str] = {
    "doing": "in_progress",
    "done": "completed",
    "شروع نشده": "not_started",
    "در حال اجرا": "in_progress",
    "خاتمه یافته": "completed",
    "ارسال برای تایید": "pending_approval",
}

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed"})

ALLOWED_TRANSITIONS: frozenset[tuple[str, str]] = frozenset(
    {
        ("not_started", "in_progress"),
        ("not_started", "completed"),
        ("in_progress", "completed"),
    }
)


def resolve_status_alias(value: str) -> str:
    """Resolve alias to canonical status name. Returns input if not an alias."""
    normalized = value.strip().lower()
    return STATUS_ALIASES.get(normalized, normalized)


def resolve_status(value: str | Status) -> Status:
    """Resolve an alias or canonical name to a Status.

    Raises ValueError for unknown statuses.
    """
    if isinstance(value, Status):
        return value
    resolved = resolve_status_alias(value)
    try:
        return Status(resolved)
    except ValueError:
        raise ValueError(f"Unknown status: {value}") from None


def is_terminal(status: str) -> bool:
    """Check if a status is terminal (completed)."""
    return resolve_status_alias(status) in TERMINAL_STATUSES


def validate_transition(from_status: str, to_status: str) -> tuple[bool, str | None]:
    """Validate a base-status transition. Returns (ok, error_message).

    ``from_status`` is the item's confirmed base status and ``to_status``
    the requested target; both accept aliases.
    """
    try:
        resolved_from = resolve_status(from_status)
        resolved_to = resolve_status(to_status)
    except ValueError as exc:
        return False, str(exc)

    if resolved_to not in BASE_STATUSES:
        return False, f"Cannot transition to {resolved_to}: not a base status"
    if resolved_from not in BASE_STATUSES:
        return False, f"Cannot transition from {resolved_from}: not a base status"

    if is_terminal(resolved_from):
        return False, f"{resolved_from} is terminal; no further transitions are allowed"

    if resolved_from == resolved_to:
        return False, f"Item is already {resolved_to}"

    if (str(resolved_from), str(resolved_to)) not in ALLOWED_TRANSITIONS:
        return False, f"Illegal transition: {resolved_from} -> {resolved_to}"

    return True, None
