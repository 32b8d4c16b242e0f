"""Error taxonomy for the workflow core.

Every error raised by the state machine, ordering engine or hierarchy
resolver derives from :class:`WorkflowError`. Each is recovered at the
boundary of the operation that detected it; see ``taskboard.board``.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for workflow core errors."""


class InvalidTransition(WorkflowError):
    """Raised when a requested status change is not legal for the item."""


class NoPendingApproval(WorkflowError):
    """Raised when an approval decision targets an item with nothing pending."""


class CyclicHierarchy(WorkflowError):
    """Raised when a parent chain revisits an item or exceeds the depth bound."""


class MalformedGesturePayload(WorkflowError):
    """Raised when a drag payload cannot be parsed back into an item reference."""
