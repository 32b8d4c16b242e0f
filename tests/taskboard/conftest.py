"""Shared fixtures for the taskboard test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from taskboard.hooks import RecordingHooks
from taskboard.status.models import (
    AwaitingApproval,
    ItemType,
    Settled,
    Status,
    WorkItem,
)

BASE_TIME = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

MakeItem = Callable[..., WorkItem]


@pytest.fixture
def make_item() -> MakeItem:
    """Factory for WorkItems with sensible defaults.

    ``status`` sets a settled state; ``pending=(requested, underlying)``
    sets an awaiting-approval state. ``created_at`` defaults to BASE_TIME
    plus ``id`` minutes so creation order follows id.
    """

    def _make(
        id: int,
        *,
        type: ItemType = ItemType.ACTIVITY,
        title: str | None = None,
        status: Status = Status.NOT_STARTED,
        pending: tuple[Status, Status] | None = None,
        **kwargs,
    ) -> WorkItem:
        if pending is not None:
            state = AwaitingApproval(requested=pending[0], underlying=pending[1])
        else:
            state = Settled(status)
        kwargs.setdefault("created_at", BASE_TIME + timedelta(minutes=id))
        return WorkItem(
            id=id,
            type=type,
            title=title or f"{type} {id}",
            state=state,
            **kwargs,
        )

    return _make


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()
