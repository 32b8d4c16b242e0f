"""Unit tests for the transition matrix and alias resolution."""

from __future__ import annotations

import pytest

from taskboard.status.models import Status
from taskboard.status.transitions import (
    ALLOWED_TRANSITIONS,
    CANONICAL_STATUSES,
    TERMINAL_STATUSES,
    is_terminal,
    resolve_status,
    resolve_status_alias,
    validate_transition,
)


class TestConstants:
    def test_canonical_statuses(self) -> None:
        assert CANONICAL_STATUSES == (
            "not_started",
            "in_progress",
            "completed",
            "pending_approval",
        )

    def test_allowed_transitions_count(self) -> None:
        assert len(ALLOWED_TRANSITIONS) == 3

    def test_terminal_statuses(self) -> None:
        assert TERMINAL_STATUSES == frozenset({"completed"})


class TestResolveAlias:
    def test_shorthands(self) -> None:
        assert resolve_status_alias("doing") == "in_progress"
        assert resolve_status_alias("done") == "completed"

    def test_tracker_labels(self) -> None:
        assert resolve_status("شروع نشده") == Status.NOT_STARTED
        assert resolve_status("در حال اجرا") == Status.IN_PROGRESS
        assert resolve_status("خاتمه یافته") == Status.COMPLETED
        assert resolve_status("ارسال برای تایید") == Status.PENDING_APPROVAL

    def test_case_and_whitespace(self) -> None:
        assert resolve_status_alias("  Doing ") == "in_progress"
        assert resolve_status("IN_PROGRESS") == Status.IN_PROGRESS

    def test_passthrough_status_instance(self) -> None:
        assert resolve_status(Status.COMPLETED) is Status.COMPLETED

    def test_unknown_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            resolve_status("archived")


class TestIsTerminal:
    def test_completed_is_terminal(self) -> None:
        assert is_terminal("completed") is True
        assert is_terminal("done") is True

    def test_others_are_not(self) -> None:
        assert is_terminal("not_started") is False
        assert is_terminal("in_progress") is False


class TestLegalTransitions:
    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            ("not_started", "in_progress"),
            ("not_started", "completed"),
            ("in_progress", "completed"),
            ("not_started", "doing"),
        ],
    )
    def test_allowed(self, from_status: str, to_status: str) -> None:
        assert validate_transition(from_status, to_status) == (True, None)


class TestIllegalTransitions:
    def test_backwards_is_illegal(self) -> None:
        ok, msg = validate_transition("in_progress", "not_started")
        assert not ok
        assert "Illegal transition" in msg

    @pytest.mark.parametrize("target", ["not_started", "in_progress", "completed"])
    def test_completed_is_absorbing(self, target: str) -> None:
        ok, msg = validate_transition("completed", target)
        assert not ok
        assert "terminal" in msg

    def test_same_status_is_rejected(self) -> None:
        ok, msg = validate_transition("in_progress", "in_progress")
        assert not ok
        assert msg == "Item is already in_progress"

    def test_pending_overlay_is_not_a_target(self) -> None:
        ok, msg = validate_transition("not_started", "pending_approval")
        assert not ok
        assert "not a base status" in msg

    def test_pending_overlay_is_not_a_source(self) -> None:
        ok, msg = validate_transition("pending_approval", "completed")
        assert not ok
        assert "not a base status" in msg

    def test_unknown_status(self) -> None:
        ok, msg = validate_transition("not_started", "blocked")
        assert not ok
        assert "Unknown status" in msg
