"""CLI tests for the item and view command groups."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskboard.cli import app
from taskboard.store import load_items, save_items
from taskboard.status.models import ApprovalStatus, ItemKey, Status

runner = CliRunner()


@pytest.fixture
def items_file(tmp_path: Path, make_item, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "items.json"
    save_items(
        path,
        [
            make_item(1, title="Survey", responsible="sara", kanban_order=0),
            make_item(2, title="Design", status=Status.IN_PROGRESS, parent_id=1, responsible="omid"),
            make_item(
                3,
                title="Permit",
                use_workflow=True,
                approver="boss",
                parent_id=1,
                parent_name="Bridge",
                kanban_order=10,
            ),
        ],
    )
    return path


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def _load(path: Path, key: str):
    wanted = ItemKey.parse(key)
    return next(i for i in load_items(path) if i.key == wanted)


class TestTransition:
    def test_direct_with_write(self, items_file: Path) -> None:
        result = _invoke("item", "transition", "activity:1", "--to", "in_progress",
                         "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["status"] == "in_progress"
        assert _load(items_file, "activity:1").status == Status.IN_PROGRESS

    def test_without_write_leaves_file(self, items_file: Path) -> None:
        before = items_file.read_text(encoding="utf-8")
        result = _invoke("item", "transition", "activity:1", "--to", "doing", "--items", str(items_file))
        assert result.exit_code == 0
        assert items_file.read_text(encoding="utf-8") == before

    def test_workflow_item_goes_pending(self, items_file: Path) -> None:
        result = _invoke("item", "transition", "activity:3", "--to", "completed",
                         "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "pending_approval"
        assert data["requested_status"] == "completed"
        assert _load(items_file, "activity:3").is_pending

    def test_illegal_transition_reports_error(self, items_file: Path) -> None:
        result = _invoke("item", "transition", "activity:2", "--to", "not_started",
                         "--items", str(items_file), "--json")
        assert result.exit_code == 1
        assert "Illegal transition" in json.loads(result.stdout)["error"]

    def test_unknown_item(self, items_file: Path) -> None:
        result = _invoke("item", "transition", "action:1", "--to", "completed", "--items", str(items_file))
        assert result.exit_code == 1
        assert "No item" in result.output

    def test_bad_key(self, items_file: Path) -> None:
        result = _invoke("item", "transition", "activity-1", "--to", "completed", "--items", str(items_file))
        assert result.exit_code == 1

    def test_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = _invoke("item", "transition", "activity:1", "--to", "completed",
                         "--items", str(tmp_path / "nope.json"), "--json")
        assert result.exit_code == 1
        assert "not found" in json.loads(result.stdout)["error"]


class TestDecide:
    def test_reject(self, items_file: Path) -> None:
        _invoke("item", "transition", "activity:3", "--to", "completed", "--items", str(items_file), "--write")
        result = _invoke("item", "decide", "activity:3", "--decision", "rejected",
                         "--actor", "boss", "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0, result.output
        item = _load(items_file, "activity:3")
        assert item.status == Status.NOT_STARTED
        assert item.approval_status == ApprovalStatus.REJECTED
        assert item.history[-1].actor == "boss"

    def test_nothing_pending(self, items_file: Path) -> None:
        result = _invoke("item", "decide", "activity:1", "--decision", "approved",
                         "--items", str(items_file), "--json")
        assert result.exit_code == 1
        assert "no pending approval" in json.loads(result.stdout)["error"]


class TestReorderAndMove:
    def test_reorder(self, items_file: Path) -> None:
        result = _invoke("item", "reorder", "activity:3", "--index", "0",
                         "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0
        updates = json.loads(result.stdout)["updates"]
        assert {u["id"]: u["new_order"] for u in updates} == {3: 0, 1: 10}
        assert _load(items_file, "activity:3").kanban_order == 0

    def test_illegal_move_is_a_silent_noop(self, items_file: Path) -> None:
        before = items_file.read_text(encoding="utf-8")
        result = _invoke("item", "move", "activity:2", "--to", "not_started",
                         "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["outcome"] == "rejected"
        assert items_file.read_text(encoding="utf-8") == before

    def test_legal_move(self, items_file: Path) -> None:
        result = _invoke("item", "move", "activity:1", "--to", "in_progress",
                         "--items", str(items_file), "--write", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["outcome"] == "moved"
        moved = _load(items_file, "activity:1")
        assert moved.status == Status.IN_PROGRESS
        assert moved.kanban_order == 10


class TestChain:
    def test_json_tree(self, items_file: Path) -> None:
        result = _invoke("item", "chain", "activity:3", "--items", str(items_file), "--json")
        assert result.exit_code == 0
        tree = json.loads(result.stdout)
        assert tree["title"] == "Survey"
        assert {c["key"] for c in tree["children"]} == {"activity:2", "activity:3"}
        assert [c["is_target"] for c in tree["children"] if c["key"] == "activity:3"] == [True]

    def test_rich_tree(self, items_file: Path) -> None:
        result = _invoke("item", "chain", "activity:2", "--items", str(items_file))
        assert result.exit_code == 0
        assert "Survey" in result.output
        assert "Design" in result.output


class TestViews:
    def test_board_json(self, items_file: Path) -> None:
        result = _invoke("view", "board", "--items", str(items_file), "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [c["key"] for c in data["not_started"]] == ["activity:1", "activity:3"]
        assert [c["key"] for c in data["in_progress"]] == ["activity:2"]
        assert data["completed_total"] == 0

    def test_board_table(self, items_file: Path) -> None:
        result = _invoke("view", "board", "--items", str(items_file))
        assert result.exit_code == 0
        assert "Not started" in result.output

    def test_delegated(self, items_file: Path) -> None:
        result = _invoke("view", "delegated", "sara", "--items", str(items_file), "--json")
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [r["key"] for r in rows] == ["activity:3", "activity:2"]
        assert {r["parent_title"] for r in rows} == {"Survey"}

    def test_approvals(self, items_file: Path) -> None:
        _invoke("item", "transition", "activity:3", "--to", "in_progress", "--items", str(items_file), "--write")
        result = _invoke("view", "approvals", "boss", "--items", str(items_file), "--json")
        assert result.exit_code == 0
        groups = json.loads(result.stdout)
        assert list(groups) == ["Bridge"]
        assert groups["Bridge"][0]["requested_status"] == "in_progress"

    def test_completed(self, items_file: Path) -> None:
        _invoke("item", "transition", "activity:1", "--to", "completed", "--items", str(items_file), "--write")
        result = _invoke("view", "completed", "--items", str(items_file), "--json")
        assert result.exit_code == 0
        [row] = json.loads(result.stdout)
        assert row["key"] == "activity:1"
        assert row["completed_at"] is not None


class TestConfigIntegration:
    def test_order_step_from_project_config(self, items_file: Path) -> None:
        config_dir = items_file.parent / ".taskboard"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("board:\n  order_step: 100\n", encoding="utf-8")
        result = _invoke("item", "move", "activity:1", "--to", "in_progress",
                         "--items", str(items_file), "--write")
        assert result.exit_code == 0
        assert _load(items_file, "activity:1").kanban_order == 100

