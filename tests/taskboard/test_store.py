"""Tests for the JSON item file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskboard.status.models import Status
from taskboard.store import StoreError, items_to_json, load_items, save_items


class TestLoadItems:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(StoreError, match="not found"):
            load_items(tmp_path / "items.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(StoreError, match="Invalid JSON"):
            load_items(path)

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text('{"id": 1}', encoding="utf-8")
        with pytest.raises(StoreError, match="JSON array"):
            load_items(path)

    def test_bad_item_reports_position(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(
            json.dumps([{"id": 1, "type": "activity"}, {"id": 2, "type": "epic"}]),
            encoding="utf-8",
        )
        with pytest.raises(StoreError, match="position 1"):
            load_items(path)


class TestSaveItems:
    def test_roundtrip(self, tmp_path: Path, make_item) -> None:
        path = tmp_path / "board" / "items.json"
        items = [
            make_item(1, status=Status.IN_PROGRESS, kanban_order=10),
            make_item(2, pending=(Status.COMPLETED, Status.IN_PROGRESS), use_workflow=True),
        ]
        save_items(path, items)

        loaded = load_items(path)
        assert [i.key for i in loaded] == [i.key for i in items]
        assert [i.state for i in loaded] == [i.state for i in items]
        assert not (tmp_path / "board" / "items.json.tmp").exists()

    def test_output_is_deterministic(self, make_item) -> None:
        items = [make_item(1)]
        assert items_to_json(items) == items_to_json(items)
        assert items_to_json(items).endswith("\n")


class TestLoadItemsShape:
    def test_non_object_item(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text("[1]", encoding="utf-8")
        with pytest.raises(StoreError, match="position 0: expected an object"):
            load_items(path)

    def test_history_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(
            json.dumps([{"id": 1, "type": "activity", "history": {"a": 1}}]),
            encoding="utf-8",
        )
        with pytest.raises(StoreError, match="history must be a list"):
            load_items(path)

    def test_history_entry_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "items.json"
        path.write_text(
            json.dumps([{"id": 1, "type": "activity"}, {"id": 2, "type": "activity", "history": ["done"]}]),
            encoding="utf-8",
        )
        with pytest.raises(StoreError, match="position 1: history entry 0"):
            load_items(path)


class TestSaveItemsFailure:
    def test_failed_replace_removes_temp_file(
        self, tmp_path: Path, make_item, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _refuse(src, dst):
            raise OSError("read-only target")

        monkeypatch.setattr("taskboard.store.os.replace", _refuse)
        path = tmp_path / "items.json"
        with pytest.raises(StoreError, match="Failed to write"):
            save_items(path, [make_item(1)])
        assert not (tmp_path / "items.json.tmp").exists()
        assert not path.exists()
