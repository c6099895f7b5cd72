"""Pytest tests for the terminal viewer rendering and snapshot loading."""

from __future__ import annotations

import json
import threading

from rich.console import Console
from rich.layout import Layout
from watchdog.events import FileModifiedEvent, FileMovedEvent

from mate_trainer import tui
from mate_trainer.response_schemas import build_session_state
from mate_trainer.snapshot import load_state_json, sync_state_json


def _render_text(state: dict) -> str:
    console = Console(record=True, width=120, color_system=None)
    console.print(tui.render_board(state))
    return console.export_text()


class TestRenderBoard:

    def test_sample_snapshot_renders(self):
        state = load_state_json(tui._SAMPLE_PUZZLE)
        assert state is not None
        layout = tui.render_board(state)
        assert isinstance(layout, Layout)

        text = _render_text(state)
        assert "El Molino" in text
        assert "★★☆" in text
        assert "Puzzle 1 of 3" in text
        assert "Hint: try playing Qh6+" in text
        assert "♕" in text

    def test_live_session_renders(self, real_session, presenter):
        real_session.load_puzzle(1)
        real_session.on_square_interacted("f7")
        real_session.on_square_interacted("f8")

        text = _render_text(build_session_state(real_session, presenter))
        assert "Solved: Mate simple" in text
        assert "Next puzzle available" in text

    def test_minimal_state(self):
        text = _render_text({})
        assert "Mate Trainer" in text


class TestSnapshotWatcher:

    def test_other_files_ignored(self, tmp_path):
        changed = threading.Event()
        handler = tui._SnapshotChanged(tmp_path / "current_puzzle.json", changed)
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "notes.txt")))
        assert not changed.is_set()

    def test_atomic_replace_flags_change(self, tmp_path):
        changed = threading.Event()
        handler = tui._SnapshotChanged(tmp_path / "current_puzzle.json", changed)
        handler.on_any_event(FileMovedEvent(
            str(tmp_path / "current_puzzle.tmp"), str(tmp_path / "current_puzzle.json"),
        ))
        assert changed.is_set()


class TestSnapshotFile:

    def test_sync_and_load(self, tmp_path):
        path = sync_state_json({"puzzle_name": "El Molino"}, tmp_path)
        assert load_state_json(path) == {"puzzle_name": "El Molino"}
        assert not (tmp_path / "current_puzzle.tmp").exists()

    def test_missing_file(self, tmp_path):
        assert load_state_json(tmp_path / "missing.json") is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "current_puzzle.json"
        path.write_text("{broken", encoding="utf-8")
        assert load_state_json(path) is None

    def test_non_dict_file(self, tmp_path):
        path = tmp_path / "current_puzzle.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        assert load_state_json(path) is None
