"""Per-tool MCP integration tests verifying minified response shapes.

Tests all MCP server tools against the built-in catalog, the synced
snapshot for the terminal viewer, and schema validation.

Run:
    uv run pytest tests/test_mcp_tools.py -v
"""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from mate_trainer.response_schemas import (
    ERROR_SCHEMA,
    MINIFIED_STATE_SCHEMA,
    SESSION_STATE_SCHEMA,
    validate_response,
)
from mate_trainer.snapshot import SNAPSHOT_NAME

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Import server module from hyphenated directory via importlib
_server_path = _PROJECT_ROOT / "mcp-server" / "server.py"
_spec = importlib.util.spec_from_file_location("mcp_server_tools_test", _server_path)
_server = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(_server)

get_puzzle_state = _server.get_puzzle_state
list_puzzles = _server.list_puzzles
select_square = _server.select_square
drag_piece = _server.drag_piece
request_hint = _server.request_hint
next_puzzle = _server.next_puzzle
reset_puzzle = _server.reset_puzzle


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _assert_minified_state(response: dict) -> None:
    """Assert a response is a properly minified session state."""
    for field in ("highlights", "orientation", "notices", "stars", "status"):
        assert field not in response, f"Removed field '{field}' found in response"
    errors = validate_response(response, MINIFIED_STATE_SCHEMA)
    assert not errors, f"Schema validation errors: {errors}"


@pytest.fixture(autouse=True)
def _fresh_session(tmp_path, monkeypatch):
    """Fresh live session per test, snapshot redirected to tmp_path."""
    monkeypatch.setattr(_server, "_DATA_DIR", tmp_path)
    monkeypatch.delenv("MATE_TRAINER_CATALOG", raising=False)
    _server._reset_live()
    yield
    _server._reset_live()


def _read_snapshot(tmp_path) -> dict:
    return json.loads((tmp_path / SNAPSHOT_NAME).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# State and listing
# ---------------------------------------------------------------------------


class TestGetPuzzleState:

    def test_minified_response_shape(self):
        response = get_puzzle_state()
        _assert_minified_state(response)
        assert response["puzzle_name"] == "El Molino"
        assert response["move_list"] == ""
        assert response["last_notice"] is None

    def test_snapshot_has_full_state(self, tmp_path):
        get_puzzle_state()
        snapshot = _read_snapshot(tmp_path)
        assert not validate_response(snapshot, SESSION_STATE_SCHEMA)
        assert snapshot["stars"] == "★★★"
        assert isinstance(snapshot["notices"], list)

    def test_list_puzzles(self):
        response = list_puzzles()
        assert [p["mate_in"] for p in response["puzzles"]] == [2, 1, 2]

    def test_catalog_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{
            "name": "Solo", "fen": "7k/5Q2/6K1/8/8/8/8/8 w - - 0 1",
            "solution": ["Qf8#"], "side": "w", "mate_in": 1,
        }]), encoding="utf-8")
        monkeypatch.setenv("MATE_TRAINER_CATALOG", str(path))
        assert [p["name"] for p in list_puzzles()["puzzles"]] == ["Solo"]


# ---------------------------------------------------------------------------
# Interaction tools
# ---------------------------------------------------------------------------


class TestSelectSquare:

    def test_select_then_move(self):
        response = select_square("d2")
        _assert_minified_state(response)
        assert response["moved"] is False
        assert response["selected_square"] == "d2"

        response = select_square("h6")
        assert response["moved"] is True
        assert response["move_list"] == "1.Qh6+"
        assert response["turn"] == "black"

    def test_invalid_square(self):
        response = select_square("i9")
        assert not validate_response(response, ERROR_SCHEMA)
        assert "Invalid square" in response["error"]


class TestDragPiece:

    def test_scripted_solution(self):
        assert drag_piece("d2", "h6")["result"] == "accept"
        assert drag_piece("g7", "h6")["result"] == "accept"
        response = drag_piece("h4", "f6")
        assert response["result"] == "accept"
        assert response["solved"] is True
        assert response["move_list"] == "1.Qh6+ Kxh6 2.Bxf6#"
        assert response["last_notice"]["kind"] == "solved"

    def test_wrong_side_denied(self):
        assert drag_piece("g7", "h6")["result"] == "denied"

    def test_illegal_drop_snaps_back(self):
        response = drag_piece("d2", "d7")
        assert response["result"] == "snapback"
        assert response["half_moves"] == 0

    def test_empty_source(self):
        assert "error" in drag_piece("e3", "e4")

    def test_invalid_target(self):
        assert "error" in drag_piece("d2", "offboard")


class TestHintsAndAdvance:

    def test_hint_costs_stars(self):
        response = request_hint()
        assert response["hint"] == "Qh6+"
        assert response["star_rating"] == 2
        assert response["last_notice"]["kind"] == "hint"

    def test_hint_pool_exhausts(self):
        next_puzzle()
        assert request_hint()["hint"] == "Qf8#"
        response = request_hint()
        assert response["hint"] is None
        assert response["hints_used"] == 1

    def test_next_wraps_with_completion_notice(self):
        next_puzzle()
        next_puzzle()
        response = next_puzzle()
        assert response["puzzle_index"] == 0
        assert response["last_notice"]["kind"] == "complete"
        assert response["progress"] == "Puzzle 1 of 3"

    def test_reset_puzzle(self):
        select_square("d2")
        select_square("h6")
        request_hint()
        response = reset_puzzle()
        assert response["half_moves"] == 0
        assert response["hints_used"] == 0
        assert response["star_rating"] == 3
