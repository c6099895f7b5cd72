"""MCP server for the Mate Trainer.

Exposes the live puzzle session to an MCP client via FastMCP. There is a
single session per server process; every tool call is one user
interaction. The session snapshot is synced to data/current_puzzle.json
after every call for the terminal viewer.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Add project root to path for imports
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

import chess
from mcp.server.fastmcp import FastMCP

from mate_trainer.catalog import PUZZLES, catalog_summary, load_catalog
from mate_trainer.controller import PuzzleSession
from mate_trainer.events import (
    AdvanceRequested,
    DragSettled,
    DragStarted,
    EventSource,
    HintRequested,
    PieceDropped,
    ResetRequested,
    SquareInteracted,
)
from mate_trainer.presenter import ViewStatePresenter
from mate_trainer.response_schemas import build_session_state, minify_session_state
from mate_trainer.snapshot import DATA_DIR, sync_state_json

mcp = FastMCP("mate-trainer")

_DATA_DIR = DATA_DIR

# The live session: presenter, controller and event source
_live: dict = {}


def _load_configured_catalog():
    """Catalog from MATE_TRAINER_CATALOG if set, else the built-in one."""
    path = os.environ.get("MATE_TRAINER_CATALOG")
    if not path:
        return PUZZLES
    return load_catalog(path)


def _get_live() -> dict:
    """Return the live session record, starting it on first use."""
    if not _live:
        presenter = ViewStatePresenter()
        session = PuzzleSession(presenter, _load_configured_catalog())
        events = EventSource()
        session.bind(events)
        session.start()
        _live.update(presenter=presenter, session=session, events=events)
    return _live


def _reset_live() -> None:
    """Drop the live session so the next call starts a fresh one."""
    _live.clear()


def _state_response(live: dict, **extra) -> dict:
    """Sync the full snapshot and return the minified one."""
    state = build_session_state(live["session"], live["presenter"])
    sync_state_json(state, _DATA_DIR)
    response = minify_session_state(state)
    response.update(extra)
    return response


def _invalid_square(square: str) -> dict | None:
    if square not in chess.SQUARE_NAMES:
        return {"error": f"Invalid square: {square}"}
    return None


@mcp.tool()
def get_puzzle_state() -> dict:
    """Get the current puzzle, position, selection and score.

    Returns:
        Minified session state.
    """
    return _state_response(_get_live())


@mcp.tool()
def list_puzzles() -> dict:
    """List the puzzles in the catalog in play order.

    Returns:
        Dict with a 'puzzles' list of index, name, mate_in and side.
    """
    live = _get_live()
    return {"puzzles": catalog_summary(live["session"].catalog)}


@mcp.tool()
def select_square(square: str) -> dict:
    """Click a square: select a piece, deselect, or move to a highlighted target.

    Args:
        square: Square name, e.g. 'f7'.

    Returns:
        Session state with 'moved' telling whether a move was played.
    """
    error = _invalid_square(square)
    if error:
        return error

    live = _get_live()
    moved = live["events"].dispatch(SquareInteracted(square))
    return _state_response(live, moved=moved)


@mcp.tool()
def drag_piece(source: str, target: str) -> dict:
    """Drag the piece on source and drop it on target.

    Args:
        source: Square the piece is picked up from.
        target: Square it is dropped on.

    Returns:
        Session state with 'result': 'accept', 'snapback' or 'denied'.
    """
    error = _invalid_square(source) or _invalid_square(target)
    if error:
        return error

    live = _get_live()
    events = live["events"]
    occupant = live["session"].engine.occupant_at(source)
    if occupant is None:
        return {"error": f"No piece on {source}"}

    if not events.dispatch(DragStarted(source, occupant.descriptor)):
        return _state_response(live, result="denied")

    result = events.dispatch(PieceDropped(source, target))
    events.dispatch(DragSettled())
    return _state_response(live, result=result)


@mcp.tool()
def request_hint() -> dict:
    """Reveal the next move of the solution. Costs a star (minimum one).

    Returns:
        Session state with 'hint' (None once every move has been shown).
    """
    live = _get_live()
    hint = live["events"].dispatch(HintRequested())
    return _state_response(live, hint=hint)


@mcp.tool()
def next_puzzle() -> dict:
    """Advance to the next puzzle, wrapping to the first after the last.

    Returns:
        Session state of the newly loaded puzzle.
    """
    live = _get_live()
    live["events"].dispatch(AdvanceRequested())
    return _state_response(live)


@mcp.tool()
def reset_puzzle() -> dict:
    """Restart the current puzzle, clearing hints and moves.

    Returns:
        Session state of the reloaded puzzle.
    """
    live = _get_live()
    live["events"].dispatch(ResetRequested())
    return _state_response(live)


if __name__ == "__main__":
    mcp.run()
