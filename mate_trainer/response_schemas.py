"""Session state snapshots, minification and response schemas.

build_session_state() produces the full snapshot that is synced to
data/current_puzzle.json for the terminal viewer and served to the
browser. minify_session_state() trims it for tool responses.
"""

from __future__ import annotations

import os
from dataclasses import asdict
from typing import TYPE_CHECKING

from mate_trainer.rules import ChessRules

if TYPE_CHECKING:
    from mate_trainer.controller import PuzzleSession
    from mate_trainer.presenter import ViewStatePresenter


def build_session_state(session: PuzzleSession, presenter: ViewStatePresenter) -> dict:
    """Build the full snapshot of a session and what is on screen.

    Args:
        session: The live puzzle session.
        presenter: The presenter the session renders into.

    Returns:
        JSON-serializable dict.
    """
    state = session.state
    puzzle = session.puzzle
    engine = session.engine
    view = presenter.view

    move_list: list[str] = []
    if isinstance(engine, ChessRules):
        move_list = engine.san_history()

    return {
        "puzzle_index": state.catalog_index,
        "puzzle_count": len(session.catalog),
        "puzzle_name": puzzle.name,
        "mate_in": puzzle.mate_distance,
        "side": puzzle.side_to_move,
        "fen": view.fen,
        "turn": engine.current_turn(),
        "orientation": view.orientation,
        "selected_square": state.selected_square,
        "legal_targets": sorted(state.legal_targets),
        "highlights": list(view.highlights),
        "hints_used": state.hints_used,
        "hints_available": len(puzzle.solution_line) - state.hints_used,
        "star_rating": state.star_rating,
        "stars": view.stars,
        "status": view.status,
        "progress": view.progress,
        "advance_visible": view.advance_visible,
        "solved": state.solved,
        "is_game_over": engine.is_game_over(),
        "half_moves": engine.half_move_count(),
        "max_half_moves": puzzle.max_plies,
        "move_list": move_list,
        "last_hint": view.last_hint,
        "notices": [asdict(n) for n in view.notices],
        "notice_seq": view.notice_seq,
    }


def minify_session_state(state: dict) -> dict:
    """Minify a session snapshot for tool responses.

    Drops presentation-only fields, compacts move_list to a PGN string
    and keeps only the most recent notice.
    """
    result = {}

    for key in (
        "puzzle_index", "puzzle_name", "mate_in", "fen", "turn",
        "selected_square", "legal_targets", "hints_used", "star_rating",
        "progress", "solved", "half_moves", "last_hint",
    ):
        if key in state:
            result[key] = state[key]

    move_list = state.get("move_list", [])
    if isinstance(move_list, list):
        result["move_list"] = _moves_to_pgn_string(move_list, state.get("side", "white"))
    else:
        result["move_list"] = move_list

    notices = state.get("notices", [])
    result["last_notice"] = notices[-1] if notices else None

    # Removed fields: orientation, highlights, stars, status, notices history

    return result


def _moves_to_pgn_string(moves: list[str], first_side: str = "white") -> str:
    """Convert a list of SAN moves to a PGN move string.

    E.g., ['Qh6+', 'Kxh6', 'Bxf6#'] -> '1.Qh6+ Kxh6 2.Bxf6#'. When black
    moves first the line opens with '1...'.
    """
    if not moves:
        return ""

    parts = []
    offset = 1 if first_side == "black" else 0
    for i, move in enumerate(moves):
        ply = i + offset
        move_num = ply // 2 + 1
        if ply % 2 == 0:
            parts.append(f"{move_num}.{move}")
        elif i == 0:
            parts.append(f"{move_num}...{move}")
        else:
            parts.append(move)

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Validation schemas (dict-based)
# ---------------------------------------------------------------------------

SESSION_STATE_SCHEMA = {
    "puzzle_index": int,
    "puzzle_count": int,
    "puzzle_name": str,
    "mate_in": int,
    "fen": str,
    "turn": str,
    "selected_square": (str, type(None)),
    "legal_targets": list,
    "hints_used": int,
    "star_rating": int,
    "stars": str,
    "status": str,
    "progress": str,
    "advance_visible": bool,
    "solved": bool,
    "half_moves": int,
    "move_list": list,
    "last_hint": (str, type(None)),
    "notices": list,
    "notice_seq": int,
}

MINIFIED_STATE_SCHEMA = {
    "puzzle_index": int,
    "puzzle_name": str,
    "fen": str,
    "selected_square": (str, type(None)),
    "legal_targets": list,
    "hints_used": int,
    "star_rating": int,
    "solved": bool,
    "move_list": str,
    "last_notice": (dict, type(None)),
}

ERROR_SCHEMA = {
    "error": str,
}


def validate_response(response: dict, schema: dict) -> list[str]:
    """Validate a response dict against a schema.

    Only runs when MATE_TRAINER_VALIDATE=1 env var is set.

    Args:
        response: Response dict to validate.
        schema: Dict mapping key names to expected types (or tuple of types).

    Returns:
        List of validation error strings (empty = valid).
    """
    if os.environ.get("MATE_TRAINER_VALIDATE") != "1":
        return []

    errors = []

    if not isinstance(response, dict):
        errors.append(f"Response is not a dict: {type(response).__name__}")
        return errors

    for key, expected_types in schema.items():
        if key not in response:
            errors.append(f"Missing key: {key}")
            continue

        value = response[key]
        if isinstance(expected_types, tuple):
            if not isinstance(value, expected_types):
                type_names = ", ".join(t.__name__ for t in expected_types)
                errors.append(
                    f"Key '{key}': expected ({type_names}), "
                    f"got {type(value).__name__}"
                )
        else:
            if not isinstance(value, expected_types):
                errors.append(
                    f"Key '{key}': expected {expected_types.__name__}, "
                    f"got {type(value).__name__}"
                )

    return errors
