"""Puzzle catalog for the Mate Trainer.

The built-in catalog is a short, ordered list of mate-in-N positions.
A replacement catalog can be loaded from a JSON array whose entries use
the keys name, fen, solution, side, mate_in and quote.
"""

from __future__ import annotations

import json
from pathlib import Path

import chess

from mate_trainer.models import PuzzleDefinition

PUZZLES: tuple[PuzzleDefinition, ...] = (
    PuzzleDefinition(
        name="El Molino",
        position="r1bq2r1/b4pk1/p1pp1p2/1p2pP2/1P2P1PB/3P4/1PPQ2P1/R3K2R w - - 0 1",
        solution_line=("Qh6+", "Kxh6", "Bxf6#"),
        side_to_move="white",
        mate_distance=2,
        flavor_text="“Strategy is the art of the battle.” – Emanuel Lasker",
    ),
    PuzzleDefinition(
        name="Mate simple",
        position="7k/5Q2/6K1/8/8/8/8/8 w - - 0 1",
        solution_line=("Qf8#",),
        side_to_move="white",
        mate_distance=1,
        flavor_text="“Seeing one move further than your opponent makes the difference.”",
    ),
    PuzzleDefinition(
        name="Dama y torre",
        position="3r2k1/5ppp/8/8/8/8/4QPPP/4R1K1 w - - 0 1",
        solution_line=("Qe8+", "Rxe8", "Rxe8#"),
        side_to_move="white",
        mate_distance=2,
        flavor_text="“Patience and long-term vision win in the end.”",
    ),
)

_REQUIRED_KEYS = ("name", "fen", "solution", "side", "mate_in")

_SIDE_ALIASES = {"w": "white", "b": "black", "white": "white", "black": "black"}


def puzzle_from_dict(entry: dict, index: int = 0) -> PuzzleDefinition:
    """Build a PuzzleDefinition from a catalog JSON entry.

    Args:
        entry: Dict with name, fen, solution, side, mate_in and
            optionally quote.
        index: Position in the catalog file, used in error messages.

    Returns:
        The parsed puzzle.

    Raises:
        ValueError: If a key is missing, a value has the wrong shape or
            the FEN does not describe a legal position.
    """
    if not isinstance(entry, dict):
        raise ValueError(f"Catalog entry {index} must be an object")
    missing = [key for key in _REQUIRED_KEYS if key not in entry]
    if missing:
        raise ValueError(f"Catalog entry {index} missing keys: {', '.join(missing)}")

    solution = entry["solution"]
    if not isinstance(solution, list) or not all(isinstance(m, str) for m in solution):
        raise ValueError(f"Catalog entry {index}: solution must be a list of SAN strings")

    side = _SIDE_ALIASES.get(str(entry["side"]).lower())
    if side is None:
        raise ValueError(f"Catalog entry {index}: unknown side {entry['side']!r}")

    mate_in = entry["mate_in"]
    if not isinstance(mate_in, int) or isinstance(mate_in, bool):
        raise ValueError(f"Catalog entry {index}: mate_in must be an integer")

    fen = str(entry["fen"])
    try:
        board = chess.Board(fen)
    except ValueError as exc:
        raise ValueError(f"Catalog entry {index}: invalid FEN {fen!r}: {exc}") from exc
    if not board.is_valid():
        raise ValueError(f"Catalog entry {index}: impossible position {fen!r}")

    return PuzzleDefinition(
        name=str(entry["name"]),
        position=fen,
        solution_line=tuple(solution),
        side_to_move=side,
        mate_distance=mate_in,
        flavor_text=str(entry.get("quote", "")),
    )


def load_catalog(path: str | Path) -> tuple[PuzzleDefinition, ...]:
    """Load an ordered catalog from a JSON file.

    Raises:
        ValueError: If the file is not a non-empty JSON array of valid
            puzzle entries.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Catalog {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list) or not data:
        raise ValueError(f"Catalog {path} must contain a non-empty JSON array")

    return tuple(puzzle_from_dict(entry, i) for i, entry in enumerate(data))


def catalog_summary(catalog: tuple[PuzzleDefinition, ...]) -> list[dict]:
    """Short per-puzzle listing for the API and tool surfaces."""
    return [
        {
            "index": i,
            "name": p.name,
            "mate_in": p.mate_distance,
            "side": p.side_to_move,
        }
        for i, p in enumerate(catalog)
    ]
