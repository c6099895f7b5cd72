#!/usr/bin/env python3
"""Validate puzzle catalogs for correct FENs and legal solution lines.

Every puzzle must parse, have the declared side to move, play its SAN
solution legally in sequence and finish in checkmate within its mate
distance.
"""

from __future__ import annotations

import argparse
import sys

import chess

from mate_trainer.catalog import PUZZLES, load_catalog
from mate_trainer.models import PuzzleDefinition


def validate_puzzle(puzzle: PuzzleDefinition, index: int = 0) -> list[str]:
    """Validate a single puzzle. Returns list of error messages."""
    errors = []
    prefix = f"[{index}] {puzzle.name}"

    try:
        board = chess.Board(puzzle.position)
    except ValueError as e:
        errors.append(f"{prefix}: invalid FEN '{puzzle.position}': {e}")
        return errors

    if not board.is_valid():
        errors.append(f"{prefix}: impossible position '{puzzle.position}'")
        return errors

    expected_turn = chess.WHITE if puzzle.side_to_move == "white" else chess.BLACK
    if board.turn != expected_turn:
        errors.append(
            f"{prefix}: side '{puzzle.side_to_move}' does not match FEN turn"
        )

    solver_moves = 0
    for i, san in enumerate(puzzle.solution_line):
        try:
            move = board.parse_san(san)
        except ValueError:
            errors.append(
                f"{prefix}: illegal move '{san}' at step {i} (FEN: {board.fen()})"
            )
            return errors
        if board.turn == expected_turn:
            solver_moves += 1
        board.push(move)

    if not board.is_checkmate():
        errors.append(f"{prefix}: solution line does not end in checkmate")

    if solver_moves > puzzle.mate_distance:
        errors.append(
            f"{prefix}: solution needs {solver_moves} moves, "
            f"declared mate in {puzzle.mate_distance}"
        )

    return errors


def validate_catalog(catalog: tuple[PuzzleDefinition, ...]) -> list[str]:
    """Validate every puzzle in *catalog*."""
    errors = []
    for i, puzzle in enumerate(catalog):
        errors.extend(validate_puzzle(puzzle, i))
    return errors


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate Mate Trainer puzzle catalogs")
    parser.add_argument(
        "--catalog", default=None,
        help="JSON catalog file (default: built-in catalog)",
    )
    args = parser.parse_args()

    if args.catalog:
        try:
            catalog = load_catalog(args.catalog)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        catalog = PUZZLES

    errors = validate_catalog(catalog)
    for err in errors:
        print(err, file=sys.stderr)

    if errors:
        print(f"FAILED: {len(errors)} error(s) in {len(catalog)} puzzles", file=sys.stderr)
        sys.exit(1)
    print(f"OK: {len(catalog)} puzzles valid")


if __name__ == "__main__":
    main()
