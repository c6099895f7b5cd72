"""Rules-engine contract and its python-chess implementation.

The session controller only talks to the RulesEngine interface, so it can
be driven by a small fake in tests. ChessRules wraps a chess.Board that is
created fresh for every puzzle load.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import chess

from mate_trainer.models import Occupant


def _side_name(color: chess.Color) -> str:
    return "white" if color == chess.WHITE else "black"


class RulesEngine(ABC):
    """What the controller needs from a chess rules engine."""

    @abstractmethod
    def current_turn(self) -> str:
        """Side to move: 'white' or 'black'."""

    @abstractmethod
    def occupant_at(self, square: str) -> Occupant | None:
        """Piece on *square*, or None when empty or not a board square."""

    @abstractmethod
    def legal_destinations(self, square: str) -> frozenset[str]:
        """Squares the piece on *square* may legally move to.

        Empty for empty squares and for names that are not board squares.
        """

    @abstractmethod
    def apply_move(self, from_square: str, to_square: str, promotion: str = "q") -> bool:
        """Play a move. Returns False (and changes nothing) if illegal."""

    @abstractmethod
    def is_checkmate(self) -> bool: ...

    @abstractmethod
    def is_game_over(self) -> bool: ...

    @abstractmethod
    def half_move_count(self) -> int:
        """Plies played since the engine was created."""

    @abstractmethod
    def to_position_string(self) -> str:
        """Current position as FEN."""


class ChessRules(RulesEngine):
    """RulesEngine backed by python-chess."""

    def __init__(self, fen: str) -> None:
        """Set up the board from *fen*.

        Raises:
            ValueError: If the FEN cannot be parsed or describes an
                impossible position.
        """
        board = chess.Board(fen)
        if not board.is_valid():
            raise ValueError(f"Invalid FEN position: {fen}")
        self._board = board

    @property
    def board(self) -> chess.Board:
        return self._board

    def current_turn(self) -> str:
        return _side_name(self._board.turn)

    def occupant_at(self, square: str) -> Occupant | None:
        if square not in chess.SQUARE_NAMES:
            return None
        piece = self._board.piece_at(chess.parse_square(square))
        if piece is None:
            return None
        return Occupant(side=_side_name(piece.color), kind=piece.symbol().lower())

    def legal_destinations(self, square: str) -> frozenset[str]:
        if square not in chess.SQUARE_NAMES:
            return frozenset()
        sq = chess.parse_square(square)
        return frozenset(
            chess.square_name(m.to_square)
            for m in self._board.legal_moves
            if m.from_square == sq
        )

    def apply_move(self, from_square: str, to_square: str, promotion: str = "q") -> bool:
        try:
            from_sq = chess.parse_square(from_square)
            to_sq = chess.parse_square(to_square)
        except ValueError:
            return False

        move = chess.Move(from_sq, to_sq)
        piece = self._board.piece_at(from_sq)
        if (
            piece is not None
            and piece.piece_type == chess.PAWN
            and chess.square_rank(to_sq) in (0, 7)
        ):
            move.promotion = chess.Piece.from_symbol(promotion.lower()).piece_type

        if move not in self._board.legal_moves:
            return False
        self._board.push(move)
        return True

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_game_over(self) -> bool:
        return self._board.is_game_over()

    def half_move_count(self) -> int:
        return len(self._board.move_stack)

    def to_position_string(self) -> str:
        return self._board.fen()

    def san_history(self) -> list[str]:
        """Moves played so far in SAN, replayed from the starting position."""
        replay = self._board.root()
        history = []
        for move in self._board.move_stack:
            history.append(replay.san(move))
            replay.push(move)
        return history
