"""Shared test fixtures for the Mate Trainer.

Fixtures:
    fake_factory       - Builds scriptable FakeRules engines (no python-chess).
    fake_catalog       - Three small puzzles whose positions the fake understands.
    presenter          - A fresh ViewStatePresenter.
    session            - A started PuzzleSession on the fake catalog.
    real_session       - A started PuzzleSession on the built-in catalog.
    enable_validation  - Sets MATE_TRAINER_VALIDATE=1 for schema validation.
"""

from __future__ import annotations

import os

import pytest

from mate_trainer.catalog import PUZZLES
from mate_trainer.controller import PuzzleSession
from mate_trainer.models import Occupant, PuzzleDefinition
from mate_trainer.presenter import ViewStatePresenter
from mate_trainer.rules import RulesEngine


# ---------------------------------------------------------------------------
# Fake rules engine
# ---------------------------------------------------------------------------

WHITE_QUEEN = Occupant("white", "q")
WHITE_KING = Occupant("white", "k")
WHITE_ROOK = Occupant("white", "r")
BLACK_KING = Occupant("black", "k")

# Qf7-f8 mates; the rook a1/a2 and black king h8/h7 shuffle forever.
DEFAULT_PIECES = {
    "f7": WHITE_QUEEN,
    "h1": WHITE_KING,
    "a1": WHITE_ROOK,
    "h8": BLACK_KING,
}

DEFAULT_DESTINATIONS = {
    "f7": {"f8", "e7", "g7"},
    "a1": {"a2"},
    "a2": {"a1"},
    "h8": {"h7"},
    "h7": {"h8"},
    "h1": {"g1"},
    "g1": {"h1"},
}


class FakeRules(RulesEngine):
    """Table-driven rules engine.

    Pieces move between squares listed in *destinations*; a move in
    *mating_moves* puts the position into checkmate.
    """

    def __init__(
        self,
        fen: str,
        pieces: dict | None = None,
        destinations: dict | None = None,
        mating_moves=(("f7", "f8"),),
        turn: str = "white",
    ) -> None:
        self.fen = fen
        self.pieces = dict(DEFAULT_PIECES if pieces is None else pieces)
        source = DEFAULT_DESTINATIONS if destinations is None else destinations
        self.destinations = {sq: frozenset(targets) for sq, targets in source.items()}
        self.mating_moves = set(mating_moves)
        self.turn = turn
        self.moves: list[tuple[str, str]] = []
        self.promotions: list[str] = []
        self.checkmate = False
        self.reject_all = False

    def current_turn(self) -> str:
        return self.turn

    def occupant_at(self, square: str) -> Occupant | None:
        return self.pieces.get(square)

    def legal_destinations(self, square: str) -> frozenset[str]:
        occupant = self.pieces.get(square)
        if self.checkmate or occupant is None or occupant.side != self.turn:
            return frozenset()
        return frozenset(
            t for t in self.destinations.get(square, frozenset())
            if t not in self.pieces or self.pieces[t].side != self.turn
        )

    def apply_move(self, from_square: str, to_square: str, promotion: str = "q") -> bool:
        if self.reject_all or to_square not in self.legal_destinations(from_square):
            return False
        self.moves.append((from_square, to_square))
        self.promotions.append(promotion)
        self.pieces[to_square] = self.pieces.pop(from_square)
        self.turn = "black" if self.turn == "white" else "white"
        if (from_square, to_square) in self.mating_moves:
            self.checkmate = True
        return True

    def is_checkmate(self) -> bool:
        return self.checkmate

    def is_game_over(self) -> bool:
        return self.checkmate

    def half_move_count(self) -> int:
        return len(self.moves)

    def to_position_string(self) -> str:
        if not self.moves:
            return self.fen
        played = " ".join(f"{f}{t}" for f, t in self.moves)
        return f"{self.fen} [{played}]"


class FakeRulesFactory:
    """Engine factory that remembers every engine it created."""

    def __init__(self, **setup) -> None:
        self.setup = setup
        self.created: list[FakeRules] = []

    def __call__(self, fen: str) -> FakeRules:
        engine = FakeRules(fen, **self.setup)
        self.created.append(engine)
        return engine


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_catalog() -> tuple[PuzzleDefinition, ...]:
    return (
        PuzzleDefinition(
            name="El Molino",
            position="fake-molino",
            solution_line=("Qh6+", "Kxh6", "Bxf6#"),
            side_to_move="white",
            mate_distance=2,
            flavor_text="Strategy is the art of the battle.",
        ),
        PuzzleDefinition(
            name="Mate simple",
            position="fake-simple",
            solution_line=("Qf8#",),
            side_to_move="white",
            mate_distance=1,
            flavor_text="One move further.",
        ),
        PuzzleDefinition(
            name="Negras juegan",
            position="fake-black",
            solution_line=("Kh7", "Qf8#"),
            side_to_move="black",
            mate_distance=1,
        ),
    )


@pytest.fixture()
def fake_factory() -> FakeRulesFactory:
    return FakeRulesFactory()


@pytest.fixture()
def presenter() -> ViewStatePresenter:
    return ViewStatePresenter()


@pytest.fixture()
def session(presenter, fake_catalog, fake_factory) -> PuzzleSession:
    s = PuzzleSession(presenter, fake_catalog, engine_factory=fake_factory)
    s.start()
    return s


@pytest.fixture()
def real_session(presenter) -> PuzzleSession:
    s = PuzzleSession(presenter, PUZZLES)
    s.start()
    return s


# ---------------------------------------------------------------------------
# Schema validation fixture
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def enable_validation():
    """Set MATE_TRAINER_VALIDATE=1 for the test.

    Restores the original env var value after the test.
    """
    original = os.environ.get("MATE_TRAINER_VALIDATE")
    os.environ["MATE_TRAINER_VALIDATE"] = "1"
    yield
    if original is None:
        os.environ.pop("MATE_TRAINER_VALIDATE", None)
    else:
        os.environ["MATE_TRAINER_VALIDATE"] = original
