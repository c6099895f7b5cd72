"""Shared data models for the Mate Trainer.

PuzzleDefinition is the static catalog entry, SessionState is the single
mutable state owned by the session controller, and ViewState is the
snapshot the presentation surfaces (browser, tools, terminal) consume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mate_trainer.rules import RulesEngine

SIDES = ("white", "black")

MAX_STARS = 3


@dataclass(frozen=True)
class PuzzleDefinition:
    """One mate-in-N puzzle. Catalog-owned and never mutated."""

    name: str
    position: str
    solution_line: tuple[str, ...]
    side_to_move: str
    mate_distance: int
    flavor_text: str = ""

    def __post_init__(self) -> None:
        if not self.solution_line:
            raise ValueError(f"Puzzle '{self.name}' has an empty solution line")
        if self.mate_distance < 1:
            raise ValueError(
                f"Puzzle '{self.name}' mate distance must be positive, "
                f"got {self.mate_distance}"
            )
        if self.side_to_move not in SIDES:
            raise ValueError(
                f"Puzzle '{self.name}' side must be 'white' or 'black', "
                f"got {self.side_to_move!r}"
            )

    @property
    def max_plies(self) -> int:
        """Half-moves allowed before an attempt is abandoned."""
        return self.mate_distance * 2


@dataclass(frozen=True)
class Occupant:
    """Piece standing on a square: side plus lower-case piece letter."""

    side: str
    kind: str

    @property
    def descriptor(self) -> str:
        """Board-widget style descriptor, e.g. 'wQ' or 'bK'."""
        return f"{self.side[0]}{self.kind.upper()}"


@dataclass
class SessionState:
    """The controller's mutable state. Re-initialized, never replaced."""

    catalog_index: int = 0
    position: RulesEngine | None = None
    hints_used: int = 0
    selected_square: str | None = None
    legal_targets: frozenset[str] = frozenset()
    advance_visible: bool = False
    solved: bool = False

    @property
    def star_rating(self) -> int:
        return max(1, MAX_STARS - self.hints_used)

    def reset(self, index: int, engine: RulesEngine) -> None:
        """Reset every per-puzzle field for a fresh load of *index*."""
        self.catalog_index = index
        self.position = engine
        self.hints_used = 0
        self.selected_square = None
        self.legal_targets = frozenset()
        self.advance_visible = False
        self.solved = False

    def clear_selection(self) -> None:
        self.selected_square = None
        self.legal_targets = frozenset()


@dataclass
class Notice:
    """A user-facing notification (hint, solved, failed, complete)."""

    kind: str
    message: str


@dataclass
class ViewState:
    """Everything the board presentation currently shows."""

    fen: str = ""
    highlights: list[str] = field(default_factory=list)
    orientation: str = "white"
    status: str = ""
    stars: str = ""
    progress: str = ""
    advance_visible: bool = False
    last_hint: str | None = None
    notices: list[Notice] = field(default_factory=list)
    # Total notices ever issued; keeps counting after the history is capped.
    notice_seq: int = 0


def star_glyphs(rating: int) -> str:
    """Three glyph slots: *rating* filled stars, the rest empty."""
    return "★" * rating + "☆" * (MAX_STARS - rating)
