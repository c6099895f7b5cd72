"""PuzzleSession — the puzzle session controller.

Owns the active catalog index, the rules engine for the current puzzle,
hint/star scoring and click/drag selection. Every public method runs
synchronously for one user interaction and leaves the session in a
consistent state; user input never raises.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from mate_trainer.catalog import PUZZLES
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
from mate_trainer.models import PuzzleDefinition, SessionState, star_glyphs
from mate_trainer.presenter import BoardPresenter
from mate_trainer.rules import ChessRules, RulesEngine

EngineFactory = Callable[[str], RulesEngine]

ACCEPT = "accept"
SNAPBACK = "snapback"

# Pawns reaching the last rank always become queens.
PROMOTION = "q"


class PuzzleSession:
    """Runs a pass through a puzzle catalog for one user."""

    def __init__(
        self,
        presenter: BoardPresenter,
        catalog: Sequence[PuzzleDefinition] = PUZZLES,
        engine_factory: EngineFactory = ChessRules,
    ) -> None:
        if not catalog:
            raise ValueError("Puzzle catalog is empty")
        self._catalog = tuple(catalog)
        self._presenter = presenter
        self._engine_factory = engine_factory
        self.state = SessionState()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def catalog(self) -> tuple[PuzzleDefinition, ...]:
        return self._catalog

    @property
    def puzzle(self) -> PuzzleDefinition:
        return self._catalog[self.state.catalog_index]

    @property
    def engine(self) -> RulesEngine:
        if self.state.position is None:
            raise RuntimeError("No puzzle loaded; call start() first")
        return self.state.position

    @property
    def progress_text(self) -> str:
        return f"Puzzle {self.state.catalog_index + 1} of {len(self._catalog)}"

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Load the first puzzle and show the progress counter."""
        self.load_puzzle(0)
        self._presenter.show_progress(self.progress_text)

    def load_puzzle(self, index: int) -> None:
        """Reset the session onto catalog entry *index*."""
        puzzle = self._catalog[index]
        engine = self._engine_factory(puzzle.position)
        self.state.reset(index, engine)

        p = self._presenter
        p.set_orientation(puzzle.side_to_move)
        self._render()
        p.show_status(f"Level {index + 1}: {puzzle.name} - Mate in {puzzle.mate_distance}")
        p.show_stars(star_glyphs(self.state.star_rating))
        p.show_hint(None)
        p.set_advance_visible(False)

    def advance_to_next(self) -> None:
        """Move on to the next puzzle, wrapping after the last one."""
        index = self.state.catalog_index + 1
        wrapped = index >= len(self._catalog)
        if wrapped:
            index = 0
        # load_puzzle builds the new engine before touching any state, so a
        # failing entry leaves the current puzzle in place.
        self.load_puzzle(index)
        if wrapped:
            self._presenter.notify(
                "complete",
                "Congratulations! You have completed every puzzle. Starting over.",
            )
        self._presenter.show_progress(self.progress_text)

    def reset_puzzle(self) -> None:
        """Retry the current puzzle from its starting position."""
        self.load_puzzle(self.state.catalog_index)

    # ── Hints ────────────────────────────────────────────────────────────

    def request_hint(self) -> str | None:
        """Disclose the next unused solution move.

        Returns the disclosed move, or None once every move of the
        solution line has been shown.
        """
        line = self.puzzle.solution_line
        if self.state.hints_used >= len(line):
            return None

        move = line[self.state.hints_used]
        self.state.hints_used += 1
        self._presenter.notify("hint", f"Hint: try playing {move}")
        self._presenter.show_hint(move)
        self._presenter.show_stars(star_glyphs(self.state.star_rating))
        return move

    # ── Selection & moves ────────────────────────────────────────────────

    def on_square_interacted(self, square: str) -> bool:
        """Handle a click on *square*. Returns True if a move was played."""
        state = self.state
        engine = self.engine

        if state.selected_square is not None and square in state.legal_targets:
            if not engine.apply_move(state.selected_square, square, PROMOTION):
                self._render()
                return False
            state.clear_selection()
            self._render()
            self._evaluate_after_move()
            return True

        if square == state.selected_square:
            state.clear_selection()
        else:
            occupant = engine.occupant_at(square)
            if occupant is not None and occupant.side == engine.current_turn():
                self._select(square)
            else:
                state.clear_selection()

        self._render()
        return False

    def on_drag_start(self, source: str, piece: str) -> bool:
        """Allow or veto picking up *piece* (e.g. 'wQ') from *source*."""
        engine = self.engine
        if engine.is_game_over():
            return False

        turn = engine.current_turn()
        occupant = engine.occupant_at(source)
        if not piece or piece[0] != turn[0]:
            return False
        if occupant is None or occupant.side != turn:
            return False

        self._select(source)
        self._render()
        return True

    def on_drop(self, source: str, target: str) -> str:
        """Try to play a dragged piece. Returns ACCEPT or SNAPBACK."""
        engine = self.engine
        if source == target or target not in engine.legal_destinations(source):
            return SNAPBACK
        if not engine.apply_move(source, target, PROMOTION):
            return SNAPBACK

        self.state.clear_selection()
        self._render()
        self._evaluate_after_move()
        return ACCEPT

    def on_drag_settled(self) -> None:
        """Redraw from the engine's position once a drag animation ends."""
        self._render()

    # ── Event wiring ─────────────────────────────────────────────────────

    def bind(self, source: EventSource) -> None:
        """Register this session's handlers on *source*."""
        source.register(SquareInteracted, lambda e: self.on_square_interacted(e.square))
        source.register(DragStarted, lambda e: self.on_drag_start(e.source, e.piece))
        source.register(PieceDropped, lambda e: self.on_drop(e.source, e.target))
        source.register(DragSettled, lambda e: self.on_drag_settled())
        source.register(HintRequested, lambda e: self.request_hint())
        source.register(AdvanceRequested, lambda e: self.advance_to_next())
        source.register(ResetRequested, lambda e: self.reset_puzzle())

    # ── Internal helpers ─────────────────────────────────────────────────

    def _select(self, square: str) -> None:
        self.state.selected_square = square
        self.state.legal_targets = frozenset(self.engine.legal_destinations(square))

    def _render(self) -> None:
        highlights = set(self.state.legal_targets)
        if self.state.selected_square is not None:
            highlights.add(self.state.selected_square)
        self._presenter.render(self.engine.to_position_string(), highlights)

    def _evaluate_after_move(self) -> None:
        puzzle = self.puzzle
        engine = self.engine

        if engine.is_checkmate():
            self.state.solved = True
            self.state.advance_visible = True
            message = f'Excellent! You solved "{puzzle.name}".'
            if puzzle.flavor_text:
                message += f"\n{puzzle.flavor_text}"
            self._presenter.notify("solved", message)
            self._presenter.set_advance_visible(True)
            return

        # Strictly greater: the final allowed ply may still be played.
        if engine.half_move_count() > puzzle.max_plies:
            self._presenter.notify(
                "failed",
                "Too many moves without mate. Restarting the puzzle.",
            )
            self.load_puzzle(self.state.catalog_index)
