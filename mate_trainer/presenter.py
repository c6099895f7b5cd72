"""Board presentation contract.

The controller pushes renders and text updates through BoardPresenter.
ViewStatePresenter keeps the latest of each in a ViewState, which the
browser, the tool server and the terminal viewer all read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from mate_trainer.models import Notice, ViewState

NOTICE_KINDS = ("hint", "solved", "failed", "complete")

# Older notices are dropped beyond this many.
_MAX_NOTICES = 20


class BoardPresenter(ABC):
    """Output side of the board presentation."""

    @abstractmethod
    def render(self, position: str, highlights: Iterable[str]) -> None:
        """Draw *position* (FEN) with *highlights* overlaid."""

    @abstractmethod
    def show_status(self, text: str) -> None: ...

    @abstractmethod
    def show_stars(self, text: str) -> None: ...

    @abstractmethod
    def show_progress(self, text: str) -> None: ...

    @abstractmethod
    def set_advance_visible(self, visible: bool) -> None: ...

    @abstractmethod
    def notify(self, kind: str, message: str) -> None:
        """Surface a notification of one of NOTICE_KINDS."""

    @abstractmethod
    def show_hint(self, move: str | None) -> None:
        """Disclose a suggested move, or clear the hint display on None."""

    @abstractmethod
    def set_orientation(self, side: str) -> None: ...


class ViewStatePresenter(BoardPresenter):
    """Presenter that records what would be on screen."""

    def __init__(self) -> None:
        self.view = ViewState()
        self.render_count = 0

    def render(self, position: str, highlights: Iterable[str]) -> None:
        self.view.fen = position
        self.view.highlights = sorted(highlights)
        self.render_count += 1

    def show_status(self, text: str) -> None:
        self.view.status = text

    def show_stars(self, text: str) -> None:
        self.view.stars = text

    def show_progress(self, text: str) -> None:
        self.view.progress = text

    def set_advance_visible(self, visible: bool) -> None:
        self.view.advance_visible = visible

    def notify(self, kind: str, message: str) -> None:
        if kind not in NOTICE_KINDS:
            raise ValueError(f"Unknown notice kind: {kind}")
        self.view.notices.append(Notice(kind=kind, message=message))
        del self.view.notices[:-_MAX_NOTICES]
        self.view.notice_seq += 1

    def show_hint(self, move: str | None) -> None:
        self.view.last_hint = move

    def set_orientation(self, side: str) -> None:
        self.view.orientation = side
