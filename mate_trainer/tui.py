"""Terminal board viewer for the Mate Trainer.

Follows data/current_puzzle.json, which the web and MCP servers rewrite
after every interaction, and redraws the board whenever watchdog reports
a change. --sample renders the bundled snapshot once and exits.
"""

from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path

import chess
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mate_trainer.snapshot import DATA_DIR, SNAPSHOT_NAME, load_state_json

_CURRENT_PUZZLE = DATA_DIR / SNAPSHOT_NAME
_SAMPLE_PUZZLE = Path(__file__).resolve().parent / "sample_puzzle.json"

_SQUARE_STYLES = {
    "light": "on grey85",
    "dark": "on grey50",
    "target": "on yellow",
    "selected": "on dark_orange",
}

_NOTICE_STYLES = {
    "hint": "cyan",
    "solved": "bold green",
    "failed": "red",
    "complete": "bold magenta",
}


def render_board(state: dict) -> Layout:
    """Board on the left, puzzle sidebar on the right."""
    layout = Layout()
    layout.split_row(
        Layout(_board_panel(state), name="board", ratio=2),
        Layout(_sidebar_panel(state), name="sidebar", ratio=1),
    )
    return layout


def _square_style(name: str, state: dict) -> str:
    if name == state.get("selected_square"):
        return _SQUARE_STYLES["selected"]
    if name in state.get("legal_targets", ()):
        return _SQUARE_STYLES["target"]
    square = chess.parse_square(name)
    light = (chess.square_rank(square) + chess.square_file(square)) % 2 == 1
    return _SQUARE_STYLES["light" if light else "dark"]


def _board_panel(state: dict) -> Panel:
    fen = state.get("fen")
    board = chess.Board(fen) if fen else chess.Board(None)
    flipped = state.get("orientation") == "black"
    ranks = "12345678" if flipped else "87654321"
    files = "hgfedcba" if flipped else "abcdefgh"

    rows = []
    for rank in ranks:
        row = Text(f"{rank} ", style="bold")
        for file in files:
            name = file + rank
            piece = board.piece_at(chess.parse_square(name))
            glyph = piece.unicode_symbol() if piece else " "
            row.append(f" {glyph} ", style=_square_style(name, state))
        rows.append(row)
    rows.append(Text("  " + "".join(f" {f} " for f in files), style="bold"))

    title = state.get("puzzle_name") or "Mate Trainer"
    if state.get("solved"):
        title = f"Solved: {title}"
    return Panel(Group(*rows), title=title, border_style="blue")


def _sidebar_panel(state: dict) -> Panel:
    lines = [
        f"[bold]{state.get('progress', '')}[/bold]",
        state.get("status", ""),
        f"[yellow]{state.get('stars', '')}[/yellow]",
        "",
        f"Half-moves: {state.get('half_moves', 0)}/{state.get('max_half_moves', 0)}",
    ]
    if state.get("turn"):
        lines.append(f"To move: {state['turn']}")
    if state.get("move_list"):
        lines += ["", "[bold]Moves:[/bold]", "  " + " ".join(state["move_list"])]
    if state.get("last_hint"):
        lines += ["", f"[bold]Hint:[/bold] {state['last_hint']}"]

    notices = state.get("notices", [])[-3:]
    if notices:
        lines.append("")
    for notice in notices:
        style = _NOTICE_STYLES.get(notice.get("kind"), "white")
        lines.append(f"[{style}]{notice.get('message', '')}[/{style}]")

    if state.get("advance_visible"):
        lines += ["", "[bold green]Next puzzle available[/bold green]"]
    return Panel("\n".join(lines), title="Puzzle", border_style="green")


class _SnapshotChanged(FileSystemEventHandler):
    """Sets *changed* whenever the snapshot file is written or replaced."""

    def __init__(self, path: Path, changed: threading.Event) -> None:
        self._name = path.name
        self._changed = changed

    def on_any_event(self, event: FileSystemEvent) -> None:
        paths = (event.src_path, getattr(event, "dest_path", ""))
        if any(str(p).endswith(self._name) for p in paths):
            self._changed.set()


def watch(console: Console, path: Path = _CURRENT_PUZZLE) -> None:
    """Redraw the board each time *path* changes, until Ctrl-C."""
    changed = threading.Event()
    changed.set()
    path.parent.mkdir(parents=True, exist_ok=True)
    observer = Observer()
    observer.schedule(_SnapshotChanged(path, changed), str(path.parent), recursive=False)
    observer.start()

    waiting = Panel(
        Text("Waiting for a puzzle...\n\nStart the web or MCP server to see the board.",
             justify="center"),
        title="Mate Trainer",
        border_style="dim",
    )
    try:
        with Live(waiting, console=console, refresh_per_second=4) as live:
            while True:
                if changed.wait(0.25):
                    changed.clear()
                    state = load_state_json(path)
                    if state is not None:
                        live.update(render_board(state))
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()


def main() -> None:
    parser = argparse.ArgumentParser(description="Mate Trainer terminal viewer")
    parser.add_argument("--sample", action="store_true",
                        help="Render the sample snapshot and exit")
    args = parser.parse_args()

    console = Console()
    if not args.sample:
        watch(console)
        return

    state = load_state_json(_SAMPLE_PUZZLE)
    if state is None:
        console.print(f"[red]Sample snapshot not found at {_SAMPLE_PUZZLE}[/red]")
        sys.exit(1)
    console.print(render_board(state))


if __name__ == "__main__":
    main()
