"""Minimal HTTP server for the Mate Trainer browser board.

Serves board.html and a JSON API that feeds user interactions to the
puzzle session. HTTPServer handles one request at a time, so events reach
the session strictly in order.
Launch: uv run python -m mate_trainer.web_server [--port 8089]
"""

from __future__ import annotations

import argparse
import http.server
import json
import sys
from pathlib import Path

import chess

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
from mate_trainer.response_schemas import build_session_state
from mate_trainer.snapshot import DATA_DIR, sync_state_json

_BOARD_HTML = Path(__file__).resolve().parent / "board.html"


class ApiError(Exception):
    """Client error carrying an HTTP status code."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class TrainerApp:
    """One live puzzle session plus its JSON API routes."""

    def __init__(
        self,
        catalog=PUZZLES,
        data_dir: Path | None = DATA_DIR,
    ) -> None:
        """Create and start the session.

        Args:
            catalog: Puzzle catalog to play through.
            data_dir: Where the live snapshot is synced; None disables it.
        """
        self.presenter = ViewStatePresenter()
        self.session = PuzzleSession(self.presenter, catalog)
        self.events = EventSource()
        self.session.bind(self.events)
        self._data_dir = data_dir
        self.session.start()
        self._sync()

    def state(self) -> dict:
        return build_session_state(self.session, self.presenter)

    def handle_get(self, path: str) -> dict:
        if path == "/api/state":
            return self.state()
        if path == "/api/puzzles":
            return {"puzzles": catalog_summary(self.session.catalog)}
        raise ApiError(404, f"Unknown endpoint: {path}")

    def handle_post(self, path: str, body: dict) -> dict:
        if path == "/api/square":
            square = _require_square(body, "square")
            result = {"moved": self.events.dispatch(SquareInteracted(square))}
        elif path == "/api/drag-start":
            source = _require_square(body, "source")
            piece = _require_str(body, "piece")
            result = {"allowed": self.events.dispatch(DragStarted(source, piece))}
        elif path == "/api/drop":
            source = _require_square(body, "source")
            target = _require_str(body, "target")
            result = {"result": self.events.dispatch(PieceDropped(source, target))}
        elif path == "/api/drag-settled":
            self.events.dispatch(DragSettled())
            result = {}
        elif path == "/api/hint":
            result = {"hint": self.events.dispatch(HintRequested())}
        elif path == "/api/next":
            self.events.dispatch(AdvanceRequested())
            result = {}
        elif path == "/api/reset":
            self.events.dispatch(ResetRequested())
            result = {}
        else:
            raise ApiError(404, f"Unknown endpoint: {path}")

        self._sync()
        result["state"] = self.state()
        return result

    def _sync(self) -> None:
        if self._data_dir is not None:
            sync_state_json(self.state(), self._data_dir)


def _require_str(body: dict, key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value:
        raise ApiError(400, f"Missing or invalid field: {key}")
    return value


def _require_square(body: dict, key: str) -> str:
    value = _require_str(body, key)
    if value not in chess.SQUARE_NAMES:
        raise ApiError(400, f"Invalid square: {value}")
    return value


class TrainerHandler(http.server.BaseHTTPRequestHandler):
    """Serves the board page and the session JSON API."""

    app: TrainerApp

    def do_GET(self) -> None:
        if self.path == "/" or self.path == "/index.html":
            self._serve_file(_BOARD_HTML, "text/html; charset=utf-8")
            return
        try:
            self._send_json(200, self.app.handle_get(self.path))
        except ApiError as e:
            self._send_json(e.status, {"error": e.message})

    def do_POST(self) -> None:
        try:
            body = self._read_body()
            payload = self.app.handle_post(self.path, body)
        except ApiError as e:
            self._send_json(e.status, {"error": e.message})
            return
        self._send_json(200, payload)

    def _read_body(self) -> dict:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            raise ApiError(400, "Invalid Content-Length header")
        if length <= 0:
            return {}
        raw = self.rfile.read(length)
        try:
            data = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ApiError(400, "Request body is not valid JSON")
        if not isinstance(data, dict):
            raise ApiError(400, "Request body must be a JSON object")
        return data

    def _serve_file(self, path: Path, content_type: str) -> None:
        if not path.exists():
            self.send_error(404, f"File not found: {path.name}")
            return
        data = path.read_bytes()
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _send_json(self, status: int, payload: dict) -> None:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: object) -> None:
        # Silence per-request logs; only show startup message
        pass


def make_server(app: TrainerApp, host: str = "127.0.0.1", port: int = 8089) -> http.server.HTTPServer:
    """Build an HTTPServer whose handler talks to *app*."""
    handler = type("BoundTrainerHandler", (TrainerHandler,), {"app": app})
    return http.server.HTTPServer((host, port), handler)


def main() -> None:
    parser = argparse.ArgumentParser(description="Mate Trainer browser server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8089, help="Port (default: 8089)")
    parser.add_argument("--catalog", default=None, help="JSON puzzle catalog file")
    args = parser.parse_args()

    catalog = PUZZLES
    if args.catalog:
        try:
            catalog = load_catalog(args.catalog)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    server = make_server(TrainerApp(catalog), args.host, args.port)
    print(f"Mate Trainer: http://{args.host}:{args.port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
        server.server_close()


if __name__ == "__main__":
    main()
