"""Live snapshot file shared with the terminal viewer."""

from __future__ import annotations

import json
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = _PROJECT_ROOT / "data"
SNAPSHOT_NAME = "current_puzzle.json"


def sync_state_json(state: dict, data_dir: Path = DATA_DIR) -> Path:
    """Write a session snapshot to data/current_puzzle.json atomically.

    Uses temp file + os.replace() for atomic write.

    Args:
        state: Session snapshot dict to write.
        data_dir: Directory holding the snapshot.

    Returns:
        Path of the written snapshot.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    target = data_dir / SNAPSHOT_NAME
    tmp = data_dir / "current_puzzle.tmp"
    tmp.write_text(
        json.dumps(state, indent=2, default=str, ensure_ascii=False),
        encoding="utf-8",
    )
    os.replace(tmp, target)
    return target


def load_state_json(path: Path) -> dict | None:
    """Load a snapshot dict, or None if the file is missing or corrupt."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    if isinstance(data, dict):
        return data
    return None
