"""File-system helpers used by the pipelines."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)

SKIPPED_DIRS = {
    ".git",
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    "dist",
    "build",
    "target",
}


class ConfigReadError(Exception):
    """Raised when a configuration document cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read JSON file {path}: {reason}")
        self.path = path
        self.reason = reason


def file_exists(path: Path) -> bool:
    return path.is_file()


def directory_exists(path: Path) -> bool:
    return path.is_dir()


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigReadError(path, str(e)) from e


def read_json(path: Path) -> Any:
    """Read and parse a JSON document."""
    content = read_text(path)
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigReadError(path, f"line {e.lineno} column {e.colno}: {e.msg}") from e


def write_text(path: Path, content: str) -> None:
    """Write (overwrite) a text file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.debug("Wrote %s", path)


def find_files(
    root: Path,
    suffixes: Iterable[str],
    max_depth: int = 10,
    limit: int | None = None,
) -> list[Path]:
    """Walk ``root`` up to ``max_depth`` levels and collect files by suffix."""
    wanted = {s.lower() for s in suffixes}
    found: list[Path] = []

    def _walk(directory: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            logger.debug("Skipping unreadable directory %s", directory)
            return
        for entry in entries:
            if limit is not None and len(found) >= limit:
                return
            if entry.is_dir():
                if entry.name not in SKIPPED_DIRS:
                    _walk(entry, depth + 1)
            elif entry.suffix.lower() in wanted:
                found.append(entry)

    _walk(root, 0)
    return found
