from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from treecopier.config import Config


log = logging.getLogger("treecopier.ignore")

MARKER_PREFIX = "/"


def _strip_line_ending(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(b"\n"):
        return line[:-1]
    return line


def load_ignore_list(path: Path) -> list[str]:
    """Read ignore patterns from *path*, one per line.

    Blank lines and lines starting with ``#`` are dropped. Only the line
    terminator is stripped, so surrounding spaces stay part of the pattern.
    Lines that are not valid UTF-8 are skipped.
    """
    patterns: list[str] = []
    with path.open("rb") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            try:
                line = _strip_line_ending(raw_line).decode("utf-8")
            except UnicodeDecodeError:
                log.warning("Skipping undecodable line %s in %s", line_number, path)
                continue
            if not line or line.startswith("#"):
                continue
            patterns.append(line)
    return patterns


class IgnoreEngine:
    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = list(patterns)
        self._names = {pattern for pattern in self.patterns if not pattern.startswith(MARKER_PREFIX)}
        self._markers = [
            pattern[len(MARKER_PREFIX):] for pattern in self.patterns if pattern.startswith(MARKER_PREFIX)
        ]

    def __len__(self) -> int:
        return len(self.patterns)

    def is_ignored(self, directory: Path) -> bool:
        if directory.name in self._names:
            return True
        # "/" alone leaves an empty marker, which matches the directory itself.
        return any((directory / marker).exists() for marker in self._markers)


def build_ignore_engine(config: Config) -> IgnoreEngine:
    if config.ignore_path is None:
        return IgnoreEngine([])
    return IgnoreEngine(load_ignore_list(config.ignore_path))
