from __future__ import annotations

import logging
from pathlib import Path

from tqdm import tqdm


BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"


class ProgressReporter:
    """Byte-based progress bar for the copy pass."""

    def __init__(self, total_bytes: int, enabled: bool = True, logger: logging.Logger | None = None) -> None:
        self.position = 0
        self.log = logger or logging.getLogger("treecopier.progress")
        self._bar = tqdm(
            total=total_bytes,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            bar_format=BAR_FORMAT,
            leave=False,
            disable=not enabled,
        )

    def advance(self, size: int) -> None:
        self.position += size
        self._bar.update(size)

    def note_skipped(self, path: Path) -> None:
        self.log.info("Ignoring %s", path)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
