from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class TraversalStats:
    total_bytes: int = 0
    total_files: int = 0


@dataclass(slots=True)
class CopyProgress:
    bytes_copied: int = 0
    files_copied: int = 0


@dataclass(slots=True, frozen=True)
class TreeEntry:
    relative_path: Path
    is_dir: bool
    size: int = 0
