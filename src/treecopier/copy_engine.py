from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
from typing import Callable, Iterator

from treecopier.ignore_engine import IgnoreEngine
from treecopier.models import CopyProgress, TraversalStats, TreeEntry


log = logging.getLogger("treecopier.copy")

ShouldDescend = Callable[[Path], bool]
FileCallback = Callable[[Path, int], None]
SkipCallback = Callable[[Path], None]


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_tree(source_root: Path, should_descend: ShouldDescend) -> Iterator[TreeEntry]:
    """Yield every directory and file under *source_root*, pruning ignored subtrees.

    Each reached directory is yielded before the files it contains, starting
    with the root itself as ``Path(".")``. Listing errors are raised, not
    skipped, so a missing source aborts before anything is yielded.
    """
    for root_str, dirs, files in os.walk(source_root, topdown=True, onerror=_raise_walk_error):
        root = Path(root_str)
        root_rel = root.relative_to(source_root)
        yield TreeEntry(relative_path=root_rel, is_dir=True)

        kept_dirs: list[str] = []
        for dir_name in dirs:
            dir_path = root / dir_name
            if dir_path.is_symlink():
                files.append(dir_name)
                continue
            if not should_descend(dir_path):
                continue
            kept_dirs.append(dir_name)
        dirs[:] = kept_dirs

        for file_name in files:
            size = (root / file_name).stat().st_size
            yield TreeEntry(relative_path=root_rel / file_name, is_dir=False, size=size)


def discover_tree(source_root: Path, ignore_engine: IgnoreEngine) -> TraversalStats:
    stats = TraversalStats()
    for entry in iter_tree(source_root, lambda path: not ignore_engine.is_ignored(path)):
        if entry.is_dir:
            continue
        stats.total_bytes += entry.size
        stats.total_files += 1
    return stats


def validate_paths(source_root: Path, target_root: Path, ignore_engine: IgnoreEngine | None = None) -> None:
    """Reject a target the copy pass would walk into.

    A target inside the source is accepted when a directory between them,
    the target included, is ignored and so never descended.
    """
    source_resolved = source_root.resolve()
    target_resolved = target_root.resolve()

    if source_resolved == target_resolved:
        raise ValueError(f"Invalid mapping: source and target are equal: {source_root}")

    if not target_resolved.is_relative_to(source_resolved):
        return

    if ignore_engine is not None:
        current = source_resolved
        for part in target_resolved.relative_to(source_resolved).parts:
            current = current / part
            if ignore_engine.is_ignored(current):
                return

    raise ValueError(f"Invalid mapping: target is inside source, which can recurse: {target_root}")


def _copy_file(source_file: Path, target_file: Path) -> None:
    try:
        shutil.copyfile(source_file, target_file)
        shutil.copymode(source_file, target_file)
    except OSError:
        log.error("Failed to copy %s", source_file)
        raise


def copy_tree(
    source_root: Path,
    target_root: Path,
    ignore_engine: IgnoreEngine,
    on_file: FileCallback | None = None,
    on_skip: SkipCallback | None = None,
) -> CopyProgress:
    """Copy *source_root* into *target_root*, leaving out ignored directories.

    Target directories are created as they are reached, so empty source
    directories are mirrored too. The first error aborts the copy.
    """
    progress = CopyProgress()

    def should_descend(path: Path) -> bool:
        if ignore_engine.is_ignored(path):
            if on_skip is not None:
                on_skip(path)
            return False
        return True

    for entry in iter_tree(source_root, should_descend):
        destination = target_root / entry.relative_path
        if entry.is_dir:
            destination.mkdir(parents=True, exist_ok=True)
            continue

        source_file = source_root / entry.relative_path
        _copy_file(source_file, destination)
        progress.bytes_copied += entry.size
        progress.files_copied += 1
        if on_file is not None:
            on_file(source_file, entry.size)

    return progress
