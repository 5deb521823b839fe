from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
import logging
import sys

from tqdm.contrib.logging import logging_redirect_tqdm

from treecopier.config import Config, RunOptions
from treecopier.copy_engine import copy_tree, discover_tree, validate_paths
from treecopier.ignore_engine import build_ignore_engine
from treecopier.progress import ProgressReporter


PACKAGE_LOGGER = "treecopier"


@dataclass(slots=True)
class RunSummary:
    total_files: int = 0
    total_bytes: int = 0
    files_copied: int = 0
    bytes_copied: int = 0
    dry_run: bool = False


def _has_console_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(handler, logging.StreamHandler) and handler.stream in {sys.stdout, sys.stderr}
        for handler in logger.handlers
    )


def run(
    config: Config,
    options: RunOptions | None = None,
    logger: logging.Logger | None = None,
) -> RunSummary:
    """Discover the source tree, then copy it into the target with progress."""
    log = logger or logging.getLogger("treecopier.run")
    options = options or RunOptions()

    ignore_engine = build_ignore_engine(config)
    log.info("Ignoring %s directories", len(ignore_engine))

    log.info("Discovering files...")
    stats = discover_tree(config.source, ignore_engine)
    log.info(
        "Discovered %s files with a total size of %s bytes",
        stats.total_files,
        stats.total_bytes,
    )

    summary = RunSummary(
        total_files=stats.total_files,
        total_bytes=stats.total_bytes,
        dry_run=options.dry_run,
    )
    if options.dry_run:
        log.info("Dry run: nothing copied")
        return summary

    validate_paths(config.source, config.target, ignore_engine)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    redirect = (
        logging_redirect_tqdm(loggers=[package_logger])
        if _has_console_handler(package_logger)
        else nullcontext()
    )
    with redirect:
        with ProgressReporter(stats.total_bytes, enabled=options.show_progress, logger=log) as reporter:
            copied = copy_tree(
                config.source,
                config.target,
                ignore_engine,
                on_file=lambda _path, size: reporter.advance(size),
                on_skip=reporter.note_skipped,
            )

    summary.files_copied = copied.files_copied
    summary.bytes_copied = copied.bytes_copied
    if copied.files_copied != stats.total_files or copied.bytes_copied != stats.total_bytes:
        # Files removed or resized after discovery are not retried.
        log.warning(
            "Source changed during copy: copied %s of %s files (%s of %s bytes)",
            copied.files_copied,
            stats.total_files,
            copied.bytes_copied,
            stats.total_bytes,
        )
    log.debug("Copied %s files (%s bytes) into %s", summary.files_copied, summary.bytes_copied, config.target)
    return summary
