from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from treecopier.config import Config, RunOptions, UsageError, load_config
from treecopier.run_service import PACKAGE_LOGGER, run


EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_INVALID_CONFIG = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treecopier",
        description="Copy a directory tree, skipping ignored directories, with a progress bar",
    )
    parser.add_argument("paths", nargs="*", metavar="PATH", help="SOURCE TARGET [IGNORE_FILE]")
    parser.add_argument("--config", type=Path, help="YAML/JSON file with source, target and ignoreFile")
    parser.add_argument("--dry-run", action="store_true", help="Only discover and report totals")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def _configure_logging(verbose: bool, log_file: Path | None) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(file_handler)

    return logger


def _resolve_config(args: argparse.Namespace) -> Config:
    if args.config is not None:
        if args.paths:
            raise UsageError("--config cannot be combined with positional paths")
        return load_config(args.config)
    return Config.from_args(args.paths)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _resolve_config(args)
    except UsageError as exc:
        print(f"err: {exc}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except Exception as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    logger = _configure_logging(args.verbose, args.log_file)

    print(f"Copying files from {config.source} to {config.target}")
    if config.ignore_path is not None:
        print(f"Using ignore file {config.ignore_path}")

    options = RunOptions(dry_run=args.dry_run, show_progress=not args.no_progress)
    try:
        run(config, options, logger=logger.getChild("run"))
    except Exception as exc:
        print(f"err: Failed to copy: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print("Finished")
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
