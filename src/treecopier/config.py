from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import json
import yaml


class UsageError(ValueError):
    """Raised when too few positional arguments are supplied."""


@dataclass(slots=True, frozen=True)
class Config:
    source: Path
    target: Path
    ignore_path: Path | None = None

    @classmethod
    def from_args(cls, args: Sequence[str]) -> "Config":
        """Build a config from ``[source, target, ignore_file?]``."""
        if len(args) < 2:
            raise UsageError("Not enough arguments")
        ignore_path = Path(args[2]) if len(args) > 2 and args[2] else None
        return cls(source=Path(args[0]), target=Path(args[1]), ignore_path=ignore_path)


@dataclass(slots=True)
class RunOptions:
    dry_run: bool = False
    show_progress: bool = True


def _as_path(value: Any, field_name: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string path")
    return Path(value).expanduser()


def _as_optional_path(value: Any, field_name: str) -> Path | None:
    if value is None:
        return None
    return _as_path(value, field_name)


def _load_raw_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ValueError(f"Config file does not exist: {config_path}")

    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in {".yml", ".yaml"}:
        loaded = yaml.safe_load(text)
    elif suffix == ".json":
        loaded = json.loads(text)
    else:
        raise ValueError("Config file must be .yaml/.yml or .json")

    if not isinstance(loaded, dict):
        raise ValueError("Config root must be an object")
    return loaded


def load_config(config_path: Path) -> Config:
    raw = _load_raw_config(config_path)
    return Config(
        source=_as_path(raw.get("source"), "source"),
        target=_as_path(raw.get("target"), "target"),
        ignore_path=_as_optional_path(raw.get("ignoreFile"), "ignoreFile"),
    )
