import logging
from pathlib import Path

import pytest

from treecopier import run_service
from treecopier.config import Config, RunOptions
from treecopier.run_service import run


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _sample_config(tmp_path: Path) -> Config:
    source = tmp_path / "src"
    _write(source / "a.txt", "a" * 100)
    _write(source / "sub" / "b.txt", "b" * 50)
    _write(source / "node_modules" / "c.txt", "c" * 10)
    ignore_file = tmp_path / "ignore.txt"
    ignore_file.write_text("# deps\nnode_modules\n", encoding="utf-8")
    return Config(source=source, target=tmp_path / "dst", ignore_path=ignore_file)


def test_run_copies_tree_and_reports_totals(tmp_path: Path, caplog) -> None:
    caplog.set_level(logging.INFO, logger="treecopier")
    config = _sample_config(tmp_path)

    summary = run(config, RunOptions(show_progress=False))

    assert summary.total_files == 2
    assert summary.total_bytes == 150
    assert summary.files_copied == 2
    assert summary.bytes_copied == 150
    assert (config.target / "a.txt").exists()
    assert (config.target / "sub" / "b.txt").exists()
    assert not (config.target / "node_modules").exists()
    assert "Ignoring 1 directories" in caplog.text
    assert "Discovered 2 files with a total size of 150 bytes" in caplog.text
    assert f"Ignoring {config.source / 'node_modules'}" in caplog.text


def test_run_dry_run_creates_nothing(tmp_path: Path) -> None:
    config = _sample_config(tmp_path)

    summary = run(config, RunOptions(dry_run=True, show_progress=False))

    assert summary.dry_run is True
    assert summary.total_files == 2
    assert summary.files_copied == 0
    assert not config.target.exists()


def test_run_without_ignore_file_copies_everything(tmp_path: Path) -> None:
    config = _sample_config(tmp_path)
    config = Config(source=config.source, target=config.target)

    summary = run(config, RunOptions(show_progress=False))

    assert summary.files_copied == 3
    assert (config.target / "node_modules" / "c.txt").exists()


def test_run_missing_ignore_file_aborts_before_copy(tmp_path: Path) -> None:
    config = _sample_config(tmp_path)
    config = Config(source=config.source, target=config.target, ignore_path=tmp_path / "nope.txt")

    with pytest.raises(FileNotFoundError):
        run(config, RunOptions(show_progress=False))

    assert not config.target.exists()


def test_run_missing_source_fails_before_target_is_created(tmp_path: Path) -> None:
    config = Config(source=tmp_path / "missing", target=tmp_path / "dst")

    with pytest.raises(FileNotFoundError):
        run(config, RunOptions(show_progress=False))

    assert not config.target.exists()


def test_run_rejects_target_inside_source(tmp_path: Path) -> None:
    config = _sample_config(tmp_path)
    config = Config(source=config.source, target=config.source / "copy")

    with pytest.raises(ValueError):
        run(config, RunOptions(show_progress=False))

    assert not config.target.exists()


def test_run_with_progress_bar_enabled(tmp_path: Path) -> None:
    config = _sample_config(tmp_path)

    summary = run(config)

    assert summary.bytes_copied == summary.total_bytes


def test_run_into_ignored_directory_inside_source(tmp_path: Path) -> None:
    source = tmp_path / "proj"
    _write(source / "main.py", "print('hi')")
    ignore_file = tmp_path / "ignore.txt"
    ignore_file.write_text("backup\n", encoding="utf-8")
    config = Config(source=source, target=source / "backup", ignore_path=ignore_file)

    summary = run(config, RunOptions(show_progress=False))

    assert summary.files_copied == 1
    assert (source / "backup" / "main.py").exists()
    assert not (source / "backup" / "backup").exists()


def test_run_warns_when_copied_totals_fall_short(tmp_path: Path, caplog, monkeypatch) -> None:
    config = _sample_config(tmp_path)
    real_copy_tree = run_service.copy_tree

    def copy_after_removal(*args, **kwargs):
        (config.source / "a.txt").unlink()
        return real_copy_tree(*args, **kwargs)

    monkeypatch.setattr(run_service, "copy_tree", copy_after_removal)

    summary = run(config, RunOptions(show_progress=False))

    assert summary.total_files == 2
    assert summary.files_copied == 1
    assert summary.bytes_copied == 50
    assert "copied 1 of 2 files (50 of 150 bytes)" in caplog.text


def test_run_without_console_handlers_leaves_stderr_alone(tmp_path: Path, capsys) -> None:
    config = _sample_config(tmp_path)

    run(config, RunOptions(show_progress=False))

    assert "Ignoring" not in capsys.readouterr().err
    assert logging.getLogger("treecopier").handlers == []
