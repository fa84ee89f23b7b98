from __future__ import annotations

import json
from pathlib import Path

import pytest

from dirbackup.cli import CliApplication
from dirbackup.commands.factory import CommandFactory
from dirbackup.core.backup_config import RunOptions
from dirbackup.core.errors import BuildError, CorruptArchiveError
from dirbackup.core.tar_archiver import TarArchiver
from tests.conftest import FixedClock, SpaceStub, make_archives


pytestmark = pytest.mark.integration


class TruncatingArchiver(TarArchiver):
    """Builds a real archive and then cuts it in half."""

    def build(self, source_dir, destination, excludes):
        duration = super().build(source_dir, destination, excludes)
        data = destination.read_bytes()
        destination.write_bytes(data[: len(data) // 2])
        return duration


def _make_tree(root: Path) -> Path:
    project = root / "demo"
    (project / "src").mkdir(parents=True)
    (project / "node_modules" / "pkg").mkdir(parents=True)
    (project / "logs").mkdir()
    (project / "b.txt").write_text("keep me\n", encoding="utf-8")
    (project / "a.log").write_text("drop me\n", encoding="utf-8")
    (project / "src" / "app.py").write_text("print('app')\n" * 200, encoding="utf-8")
    (project / "src" / "debug.log").write_text("drop me too\n", encoding="utf-8")
    (project / "node_modules" / "pkg" / "index.js").write_text("x\n", encoding="utf-8")
    (project / "logs" / "today.txt").write_text("x\n", encoding="utf-8")
    return project


def test_tar_archiver_excludes_per_segment(tmp_path: Path, require_tar: None) -> None:
    project = _make_tree(tmp_path)
    archive = tmp_path / "out.tar.gz"
    archiver = TarArchiver()

    archiver.build(project, archive, ["*.log", "node_modules", "logs/"])
    entries = archiver.list_entries(archive)

    assert "b.txt" in entries
    assert "src/app.py" in entries
    assert "a.log" not in entries
    assert "src/debug.log" not in entries
    assert not any(entry.startswith("node_modules") for entry in entries)
    assert not any(entry.startswith("logs") for entry in entries)


def test_tar_archiver_detects_truncated_archive(tmp_path: Path, require_tar: None) -> None:
    project = _make_tree(tmp_path)
    archive = tmp_path / "out.tar.gz"
    TruncatingArchiver().build(project, archive, [])

    with pytest.raises(CorruptArchiveError):
        TarArchiver().verify(archive)


def test_tar_archiver_build_failure_leaves_nothing(tmp_path: Path, require_tar: None) -> None:
    archive = tmp_path / "out.tar.gz"

    with pytest.raises(BuildError):
        TarArchiver().build(tmp_path / "missing", archive, [])

    assert not archive.exists()


def test_full_backup_run_through_cli(
    tmp_path: Path,
    require_tar: None,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = _make_tree(tmp_path)
    backup_dir = tmp_path / "Backup"
    make_archives(backup_dir, "demo", 4)
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"maxBackups": 2, "excludes": ["*.log"]}), encoding="utf-8")

    factory = CommandFactory(clock=FixedClock(), estimator=SpaceStub())
    result = CliApplication(factory).run(["backup", str(project), "--config", str(config_file)])

    assert result == 0
    archives = sorted(backup_dir.glob("demo_backup_*.tar.gz"))
    assert len(archives) == 3
    created = backup_dir / "demo_backup_20260216_010203.tar.gz"
    assert created in archives
    entries = TarArchiver().list_entries(created)
    assert "b.txt" in entries
    assert "a.log" not in entries
    assert "node_modules/pkg/index.js" in entries
    assert "Backup integrity confirmed" in capsys.readouterr().out


def test_backup_dir_inside_source_keeps_nested_namesakes(
    tmp_path: Path,
    require_tar: None,
) -> None:
    project = _make_tree(tmp_path)
    (project / "docs" / "backups").mkdir(parents=True)
    (project / "docs" / "backups" / "keep.txt").write_text("keep\n", encoding="utf-8")
    backup_dir = project / "backups"
    factory = CommandFactory(clock=FixedClock(), estimator=SpaceStub())

    result = factory.create(
        "backup", RunOptions(source_dir=project, backup_dir=backup_dir)
    ).execute()

    assert result == 0
    entries = TarArchiver().list_entries(backup_dir / "demo_backup_20260216_010203.tar.gz")
    assert "docs/backups/keep.txt" in entries
    assert not any(entry == "backups" or entry.startswith("backups/") for entry in entries)


def test_truncated_archive_is_removed_and_run_fails(tmp_path: Path, require_tar: None) -> None:
    project = _make_tree(tmp_path)
    backup_dir = tmp_path / "Backup"
    factory = CommandFactory(
        clock=FixedClock(),
        archiver=TruncatingArchiver(),
        estimator=SpaceStub(),
    )

    result = factory.create("backup", RunOptions(source_dir=project)).execute()

    assert result == 1
    assert list(backup_dir.glob("demo_backup_*.tar.gz")) == []
    listing = factory.create("list", RunOptions(source_dir=project))
    assert listing.run() == 0


def test_verify_command_on_real_archive(
    tmp_path: Path,
    require_tar: None,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = _make_tree(tmp_path)
    archive = tmp_path / "out.tar.gz"
    TarArchiver().build(project, archive, [])

    assert CliApplication().run(["verify", str(archive)]) == 0
    assert "Archive OK" in capsys.readouterr().out
