from __future__ import annotations

import os
import shutil
import time
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import pytest

from dirbackup.core.backup_config import BackupConfig
from dirbackup.core.errors import BuildError, CorruptArchiveError
from dirbackup.core.space_estimator import SpaceReport


class FixedClock:
    def __init__(self) -> None:
        self._timestamp = "20260216_010203"
        self._iso = "2026-02-16T01:02:03Z"

    def now_iso(self) -> str:
        return self._iso

    def timestamp(self, time_format: str = "%Y%m%d_%H%M%S") -> str:
        return self._timestamp

    def display(self, moment: datetime) -> str:
        return moment.strftime("%Y-%m-%d %H:%M:%S")


class ArchiverStub:
    """Stands in for tar: writes a placeholder archive and records calls."""

    def __init__(
        self,
        *,
        available: bool = True,
        fail_build: bool = False,
        corrupt: bool = False,
    ) -> None:
        self.available = available
        self.fail_build = fail_build
        self.corrupt = corrupt
        self.build_calls: list[tuple[Path, Path, list[str]]] = []
        self.verified: list[Path] = []

    def is_available(self) -> bool:
        return self.available

    def build(self, source_dir: Path, destination: Path, excludes: Sequence[str]) -> float:
        self.build_calls.append((source_dir, destination, list(excludes)))
        destination.write_bytes(b"archive-bytes")
        if self.fail_build:
            raise BuildError("tar exited with 2")
        return 1.5

    def verify(self, archive: Path) -> None:
        self.verified.append(archive)
        if self.corrupt:
            raise CorruptArchiveError(f"Archive {archive} is unreadable")

    def list_entries(self, archive: Path) -> list[str]:
        self.verify(archive)
        return ["README.md", "src", "src/main.py"]


class SpaceStub:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[Path, Path]] = []

    def check_space(self, source_dir: Path, backup_dir: Path) -> SpaceReport:
        self.calls.append((source_dir, backup_dir))
        if self.error is not None:
            raise self.error
        return SpaceReport(source_size=10, required=50 * 1024 * 1024, available=10**12)


def make_archives(backup_dir: Path, project: str, count: int) -> list[Path]:
    """Create ``count`` archives, oldest first, one minute apart."""
    backup_dir.mkdir(parents=True, exist_ok=True)
    base = time.time() - 100_000
    paths: list[Path] = []
    for index in range(count):
        path = backup_dir / f"{project}_backup_202601{index + 1:02d}_120000.tar.gz"
        path.write_bytes(b"x" * (index + 1))
        stamp = base + index * 60
        os.utime(path, (stamp, stamp))
        paths.append(path)
    return paths


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    project = tmp_path / "workspace" / "myproject"
    (project / "src").mkdir(parents=True)
    (project / "src" / "main.py").write_text("print('hello')\n", encoding="utf-8")
    (project / "README.md").write_text("# myproject\n", encoding="utf-8")
    return project


@pytest.fixture
def sample_config(tmp_path: Path) -> BackupConfig:
    return BackupConfig(max_backups=3, backup_dir=tmp_path / "archives")


@pytest.fixture
def require_tar() -> None:
    if shutil.which("tar") is None:
        pytest.skip("tar is not installed")
