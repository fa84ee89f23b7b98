from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..core.archive_rotator import ArchiveRotator
from ..core.backup_config import BackupConfig, RunOptions
from ..core.config_loader import ConfigLoader
from ..core.errors import (
    CorruptArchiveError,
    FilesystemError,
    InvalidNameError,
    PermissionDeniedError,
    ToolMissingError,
)
from ..core.interrupt_guard import InterruptGuard
from ..core.logging_setup import setup_logging
from ..core.protocols import ArchiverProtocol, ClockProtocol, SpaceEstimatorProtocol
from ..core.size_formatter import SizeFormatter
from .base import Command
from .list_command import print_backups

logger = logging.getLogger(__name__)

INVALID_NAME_CHARACTERS = '\\/:*?"<>|'
PROBE_FILE_NAME = ".backup_test"


class BackupCommand(Command):
    """Archive one project directory.

    Steps run strictly in order and any failure aborts the run: resolve
    paths, check for tar, load config, validate the project name, prepare
    the backup directory, rotate old archives, check free space, build,
    verify, list. Once the destination path is known it is tracked by the
    interrupt guard and removed on any failure or interruption.
    """

    def __init__(
        self,
        options: RunOptions,
        config_loader: ConfigLoader,
        archiver: ArchiverProtocol,
        clock: ClockProtocol,
        rotator: ArchiveRotator,
        estimator: SpaceEstimatorProtocol,
        guard_factory: Callable[[], InterruptGuard] = InterruptGuard,
    ) -> None:
        self._options = options
        self._config_loader = config_loader
        self._archiver = archiver
        self._clock = clock
        self._rotator = rotator
        self._estimator = estimator
        self._guard_factory = guard_factory

    def run(self) -> int:
        with self._guard_factory() as guard:
            completed = False
            try:
                self._run_steps(guard)
                completed = True
            finally:
                if not completed:
                    guard.cleanup()
        return 0

    def _run_steps(self, guard: InterruptGuard) -> None:
        source_dir = self._options.resolve_source()
        if not source_dir.is_dir():
            raise FilesystemError(f"Source directory does not exist: {source_dir}")
        project_name = self._options.resolve_project_name(source_dir)
        logger.info("Starting backup at %s", self._clock.now_iso())
        logger.info("Source directory: %s", source_dir)
        logger.info("Project name: %s", project_name)

        if not self._archiver.is_available():
            raise ToolMissingError("tar is required but was not found on PATH")

        config = self._options.apply(self._config_loader.load(self._options.config_path))
        if config.debug:
            setup_logging(debug=True)
        backup_dir = config.resolve_backup_dir(source_dir)
        logger.info("Backup directory: %s", backup_dir)

        self.validate_project_name(project_name)
        self.ensure_writable(backup_dir)

        self._rotator.rotate(backup_dir, project_name, config.max_backups)
        self._estimator.check_space(source_dir, backup_dir)
        logger.info("Enough disk space available")

        destination = backup_dir / config.archive_name(
            project_name, self._clock.timestamp(config.time_format)
        )
        if destination.exists():
            raise FilesystemError(f"Backup file already exists: {destination}")
        logger.info("Backup file: %s", destination)
        guard.track(destination)

        duration = self._archiver.build(
            source_dir, destination, self._excludes(config, source_dir, destination)
        )
        logger.info("Archive created in %s", SizeFormatter.format_duration(duration))

        try:
            size = destination.stat().st_size
        except OSError as exc:
            raise FilesystemError(f"Could not read size of {destination}: {exc}") from exc
        print(f"Backup created: {destination}")
        print(f"  Size: {SizeFormatter.format_bytes(size)}")

        print("\nVerifying backup integrity...")
        try:
            self._archiver.verify(destination)
        except CorruptArchiveError:
            logger.error("Verification failed, removing %s", destination)
            raise
        guard.clear()
        print("Backup integrity confirmed")

        print_backups(self._rotator.list_backups(backup_dir, project_name), self._clock)

    @staticmethod
    def validate_project_name(project_name: str) -> None:
        if not project_name:
            raise InvalidNameError("Project name is empty")
        invalid = sorted({char for char in project_name if char in INVALID_NAME_CHARACTERS})
        if invalid:
            raise InvalidNameError(
                f"Project name {project_name!r} contains invalid characters: {' '.join(invalid)}"
            )

    @staticmethod
    def ensure_writable(backup_dir: Path) -> None:
        probe = backup_dir / PROBE_FILE_NAME
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            probe.write_text("test", encoding="utf-8")
            probe.read_text(encoding="utf-8")
        except OSError as exc:
            raise PermissionDeniedError(f"No read/write access to {backup_dir}: {exc}") from exc
        finally:
            try:
                probe.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove probe file %s: %s", probe, exc)
        logger.debug("Backup directory %s is writable", backup_dir)

    @staticmethod
    def _excludes(config: BackupConfig, source_dir: Path, destination: Path) -> list[str]:
        excludes = list(config.excludes)
        try:
            relative = destination.parent.resolve().relative_to(source_dir)
        except ValueError:
            return excludes
        logger.debug("Backup directory lies inside the source, excluding it from the archive")
        excludes.append(destination.name)
        if relative.parts:
            excludes.append(f"./{relative.parts[0]}")
        return excludes
