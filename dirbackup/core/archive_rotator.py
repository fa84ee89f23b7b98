from __future__ import annotations

import glob
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .backup_config import ARCHIVE_SUFFIX
from .errors import FilesystemError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupRecord:
    path: Path
    mod_time: datetime
    size: int


class ArchiveRotator:
    """Find a project's archives and drop the oldest beyond a retention count."""

    @staticmethod
    def pattern(project_name: str) -> str:
        return f"{glob.escape(project_name)}_backup_*{ARCHIVE_SUFFIX}"

    def list_backups(self, backup_dir: Path, project_name: str) -> list[BackupRecord]:
        """Return the project's archives, newest first.

        Files that vanish or cannot be stat'd between globbing and stat are
        skipped with a warning. Equal modification times are ordered by path.
        """
        if not backup_dir.is_dir():
            return []

        records: list[BackupRecord] = []
        for candidate in backup_dir.glob(self.pattern(project_name)):
            try:
                info = candidate.stat()
            except OSError as exc:
                logger.warning("Cannot read status of %s: %s", candidate, exc)
                continue
            records.append(
                BackupRecord(
                    path=candidate,
                    mod_time=datetime.fromtimestamp(info.st_mtime),
                    size=info.st_size,
                )
            )

        records.sort(key=lambda record: str(record.path))
        records.sort(key=lambda record: record.mod_time, reverse=True)
        return records

    def rotate(self, backup_dir: Path, project_name: str, max_backups: int) -> list[Path]:
        if max_backups < 1:
            raise ValueError(f"max_backups must be at least 1, got {max_backups}")

        logger.info("Looking for old backups...")
        backups = self.list_backups(backup_dir, project_name)
        excess = backups[max_backups:]
        if not excess:
            logger.debug("%d backup(s) found, nothing to rotate", len(backups))
            return []

        logger.info("Maximum backup count reached, deleting %d old backup(s)", len(excess))
        deleted: list[Path] = []
        for record in excess:
            logger.info("Deleting: %s", record.path)
            try:
                record.path.unlink()
            except OSError as exc:
                raise FilesystemError(f"Could not delete {record.path}: {exc}") from exc
            deleted.append(record.path)
        return deleted
