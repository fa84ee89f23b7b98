from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import EmptySourceError, FilesystemError, InsufficientSpaceError
from .size_formatter import SizeFormatter

logger = logging.getLogger(__name__)

MIN_FREE_SPACE = 50 * 1024 * 1024


@dataclass(frozen=True)
class SpaceReport:
    source_size: int
    required: int
    available: int


class SpaceEstimator:
    def __init__(self, disk_usage: Callable[[str], Any] | None = None) -> None:
        self._disk_usage = disk_usage or shutil.disk_usage

    def estimate_source_size(self, source_dir: Path) -> int:
        def _raise(exc: OSError) -> None:
            raise exc

        total = 0
        try:
            for root, _, files in os.walk(source_dir, onerror=_raise):
                for name in files:
                    info = os.lstat(os.path.join(root, name))
                    if stat.S_ISREG(info.st_mode):
                        total += info.st_size
        except OSError as exc:
            raise FilesystemError(f"Could not determine size of {source_dir}: {exc}") from exc

        if total == 0:
            raise EmptySourceError(f"Source directory {source_dir} appears to be empty")
        return total

    @staticmethod
    def required_space(source_size: int) -> int:
        # ceil(source_size * 1.1) in integers
        return max(-(-source_size * 11 // 10), MIN_FREE_SPACE)

    def available_space(self, backup_dir: Path) -> int:
        try:
            return int(self._disk_usage(str(backup_dir)).free)
        except OSError as exc:
            raise FilesystemError(f"Could not query free space at {backup_dir}: {exc}") from exc

    def check_space(self, source_dir: Path, backup_dir: Path) -> SpaceReport:
        logger.info("Checking available disk space...")
        source_size = self.estimate_source_size(source_dir)
        required = self.required_space(source_size)
        available = self.available_space(backup_dir)

        if available < required:
            raise InsufficientSpaceError(
                required,
                available,
                "Not enough free space in "
                f"{backup_dir}: required {SizeFormatter.format_bytes(required)}, "
                f"available {SizeFormatter.format_bytes(available)}",
            )

        logger.info("Source size: %s", SizeFormatter.format_bytes(source_size))
        logger.info("Available space: %s", SizeFormatter.format_bytes(available))
        return SpaceReport(source_size=source_size, required=required, available=available)
