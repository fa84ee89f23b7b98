from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Iterable, Sequence
from pathlib import Path

from .errors import BuildError, CorruptArchiveError

logger = logging.getLogger(__name__)


class TarArchiver:
    """Create, test and list gzip-compressed tarballs with the system ``tar``.

    Exclude patterns are handed to ``tar --exclude`` unanchored, so each one
    is matched against every path segment: ``*.log`` drops log files at any
    depth and ``node_modules`` drops that directory wherever it occurs.
    """

    def __init__(self, executable: str = "tar") -> None:
        self._executable = executable

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def run(
        self,
        args: Iterable[str],
        *,
        capture_output: bool = False,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        cmd = [self._executable, *args]
        logger.debug("Running: %s", " ".join(cmd))
        return subprocess.run(
            cmd,
            text=True,
            capture_output=capture_output,
            check=check,
        )

    def build(
        self,
        source_dir: Path,
        destination: Path,
        excludes: Sequence[str],
    ) -> float:
        args = ["-czf", str(destination), "-C", str(source_dir)]
        args.extend(f"--exclude={pattern}" for pattern in self.normalize_excludes(excludes))
        args.append(".")

        logger.info("Creating archive of %s", source_dir)
        logger.info("Excluded files/directories: %s", ", ".join(excludes))

        started = time.monotonic()
        try:
            process = self.run(args, capture_output=True, check=False)
        except OSError as exc:
            self._remove_partial(destination)
            raise BuildError(f"Could not run {self._executable}: {exc}") from exc

        if process.returncode != 0:
            self._remove_partial(destination)
            detail = (process.stderr or "").strip() or f"exit code {process.returncode}"
            raise BuildError(f"{self._executable} failed for {source_dir}: {detail}")
        return time.monotonic() - started

    def verify(self, archive: Path) -> None:
        self.list_entries(archive)

    def list_entries(self, archive: Path) -> list[str]:
        try:
            process = self.run(["-tzf", str(archive)], capture_output=True, check=False)
        except OSError as exc:
            raise CorruptArchiveError(f"Could not run {self._executable}: {exc}") from exc

        if process.returncode != 0:
            detail = (process.stderr or "").strip() or f"exit code {process.returncode}"
            raise CorruptArchiveError(f"Archive {archive} is unreadable: {detail}")

        entries: list[str] = []
        for line in process.stdout.splitlines():
            name = line.strip()
            if name.startswith("./"):
                name = name[2:]
            name = name.rstrip("/")
            if name and name != ".":
                entries.append(name)
        return entries

    @staticmethod
    def normalize_excludes(excludes: Sequence[str]) -> list[str]:
        patterns: list[str] = []
        for pattern in excludes:
            cleaned = pattern.strip().rstrip("/")
            if cleaned:
                patterns.append(cleaned)
        return patterns

    @staticmethod
    def _remove_partial(destination: Path) -> None:
        try:
            destination.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial archive %s: %s", destination, exc)
