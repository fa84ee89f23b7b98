from __future__ import annotations

from pathlib import Path

from ..core.errors import FilesystemError, ToolMissingError
from ..core.protocols import ArchiverProtocol
from .base import Command


class VerifyCommand(Command):
    def __init__(self, archive: Path, archiver: ArchiverProtocol) -> None:
        self._archive = archive
        self._archiver = archiver

    def run(self) -> int:
        if not self._archiver.is_available():
            raise ToolMissingError("tar is required but was not found on PATH")
        if not self._archive.is_file():
            raise FilesystemError(f"Archive not found: {self._archive}")

        entries = self._archiver.list_entries(self._archive)
        print(f"Archive OK: {self._archive} ({len(entries)} entries)")
        return 0
