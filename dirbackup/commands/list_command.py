from __future__ import annotations

from collections.abc import Sequence

from ..core.archive_rotator import ArchiveRotator, BackupRecord
from ..core.backup_config import RunOptions
from ..core.config_loader import ConfigLoader
from ..core.protocols import ClockProtocol
from ..core.size_formatter import SizeFormatter
from .base import Command


def print_backups(records: Sequence[BackupRecord], clock: ClockProtocol) -> None:
    print("\nCurrent backups:")
    if not records:
        print("(none)")
        return
    for record in sorted(records, key=lambda item: (item.mod_time, str(item.path))):
        print(
            f"{record.path.name} from {clock.display(record.mod_time)} "
            f"({SizeFormatter.format_bytes(record.size)})"
        )
    total_size = sum(record.size for record in records)
    print(f"\nTotal backups: {len(records)}")
    print(f"Total size: {SizeFormatter.format_bytes(total_size)}")


class ListCommand(Command):
    def __init__(
        self,
        options: RunOptions,
        config_loader: ConfigLoader,
        rotator: ArchiveRotator,
        clock: ClockProtocol,
    ) -> None:
        self._options = options
        self._config_loader = config_loader
        self._rotator = rotator
        self._clock = clock

    def run(self) -> int:
        source_dir = self._options.resolve_source()
        project_name = self._options.resolve_project_name(source_dir)
        config = self._options.apply(self._config_loader.load(self._options.config_path))
        backup_dir = config.resolve_backup_dir(source_dir)

        print(f"Backups of {project_name} in {backup_dir}")
        print_backups(self._rotator.list_backups(backup_dir, project_name), self._clock)
        return 0
