from __future__ import annotations

from ..core.archive_rotator import ArchiveRotator
from ..core.backup_config import RunOptions
from ..core.clock import Clock
from ..core.config_loader import ConfigLoader
from ..core.protocols import ArchiverProtocol, ClockProtocol, SpaceEstimatorProtocol
from ..core.space_estimator import SpaceEstimator
from ..core.tar_archiver import TarArchiver
from .backup_command import BackupCommand
from .base import Command
from .list_command import ListCommand
from .verify_command import VerifyCommand


class CommandFactory:
    def __init__(
        self,
        *,
        config_loader: ConfigLoader | None = None,
        clock: ClockProtocol | None = None,
        archiver: ArchiverProtocol | None = None,
        rotator: ArchiveRotator | None = None,
        estimator: SpaceEstimatorProtocol | None = None,
    ) -> None:
        self._config_loader = config_loader or ConfigLoader()
        self._clock = clock or Clock()
        self._archiver = archiver or TarArchiver()
        self._rotator = rotator or ArchiveRotator()
        self._estimator = estimator or SpaceEstimator()

    def create(self, action: str, options: RunOptions) -> Command:
        if action == "backup":
            return BackupCommand(
                options,
                self._config_loader,
                self._archiver,
                self._clock,
                self._rotator,
                self._estimator,
            )
        if action == "list":
            return ListCommand(options, self._config_loader, self._rotator, self._clock)
        if action == "verify":
            if options.archive is None:
                raise SystemExit("verify requires an archive path")
            return VerifyCommand(options.archive, self._archiver)
        raise SystemExit(f"Unsupported action: {action}")
