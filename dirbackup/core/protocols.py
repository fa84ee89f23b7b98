from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .space_estimator import SpaceReport


class ArchiverProtocol(Protocol):
    def is_available(self) -> bool:
        ...

    def build(
        self,
        source_dir: Path,
        destination: Path,
        excludes: Sequence[str],
    ) -> float:
        ...

    def verify(self, archive: Path) -> None:
        ...

    def list_entries(self, archive: Path) -> list[str]:
        ...


class SpaceEstimatorProtocol(Protocol):
    def check_space(self, source_dir: Path, backup_dir: Path) -> SpaceReport:
        ...


class ClockProtocol(Protocol):
    def now_iso(self) -> str:
        ...

    def timestamp(self, time_format: str = "%Y%m%d_%H%M%S") -> str:
        ...

    def display(self, moment: datetime) -> str:
        ...
