from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..core.errors import BackupError

logger = logging.getLogger(__name__)


class Command(ABC):
    def execute(self) -> int:
        """Run the command and map fatal backup errors to exit status 1."""
        try:
            return self.run()
        except BackupError as exc:
            logger.error("%s: %s", type(exc).__name__, exc)
            return 1

    @abstractmethod
    def run(self) -> int:
        raise NotImplementedError
