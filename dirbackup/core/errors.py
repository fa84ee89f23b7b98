from __future__ import annotations


class BackupError(Exception):
    """Base class for every failure that aborts a backup run."""


class ToolMissingError(BackupError):
    pass


class ConfigLoadError(BackupError):
    """Config file exists but cannot be used; callers fall back to defaults."""


class PermissionDeniedError(BackupError):
    pass


class FilesystemError(BackupError):
    pass


class EmptySourceError(BackupError):
    pass


class InsufficientSpaceError(BackupError):
    def __init__(self, required: int, available: int, message: str | None = None) -> None:
        self.required = required
        self.available = available
        super().__init__(
            message or f"Not enough free space: required {required} bytes, available {available} bytes"
        )


class InvalidNameError(BackupError):
    pass


class BuildError(BackupError):
    pass


class CorruptArchiveError(BackupError):
    pass
