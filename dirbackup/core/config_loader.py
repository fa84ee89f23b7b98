from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from .backup_config import BackupConfig
from .errors import ConfigLoadError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Load an optional YAML/JSON config file on top of the built-in defaults.

    A missing file is normal and yields the defaults. A file that exists but
    cannot be used is reported as a warning and also yields the defaults.
    """

    def __init__(self, defaults: BackupConfig | None = None) -> None:
        self._defaults = defaults or BackupConfig()

    def load(self, config_path: str | Path | None) -> BackupConfig:
        if config_path is None:
            return self._defaults
        config_file = Path(config_path).expanduser()
        if not config_file.is_file():
            logger.debug("No config file at %s, using defaults", config_file)
            return self._defaults

        try:
            config = self.parse(config_file)
        except ConfigLoadError as exc:
            logger.warning("Could not load config file %s: %s; using defaults", config_file, exc)
            return self._defaults

        logger.info("Loaded config from %s", config_file)
        return config

    def parse(self, config_file: Path) -> BackupConfig:
        try:
            with open(config_file, encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigLoadError(f"cannot read file: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"invalid syntax: {exc}") from exc

        if payload is None:
            return self._defaults
        if not isinstance(payload, dict):
            raise ConfigLoadError("top level must be a mapping")

        values = {str(key).lower(): value for key, value in payload.items()}
        overrides: dict[str, Any] = {}

        if "maxbackups" in values:
            overrides["max_backups"] = self._max_backups(values["maxbackups"])
        if "debug" in values:
            if not isinstance(values["debug"], bool):
                raise ConfigLoadError("debug must be a boolean")
            overrides["debug"] = values["debug"]
        if "excludes" in values:
            overrides["excludes"] = self._excludes(values["excludes"])
        if values.get("backupdir"):
            overrides["backup_dir"] = self._resolve_path(values["backupdir"], config_file)
        if values.get("timeformat"):
            if not isinstance(values["timeformat"], str):
                raise ConfigLoadError("timeFormat must be a string")
            overrides["time_format"] = self._time_format(values["timeformat"])

        return replace(self._defaults, **overrides)

    def _max_backups(self, value: object) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigLoadError("maxBackups must be an integer")
        if value < 1:
            raise ConfigLoadError("maxBackups must be at least 1")
        return value

    def _time_format(self, value: str) -> str:
        if "%" not in value:
            raise ConfigLoadError(f"timeFormat {value!r} has no strftime directive")
        if os.sep in value or "/" in value:
            raise ConfigLoadError(f"timeFormat {value!r} must not contain path separators")
        return value

    def _excludes(self, value: object) -> tuple[str, ...]:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ConfigLoadError("excludes must be a list of strings")
        return tuple(item for item in value if item.strip())

    def _resolve_path(self, value: object, config_file: Path) -> Path:
        if not isinstance(value, str):
            raise ConfigLoadError("backupDir must be a string")
        resolved = Path(value).expanduser()
        if not resolved.is_absolute():
            resolved = config_file.parent / resolved
        return resolved
