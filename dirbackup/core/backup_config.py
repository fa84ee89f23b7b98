from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

ARCHIVE_SUFFIX = ".tar.gz"
DEFAULT_TIME_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_MAX_BACKUPS = 10

DEFAULT_EXCLUDES: tuple[str, ...] = (
    # IDEs
    ".idea",
    ".vscode",
    ".eclipse",
    ".settings",
    # version control
    ".git",
    ".gitignore",
    ".svn",
    ".hg",
    # temporary files
    "*.tmp",
    "*.temp",
    "*.swp",
    "*~",
    # logs
    "*.log",
    "logs/",
    # Python
    "venv",
    ".venv",
    "__pycache__",
    "*.pyc",
    "*.pyo",
    "*.pyd",
    ".Python",
    "pip-log.txt",
    ".tox",
    ".coverage",
    ".pytest_cache",
    # Node.js
    "node_modules",
    "npm-debug.log",
    "yarn-debug.log",
    "yarn-error.log",
    ".npm",
    # Rust
    "target/",
    "Cargo.lock",
    "**/*.rs.bk",
    # Go
    "bin/",
    "pkg/",
    "*.exe",
    "*.test",
    "*.prof",
    # Zig
    "zig-cache/",
    "zig-out/",
    # build output
    "build/",
    "dist/",
    "out/",
    # local configuration
    ".env",
    ".env.local",
    ".env.*",
    "config.local.*",
    # OS metadata
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    # editors
    "*.sublime-workspace",
    "*.sublime-project",
    ".atom/",
    ".project",
    "*.iml",
    # compiled objects
    "*.o",
    "*.a",
    "*.so",
    "*.dylib",
    "*.dll",
    "*.class",
)


@dataclass(frozen=True)
class BackupConfig:
    max_backups: int = DEFAULT_MAX_BACKUPS
    debug: bool = False
    excludes: tuple[str, ...] = DEFAULT_EXCLUDES
    backup_dir: Path | None = None
    time_format: str = DEFAULT_TIME_FORMAT

    def resolve_backup_dir(self, source_dir: Path) -> Path:
        if self.backup_dir is not None:
            return self.backup_dir
        return source_dir.parent / "Backup"

    def archive_name(self, project_name: str, timestamp: str) -> str:
        return f"{project_name}_backup_{timestamp}{ARCHIVE_SUFFIX}"


@dataclass(frozen=True)
class RunOptions:
    """Per-invocation settings from the command line.

    Values left as ``None`` defer to the config file or the built-in defaults.
    """

    source_dir: Path | None = None
    config_path: Path | None = None
    backup_dir: Path | None = None
    max_backups: int | None = None
    project_name: str | None = None
    debug: bool = False
    archive: Path | None = None

    def resolve_source(self) -> Path:
        return (self.source_dir or Path.cwd()).expanduser().resolve()

    def resolve_project_name(self, source_dir: Path) -> str:
        if self.project_name is not None:
            return self.project_name
        return source_dir.name

    def apply(self, config: BackupConfig) -> BackupConfig:
        overrides: dict[str, object] = {}
        if self.backup_dir is not None:
            overrides["backup_dir"] = self.backup_dir.expanduser().resolve()
        if self.max_backups is not None:
            overrides["max_backups"] = self.max_backups
        if self.debug:
            overrides["debug"] = True
        if not overrides:
            return config
        return replace(config, **overrides)
