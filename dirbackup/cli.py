#!/usr/bin/env python3

from __future__ import annotations

import argparse
from pathlib import Path

from .commands.factory import CommandFactory
from .core.backup_config import RunOptions
from .core.logging_setup import setup_logging

DEFAULT_CONFIG_FILE = "config.json"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


class CliApplication:
    def __init__(self, factory: CommandFactory | None = None) -> None:
        self._factory = factory or CommandFactory()

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="dir-backup",
            description="Archive a project directory into a rotating set of tar.gz backups",
        )
        subparsers = parser.add_subparsers(dest="action", required=True)

        backup_parser = subparsers.add_parser(
            "backup",
            help="Create a new backup of a project directory.",
        )
        self._add_project_args(backup_parser)
        backup_parser.add_argument(
            "--max-backups",
            type=_positive_int,
            default=None,
            help="Number of existing backups to keep before adding a new one.",
        )

        list_parser = subparsers.add_parser(
            "list",
            help="List existing backups of a project directory.",
        )
        self._add_project_args(list_parser)

        verify_parser = subparsers.add_parser(
            "verify",
            help="Check that an existing archive is readable.",
        )
        verify_parser.add_argument("archive", type=Path, help="Archive file to verify.")
        verify_parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
        return parser

    def _add_project_args(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "source",
            nargs="?",
            type=Path,
            default=None,
            help="Project directory (default: current directory)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            default=Path(DEFAULT_CONFIG_FILE),
            help=f"Optional config file (default: ./{DEFAULT_CONFIG_FILE})",
        )
        parser.add_argument(
            "--backup-dir",
            type=Path,
            default=None,
            help="Where archives are stored (default: <parent>/Backup)",
        )
        parser.add_argument(
            "--project-name",
            default=None,
            help="Name used in archive file names (default: source directory name)",
        )
        parser.add_argument("--debug", action="store_true", help="Enable debug logging.")

    def parse_options(self, args: argparse.Namespace) -> RunOptions:
        return RunOptions(
            source_dir=getattr(args, "source", None),
            config_path=getattr(args, "config", None),
            backup_dir=getattr(args, "backup_dir", None),
            max_backups=getattr(args, "max_backups", None),
            project_name=getattr(args, "project_name", None),
            debug=args.debug,
            archive=getattr(args, "archive", None),
        )

    def run(self, argv: list[str] | None = None) -> int:
        args = self.build_parser().parse_args(argv)
        setup_logging(debug=args.debug)
        command = self._factory.create(args.action, self.parse_options(args))
        return command.execute()


def main() -> int:
    app = CliApplication()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
