"""Command-line entry point for the contacts browser."""

from __future__ import annotations

import argparse
import logging
import sys

from .app import Application
from .config import load_config, resolve_directories
from .errors import ConfigError
from .operations import Workspace
from .paths import APP_NAME, get_log_path
from .store import ContactStore


log = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Browse and maintain denote contact notes in the terminal.",
    )
    parser.add_argument(
        "--version", action="version", version=f"{APP_NAME} v{VERSION}",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log file verbosity (default: INFO)",
    )
    return parser


def configure_logging(level: str) -> None:
    # The terminal belongs to the UI, so logs go to a file
    logging.basicConfig(
        filename=get_log_path(),
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = resolve_directories(load_config())
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not sys.stdin.isatty():
        print("Error: an interactive terminal is required", file=sys.stderr)
        return 1

    log.info("Starting with contacts in %s, tasks in %s",
             config.notes_directory, config.tasks_directory)
    workspace = Workspace(ContactStore(config.notes_directory), config.tasks_directory)
    Application(workspace).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
