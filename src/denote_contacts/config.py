"""Process configuration: contacts root and task directory."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .paths import expand_home, get_config_path


log = logging.getLogger(__name__)

ENV_CONTACTS_DIR = "DENOTE_CONTACTS_DIR"
ENV_TASKS_DIR = "DENOTE_TASKS_DIR"


@dataclass(frozen=True)
class Config:
    notes_directory: Path
    tasks_directory: Path


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigError(f"could not determine home directory: {e}") from e


def load_config(path: Path | None = None, home: Path | None = None) -> Config:
    """Read the config file, falling back to defaults when it does not exist."""
    home = home or _home()
    path = path or get_config_path()
    config = Config(
        notes_directory=home / "Documents" / "denote",
        tasks_directory=home / "notes",
    )
    if not path.exists():
        log.debug("No config file at %s, using defaults", path)
        return config

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to load config '{path}': {e}") from e

    notes = data.get("notes_directory")
    tasks = data.get("tasks_directory")
    for key, value in (("notes_directory", notes), ("tasks_directory", tasks)):
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{key}' in {path} must be a string")
    return Config(
        notes_directory=expand_home(notes, home) if notes else config.notes_directory,
        tasks_directory=expand_home(tasks, home) if tasks else config.tasks_directory,
    )


def resolve_directories(
    config: Config, environ: Mapping[str, str] | None = None
) -> Config:
    """Apply environment overrides on top of the loaded config."""
    environ = os.environ if environ is None else environ
    notes = environ.get(ENV_CONTACTS_DIR) or ""
    tasks = environ.get(ENV_TASKS_DIR) or ""
    return Config(
        notes_directory=Path(notes) if notes else config.notes_directory,
        tasks_directory=Path(tasks) if tasks else config.tasks_directory,
    )
