"""Platform path resolution for config and log files."""

from pathlib import Path

from platformdirs import user_log_dir
from platformdirs.unix import Unix


APP_NAME = "denote-contacts"


def get_config_path() -> Path:
    """Return the path of the TOML config file (may not exist).

    Always the XDG location, ``~/.config/denote-contacts/config.toml`` unless
    ``XDG_CONFIG_HOME`` says otherwise, on every platform.
    """
    return Path(Unix(APP_NAME).user_config_dir) / "config.toml"


def get_log_path() -> Path:
    """Return the log file path, creating its directory."""
    path = Path(user_log_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path / f"{APP_NAME}.log"


def expand_home(raw: str, home: Path) -> Path:
    """Expand a leading ``~`` against ``home``."""
    if raw == "~" or raw.startswith("~/"):
        return home / raw[2:]
    return Path(raw)
