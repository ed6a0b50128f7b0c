"""Configuration loading and data directory helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigError

DATA_DIR_NAME = ".todo"
CONFIG_FILENAME = "config.json"


def resolve_data_dir() -> Path:
    """Return ``$HOME/.todo``, creating it if needed.

    Raises:
        ConfigError: If HOME is not set or the directory cannot be created
    """
    home = os.environ.get("HOME")
    if not home:
        raise ConfigError("could not determine home directory")
    data_dir = Path(home) / DATA_DIR_NAME
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ConfigError(f"could not create data directory {data_dir}: {err}") from err
    return data_dir


@dataclass(frozen=True)
class Config:
    """Runtime configuration, optionally loaded from config.json."""

    data_dir: Path
    db_filename: str = "todos.sqlite"
    log_filename: str = "todo.log"
    poll_timeout_seconds: float = 0.25
    min_terminal_cols: int = 60
    min_terminal_rows: int = 16

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @property
    def log_path(self) -> Path:
        return self.data_dir / self.log_filename

    @classmethod
    def from_dict(cls, payload: dict, data_dir: Path) -> Config:
        """Create a Config object from a raw dictionary.

        Args:
            payload: Parsed JSON object; missing keys take their defaults
            data_dir: Directory used when the payload has no ``data_dir``

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        if not isinstance(payload, dict):
            raise ConfigError("config must be a JSON object")

        try:
            if "data_dir" in payload:
                data_dir = Path(os.path.expanduser(str(payload["data_dir"]))).resolve()
            poll_timeout_seconds = float(payload.get("poll_timeout_seconds", 0.25))
            min_terminal_cols = int(payload.get("min_terminal_cols", 60))
            min_terminal_rows = int(payload.get("min_terminal_rows", 16))
        except (TypeError, ValueError) as err:
            raise ConfigError(f"invalid config value: {err}") from err

        if poll_timeout_seconds <= 0:
            raise ConfigError(
                f"poll_timeout_seconds must be positive, got {poll_timeout_seconds}"
            )
        if min_terminal_cols <= 0:
            raise ConfigError(f"min_terminal_cols must be positive, got {min_terminal_cols}")
        if min_terminal_rows <= 0:
            raise ConfigError(f"min_terminal_rows must be positive, got {min_terminal_rows}")

        db_filename = str(payload.get("db_filename", "todos.sqlite"))
        log_filename = str(payload.get("log_filename", "todo.log"))
        if not db_filename or not log_filename:
            raise ConfigError("db_filename and log_filename must not be empty")

        return cls(
            data_dir=data_dir,
            db_filename=db_filename,
            log_filename=log_filename,
            poll_timeout_seconds=poll_timeout_seconds,
            min_terminal_cols=min_terminal_cols,
            min_terminal_rows=min_terminal_rows,
        )


def load_config(path: Path | None, data_dir: Path) -> Config:
    """Load configuration from ``path``.

    A missing file yields the defaults. An unreadable or malformed file
    raises ConfigError.
    """
    if path is None or not path.exists():
        return Config(data_dir=data_dir)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as err:
        raise ConfigError(f"could not read config {path}: {err}") from err
    return Config.from_dict(data, data_dir)
