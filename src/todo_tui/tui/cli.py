"""CLI entry point for the todo application.

This module handles command-line argument parsing, logging setup,
signal handling, and picks between the one-shot report and the TUI.
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import signal
import sys
from datetime import UTC, date, datetime
from pathlib import Path

from rich.console import Console

from ..database import TodoStore
from ..exceptions import ConfigError
from ..report import run_report
from ..utils import CONFIG_FILENAME, Config, load_config, resolve_data_dir
from .app import TUIApp

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log line
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "context": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_context"):
            log_data["context"].update(record.extra_context)

        return json.dumps(log_data)


def _setup_logging(log_file: Path, debug: bool) -> None:
    """Setup structured JSON logging to file.

    The TUI owns the terminal, so nothing is logged to stdout or stderr.

    Args:
        log_file: Path to log file
        debug: Enable debug level logging
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # 1MB max, 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    root_logger.addHandler(file_handler)

    logger.info(
        "Logging initialized",
        extra={"extra_context": {"log_file": str(log_file), "debug": debug}},
    )


def _parse_date(value: str) -> date:
    """argparse type for ``YYYY-MM-DD`` dates."""
    try:
        return date.fromisoformat(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from err


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="todo-tui",
        description="Terminal todo list manager",
    )

    parser.add_argument(
        "-d",
        "--date",
        type=_parse_date,
        metavar="YYYY-MM-DD",
        help="Print incomplete todos due on or before this date and exit",
    )

    parser.add_argument(
        "-c",
        "--count",
        action="store_true",
        help="Only print the number of incomplete todos due (defaults to today)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to a JSON config file (default: ~/.todo/{CONFIG_FILENAME})",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def _load_runtime_config(config_path: Path | None) -> Config:
    """Resolve the data directory and load the config.

    Raises:
        ConfigError: If the home directory or config cannot be resolved
    """
    data_dir = resolve_data_dir()
    path = config_path if config_path is not None else data_dir / CONFIG_FILENAME
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}")
    config = load_config(path, data_dir)
    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ConfigError(f"could not create data directory {config.data_dir}: {err}") from err
    return config


# Global TUI app instance for signal handlers
_app_instance: TUIApp | None = None


def _signal_handler(signum: int, frame) -> None:
    """Handle shutdown signals.

    SIGTERM unwinds through the app's ``with`` blocks so the terminal is
    restored before the process exits.
    """
    if signum == signal.SIGTERM:
        logger.info("Received SIGTERM, shutting down")
        if _app_instance is not None:
            _app_instance.should_quit = True
        sys.exit(0)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0=success, 1=error, 2=config error, 130=SIGINT)
    """
    global _app_instance

    args = _parse_args(argv)
    console = Console()

    try:
        config = _load_runtime_config(args.config)
    except ConfigError as err:
        console.print(f"Error: {err}.", markup=False, highlight=False)
        return EXIT_CONFIG_ERROR

    _setup_logging(config.log_path, args.debug)
    store = TodoStore(config.db_path)

    if args.date is not None or args.count:
        due_by = args.date or date.today()
        logger.info(
            "Report command invoked",
            extra={"extra_context": {"due_by": due_by.isoformat(), "count": args.count}},
        )
        return run_report(store, due_by, args.count)

    logger.info(
        "TUI starting",
        extra={"extra_context": {"db_path": str(config.db_path), "debug": args.debug}},
    )

    try:
        _app_instance = TUIApp(config, store, console=console)
        signal.signal(signal.SIGTERM, _signal_handler)

        exit_code = _app_instance.run()

        logger.info("TUI exited", extra={"extra_context": {"exit_code": exit_code}})
        return exit_code

    except KeyboardInterrupt:
        logger.info("TUI interrupted by user (KeyboardInterrupt)")
        return 130

    finally:
        _app_instance = None


if __name__ == "__main__":
    sys.exit(main())
