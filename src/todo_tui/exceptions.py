"""Custom exceptions for todo operations.

This module defines a small hierarchy of exceptions so callers can tell
store failures apart from configuration and terminal problems.
"""


class TodoError(Exception):
    """Base exception for all todo-tui errors."""


class StoreError(TodoError):
    """Raised when a SQL statement or the database file access fails."""


class ConfigError(TodoError):
    """Raised when configuration is invalid or the data directory cannot be resolved."""


class TerminalError(TodoError):
    """Raised when the terminal cannot be switched into or out of cbreak mode."""
