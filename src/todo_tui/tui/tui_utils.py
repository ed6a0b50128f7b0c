"""TUI utility functions for ordering, date input and display helpers."""

import shutil
from datetime import date, timedelta

from ..models import Todo


def sort_todos(todos: list[Todo]) -> list[Todo]:
    """
    Order todos for display.

    Three stable passes give the same order as sorting by
    ``(completed, due_date is None, due_date)``: incomplete todos by due
    date, then incomplete todos without a due date, then completed todos.

    Args:
        todos: Todos in store order

    Returns:
        New list in display order
    """
    ordered = sorted(todos, key=lambda t: (t.due_date is not None, t.due_date or date.min))
    ordered.sort(key=lambda t: t.due_date is None)
    ordered.sort(key=lambda t: t.completed)
    return ordered


def is_overdue(todo: Todo, today: date) -> bool:
    """
    Return True if the todo is incomplete and due today or earlier.

    Examples:
        >>> is_overdue(Todo(list_id=1, title="x", due_date=date(2024, 1, 1)), date(2024, 1, 1))
        True
        >>> is_overdue(Todo(list_id=1, title="x"), date(2024, 1, 1))
        False
    """
    return not todo.completed and todo.due_date is not None and todo.due_date <= today


def parse_due_offset(text: str, today: date) -> date | None:
    """
    Turn a "+days from now" input into a due date.

    Args:
        text: Raw input, expected to be a non-negative integer
        today: Date the offset counts from

    Returns:
        ``today + N days``, or None if the input is not a non-negative
        integer or the result is out of the date range

    Examples:
        >>> parse_due_offset("3", date(2024, 1, 1))
        datetime.date(2024, 1, 4)
        >>> parse_due_offset("abc", date(2024, 1, 1)) is None
        True
    """
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    try:
        return today + timedelta(days=int(digits))
    except (OverflowError, ValueError):
        return None


def truncate_text(text: str, max_len: int) -> str:
    """
    Truncate text to max length, adding ellipsis if needed.

    Examples:
        >>> truncate_text("short", 10)
        'short'
        >>> truncate_text("this is a long text", 10)
        'this is...'
    """
    if len(text) <= max_len:
        return text

    if max_len <= 3:
        return "..."[: max(max_len, 0)]

    return text[: max_len - 3] + "..."


def get_terminal_size() -> tuple[int, int]:
    """
    Get terminal size as (columns, rows) tuple.

    Returns:
        Tuple of (columns, rows), defaults to (80, 24) if unavailable
    """
    try:
        size = shutil.get_terminal_size(fallback=(80, 24))
        return (size.columns, size.lines)
    except Exception:
        return (80, 24)
