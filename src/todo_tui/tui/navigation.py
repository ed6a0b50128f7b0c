"""Cursor movement over a pane of variable length.

A cursor is either None (nothing selected) or an index in
``range(length)``. Every helper here keeps that invariant.
"""

from __future__ import annotations


def move_up(cursor: int | None, length: int) -> int | None:
    """Move the cursor up one row, stopping at the first row."""
    if length <= 0:
        return None
    if cursor is None:
        return 0
    return max(min(cursor, length - 1) - 1, 0)


def move_down(cursor: int | None, length: int) -> int | None:
    """Move the cursor down one row, stopping at the last row."""
    if length <= 0:
        return None
    if cursor is None:
        return 0
    return min(cursor + 1, length - 1)


def clamp_cursor(cursor: int | None, length: int) -> int | None:
    """Re-fit a cursor to a freshly fetched sequence of ``length`` rows."""
    if cursor is None or length <= 0:
        return None
    return max(0, min(cursor, length - 1))


def visible_window(length: int, cursor: int | None, height: int) -> tuple[int, int]:
    """Return the ``(start, end)`` slice of rows to draw so the cursor stays visible.

    Args:
        length: Number of rows in the pane
        cursor: Selected row, or None
        height: Number of rows that fit on screen

    Returns:
        Tuple of (start, end) indices, ``end`` exclusive

    Examples:
        >>> visible_window(10, 7, 5)
        (3, 8)
        >>> visible_window(3, None, 5)
        (0, 3)
    """
    if height <= 0 or length <= 0:
        return (0, 0)
    if length <= height:
        return (0, length)
    start = 0
    if cursor is not None and cursor >= height:
        start = cursor - height + 1
    start = min(start, length - height)
    return (start, start + height)
