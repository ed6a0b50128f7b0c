"""Todos pane renderer.

This module provides the render_todos_panel function that displays the
todos of the selected list, marking completion and overdue items.
"""

from __future__ import annotations

from datetime import date

from rich.panel import Panel
from rich.text import Text

from ...models import Todo
from ..navigation import visible_window
from ..tui_utils import is_overdue
from .lists_panel import HIGHLIGHT_SYMBOL


def format_todo_label(todo: Todo) -> str:
    """Return the row label, e.g. ``"3 [x] Buy milk"``."""
    mark = "[x]" if todo.completed else "[ ]"
    todo_id = todo.id if todo.id is not None else 9
    return f"{todo_id} {mark} {todo.title}"


def render_todos_panel(
    todos: list[Todo],
    cursor: int | None,
    has_focus: bool,
    today: date,
    viewport_size: int | None = None,
) -> Panel:
    """Build Rich Panel listing the todos of the selected list.

    Args:
        todos: Todos in display order
        cursor: Selected row, or None
        has_focus: Whether navigation keys currently move this pane
        today: Date used for the overdue highlight
        viewport_size: Maximum rows to draw (None = all)

    Returns:
        Rich Panel component ready for rendering
    """
    height = viewport_size if viewport_size is not None else len(todos)
    start, end = visible_window(len(todos), cursor, height)

    body = Text(no_wrap=True, overflow="ellipsis")
    if not todos:
        body.append("No todos", style="dim italic")

    for index in range(start, end):
        if index > start:
            body.append("\n")
        todo = todos[index]
        color = "red" if is_overdue(todo, today) else "white"
        style = f"{color} italic" if index == cursor else color
        prefix = HIGHLIGHT_SYMBOL if index == cursor else " " * len(HIGHLIGHT_SYMBOL)
        body.append(prefix + format_todo_label(todo), style=style)
        if todo.due_date is not None:
            body.append(f"  {todo.due_date.isoformat()}", style="dim")

    count = f"[dim]({len(todos)})[/dim]"
    return Panel(
        body,
        title=f"[bold]Todos[/bold] {count}",
        border_style="cyan" if has_focus else "white",
    )
