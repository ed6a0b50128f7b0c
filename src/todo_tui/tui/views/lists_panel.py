"""Lists pane renderer.

This module provides the render_lists_panel function that displays every
todo list with the selected one highlighted.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from ...models import TodoList
from ..navigation import visible_window

HIGHLIGHT_SYMBOL = ">> "


def render_lists_panel(
    lists: list[TodoList],
    cursor: int | None,
    has_focus: bool,
    viewport_size: int | None = None,
) -> Panel:
    """Build Rich Panel listing todo list titles.

    Args:
        lists: Lists in store order
        cursor: Selected row, or None
        has_focus: Whether navigation keys currently move this pane
        viewport_size: Maximum rows to draw (None = all)

    Returns:
        Rich Panel component ready for rendering
    """
    height = viewport_size if viewport_size is not None else len(lists)
    start, end = visible_window(len(lists), cursor, height)

    body = Text(no_wrap=True, overflow="ellipsis")
    if not lists:
        body.append("No lists yet, press L to create one", style="dim italic")

    for index in range(start, end):
        if index > start:
            body.append("\n")
        title = lists[index].title
        if index == cursor:
            body.append(HIGHLIGHT_SYMBOL + title, style="italic")
        else:
            body.append(" " * len(HIGHLIGHT_SYMBOL) + title)

    return Panel(
        body,
        title="[bold]List[/bold]",
        border_style="cyan" if has_focus else "white",
    )
