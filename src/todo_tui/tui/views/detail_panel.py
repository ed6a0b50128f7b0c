"""Detail panel renderer showing one todo's title and description."""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from ...models import Todo


def render_detail_panel(todo: Todo | None) -> Panel:
    """Build Rich Panel with the title and description of a todo.

    Args:
        todo: Todo to show, or None if the detail row disappeared

    Returns:
        Rich Panel component ready for rendering
    """
    if todo is None:
        return Panel(Text("", justify="center"), title="Details", border_style="dim")

    content = Group(
        Text(todo.title, justify="center", style="bold"),
        Text(todo.description or "", justify="center"),
    )
    return Panel(content, title="Details", border_style="blue")
