"""New-list form renderer."""

from __future__ import annotations

from rich.console import Group
from rich.text import Text

from ..models import EditBuffers, EditingField, EditingList
from .todo_form import render_input_box


def render_list_form(view: EditingList, buffers: EditBuffers) -> Group:
    """Build the new-list form with its single title box."""
    active = isinstance(view.focus, EditingField)
    value = buffers.pending_input if active else buffers.new_list_title

    menu = Text(justify="center")
    menu.append("(t) Input title\n")
    menu.append("(s) Save list\n", style="green italic")
    menu.append("(esc) Cancel", style="red")

    return Group(
        Text("New list", justify="center", style="bold"),
        Text(""),
        menu,
        Text(""),
        render_input_box("Title", value, active),
    )
