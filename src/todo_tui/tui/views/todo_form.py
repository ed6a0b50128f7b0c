"""Todo form renderer for creating and editing todos.

The field being typed into shows the live input in yellow; the other
fields show their staged values.
"""

from __future__ import annotations

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from ..models import EditBuffers, EditingField, EditingTodo, Field, FormFocus

FIELD_TITLES = {
    Field.TITLE: "Title",
    Field.DESCRIPTION: "Description",
    Field.DUE_DATE: "Due date +days from now",
}


def render_input_box(title: str, value: str, active: bool) -> Panel:
    """Build a rounded box holding one field value."""
    style = "yellow" if active else "white"
    return Panel(
        Text(value, justify="center", style=style),
        title=title,
        box=box.ROUNDED,
        border_style=style,
    )


def field_value(field: Field, focus: FormFocus, buffers: EditBuffers) -> str:
    """Return the text shown in a todo field box."""
    if isinstance(focus, EditingField) and focus.field == field:
        return buffers.pending_input
    if field == Field.TITLE:
        return buffers.pending_title
    if field == Field.DESCRIPTION:
        return buffers.pending_description
    if buffers.pending_due_date is None:
        return ""
    return buffers.pending_due_date.isoformat()


def render_todo_form(view: EditingTodo, buffers: EditBuffers) -> Group:
    """Build the todo form.

    Args:
        view: Current todo form view
        buffers: Input and staged values

    Returns:
        Rich Group with header, key menu and one box per field
    """
    header = "New todo" if view.edit_index is None else "Edit todo"
    menu = Text(justify="center")
    menu.append("Create a todo\n" if view.edit_index is None else "Edit the todo\n")
    menu.append("(t) Input title\n")
    menu.append("(d) Input description\n")
    menu.append("(D) Input due date\n")
    menu.append("(s) Save todo\n", style="green italic")
    menu.append("(esc) Cancel", style="red")

    boxes = [
        render_input_box(
            FIELD_TITLES[field],
            field_value(field, view.focus, buffers),
            isinstance(view.focus, EditingField) and view.focus.field == field,
        )
        for field in (Field.TITLE, Field.DESCRIPTION, Field.DUE_DATE)
    ]

    return Group(
        Text(header, justify="center", style="bold"),
        Text(""),
        menu,
        Text(""),
        *boxes,
    )
