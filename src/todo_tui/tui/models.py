"""State models for the TUI application.

The current screen is one of three view dataclasses. Forms carry a focus
that is either the field menu or a field being typed into, so a form can
never be "editing nothing" and "editing a field" at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Union

from ..models import Todo, TodoList


class Field(Enum):
    """Input fields of the todo and list forms."""

    TITLE = "title"
    DESCRIPTION = "description"
    DUE_DATE = "due_date"


@dataclass(frozen=True)
class FieldMenu:
    """Form focus when no field is being typed into."""


@dataclass(frozen=True)
class EditingField:
    """Form focus while a field is being typed into."""

    field: Field


FormFocus = Union[FieldMenu, EditingField]


@dataclass(frozen=True)
class Browsing:
    """Main screen. ``detail_index`` shows the details of that todo row."""

    detail_index: int | None = None


@dataclass(frozen=True)
class EditingTodo:
    """Todo form. ``edit_index`` is the todo row being edited, None for a new todo."""

    focus: FormFocus
    edit_index: int | None = None


@dataclass(frozen=True)
class EditingList:
    """New-list form."""

    focus: FormFocus


View = Union[Browsing, EditingTodo, EditingList]


@dataclass
class SelectionState:
    """Cursors over the lists pane and the todos pane."""

    lists_cursor: int | None = None
    todos_cursor: int | None = None
    focus_is_lists: bool = True


@dataclass
class EditBuffers:
    """Keystroke accumulator and staged values of the open form."""

    pending_input: str = ""
    pending_title: str = ""
    pending_description: str = ""
    pending_due_date: date | None = None
    new_list_title: str = ""

    def clear_todo(self) -> None:
        self.pending_title = ""
        self.pending_description = ""
        self.pending_due_date = None

    def clear_list(self) -> None:
        self.new_list_title = ""


@dataclass
class AppState:
    """Complete interaction state of the TUI.

    ``lists`` and ``todos`` are the rows fetched for the current frame;
    ``todos`` is already in display order.
    """

    view: View = field(default_factory=Browsing)
    selection: SelectionState = field(default_factory=SelectionState)
    buffers: EditBuffers = field(default_factory=EditBuffers)
    lists: list[TodoList] = field(default_factory=list)
    todos: list[Todo] = field(default_factory=list)
    current_error: str | None = None
    status_message: str | None = None

    @property
    def selected_list(self) -> TodoList | None:
        """Return the list under the lists cursor, if any."""
        index = self.selection.lists_cursor
        if index is None or not 0 <= index < len(self.lists):
            return None
        return self.lists[index]

    @property
    def selected_todo(self) -> Todo | None:
        """Return the todo under the todos cursor, if any."""
        index = self.selection.todos_cursor
        if index is None or not 0 <= index < len(self.todos):
            return None
        return self.todos[index]

    @property
    def detail_todo(self) -> Todo | None:
        """Return the todo shown in the detail panel, if any."""
        if not isinstance(self.view, Browsing) or self.view.detail_index is None:
            return None
        index = self.view.detail_index
        if not 0 <= index < len(self.todos):
            return None
        return self.todos[index]
