"""Keyboard input handling for TUI application.

This module is the view state machine: it maps a key token to a state
transition for the current view and runs the store call the transition
implies.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

from ..exceptions import StoreError
from ..models import Todo
from .models import (
    AppState,
    Browsing,
    EditingField,
    EditingList,
    EditingTodo,
    Field,
    FieldMenu,
)
from .navigation import clamp_cursor, move_down, move_up
from .terminal import BACKSPACE, ENTER, ESCAPE
from .tui_utils import parse_due_offset, sort_todos

if TYPE_CHECKING:
    from ..database import TodoStore

logger = logging.getLogger(__name__)

QUIT = "quit"

_NEXT_TODO_FIELD = {
    Field.TITLE: EditingField(Field.DESCRIPTION),
    Field.DESCRIPTION: EditingField(Field.DUE_DATE),
    Field.DUE_DATE: FieldMenu(),
}


class KeybindingHandler:
    """Dispatches key tokens against the current view."""

    def __init__(
        self,
        app_state: AppState,
        store: TodoStore,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize keybinding handler.

        Args:
            app_state: Interaction state mutated by transitions
            store: Store used for the side effects of transitions
            today: Clock used for due dates and completion stamps
        """
        self.app_state = app_state
        self.store = store
        self.today = today

    def handle_key(self, key: str) -> tuple[bool, str | None]:
        """Process a key token and execute the corresponding transition.

        Args:
            key: Key token (a character, "enter", "backspace", "escape" or an arrow)

        Returns:
            Tuple of (handled, message):
                - handled: True if the key did something in the current view
                - message: Optional feedback, "quit" to end the loop, or
                  a string starting with "Error:" on a store failure
        """
        view = self.app_state.view
        if isinstance(view, Browsing):
            return self._handle_browsing(view, key)
        if isinstance(view, EditingTodo):
            if isinstance(view.focus, EditingField):
                return self._handle_todo_field(view, view.focus.field, key)
            return self._handle_todo_menu(view, key)
        if isinstance(view, EditingList):
            if isinstance(view.focus, EditingField):
                return self._handle_list_field(key)
            return self._handle_list_menu(key)
        return False, None

    # Data helpers

    def fetch_todos(self, list_id: int | None) -> list[Todo]:
        """Fetch a list's todos in display order; empty on failure."""
        if list_id is None:
            return []
        try:
            return sort_todos(self.store.list_todos_for(list_id))
        except StoreError as err:
            logger.warning(f"Failed to fetch todos for list {list_id}: {err}")
            return []

    # Browsing

    def _handle_browsing(self, view: Browsing, key: str) -> tuple[bool, str | None]:
        selection = self.app_state.selection

        if key == "q":
            return True, QUIT
        if key == "v":
            return self._handle_toggle_detail(view)
        if key == "E":
            return self._handle_edit_todo()
        if key == "N":
            if self.app_state.selected_list is None:
                return False, None
            self.app_state.view = EditingTodo(EditingField(Field.TITLE), None)
            return True, None
        if key == "L":
            self.app_state.view = EditingList(EditingField(Field.TITLE))
            return True, None
        if key == "D":
            if selection.focus_is_lists:
                return self._handle_delete_list()
            return self._handle_delete_todo()
        if key in ("j", "down"):
            return self._handle_move(down=True)
        if key in ("k", "up"):
            return self._handle_move(down=False)
        if key in ("h", "left"):
            if selection.focus_is_lists:
                return False, None
            selection.focus_is_lists = True
            selection.todos_cursor = None
            self.app_state.view = Browsing(None)
            return True, None
        if key in ("l", "right"):
            if selection.focus_is_lists:
                return self._handle_focus_todos()
            return self._handle_toggle_completion()
        if key == " ":
            if selection.focus_is_lists:
                return False, None
            return self._handle_toggle_completion()

        return False, None

    def _handle_toggle_detail(self, view: Browsing) -> tuple[bool, str | None]:
        if view.detail_index is not None:
            self.app_state.view = Browsing(None)
            return True, None
        cursor = self.app_state.selection.todos_cursor
        if cursor is None:
            return False, None
        self.app_state.view = Browsing(cursor)
        return True, None

    def _handle_edit_todo(self) -> tuple[bool, str | None]:
        """Open the todo form preloaded with the selected todo."""
        if self.app_state.selected_list is None:
            return False, None
        todo = self.app_state.selected_todo
        if todo is None:
            return False, None

        buffers = self.app_state.buffers
        buffers.pending_title = todo.title
        buffers.pending_description = todo.description or ""
        buffers.pending_due_date = todo.due_date
        buffers.pending_input = todo.title
        self.app_state.view = EditingTodo(
            EditingField(Field.TITLE), self.app_state.selection.todos_cursor
        )
        return True, None

    def _handle_delete_list(self) -> tuple[bool, str | None]:
        todo_list = self.app_state.selected_list
        if todo_list is None or todo_list.id is None:
            return False, None
        try:
            self.store.delete_list(todo_list.id)
        except StoreError as err:
            return True, f"Error: could not delete list: {err}"
        self.app_state.selection.lists_cursor = None
        self.app_state.selection.todos_cursor = None
        self.app_state.todos = []
        return True, f"Deleted list {todo_list.title}"

    def _handle_delete_todo(self) -> tuple[bool, str | None]:
        todo = self.app_state.selected_todo
        if todo is None or todo.id is None:
            return False, None
        try:
            self.store.delete_todo(todo.id)
        except StoreError as err:
            return True, f"Error: could not delete todo: {err}"
        return True, f"Deleted todo {todo.title}"

    def _handle_move(self, down: bool) -> tuple[bool, str | None]:
        selection = self.app_state.selection
        move = move_down if down else move_up
        if selection.focus_is_lists:
            selection.lists_cursor = move(selection.lists_cursor, len(self.app_state.lists))
        else:
            selection.todos_cursor = move(selection.todos_cursor, len(self.app_state.todos))
        return True, None

    def _handle_focus_todos(self) -> tuple[bool, str | None]:
        """Move focus to the todos pane of the selected list."""
        selection = self.app_state.selection
        selection.focus_is_lists = False
        todo_list = self.app_state.selected_list
        self.app_state.todos = self.fetch_todos(todo_list.id if todo_list else None)
        selection.todos_cursor = 0 if self.app_state.todos else None
        return True, None

    def _handle_toggle_completion(self) -> tuple[bool, str | None]:
        todo = self.app_state.selected_todo
        if todo is None or todo.id is None:
            return False, None
        try:
            self.store.set_completion(todo.id, not todo.completed, today=self.today())
        except StoreError as err:
            return True, f"Error: could not update todo: {err}"
        return True, None

    # Todo form

    def _handle_todo_field(
        self, view: EditingTodo, active: Field, key: str
    ) -> tuple[bool, str | None]:
        buffers = self.app_state.buffers

        if key == ESCAPE:
            buffers.pending_input = ""
            self.app_state.view = replace(view, focus=FieldMenu())
            return True, None
        if key == BACKSPACE:
            buffers.pending_input = buffers.pending_input[:-1]
            return True, None
        if key == ENTER:
            text = buffers.pending_input
            if active == Field.TITLE:
                buffers.pending_title = text
            elif active == Field.DESCRIPTION:
                buffers.pending_description = text
            else:
                buffers.pending_due_date = parse_due_offset(text, self.today())
            buffers.pending_input = ""
            self.app_state.view = replace(view, focus=_NEXT_TODO_FIELD[active])
            return True, None
        if len(key) == 1 and key.isprintable():
            buffers.pending_input += key
            return True, None

        return False, None

    def _handle_todo_menu(self, view: EditingTodo, key: str) -> tuple[bool, str | None]:
        buffers = self.app_state.buffers

        if key in (ESCAPE, "q"):
            buffers.clear_todo()
            self.app_state.view = Browsing(None)
            return True, None
        if key == "D":
            self.app_state.view = replace(view, focus=EditingField(Field.DUE_DATE))
            return True, None
        if key == "d":
            buffers.pending_input = buffers.pending_description
            self.app_state.view = replace(view, focus=EditingField(Field.DESCRIPTION))
            return True, None
        if key == "t":
            buffers.pending_input = buffers.pending_title
            self.app_state.view = replace(view, focus=EditingField(Field.TITLE))
            return True, None
        if key == "s":
            if view.edit_index is None:
                message = self._save_new_todo()
            else:
                message = self._save_edited_todo(view.edit_index)
            buffers.clear_todo()
            self.app_state.view = Browsing(None)
            return True, message

        return False, None

    def _save_new_todo(self) -> str | None:
        buffers = self.app_state.buffers
        todo_list = self.app_state.selected_list
        if todo_list is None or todo_list.id is None:
            return "Error: no list selected"
        todo = Todo(
            list_id=todo_list.id,
            title=buffers.pending_title,
            description=buffers.pending_description,
            due_date=buffers.pending_due_date,
            completed=False,
            completed_date=None,
        )
        try:
            self.store.create_todo(todo)
        except StoreError as err:
            return f"Error: could not create todo: {err}"
        return f"Created todo {todo.title}"

    def _save_edited_todo(self, edit_index: int) -> str | None:
        """Apply staged values to the todo at ``edit_index`` of a fresh fetch."""
        buffers = self.app_state.buffers
        todo_list = self.app_state.selected_list
        todos = self.fetch_todos(todo_list.id if todo_list else None)
        if clamp_cursor(edit_index, len(todos)) != edit_index:
            return "Error: todo being edited no longer exists"
        updated = replace(
            todos[edit_index],
            title=buffers.pending_title,
            description=buffers.pending_description,
            due_date=buffers.pending_due_date,
        )
        try:
            self.store.update_todo(updated)
        except StoreError as err:
            return f"Error: could not update todo: {err}"
        return f"Updated todo {updated.title}"

    # List form

    def _handle_list_field(self, key: str) -> tuple[bool, str | None]:
        buffers = self.app_state.buffers

        if key == ESCAPE:
            buffers.pending_input = ""
            self.app_state.view = EditingList(FieldMenu())
            return True, None
        if key == BACKSPACE:
            buffers.pending_input = buffers.pending_input[:-1]
            return True, None
        if key == ENTER:
            buffers.new_list_title = buffers.pending_input
            buffers.pending_input = ""
            self.app_state.view = EditingList(FieldMenu())
            return True, None
        if len(key) == 1 and key.isprintable():
            buffers.pending_input += key
            return True, None

        return False, None

    def _handle_list_menu(self, key: str) -> tuple[bool, str | None]:
        buffers = self.app_state.buffers

        if key in (ESCAPE, "q"):
            buffers.clear_list()
            self.app_state.view = Browsing(None)
            return True, None
        if key == "t":
            buffers.pending_input = buffers.new_list_title
            self.app_state.view = EditingList(EditingField(Field.TITLE))
            return True, None
        if key == "s":
            title = buffers.new_list_title
            buffers.pending_input = ""
            buffers.clear_list()
            self.app_state.view = Browsing(None)
            try:
                self.store.create_list(title)
            except StoreError as err:
                return True, f"Error: could not create list: {err}"
            return True, f"Created list {title}"

        return False, None
