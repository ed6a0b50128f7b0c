"""Unit tests for KeybindingHandler."""

from __future__ import annotations

from datetime import date
from unittest.mock import Mock

import pytest

from todo_tui.database import TodoStore
from todo_tui.exceptions import StoreError
from todo_tui.models import Todo, TodoList
from todo_tui.tui.keybindings import QUIT, KeybindingHandler
from todo_tui.tui.models import (
    AppState,
    Browsing,
    EditingField,
    EditingList,
    EditingTodo,
    Field,
    FieldMenu,
)
from todo_tui.tui.terminal import split_keys

TODAY = date(2024, 1, 1)


@pytest.fixture
def store() -> Mock:
    """Create mock store."""
    mock = Mock(spec=TodoStore)
    mock.list_todos_for.return_value = []
    return mock


@pytest.fixture
def app_state() -> AppState:
    """Create app state with two lists and two todos in the first one."""
    state = AppState()
    state.lists = [TodoList(id=1, title="Home"), TodoList(id=2, title="Work")]
    state.todos = [
        Todo(id=10, list_id=1, title="Dishes", description="all of them", due_date=TODAY),
        Todo(id=11, list_id=1, title="Laundry"),
    ]
    return state


@pytest.fixture
def handler(app_state: AppState, store: Mock) -> KeybindingHandler:
    return KeybindingHandler(app_state, store, today=lambda: TODAY)


def _focus_todos(app_state: AppState, cursor: int | None = 0) -> None:
    app_state.selection.lists_cursor = 0
    app_state.selection.focus_is_lists = False
    app_state.selection.todos_cursor = cursor


class TestBrowsingBasics:
    """Tests for quit, detail view and unknown keys."""

    def test_quit(self, handler: KeybindingHandler) -> None:
        assert handler.handle_key("q") == (True, QUIT)

    def test_unassigned_key_not_handled(self, handler: KeybindingHandler) -> None:
        assert handler.handle_key("z") == (False, None)

    def test_detail_opens_for_selected_todo(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        _focus_todos(app_state, cursor=1)

        handled, _ = handler.handle_key("v")

        assert handled is True
        assert app_state.view == Browsing(1)

    def test_detail_needs_todo_cursor(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        handled, _ = handler.handle_key("v")

        assert handled is False
        assert app_state.view == Browsing(None)

    def test_detail_closes(self, handler: KeybindingHandler, app_state: AppState) -> None:
        _focus_todos(app_state, cursor=1)
        app_state.view = Browsing(1)

        handler.handle_key("v")

        assert app_state.view == Browsing(None)


class TestNavigation:
    """Tests for j/k/h/l pane navigation."""

    def test_j_moves_lists_cursor(self, handler: KeybindingHandler, app_state: AppState) -> None:
        handler.handle_key("j")
        assert app_state.selection.lists_cursor == 0
        handler.handle_key("j")
        assert app_state.selection.lists_cursor == 1
        handler.handle_key("j")
        assert app_state.selection.lists_cursor == 1

    def test_k_moves_lists_cursor(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.selection.lists_cursor = 1

        handler.handle_key("k")
        handler.handle_key("k")

        assert app_state.selection.lists_cursor == 0

    def test_arrows_alias_jk(self, handler: KeybindingHandler, app_state: AppState) -> None:
        handler.handle_key("down")
        handler.handle_key("down")
        handler.handle_key("up")

        assert app_state.selection.lists_cursor == 0

    def test_j_moves_todos_cursor_when_focused(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        _focus_todos(app_state)

        handler.handle_key("j")

        assert app_state.selection.todos_cursor == 1
        assert app_state.selection.lists_cursor == 0

    def test_l_focuses_todos_and_fetches(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 1
        store.list_todos_for.return_value = [Todo(id=20, list_id=2, title="Report")]

        handler.handle_key("l")

        store.list_todos_for.assert_called_once_with(2)
        assert app_state.selection.focus_is_lists is False
        assert app_state.selection.todos_cursor == 0
        assert [t.id for t in app_state.todos] == [20]

    def test_l_on_empty_list_leaves_cursor_unset(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 1
        store.list_todos_for.return_value = []

        handler.handle_key("l")

        assert app_state.selection.focus_is_lists is False
        assert app_state.selection.todos_cursor is None

    def test_l_with_fetch_failure_shows_empty_pane(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 0
        store.list_todos_for.side_effect = StoreError("locked")

        handler.handle_key("l")

        assert app_state.todos == []
        assert app_state.selection.todos_cursor is None

    def test_h_returns_focus_to_lists(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        _focus_todos(app_state, cursor=1)
        app_state.view = Browsing(1)

        handler.handle_key("h")

        assert app_state.selection.focus_is_lists is True
        assert app_state.selection.todos_cursor is None
        assert app_state.selection.lists_cursor == 0
        assert app_state.view == Browsing(None)

    def test_h_on_lists_does_nothing(self, handler: KeybindingHandler) -> None:
        assert handler.handle_key("h") == (False, None)


class TestCompletion:
    """Tests for toggling completion."""

    def test_space_toggles_selected_todo(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        _focus_todos(app_state, cursor=1)

        handled, message = handler.handle_key(" ")

        assert (handled, message) == (True, None)
        store.set_completion.assert_called_once_with(11, True, today=TODAY)

    def test_l_in_todos_toggles(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        _focus_todos(app_state, cursor=0)
        app_state.todos[0].completed = True

        handler.handle_key("l")

        store.set_completion.assert_called_once_with(10, False, today=TODAY)

    def test_space_on_lists_pane_does_nothing(
        self, handler: KeybindingHandler, store: Mock
    ) -> None:
        handler.handle_key(" ")

        store.set_completion.assert_not_called()

    def test_failed_toggle_reports_error(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        _focus_todos(app_state)
        store.set_completion.side_effect = StoreError("readonly")

        handled, message = handler.handle_key(" ")

        assert handled is True
        assert message.startswith("Error:")
        assert app_state.todos[0].completed is False


class TestDelete:
    """Tests for D in the browsing view."""

    def test_delete_list_clears_cursors(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 1

        handled, _ = handler.handle_key("D")

        assert handled is True
        store.delete_list.assert_called_once_with(2)
        assert app_state.selection.lists_cursor is None
        assert app_state.selection.todos_cursor is None

    def test_delete_list_needs_selection(
        self, handler: KeybindingHandler, store: Mock
    ) -> None:
        assert handler.handle_key("D") == (False, None)
        store.delete_list.assert_not_called()

    def test_delete_todo(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        _focus_todos(app_state, cursor=1)

        handler.handle_key("D")

        store.delete_todo.assert_called_once_with(11)
        store.delete_list.assert_not_called()

    def test_delete_failure_keeps_selection(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 0
        store.delete_list.side_effect = StoreError("locked")

        handled, message = handler.handle_key("D")

        assert handled is True
        assert message.startswith("Error:")
        assert app_state.selection.lists_cursor == 0


class TestTodoForm:
    """Tests for the todo form transitions."""

    def test_n_requires_selected_list(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        assert handler.handle_key("N") == (False, None)
        assert app_state.view == Browsing(None)

    def test_n_opens_title_field(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.selection.lists_cursor = 0

        handler.handle_key("N")

        assert app_state.view == EditingTodo(EditingField(Field.TITLE), None)

    def test_typing_and_backspace(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)

        for key in "Milkk":
            handler.handle_key(key)
        handler.handle_key("backspace")

        assert app_state.buffers.pending_input == "Milk"

    def test_backspace_on_empty_input(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)

        handler.handle_key("backspace")

        assert app_state.buffers.pending_input == ""

    def test_field_keys_are_typed_not_dispatched(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        """While typing, q and s are text."""
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)

        handler.handle_key("q")
        handler.handle_key("s")

        assert app_state.buffers.pending_input == "qs"
        assert isinstance(app_state.view, EditingTodo)
        store.create_todo.assert_not_called()

    def test_arrows_are_ignored_in_field(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)

        assert handler.handle_key("up") == (False, None)
        assert app_state.buffers.pending_input == ""

    @pytest.mark.parametrize("sequence", ["\x1b[3~", "\x1b[H", "\x1b[F", "\x1bOP"])
    def test_editing_keys_keep_field_input(
        self, handler: KeybindingHandler, app_state: AppState, sequence: str
    ) -> None:
        """Delete, Home, End and F-keys neither clear the input nor leave the field."""
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)
        app_state.buffers.pending_input = "Buy mil"

        for key in split_keys(sequence):
            handler.handle_key(key)

        assert app_state.buffers.pending_input == "Buy mil"
        assert app_state.view == EditingTodo(EditingField(Field.TITLE), None)

    def test_editing_keys_keep_staged_values_at_menu(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingTodo(FieldMenu(), None)
        app_state.buffers.pending_title = "Buy milk"

        for key in split_keys("\x1b[3~"):
            handler.handle_key(key)

        assert app_state.view == EditingTodo(FieldMenu(), None)
        assert app_state.buffers.pending_title == "Buy milk"

    def test_enter_advances_fields(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.view = EditingTodo(EditingField(Field.TITLE), None)

        for key in "Tea":
            handler.handle_key(key)
        handler.handle_key("enter")
        assert app_state.buffers.pending_title == "Tea"
        assert app_state.view == EditingTodo(EditingField(Field.DESCRIPTION), None)

        for key in "green":
            handler.handle_key(key)
        handler.handle_key("enter")
        assert app_state.buffers.pending_description == "green"
        assert app_state.view == EditingTodo(EditingField(Field.DUE_DATE), None)

        handler.handle_key("3")
        handler.handle_key("enter")
        assert app_state.buffers.pending_due_date == date(2024, 1, 4)
        assert app_state.buffers.pending_input == ""
        assert app_state.view == EditingTodo(FieldMenu(), None)

    def test_invalid_due_date_stages_none(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingTodo(EditingField(Field.DUE_DATE), None)
        app_state.buffers.pending_due_date = date(2030, 1, 1)

        for key in "abc":
            handler.handle_key(key)
        handler.handle_key("enter")

        assert app_state.buffers.pending_due_date is None

    def test_escape_in_field_returns_to_menu(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingTodo(EditingField(Field.DESCRIPTION), 1)
        app_state.buffers.pending_input = "half typed"

        handler.handle_key("escape")

        assert app_state.buffers.pending_input == ""
        assert app_state.view == EditingTodo(FieldMenu(), 1)

    @pytest.mark.parametrize("key", ["escape", "q"])
    def test_menu_escape_and_q_leave_form(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock, key: str
    ) -> None:
        app_state.view = EditingTodo(FieldMenu(), None)
        app_state.buffers.pending_title = "abandoned"

        handler.handle_key(key)

        assert app_state.view == Browsing(None)
        assert app_state.buffers.pending_title == ""
        store.create_todo.assert_not_called()

    def test_menu_field_shortcuts(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.view = EditingTodo(FieldMenu(), None)
        app_state.buffers.pending_title = "T"
        app_state.buffers.pending_description = "Desc"

        handler.handle_key("d")
        assert app_state.view == EditingTodo(EditingField(Field.DESCRIPTION), None)
        assert app_state.buffers.pending_input == "Desc"

        handler.handle_key("escape")
        handler.handle_key("t")
        assert app_state.view == EditingTodo(EditingField(Field.TITLE), None)
        assert app_state.buffers.pending_input == "T"

        handler.handle_key("escape")
        handler.handle_key("D")
        assert app_state.view == EditingTodo(EditingField(Field.DUE_DATE), None)
        assert app_state.buffers.pending_input == ""

    def test_save_new_todo(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 1
        app_state.view = EditingTodo(FieldMenu(), None)
        app_state.buffers.pending_title = "Report"
        app_state.buffers.pending_description = "quarterly"
        app_state.buffers.pending_due_date = date(2024, 1, 5)

        handled, _ = handler.handle_key("s")

        assert handled is True
        [created] = store.create_todo.call_args.args
        assert created == Todo(
            list_id=2,
            title="Report",
            description="quarterly",
            due_date=date(2024, 1, 5),
            completed=False,
            completed_date=None,
        )
        assert app_state.view == Browsing(None)
        assert app_state.buffers.pending_title == ""
        assert app_state.buffers.pending_description == ""
        assert app_state.buffers.pending_due_date is None

    def test_save_without_list_reports_error(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.view = EditingTodo(FieldMenu(), None)

        handled, message = handler.handle_key("s")

        assert handled is True
        assert message.startswith("Error:")
        store.create_todo.assert_not_called()
        assert app_state.view == Browsing(None)

    def test_save_failure_still_returns_to_browsing(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.selection.lists_cursor = 0
        app_state.view = EditingTodo(FieldMenu(), None)
        store.create_todo.side_effect = StoreError("disk full")

        handled, message = handler.handle_key("s")

        assert message.startswith("Error:")
        assert app_state.view == Browsing(None)


class TestEditTodo:
    """Tests for editing an existing todo."""

    def test_e_preloads_selected_todo(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        _focus_todos(app_state, cursor=0)

        handler.handle_key("E")

        buffers = app_state.buffers
        assert app_state.view == EditingTodo(EditingField(Field.TITLE), 0)
        assert buffers.pending_title == "Dishes"
        assert buffers.pending_input == "Dishes"
        assert buffers.pending_description == "all of them"
        assert buffers.pending_due_date == TODAY

    def test_e_needs_selected_todo(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.selection.lists_cursor = 0

        assert handler.handle_key("E") == (False, None)
        assert app_state.view == Browsing(None)

    def test_save_updates_todo_at_index(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        _focus_todos(app_state, cursor=1)
        store.list_todos_for.return_value = list(app_state.todos)
        handler.handle_key("E")
        handler.handle_key("escape")
        app_state.buffers.pending_title = "Laundry (darks)"

        handler.handle_key("s")

        [updated] = store.update_todo.call_args.args
        assert updated.id == 11
        assert updated.title == "Laundry (darks)"
        assert updated.description == ""
        assert updated.due_date is None
        store.create_todo.assert_not_called()
        assert app_state.view == Browsing(None)

    def test_save_when_todo_vanished(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        """If the edited row is gone from a fresh fetch, nothing is written."""
        _focus_todos(app_state, cursor=1)
        app_state.view = EditingTodo(FieldMenu(), 1)
        store.list_todos_for.return_value = [app_state.todos[0]]

        handled, message = handler.handle_key("s")

        assert handled is True
        assert message.startswith("Error:")
        store.update_todo.assert_not_called()
        assert app_state.view == Browsing(None)


class TestListForm:
    """Tests for the new-list form."""

    def test_l_opens_list_form(self, handler: KeybindingHandler, app_state: AppState) -> None:
        handler.handle_key("L")

        assert app_state.view == EditingList(EditingField(Field.TITLE))

    def test_enter_stages_title_and_returns_to_menu(
        self, handler: KeybindingHandler, app_state: AppState
    ) -> None:
        app_state.view = EditingList(EditingField(Field.TITLE))

        for key in "Errands":
            handler.handle_key(key)
        handler.handle_key("enter")

        assert app_state.buffers.new_list_title == "Errands"
        assert app_state.buffers.pending_input == ""
        assert app_state.view == EditingList(FieldMenu())

    def test_save_creates_list(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.view = EditingList(FieldMenu())
        app_state.buffers.new_list_title = "Errands"

        handled, _ = handler.handle_key("s")

        assert handled is True
        store.create_list.assert_called_once_with("Errands")
        assert app_state.view == Browsing(None)
        assert app_state.buffers.new_list_title == ""

    def test_escape_in_field_then_menu_cancel(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.view = EditingList(EditingField(Field.TITLE))
        handler.handle_key("x")

        handler.handle_key("escape")
        assert app_state.view == EditingList(FieldMenu())
        assert app_state.buffers.pending_input == ""

        handler.handle_key("q")
        assert app_state.view == Browsing(None)
        store.create_list.assert_not_called()

    def test_t_reenters_title(self, handler: KeybindingHandler, app_state: AppState) -> None:
        app_state.view = EditingList(FieldMenu())
        app_state.buffers.new_list_title = "Work"

        handler.handle_key("t")

        assert app_state.view == EditingList(EditingField(Field.TITLE))
        assert app_state.buffers.pending_input == "Work"

    def test_create_failure_reports_error(
        self, handler: KeybindingHandler, app_state: AppState, store: Mock
    ) -> None:
        app_state.view = EditingList(FieldMenu())
        store.create_list.side_effect = StoreError("locked")

        handled, message = handler.handle_key("s")

        assert message.startswith("Error:")
        assert app_state.view == Browsing(None)
