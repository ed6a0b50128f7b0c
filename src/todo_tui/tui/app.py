"""Main TUI application loop and layout.

This module orchestrates the TUI: every frame it re-fetches lists and
todos, re-clamps the cursors, renders the current view, then waits for
one key and hands it to the KeybindingHandler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel

from ..database import TodoStore
from ..exceptions import StoreError, TerminalError
from ..utils import Config
from .keybindings import QUIT, KeybindingHandler
from .models import AppState, Browsing, EditingList, EditingTodo
from .navigation import clamp_cursor
from .terminal import KeyReader, TerminalSession
from .tui_utils import get_terminal_size
from .views.detail_panel import render_detail_panel
from .views.footer_bar import render_footer_bar, render_header
from .views.list_form import render_list_form
from .views.lists_panel import render_lists_panel
from .views.todo_form import render_todo_form
from .views.todos_panel import render_todos_panel

logger = logging.getLogger(__name__)

# Rows taken by the header, footer and pane borders
_CHROME_ROWS = 4
_DETAIL_ROWS = 6


class TUIApp:
    """Main TUI application tying the store, state machine and views together."""

    def __init__(
        self,
        config: Config,
        store: TodoStore,
        console: Console | None = None,
        key_reader: KeyReader | None = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize TUI application.

        Args:
            config: Runtime configuration
            store: Store the app reads from and writes to
            console: Rich console to draw on
            key_reader: Source of key tokens (defaults to stdin)
            today: Clock used for due dates and overdue highlighting
        """
        self.config = config
        self.store = store
        self.console = console or Console()
        self.key_reader = key_reader or KeyReader()
        self.today = today

        self.app_state = AppState()
        self.should_quit = False
        self.keybinding_handler = KeybindingHandler(self.app_state, store, today=today)

        self.terminal_width, self.terminal_height = get_terminal_size()

    def _refresh_data(self) -> None:
        """Fetch lists and todos for this frame and re-clamp every cursor."""
        state = self.app_state
        selection = state.selection

        try:
            state.lists = self.store.list_all_lists()
        except StoreError as err:
            logger.warning(f"Failed to fetch lists: {err}")
            state.lists = []

        selection.lists_cursor = clamp_cursor(selection.lists_cursor, len(state.lists))
        todo_list = state.selected_list
        state.todos = self.keybinding_handler.fetch_todos(todo_list.id if todo_list else None)

        if selection.focus_is_lists:
            selection.todos_cursor = None
        else:
            selection.todos_cursor = clamp_cursor(selection.todos_cursor, len(state.todos))

        if isinstance(state.view, Browsing) and state.view.detail_index is not None:
            if clamp_cursor(state.view.detail_index, len(state.todos)) != state.view.detail_index:
                state.view = Browsing(None)

    def _check_terminal_size(self) -> bool:
        """Check if terminal meets minimum size requirements.

        Returns:
            True if terminal is large enough, False otherwise
        """
        self.terminal_width, self.terminal_height = get_terminal_size()
        return (
            self.terminal_width >= self.config.min_terminal_cols
            and self.terminal_height >= self.config.min_terminal_rows
        )

    def _build_layout(self) -> Layout:
        """Build the layout for the current view.

        Returns:
            Rich Layout with all panels configured
        """
        layout = Layout()
        view = self.app_state.view

        if isinstance(view, Browsing):
            sections = [
                Layout(name="header", size=1),
                Layout(name="main", ratio=1),
            ]
            if view.detail_index is not None:
                sections.append(Layout(name="detail", size=_DETAIL_ROWS))
            sections.append(Layout(name="footer", size=1))
            layout.split_column(*sections)
            layout["main"].split_row(
                Layout(name="lists", ratio=3),
                Layout(name="todos", ratio=7),
            )
        else:
            layout.split_column(
                Layout(name="header", size=1),
                Layout(name="form", ratio=1),
                Layout(name="footer", size=1),
            )

        return layout

    def _render_layout(self, layout: Layout) -> None:
        """Render all panels of the current view into the layout.

        Args:
            layout: Layout built by _build_layout for the same view
        """
        state = self.app_state
        view = state.view
        layout["header"].update(render_header(view))

        if isinstance(view, Browsing):
            pane_rows = self.terminal_height - _CHROME_ROWS
            if view.detail_index is not None:
                pane_rows -= _DETAIL_ROWS
            pane_rows = max(pane_rows, 1)

            layout["lists"].update(
                render_lists_panel(
                    state.lists,
                    state.selection.lists_cursor,
                    state.selection.focus_is_lists,
                    viewport_size=pane_rows,
                )
            )
            layout["todos"].update(
                render_todos_panel(
                    state.todos,
                    state.selection.todos_cursor,
                    not state.selection.focus_is_lists,
                    self.today(),
                    viewport_size=pane_rows,
                )
            )
            if "detail" in layout:
                layout["detail"].update(render_detail_panel(state.detail_todo))
        elif isinstance(view, EditingTodo):
            layout["form"].update(Panel(render_todo_form(view, state.buffers), border_style="dim"))
        elif isinstance(view, EditingList):
            layout["form"].update(Panel(render_list_form(view, state.buffers), border_style="dim"))

        layout["footer"].update(
            render_footer_bar(
                focus_is_lists=state.selection.focus_is_lists,
                error_message=state.current_error,
                status_message=state.status_message,
                terminal_width=self.terminal_width,
            )
        )

    def _render_frame(self) -> Layout:
        """Refresh data and return a fully rendered layout for this frame."""
        if isinstance(self.app_state.view, Browsing):
            self._refresh_data()

        if not self._check_terminal_size():
            self.app_state.current_error = (
                f"Terminal too small! Need {self.config.min_terminal_cols}x"
                f"{self.config.min_terminal_rows}, got {self.terminal_width}x"
                f"{self.terminal_height}"
            )
        elif (
            self.app_state.current_error
            and "Terminal too small" in self.app_state.current_error
        ):
            self.app_state.current_error = None

        layout = self._build_layout()
        self._render_layout(layout)
        return layout

    def _poll_keyboard(self, timeout: float) -> str | None:
        """Poll for one key token with timeout.

        Returns:
            Key token if a key was pressed, None otherwise
        """
        return self.key_reader.poll(timeout)

    def _dispatch(self, key: str) -> None:
        """Hand a key to the state machine and record its feedback."""
        handled, message = self.keybinding_handler.handle_key(key)
        if not handled:
            return
        if message == QUIT:
            self.should_quit = True
        elif message and message.startswith("Error:"):
            logger.warning(message)
            self.app_state.current_error = message
            self.app_state.status_message = None
        else:
            self.app_state.current_error = None
            self.app_state.status_message = message

    def run(self) -> int:
        """Run the main TUI event loop.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        try:
            with TerminalSession(), Live(
                self._render_frame(),
                console=self.console,
                auto_refresh=False,
                screen=True,
            ) as live:
                logger.info("TUI main loop started")

                while not self.should_quit:
                    live.update(self._render_frame(), refresh=True)
                    key = self._poll_keyboard(self.config.poll_timeout_seconds)
                    if key is not None:
                        self._dispatch(key)

            logger.info("TUI main loop exited")
            return 0

        except KeyboardInterrupt:
            logger.info("TUI interrupted by user")
            return 130

        except TerminalError as err:
            logger.error(f"Terminal setup failed: {err}")
            self.console.print(f"[red]Error: {err}[/red]")
            return 1

        except Exception as err:
            logger.error(f"TUI crashed: {err}", exc_info=True)
            self.console.print(f"[red]Error: {err}[/red]")
            return 1

        finally:
            logger.info("TUI cleanup complete")
