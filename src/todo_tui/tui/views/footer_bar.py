"""Header and footer bar renderers.

The header shows the key hints of the current view. The footer shows
which pane has focus, the last status or error message, and a quit hint.
"""

from __future__ import annotations

from rich.text import Text

from ..models import Browsing, EditingField, View
from ..tui_utils import truncate_text

BROWSING_HINTS = (
    "(N) new task, (L) new list, (E) edit, (v) details, "
    "(h,j,k,l) move, (space) done, (D) delete, (q) exit"
)
FIELD_HINTS = "Type to edit, (enter) next field, (esc) stop editing"
MENU_HINTS = "(t/d/D) pick field, (s) save, (esc, q) cancel"


def render_header(view: View) -> Text:
    """Build the centered key hint line for a view."""
    if isinstance(view, Browsing):
        hints = BROWSING_HINTS
    elif isinstance(view.focus, EditingField):
        hints = FIELD_HINTS
    else:
        hints = MENU_HINTS
    return Text(hints, justify="center", no_wrap=True, overflow="ellipsis")


def render_footer_bar(
    focus_is_lists: bool,
    error_message: str | None = None,
    status_message: str | None = None,
    terminal_width: int = 80,
) -> Text:
    """Build Rich Text displaying the footer status bar.

    Args:
        focus_is_lists: True when the lists pane has focus
        error_message: Current error message to display, if any
        status_message: Last non-error feedback, shown when there is no error
        terminal_width: Terminal width for truncation calculations

    Returns:
        Rich Text component ready for rendering
    """
    parts = [("Focus: lists" if focus_is_lists else "Focus: todos", "green")]

    quit_hint = "q to quit"
    message = error_message or status_message
    if message:
        available_width = terminal_width - len(parts[0][0]) - len(quit_hint) - 6
        if available_width > 10:
            parts.append((" | ", "dim"))
            parts.append(
                (truncate_text(message, available_width), "red" if error_message else "white")
            )

    parts.append((" | ", "dim"))
    parts.append((quit_hint, "cyan"))

    footer = Text(no_wrap=True)
    for text, style in parts:
        footer.append(text, style=style)
    return footer
