"""One-shot report of incomplete todos due on or before a date.

Output is plain tab-separated text so it can be piped into other tools.
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from typing import TextIO

from .database import TodoStore
from .exceptions import StoreError
from .models import Todo

logger = logging.getLogger(__name__)

_TITLE_ESCAPES = str.maketrans(
    {"\\": "\\\\", '"': '\\"', "\t": "\\t", "\n": "\\n", "\r": "\\r"}
)


def format_due_line(todo: Todo) -> str:
    """Format one report line as ``id<TAB>due<TAB>"title"``.

    The title is quoted with backslash escapes so tabs and newlines in it
    cannot break the line format.
    """
    due = todo.due_date.isoformat() if todo.due_date else ""
    title = todo.title.translate(_TITLE_ESCAPES)
    return f'{todo.id if todo.id is not None else 0}\t{due}\t"{title}"'


def run_report(
    store: TodoStore, due_by: date, count_only: bool, out: TextIO | None = None
) -> int:
    """Print incomplete todos due by ``due_by``, or just their count.

    Store failures are printed and still exit 0.

    Returns:
        Exit code (always 0)
    """
    if out is None:
        out = sys.stdout
    try:
        todos = store.list_incomplete_due_by(due_by)
    except StoreError as err:
        logger.error("Report query failed", extra={"extra_context": {"error": str(err)}})
        print(f"Err: {err!r}", file=out)
        return 0

    logger.info(
        "Report generated",
        extra={"extra_context": {"due_by": due_by.isoformat(), "count": len(todos)}},
    )
    if count_only:
        print(len(todos), file=out)
        return 0

    for todo in todos:
        print(format_due_line(todo), file=out)
    return 0
