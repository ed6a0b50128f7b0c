"""SQLite-backed store for todo lists and todos.

Every operation opens a fresh connection, runs its statement, commits and
closes. The database's own file lock is the only concurrency control.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path

from .exceptions import StoreError
from .models import Todo, TodoList, format_date

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS todos (
        id INTEGER PRIMARY KEY,
        list_id INTEGER,
        title TEXT NOT NULL,
        description TEXT,
        due_date TEXT,
        completed BOOLEAN NOT NULL,
        completed_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lists (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL
    )
    """,
)


class TodoStore:
    """Data-access layer over the ``lists`` and ``todos`` tables."""

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file (created on first use)
        """
        self.db_path = db_path

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        """Open a connection with the schema in place, commit and close it.

        Raises:
            StoreError: On any sqlite3 or filesystem failure
        """
        conn: sqlite3.Connection | None = None
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            for statement in _SCHEMA:
                conn.execute(statement)
            yield conn
            conn.commit()
        except (sqlite3.Error, OSError) as err:
            logger.warning(
                "Store operation failed",
                extra={"extra_context": {"db_path": str(self.db_path), "error": str(err)}},
            )
            raise StoreError(str(err)) from err
        finally:
            if conn is not None:
                conn.close()

    # Lists

    def create_list(self, title: str) -> int:
        """Insert a new list and return its id."""
        with self._conn() as conn:
            cur = conn.execute("INSERT INTO lists (title) VALUES (?)", (title,))
            list_id = int(cur.lastrowid)
        logger.info(f"Created list {list_id}")
        return list_id

    def delete_list(self, list_id: int) -> None:
        """Delete a list and every todo that belongs to it."""
        with self._conn() as conn:
            conn.execute("DELETE FROM lists WHERE id = ?", (list_id,))
            conn.execute("DELETE FROM todos WHERE list_id = ?", (list_id,))
        logger.info(f"Deleted list {list_id}")

    def list_all_lists(self) -> list[TodoList]:
        """Return all lists in creation order."""
        with self._conn() as conn:
            rows = conn.execute("SELECT id, title FROM lists ORDER BY id").fetchall()
        return [TodoList.from_row(row) for row in rows]

    # Todos

    def create_todo(self, todo: Todo) -> int:
        """Insert a todo and return its id. ``todo.id`` is ignored."""
        row = todo.to_row()
        with self._conn() as conn:
            cur = conn.execute(
                """
                INSERT INTO todos (list_id, title, description, due_date, completed, completed_date)
                VALUES (:list_id, :title, :description, :due_date, :completed, :completed_date)
                """,
                row,
            )
            todo_id = int(cur.lastrowid)
        logger.info(f"Created todo {todo_id} in list {todo.list_id}")
        return todo_id

    def update_todo(self, todo: Todo) -> None:
        """Replace every stored column of the todo with ``todo.id``."""
        if todo.id is None:
            raise StoreError("Cannot update a todo without an id")
        with self._conn() as conn:
            conn.execute(
                """
                UPDATE todos SET
                    list_id = :list_id,
                    title = :title,
                    description = :description,
                    due_date = :due_date,
                    completed = :completed,
                    completed_date = :completed_date
                WHERE id = :id
                """,
                todo.to_row(),
            )
        logger.info(f"Updated todo {todo.id}")

    def set_completion(self, todo_id: int, completed: bool, today: date | None = None) -> None:
        """Set the completion flag, stamping or clearing the completion date.

        Args:
            todo_id: Todo to update
            completed: New completion state
            today: Date stamped on completion (defaults to the current date)
        """
        completed_date = format_date(today or date.today()) if completed else None
        with self._conn() as conn:
            conn.execute(
                "UPDATE todos SET completed = ?, completed_date = ? WHERE id = ?",
                (completed, completed_date, todo_id),
            )
        logger.info(f"Set todo {todo_id} completed={completed}")

    def delete_todo(self, todo_id: int) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM todos WHERE id = ?", (todo_id,))
        logger.info(f"Deleted todo {todo_id}")

    def list_todos_for(self, list_id: int) -> list[Todo]:
        """Return every todo in a list, in insertion order."""
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM todos WHERE list_id = ? ORDER BY id", (list_id,)
            ).fetchall()
        return [Todo.from_row(row) for row in rows]

    def list_incomplete_due_by(self, due_by: date) -> list[Todo]:
        """Return incomplete todos whose due date is on or before ``due_by``."""
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM todos WHERE completed = 0 AND due_date <= ? ORDER BY due_date, id",
                (format_date(due_by),),
            ).fetchall()
        return [Todo.from_row(row) for row in rows]
