"""Record types for todo lists and todos.

These are the two flat records owned by the store. Dates are kept as
``datetime.date`` in memory and as ``YYYY-MM-DD`` text in the database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def format_date(value: date | None) -> str | None:
    """Format a date for storage, or None."""
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)


def parse_date(value: str | None) -> date | None:
    """Parse a stored ``YYYY-MM-DD`` value.

    Args:
        value: Stored text, may be None

    Returns:
        Parsed date, or None when the value is missing or malformed
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.debug(f"Ignoring unparseable stored date: {value!r}")
        return None


@dataclass
class TodoList:
    """A named list of todos."""

    title: str
    id: int | None = None

    @classmethod
    def from_row(cls, row: Any) -> TodoList:
        return cls(id=int(row["id"]), title=str(row["title"]))


@dataclass
class Todo:
    """A single todo belonging to a list.

    ``completed_date`` is set exactly when ``completed`` is true.
    ``dependencies`` is not persisted and is always empty on loaded records.
    """

    list_id: int
    title: str
    description: str | None = None
    due_date: date | None = None
    completed: bool = False
    completed_date: date | None = None
    id: int | None = None
    dependencies: list[int] = field(default_factory=list)

    def to_row(self) -> dict[str, Any]:
        """Convert to a mapping of column name to stored value."""
        return {
            "id": self.id,
            "list_id": self.list_id,
            "title": self.title,
            "description": self.description,
            "due_date": format_date(self.due_date),
            "completed": self.completed,
            "completed_date": format_date(self.completed_date),
        }

    @classmethod
    def from_row(cls, row: Any) -> Todo:
        return cls(
            id=int(row["id"]),
            list_id=int(row["list_id"]) if row["list_id"] is not None else 0,
            title=str(row["title"]),
            description=row["description"],
            due_date=parse_date(row["due_date"]),
            completed=bool(row["completed"]),
            completed_date=parse_date(row["completed_date"]),
        )
