"""Persistent todo store.

The store is advisory: a missing or damaged file reads as an empty list and is
never partially repaired. Writes go through a scratch file so a failed save
never leaves a half-written document behind.

File format (``.mrdm/todos.json``)::

    {
      "items": {
        "0": {"title": "x", "category": "TODO", "path": "src/a.py", "line": 3, "done": false}
      }
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from mrdm.errors import StoreParseError
from mrdm.logging import get_logger
from mrdm.todo.models import SortOrder, StoreDocument, TodoList
from mrdm.utils.atomic import atomic_write

logger = get_logger("todo.store")


def parse_store(text: str) -> TodoList:
    """Parse a store document.

    Raises:
        StoreParseError: If the text is not valid JSON or does not follow the schema.
    """
    try:
        return StoreDocument.model_validate_json(text).to_todo_list()
    except ValidationError as e:
        raise StoreParseError(f"Malformed todo store: {e}") from e


def dump_store(items: TodoList, order: SortOrder = "numeric") -> str:
    """Serialize ``items`` deterministically (sorted ids, two-space indent)."""
    document = StoreDocument.from_todo_list(items, order)
    return json.dumps(document.model_dump(), indent=2) + "\n"


class TodoStore:
    """JSON file holding the tracked items of a project.

    Example:
        >>> store = TodoStore(Path(".mrdm/todos.json"))
        >>> items = store.load()
        >>> store.save(items)

    Attributes:
        path: Location of the store file.
        order: Id ordering used when saving.
    """

    def __init__(self, path: str | Path, order: SortOrder = "numeric") -> None:
        self.path = Path(path)
        self.order = order

    def load(self) -> TodoList:
        """Load the stored items.

        Returns:
            The stored items, or an empty mapping if the file is missing,
            unreadable, or malformed.
        """
        if not self.path.exists():
            logger.debug(f"No store at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                return parse_store(f.read())
        except (OSError, UnicodeDecodeError, StoreParseError) as e:
            logger.warning(f"Ignoring unusable todo store {self.path}: {e}")
            return {}

    def save(self, items: TodoList) -> Path:
        """Write ``items`` atomically, creating the parent directory if needed.

        Returns:
            Path of the written store.

        Raises:
            TodoIOError: If the store cannot be written or replaced.
        """
        content = dump_store(items, self.order)
        with atomic_write(self.path, mkdir=True) as out:
            out.write(content)
        logger.debug(f"Saved {len(items)} item(s) to {self.path}")
        return self.path
