"""Data models for tracked annotations.

A :class:`TodoItem` is one annotation occurrence keyed by its id. A
:data:`TodoList` maps ids to items; ids are decimal strings because they are
read back out of source text and used as JSON object keys.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SortOrder = Literal["numeric", "lexical"]

_DECIMAL_ID = re.compile(r"[0-9]+")


def is_decimal_id(value: str) -> bool:
    """True for ids made of ASCII digits only."""
    return _DECIMAL_ID.fullmatch(value) is not None


class TodoItem(BaseModel):
    """One tracked annotation.

    Attributes:
        id: Stable identifier, written into the source as ``TODO(<id>)``.
        title: Free text after the colon, as found in the source.
        category: Matched category token, e.g. ``TODO`` or ``FIXME``.
        path: File the annotation was last seen in.
        line: 1-based line number at the most recent scan that saw it.
        done: Whether the item was resolved through reconciliation.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: str
    title: str
    category: str
    path: str
    line: int = Field(gt=0)
    done: bool = False

    @field_validator("id")
    @classmethod
    def _id_is_decimal(cls, value: str) -> str:
        if not is_decimal_id(value):
            raise ValueError(f"id must be a decimal string, got {value!r}")
        return value

    @property
    def location(self) -> str:
        """``path:line`` reference for terminals."""
        return f"{self.path}:{self.line}"

    def to_dict(self) -> dict[str, Any]:
        """Body of the item as persisted under its id key."""
        return self.model_dump(exclude={"id"})


# Mapping of id -> item
TodoList = dict[str, TodoItem]


class StoredItem(BaseModel):
    """Persisted item body (the id is the enclosing key)."""

    model_config = ConfigDict(strict=True)

    title: str
    category: str
    path: str
    line: int = Field(gt=0)
    done: bool


class StoreDocument(BaseModel):
    """Top-level persisted document: ``{"items": {"<id>": {...}}}``."""

    model_config = ConfigDict(strict=True)

    items: dict[str, StoredItem] = Field(default_factory=dict)

    @field_validator("items")
    @classmethod
    def _keys_are_decimal(cls, value: dict[str, StoredItem]) -> dict[str, StoredItem]:
        bad = [key for key in value if not is_decimal_id(key)]
        if bad:
            raise ValueError(f"non-numeric ids: {', '.join(sorted(bad))}")
        return value

    def to_todo_list(self) -> TodoList:
        return {
            item_id: TodoItem(id=item_id, **body.model_dump())
            for item_id, body in self.items.items()
        }

    @classmethod
    def from_todo_list(cls, items: TodoList, order: SortOrder = "numeric") -> StoreDocument:
        return cls(
            items={
                item_id: StoredItem(**items[item_id].to_dict())
                for item_id in sort_ids(items, order)
            }
        )


# =============================================================================
# Ordering
# =============================================================================


def id_sort_key(item_id: str) -> tuple[int, int, str]:
    """Numeric ordering key; non-decimal ids sort after all decimal ones."""
    if is_decimal_id(item_id):
        return (0, int(item_id), item_id)
    return (1, 0, item_id)


def sort_ids(ids: Iterable[str], order: SortOrder = "numeric") -> list[str]:
    """Sort ids numerically (``2`` before ``10``) or as raw strings."""
    if order == "lexical":
        return sorted(ids)
    return sorted(ids, key=id_sort_key)


def sorted_items(items: TodoList, order: SortOrder = "numeric") -> TodoList:
    """Return a copy of ``items`` with keys in the requested order."""
    return {item_id: items[item_id] for item_id in sort_ids(items, order)}


def max_id(items: Iterable[str]) -> int | None:
    """Highest decimal id in ``items``, or None if there is none."""
    numeric = [int(item_id) for item_id in items if is_decimal_id(item_id)]
    return max(numeric) if numeric else None
