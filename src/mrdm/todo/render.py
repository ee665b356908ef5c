"""Checklist rendering.

Each item becomes one Markdown checklist line. The location reference depends
only on where the checklist goes:

- default stream: ``- [ ] TODO(3): fix parser (src/app.py:12)``
- output file:    ``- [ ] TODO(3): fix parser [link](src/app.py#L12)``

The file form lets editors and code hosts jump straight to the line. Link targets
resolve from the directory holding the checklist file.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TextIO

from mrdm.logging import get_logger
from mrdm.todo.models import SortOrder, TodoItem, TodoList, sort_ids
from mrdm.utils.atomic import atomic_write

logger = get_logger("todo.render")


def format_item(
    item_id: str, item: TodoItem, terminal: bool, target: str | None = None
) -> str:
    """Format one checklist line (without a trailing newline).

    Args:
        item_id: Id shown in parentheses.
        item: Item to format.
        terminal: True for ``path:line`` references, False for file links.
        target: Link target replacing ``item.path`` in file links.
    """
    checkbox = "[x]" if item.done else "[ ]"
    if terminal:
        reference = f"({item.path}:{item.line})"
    else:
        reference = f"[link]({target or item.path}#L{item.line})"
    return f"- {checkbox} {item.category}({item_id}): {item.title.strip()} {reference}"


class ChecklistRenderer:
    """Write a checklist to a text stream.

    Attributes:
        terminal: Whether the destination is the default stream.
        order: Id ordering.
        root: Project root that item paths are relative to.
        link_dir: Directory holding the checklist file. File links are made
            relative to it; None keeps item paths as they are.
    """

    def __init__(
        self,
        terminal: bool = True,
        order: SortOrder = "numeric",
        *,
        root: str | Path = ".",
        link_dir: str | Path | None = None,
    ) -> None:
        self.terminal = terminal
        self.order = order
        self.root = Path(root)
        self.link_dir = Path(link_dir) if link_dir is not None else None

    def link_target(self, item: TodoItem) -> str:
        if self.link_dir is None:
            return item.path
        return Path(os.path.relpath(self.root / item.path, self.link_dir)).as_posix()

    def lines(self, items: TodoList) -> list[str]:
        return [
            format_item(
                item_id,
                items[item_id],
                self.terminal,
                None if self.terminal else self.link_target(items[item_id]),
            )
            for item_id in sort_ids(items, self.order)
        ]

    def render(self, items: TodoList, writer: TextIO) -> int:
        """Write every item to ``writer``.

        Returns:
            Number of lines written.
        """
        lines = self.lines(items)
        for line in lines:
            writer.write(line + "\n")
        return len(lines)


def render_checklist(
    items: TodoList,
    out: str | Path | None = None,
    *,
    stream: TextIO | None = None,
    order: SortOrder = "numeric",
    root: str | Path | None = None,
) -> int:
    """Render ``items`` to ``out`` (link style) or to ``stream`` (terminal style).

    Args:
        items: Items to render.
        out: Output file. When set, the file is replaced atomically.
        stream: Default stream used when ``out`` is None (``sys.stdout`` if unset).
        order: Id ordering.
        root: Project root of the item paths. When given, file links are
            rewritten to resolve from the directory of ``out``.

    Returns:
        Number of lines written.

    Raises:
        TodoIOError: If the output file cannot be written.
    """
    if out is None:
        if stream is None:
            stream = sys.stdout
        return ChecklistRenderer(terminal=True, order=order).render(items, stream)

    out = Path(out)
    renderer = ChecklistRenderer(
        terminal=False,
        order=order,
        root=root if root is not None else ".",
        link_dir=out.parent if root is not None else None,
    )
    with atomic_write(out, mkdir=True) as writer:
        count = renderer.render(items, writer)
    logger.info(f"Wrote {count} item(s) to {out}")
    return count
