"""Reconciliation of a fresh scan against the persisted store.

Two kinds of ids need an operator decision:

- *deleted*: stored, not done, and no longer found in the code.
  Answer ``d`` to keep it as done; anything else drops it.
- *resurrected*: stored as done but found again in the code.
  Answer ``u`` to reopen it; anything else keeps the done entry and adds a
  reopened copy under a new id.

Everything else is merged without asking: scanned entries refresh the stored
ones, stored-only entries pass through.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from mrdm.errors import PromptError
from mrdm.logging import get_logger
from mrdm.todo.models import SortOrder, TodoItem, TodoList, sort_ids, sorted_items
from mrdm.todo.render import format_item
from mrdm.todo.state import IdAllocator

logger = get_logger("todo.reconcile")

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]

DELETED_PROMPT = "Not found in the code anymore. [d]one, or anything else to remove: "
RESURRECTED_PROMPT = "Marked done but found again. [u]ndo, or anything else to duplicate: "


def merge_scan(previous: TodoList, current: TodoList, order: SortOrder = "numeric") -> TodoList:
    """Carry the store forward with fresh scan data, without any decisions.

    Scanned ids refresh title, category, path and line but keep the stored
    ``done`` flag. New ids are added. Nothing is removed.
    """
    merged = dict(previous)
    for item_id, item in current.items():
        stored = previous.get(item_id)
        merged[item_id] = item if stored is None else item.model_copy(update={"done": stored.done})
    return sorted_items(merged, order)


@dataclass
class Classification:
    """Ids needing a decision, each in id order."""

    deleted: list[str] = field(default_factory=list)
    resurrected: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.deleted or self.resurrected)


@dataclass
class ReconcileResult:
    """Outcome of a reconciliation.

    Attributes:
        items: Fully resolved list.
        marked_done: Deleted ids kept as done.
        removed: Deleted ids dropped.
        reopened: Resurrected ids reopened under their own id.
        duplicated: Resurrected id -> id of its reopened copy.
    """

    items: TodoList
    marked_done: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    reopened: list[str] = field(default_factory=list)
    duplicated: dict[str, str] = field(default_factory=dict)


class ReconciliationEngine:
    """Interactive merge of the previous store and a fresh scan.

    Example:
        >>> engine = ReconciliationEngine(allocator, get_input=lambda _: "d")
        >>> result = engine.reconcile(previous, current)
        >>> result.items

    Attributes:
        allocator: Id source shared with the scan, used for duplicated entries.
        order: Id ordering of the result.
    """

    def __init__(
        self,
        allocator: IdAllocator,
        *,
        get_input: InputFn | None = None,
        output: OutputFn | None = None,
        order: SortOrder = "numeric",
    ) -> None:
        """Create an engine.

        Args:
            allocator: Id source for duplicated entries.
            get_input: Reads one line of operator input (defaults to ``input``).
            output: Shows an item to the operator (defaults to ``print``).
            order: Id ordering.
        """
        self.allocator = allocator
        self._input = get_input if get_input is not None else input
        self._output = output if output is not None else print
        self.order = order

    def classify(self, previous: TodoList, current: TodoList) -> Classification:
        """Find deleted and resurrected ids."""
        deleted = [i for i, item in previous.items() if not item.done and i not in current]
        resurrected = [i for i, item in previous.items() if item.done and i in current]
        return Classification(
            deleted=sort_ids(deleted, self.order),
            resurrected=sort_ids(resurrected, self.order),
        )

    def _ask(self, item: TodoItem, prompt: str) -> str:
        self._output(format_item(item.id, item, terminal=True))
        try:
            answer = self._input(prompt)
        except (EOFError, OSError) as e:
            raise PromptError(
                f"Input closed while resolving id {item.id}", {"id": item.id}
            ) from e
        return answer.strip().lower()

    def reconcile(self, previous: TodoList, current: TodoList) -> ReconcileResult:
        """Merge ``current`` into ``previous``, asking about ambiguous ids.

        Prompts run one at a time in id order: deleted ids first, then
        resurrected ones. Decisions apply immediately.

        Raises:
            PromptError: If operator input is closed or unreadable.
        """
        pending = self.classify(previous, current)
        merged: TodoList = {**previous, **current}
        result = ReconcileResult(items=merged)

        if pending:
            logger.info(
                f"{len(pending.deleted)} missing and {len(pending.resurrected)} "
                f"reappeared item(s) to resolve"
            )

        for item_id in pending.deleted:
            item = merged[item_id]
            if self._ask(item, DELETED_PROMPT) == "d":
                merged[item_id] = item.model_copy(update={"done": True})
                result.marked_done.append(item_id)
            else:
                del merged[item_id]
                result.removed.append(item_id)

        for item_id in pending.resurrected:
            item = merged[item_id]
            if self._ask(item, RESURRECTED_PROMPT) == "u":
                merged[item_id] = item.model_copy(update={"done": False})
                result.reopened.append(item_id)
            else:
                new_id = self.allocator.allocate()
                # Operator-written ids in the source may sit above the allocator
                while new_id in merged:
                    new_id = self.allocator.allocate()
                merged[item_id] = item.model_copy(update={"done": True})
                merged[new_id] = item.model_copy(update={"id": new_id, "done": False})
                result.duplicated[item_id] = new_id
                logger.debug(f"Duplicated done item {item_id} as {new_id}")

        result.items = sorted_items(merged, self.order)
        return result
