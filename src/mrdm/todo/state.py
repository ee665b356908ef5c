"""Shared state for one scan invocation.

Scan tasks run in worker threads and share two objects:

- :class:`IdAllocator` hands out new ids, never the same value twice.
- :class:`ScanResults` accumulates the items found by every task.

Both serialize access with a ``threading.Lock``. A lock that cannot be
acquired within ``lock_timeout`` seconds raises :class:`~mrdm.errors.LockError`
instead of blocking forever.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from mrdm.errors import LockError
from mrdm.logging import get_logger
from mrdm.todo.models import SortOrder, TodoItem, TodoList, max_id, sorted_items

logger = get_logger("todo.state")

# Seconds to wait for a shared-state lock before giving up
LOCK_TIMEOUT = 30.0


@contextmanager
def _locked(lock: threading.Lock, resource: str, timeout: float) -> Iterator[None]:
    if not lock.acquire(timeout=timeout):
        raise LockError(f"Timed out waiting for the {resource} lock", resource=resource)
    try:
        yield
    finally:
        lock.release()


class IdAllocator:
    """Monotonic id source shared by all scan tasks and by reconciliation.

    Example:
        >>> allocator = IdAllocator.from_ids(["0", "4"])
        >>> allocator.allocate()
        '5'
    """

    def __init__(self, start: int = 0, *, lock_timeout: float = LOCK_TIMEOUT) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._next = start
        self._start = start
        self._issued = 0
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    @classmethod
    def from_ids(cls, ids: Iterable[str], **kwargs) -> IdAllocator:
        """Seed with one more than the highest numeric id (0 if there is none)."""
        highest = max_id(ids)
        return cls(0 if highest is None else highest + 1, **kwargs)

    @property
    def start(self) -> int:
        return self._start

    @property
    def next_value(self) -> int:
        """The value the next :meth:`allocate` call will return."""
        with _locked(self._lock, "id allocator", self._lock_timeout):
            return self._next

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        with _locked(self._lock, "id allocator", self._lock_timeout):
            return self._issued

    def allocate(self) -> str:
        """Return a fresh id as a decimal string."""
        with _locked(self._lock, "id allocator", self._lock_timeout):
            value = self._next
            self._next += 1
            self._issued += 1
        return str(value)

    def reserve(self, ids: Iterable[str]) -> int:
        """Skip past ids already in use so :meth:`allocate` never returns them.

        Returns:
            The value the next :meth:`allocate` call will return.
        """
        highest = max_id(ids)
        with _locked(self._lock, "id allocator", self._lock_timeout):
            if highest is not None and highest >= self._next:
                logger.debug(f"Ids up to {highest} already in use; next id is {highest + 1}")
                self._next = highest + 1
            return self._next

    def __repr__(self) -> str:
        return f"IdAllocator(start={self._start}, next={self._next})"


class ScanResults:
    """Thread-safe aggregate of items found during a scan."""

    def __init__(self, *, lock_timeout: float = LOCK_TIMEOUT) -> None:
        self._items: TodoList = {}
        self._new_ids: set[str] = set()
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    def add(self, item: TodoItem, *, new: bool = False) -> None:
        """Record or refresh an item.

        Args:
            item: Item found by a scan task.
            new: True when the id was allocated during this scan.
        """
        with _locked(self._lock, "scan results", self._lock_timeout):
            previous = self._items.get(item.id)
            self._items[item.id] = item
            if new:
                self._new_ids.add(item.id)
        if previous is not None and previous.location != item.location:
            logger.warning(
                f"Duplicate id {item.id} at {previous.location} and {item.location}; "
                f"keeping {item.location}"
            )

    @property
    def new_ids(self) -> set[str]:
        """Ids allocated during this scan."""
        with _locked(self._lock, "scan results", self._lock_timeout):
            return set(self._new_ids)

    def items(self, order: SortOrder = "numeric") -> TodoList:
        """Snapshot of the aggregate, sorted by id."""
        with _locked(self._lock, "scan results", self._lock_timeout):
            snapshot = dict(self._items)
        return sorted_items(snapshot, order)

    def __len__(self) -> int:
        with _locked(self._lock, "scan results", self._lock_timeout):
            return len(self._items)
