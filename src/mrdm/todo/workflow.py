"""End-to-end ``list`` and ``done`` workflows.

Both workflows share the same front half: build the matcher (failing before
any file is touched), load the previous store, seed the id allocator from it,
and scan. They differ in how the scan is merged into the store:

- :func:`list_todos` merges without asking anything.
- :func:`mark_done` runs the interactive reconciliation.

The merged list is then saved and rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from mrdm.config import ScanConfig, store_path
from mrdm.logging import get_logger
from mrdm.todo.coordinator import ScanCoordinator, ScanSummary
from mrdm.todo.models import TodoList
from mrdm.todo.patterns import PatternMatcher
from mrdm.todo.reconcile import (
    InputFn,
    OutputFn,
    ReconcileResult,
    ReconciliationEngine,
    merge_scan,
)
from mrdm.todo.render import render_checklist
from mrdm.todo.state import IdAllocator
from mrdm.todo.store import TodoStore

logger = get_logger("todo.workflow")


@dataclass
class TodoRun:
    """Result of a workflow run.

    Attributes:
        items: Final list, as saved and rendered.
        previous: Store contents before the run.
        scan: Scan summary.
        store_path: Where the list was saved.
        output_path: Checklist file, or None when rendered to the stream.
        reconcile: Reconciliation details (``done`` only).
    """

    items: TodoList
    previous: TodoList
    scan: ScanSummary
    store_path: Path
    output_path: Path | None = None
    reconcile: ReconcileResult | None = None


@dataclass
class _Context:
    root: Path
    store: TodoStore
    previous: TodoList
    allocator: IdAllocator
    coordinator: ScanCoordinator
    output_path: Path | None


def _prepare(config: ScanConfig, root: str | Path) -> _Context:
    root = Path(root)
    matcher = PatternMatcher(config.patterns, config.markers)
    store = TodoStore(store_path(root), order=config.sort)
    previous = store.load()
    allocator = IdAllocator.from_ids(previous)
    logger.debug(f"Loaded {len(previous)} stored item(s); next id is {allocator.start}")

    output_path = None
    if config.out:
        output_path = Path(config.out)
        if not output_path.is_absolute():
            output_path = root / output_path

    return _Context(
        root=root,
        store=store,
        previous=previous,
        allocator=allocator,
        coordinator=ScanCoordinator(matcher, allocator, root=root, order=config.sort),
        output_path=output_path,
    )


def _finish(ctx: _Context, config: ScanConfig, items: TodoList, stream: TextIO | None) -> Path:
    saved = ctx.store.save(items)
    render_checklist(items, ctx.output_path, stream=stream, order=config.sort, root=ctx.root)
    return saved


def list_todos(
    config: ScanConfig,
    root: str | Path = ".",
    *,
    stream: TextIO | None = None,
) -> TodoRun:
    """Scan, merge into the store, save, and render.

    Args:
        config: Resolved configuration.
        root: Project root holding ``.mrdm/`` and the relative globs.
        stream: Default output stream (``sys.stdout`` if unset).

    Raises:
        ConfigError: Invalid categories or markers. No file is touched.
        TodoIOError: A file could not be scanned, or the store/checklist written.
        LockError: Shared scan state could not be locked.
    """
    ctx = _prepare(config, root)
    summary = ctx.coordinator.run(config.include)
    items = merge_scan(ctx.previous, summary.items, config.sort)
    saved = _finish(ctx, config, items, stream)
    return TodoRun(
        items=items,
        previous=ctx.previous,
        scan=summary,
        store_path=saved,
        output_path=ctx.output_path,
    )


def mark_done(
    config: ScanConfig,
    root: str | Path = ".",
    *,
    get_input: InputFn | None = None,
    output: OutputFn | None = None,
    stream: TextIO | None = None,
) -> TodoRun:
    """Scan, reconcile interactively, save, and render.

    Blocks on ``get_input`` once per ambiguous item. If input closes, nothing
    is saved, although ids injected by the scan stay in the source files.

    Args:
        config: Resolved configuration.
        root: Project root.
        get_input: Reads one operator answer (``input`` if unset).
        output: Shows an item to the operator (``print`` if unset).
        stream: Default output stream for the checklist.

    Raises:
        PromptError: Operator input closed before every item was resolved.
        ConfigError, TodoIOError, LockError: As for :func:`list_todos`.
    """
    ctx = _prepare(config, root)
    summary = ctx.coordinator.run(config.include)

    engine = ReconciliationEngine(
        ctx.allocator,
        get_input=get_input,
        output=output,
        order=config.sort,
    )
    result = engine.reconcile(ctx.previous, summary.items)
    logger.info(
        f"Resolved: {len(result.marked_done)} done, {len(result.removed)} removed, "
        f"{len(result.reopened)} reopened, {len(result.duplicated)} duplicated"
    )

    saved = _finish(ctx, config, result.items, stream)
    return TodoRun(
        items=result.items,
        previous=ctx.previous,
        scan=summary,
        store_path=saved,
        output_path=ctx.output_path,
        reconcile=result,
    )
