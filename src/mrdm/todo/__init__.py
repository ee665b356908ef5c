"""Annotation tracking engine.

Scans source files for comments such as ``// TODO: ...``, stamps each one with
a stable id written back into the file, and keeps a persistent list of them
across runs.

Example:
    from mrdm.config import load_config
    from mrdm.todo import list_todos

    run = list_todos(load_config("."), root=".")
    print(f"{len(run.items)} item(s), {len(run.scan.new_ids)} new")
"""

from mrdm.todo.coordinator import ScanCoordinator, ScanSummary, SourceFile, expand_paths
from mrdm.todo.models import (
    StoreDocument,
    StoredItem,
    TodoItem,
    TodoList,
    id_sort_key,
    sort_ids,
    sorted_items,
)
from mrdm.todo.patterns import AnnotationMatch, PatternMatcher
from mrdm.todo.reconcile import (
    Classification,
    ReconcileResult,
    ReconciliationEngine,
    merge_scan,
)
from mrdm.todo.render import ChecklistRenderer, format_item, render_checklist
from mrdm.todo.scanner import FileScanResult, scan_file
from mrdm.todo.state import IdAllocator, ScanResults
from mrdm.todo.store import TodoStore, dump_store, parse_store
from mrdm.todo.workflow import TodoRun, list_todos, mark_done

__all__ = [
    # Models
    "StoreDocument",
    "StoredItem",
    "TodoItem",
    "TodoList",
    "id_sort_key",
    "sort_ids",
    "sorted_items",
    # Matching and scanning
    "AnnotationMatch",
    "FileScanResult",
    "PatternMatcher",
    "scan_file",
    # Coordination
    "IdAllocator",
    "ScanCoordinator",
    "ScanResults",
    "ScanSummary",
    "SourceFile",
    "expand_paths",
    # Persistence
    "TodoStore",
    "dump_store",
    "parse_store",
    # Reconciliation
    "Classification",
    "ReconcileResult",
    "ReconciliationEngine",
    "merge_scan",
    # Rendering
    "ChecklistRenderer",
    "format_item",
    "render_checklist",
    # Workflows
    "TodoRun",
    "list_todos",
    "mark_done",
]
