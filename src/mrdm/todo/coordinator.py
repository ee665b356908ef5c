"""Concurrent scan of every configured file.

The coordinator expands include globs into a concrete file list, runs
:func:`~mrdm.todo.scanner.scan_file` for each file in a worker thread, and
waits for all of them before reporting. One failing file fails the whole
scan, but files already rewritten by other tasks stay rewritten: the file
system, not the return value, tells what was changed.

Before any file is rewritten, a read-only pass collects the ids already written
in the sources, so ids typed in by hand are never handed out again.
"""

from __future__ import annotations

import asyncio
import glob
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from mrdm.errors import TodoIOError
from mrdm.logging import get_logger
from mrdm.todo.models import SortOrder, TodoList
from mrdm.todo.patterns import PatternMatcher
from mrdm.todo.scanner import FileScanResult, explicit_ids, scan_file
from mrdm.todo.state import IdAllocator, ScanResults

logger = get_logger("todo.coordinator")


# =============================================================================
# Path expansion
# =============================================================================


@dataclass(frozen=True)
class SourceFile:
    """A file selected for scanning.

    Attributes:
        path: Location used to open the file.
        display: Path recorded on items, relative to the project root when possible.
    """

    path: Path
    display: str


def expand_paths(patterns: Iterable[str], root: str | Path = ".") -> list[SourceFile]:
    """Expand globs into a deduplicated, sorted list of regular files.

    Relative patterns are resolved against ``root``; ``**`` matches across
    directories. A pattern naming an existing file is used as is even if it
    contains glob characters. Hidden files are only matched explicitly.

    Args:
        patterns: Glob patterns or plain paths.
        root: Project root.

    Returns:
        Files ordered by display path.
    """
    root = Path(root)
    seen: dict[Path, SourceFile] = {}

    for pattern in patterns:
        literal = root / pattern
        if literal.is_file():
            candidates = [pattern]
        else:
            candidates = glob.glob(pattern, root_dir=root, recursive=True)
            if not candidates:
                logger.debug(f"No files match {pattern!r}")

        for candidate in candidates:
            path = root / candidate
            if not path.is_file():
                continue
            key = path.resolve()
            if key not in seen:
                seen[key] = SourceFile(path=path, display=Path(candidate).as_posix())

    return sorted(seen.values(), key=lambda f: f.display)


# =============================================================================
# ScanCoordinator
# =============================================================================


@dataclass
class ScanSummary:
    """Outcome of a completed scan.

    Attributes:
        items: Every annotation found, sorted by id.
        files: Per-file results in file order.
        new_ids: Ids allocated during the scan.
    """

    items: TodoList
    files: list[FileScanResult] = field(default_factory=list)
    new_ids: set[str] = field(default_factory=set)

    @property
    def rewritten_files(self) -> list[Path]:
        return [f.path for f in self.files if f.rewritten]


class ScanCoordinator:
    """Fan out file scans and aggregate their results.

    Example:
        >>> matcher = PatternMatcher(["TODO"])
        >>> coordinator = ScanCoordinator(matcher, IdAllocator(), root=".")
        >>> summary = coordinator.run(["src/**/*.py"])
        >>> len(summary.items)

    Attributes:
        matcher: Shared annotation rule.
        allocator: Shared id source, also used later by reconciliation.
        root: Project root for relative globs.
    """

    def __init__(
        self,
        matcher: PatternMatcher,
        allocator: IdAllocator,
        *,
        root: str | Path = ".",
        encoding: str = "utf-8",
        order: SortOrder = "numeric",
    ) -> None:
        self.matcher = matcher
        self.allocator = allocator
        self.root = Path(root)
        self.encoding = encoding
        self.order = order

    async def reserve_explicit_ids(self, files: list[SourceFile]) -> int:
        """Advance the allocator past ids already written in ``files``.

        Unreadable files are skipped here; the scan itself reports them.

        Returns:
            The first id the scan will allocate.
        """
        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(explicit_ids, source.path, self.matcher, self.encoding)
                for source in files
            ),
            return_exceptions=True,
        )
        found: list[str] = []
        for source, outcome in zip(files, outcomes):
            if isinstance(outcome, TodoIOError):
                logger.debug(f"Skipping id pre-pass for {source.display}: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                found.extend(outcome)
        return self.allocator.reserve(found)

    async def scan(self, patterns: Iterable[str]) -> ScanSummary:
        """Scan every file matched by ``patterns`` concurrently.

        Raises:
            TodoIOError: The first failure in file order, after all tasks finished.
            LockError: If shared state could not be locked.
        """
        files = expand_paths(patterns, self.root)
        results = ScanResults()
        logger.info(f"Scanning {len(files)} file(s)")
        await self.reserve_explicit_ids(files)

        tasks = [
            asyncio.to_thread(
                scan_file,
                source.path,
                self.matcher,
                self.allocator,
                results,
                encoding=self.encoding,
                display_path=source.display,
            )
            for source in files
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        errors: list[BaseException] = []
        file_results: list[FileScanResult] = []
        for source, outcome in zip(files, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Scan failed for {source.display}: {outcome}")
                errors.append(outcome)
            else:
                file_results.append(outcome)

        if errors:
            rewritten = [f.path for f in file_results if f.rewritten]
            if rewritten:
                logger.warning(
                    f"{len(rewritten)} file(s) were already rewritten before the failure"
                )
            raise errors[0]

        summary = ScanSummary(
            items=results.items(self.order),
            files=file_results,
            new_ids=results.new_ids,
        )
        logger.info(
            f"Found {len(summary.items)} annotation(s), assigned {len(summary.new_ids)} new id(s)"
        )
        return summary

    def run(self, patterns: Iterable[str]) -> ScanSummary:
        """Synchronous wrapper around :meth:`scan`."""
        return asyncio.run(self.scan(patterns))
