"""Single-file annotation scanner.

:func:`scan_file` reads one source file, records every annotation it finds,
stamps annotations that have no id with a freshly allocated one, and rewrites
the file through a scratch copy. The original file is only replaced once every
line was processed; on any failure it is left byte-for-byte untouched.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path

from mrdm.errors import TodoIOError
from mrdm.logging import get_logger
from mrdm.todo.models import TodoItem
from mrdm.todo.patterns import PatternMatcher
from mrdm.todo.state import IdAllocator, ScanResults
from mrdm.utils.atomic import atomic_write

logger = get_logger("todo.scanner")


@dataclass
class FileScanResult:
    """Outcome of scanning one file.

    Attributes:
        path: The scanned file.
        found: Ids of every annotation seen, in line order.
        assigned: Ids allocated and written into the file by this scan.
    """

    path: Path
    found: list[str] = field(default_factory=list)
    assigned: list[str] = field(default_factory=list)

    @property
    def rewritten(self) -> bool:
        return bool(self.assigned)


def _split_line_ending(line: str) -> tuple[str, str]:
    if line.endswith("\r\n"):
        return line[:-2], "\r\n"
    if line.endswith(("\n", "\r")):
        return line[:-1], line[-1]
    return line, ""


def read_source(path: Path, encoding: str = "utf-8") -> str:
    """Read a whole file as text with line endings preserved.

    Raises:
        TodoIOError: If the file cannot be opened or decoded.
    """
    try:
        with open(path, encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TodoIOError(
            f"Could not read {path}: {e}", path, TodoIOError.NOT_READABLE
        ) from e


def explicit_ids(path: str | Path, matcher: PatternMatcher, encoding: str = "utf-8") -> list[str]:
    """Ids already written into annotations in ``path``, in line order.

    Raises:
        TodoIOError: If the file cannot be read.
    """
    ids = []
    for raw in io.StringIO(read_source(Path(path), encoding), newline=""):
        match = matcher.match(_split_line_ending(raw)[0])
        if match is not None and match.id is not None:
            ids.append(match.id)
    return ids


def scan_file(
    path: str | Path,
    matcher: PatternMatcher,
    allocator: IdAllocator,
    results: ScanResults,
    *,
    encoding: str = "utf-8",
    display_path: str | None = None,
) -> FileScanResult:
    """Scan one file, assign missing ids, and rewrite it in place.

    Args:
        path: File to scan.
        matcher: Compiled annotation rule.
        allocator: Shared id source.
        results: Shared aggregate receiving every item found.
        encoding: Source encoding.
        display_path: Path recorded on items. Defaults to ``path``.

    Returns:
        Per-file summary.

    Raises:
        TodoIOError: On any read, write, or rename failure. The original file
            is unchanged in that case.
    """
    path = Path(path)
    content = read_source(path, encoding)
    outcome = FileScanResult(path=path)
    display_path = display_path or path.as_posix()

    with atomic_write(path, encoding=encoding) as out:
        for lineno, raw in enumerate(io.StringIO(content, newline=""), start=1):
            text, ending = _split_line_ending(raw)
            match = matcher.match(text)
            if match is None:
                out.write(raw)
                continue

            item_id = match.id
            is_new = item_id is None
            if is_new:
                item_id = allocator.allocate()
                text = matcher.rewrite(text, match, item_id)
                outcome.assigned.append(item_id)
                logger.debug(f"{display_path}:{lineno}: assigned id {item_id}")

            out.write(text + ending)
            outcome.found.append(item_id)
            results.add(
                TodoItem(
                    id=item_id,
                    title=match.title,
                    category=match.category,
                    path=display_path,
                    line=lineno,
                ),
                new=is_new,
            )

        # Nothing injected: keep the original file and its timestamps
        out.discard = not outcome.assigned

    logger.debug(
        f"Scanned {display_path}: {len(outcome.found)} annotation(s), "
        f"{len(outcome.assigned)} new id(s)"
    )
    return outcome
