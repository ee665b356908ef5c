"""Crash-safe file replacement.

Content is written to a scratch file in the destination's directory and moved
over the destination with ``os.replace`` only after writing succeeded. A
failure at any point removes the scratch file and leaves the destination as it
was. No fsync is issued before the rename.

Example:
    with atomic_write(Path("notes.txt")) as f:
        f.write("hello\\n")
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from mrdm.errors import TodoIOError
from mrdm.logging import get_logger

logger = get_logger("utils.atomic")


class AtomicWriter:
    """Handle yielded by :func:`atomic_write`.

    Attributes:
        file: Open text stream on the scratch file.
        temp_path: Location of the scratch file.
        discard: Set to True to drop the scratch file instead of replacing.
    """

    def __init__(self, file: TextIO, temp_path: Path) -> None:
        self.file = file
        self.temp_path = temp_path
        self.discard = False

    def write(self, text: str) -> int:
        return self.file.write(text)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove scratch file {path}: {e}")


@contextmanager
def atomic_write(
    path: str | Path,
    *,
    encoding: str = "utf-8",
    newline: str | None = "",
    keep_mode: bool = True,
    mkdir: bool = False,
) -> Iterator[AtomicWriter]:
    """Write ``path`` through a scratch file and rename it into place.

    Args:
        path: Destination file.
        encoding: Text encoding of the scratch file.
        newline: Passed to ``open``; the default keeps line endings verbatim.
        keep_mode: Copy the destination's permission bits to the new file.
        mkdir: Create the parent directory if missing.

    Raises:
        TodoIOError: If the scratch file cannot be created or written, or
            the rename fails. Errors raised by the caller inside the block
            propagate unchanged after cleanup.
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")

    try:
        if mkdir:
            directory.mkdir(parents=True, exist_ok=True)
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            encoding=encoding,
            newline=newline,
            dir=directory,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as e:
        raise TodoIOError(
            f"Could not create scratch file next to {path}: {e}", path, TodoIOError.NOT_WRITABLE
        ) from e

    temp_path = Path(handle.name)
    writer = AtomicWriter(handle, temp_path)
    try:
        try:
            with handle:
                yield writer
        except OSError as e:
            raise TodoIOError(
                f"Could not write {path}: {e}", path, TodoIOError.NOT_WRITABLE
            ) from e

        if writer.discard:
            _remove_quietly(temp_path)
            return

        if keep_mode and path.exists():
            try:
                shutil.copymode(path, temp_path)
            except OSError as e:
                logger.debug(f"Could not copy mode of {path}: {e}")

        try:
            os.replace(temp_path, path)
        except OSError as e:
            raise TodoIOError(
                f"Could not replace {path}: {e}", path, TodoIOError.RENAME_FAILED
            ) from e
    except BaseException:
        _remove_quietly(temp_path)
        raise
