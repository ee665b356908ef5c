"""Logging helpers for mrdm.

All loggers live under the ``mrdm`` namespace so a single handler installed by
:func:`configure_logging` covers the whole package. Library code only calls
:func:`get_logger`; the CLI decides where records go.

Example:
    from mrdm.logging import get_logger

    logger = get_logger("todo.scanner")
    logger.debug(f"Scanning {path}")
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "mrdm"

# Environment variable consulted when no explicit level is given
LOG_LEVEL_ENV = "MRDM_LOG_LEVEL"

_configured = False


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger in the ``mrdm`` namespace.

    Args:
        name: Dotted sub-name such as ``"todo.store"``. ``None`` returns the
            package root logger.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    # getLevelName returns "Level X" for unknown names
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: int | str | None = None, *, force: bool = False) -> logging.Logger:
    """Install a rich stderr handler on the ``mrdm`` root logger.

    Calling this more than once only adjusts the level unless ``force`` is set.

    Args:
        level: Level name or number. Falls back to ``MRDM_LOG_LEVEL``, then WARNING.
        force: Replace any handler installed by a previous call.

    Returns:
        The configured package root logger.
    """
    global _configured

    root = get_logger()
    root.setLevel(_resolve_level(level))

    if _configured and not force:
        return root

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.propagate = False
    _configured = True
    return root
