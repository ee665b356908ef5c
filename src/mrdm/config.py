"""Project configuration for mrdm.

The configuration lives in ``.mrdm/config.json`` under the project root:

    {
      "patterns": ["TODO", "FIXME"],
      "include": ["src/**/*"],
      "out": null,
      "markers": ["//", "#"],
      "sort": "numeric"
    }

A missing or unparseable file is not an error: the built-in defaults are used
instead. Command line overrides are applied with :meth:`ScanConfig.with_overrides`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mrdm.errors import ConfigError, TodoIOError
from mrdm.logging import get_logger

logger = get_logger("config")

# =============================================================================
# Well-known locations
# =============================================================================

STATE_DIR_NAME = ".mrdm"
CONFIG_FILE_NAME = "config.json"
STORE_FILE_NAME = "todos.json"

DEFAULT_PATTERNS = ["TODO"]
DEFAULT_INCLUDE = ["src/**/*"]
DEFAULT_MARKERS = ["//", "#"]

SortOrder = Literal["numeric", "lexical"]


def config_path(root: str | Path = ".") -> Path:
    """Path of the configuration file for a project root."""
    return Path(root) / STATE_DIR_NAME / CONFIG_FILE_NAME


def store_path(root: str | Path = ".") -> Path:
    """Path of the persisted todo store for a project root."""
    return Path(root) / STATE_DIR_NAME / STORE_FILE_NAME


# =============================================================================
# Model
# =============================================================================


class ScanConfig(BaseModel):
    """Resolved scan configuration handed to the todo engine."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PATTERNS),
        description="Annotation categories, e.g. TODO, FIXME",
    )
    include: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE),
        description="Glob patterns selecting files to scan",
    )
    out: str | None = Field(None, description="Checklist output file (stdout when unset)")
    markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MARKERS),
        description="Line comment markers that may precede a category",
    )
    sort: SortOrder = Field("numeric", description="Id ordering for rendering and persistence")

    def with_overrides(
        self,
        patterns: str | list[str] | None = None,
        path: str | None = None,
        out: str | None = None,
    ) -> ScanConfig:
        """Return a copy with command line overrides applied.

        Args:
            patterns: Comma-separated categories (``"TODO,FIXME"``) or a list.
            path: A single path or glob replacing the include list.
            out: Output file for the rendered checklist.
        """
        update: dict[str, object] = {}
        if patterns:
            update["patterns"] = split_patterns(patterns)
        if path:
            update["include"] = [path]
        if out:
            update["out"] = out
        return self.model_copy(update=update) if update else self


def split_patterns(value: str | list[str]) -> list[str]:
    """Split a comma-separated category override, keeping order and dropping repeats."""
    items = value.split(",") if isinstance(value, str) else value
    seen: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


# =============================================================================
# Loading and scaffolding
# =============================================================================


def load_config(root: str | Path = ".") -> ScanConfig:
    """Load the project configuration, falling back to defaults.

    Args:
        root: Project root containing ``.mrdm/config.json``.

    Returns:
        The parsed configuration, or the defaults if the file is missing or invalid.
    """
    path = config_path(root)
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return ScanConfig()

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return ScanConfig.model_validate(data)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Failed to load config {path}: {e}. Using defaults.")
        return ScanConfig()


def init_config(root: str | Path = ".") -> Path:
    """Write a default configuration file for a project.

    Args:
        root: Project root.

    Returns:
        Path of the new configuration file.

    Raises:
        ConfigError: If a configuration file already exists.
        TodoIOError: If the file cannot be written.
    """
    path = config_path(root)
    if path.exists():
        raise ConfigError(f"Config already exists: {path}", {"path": str(path)})

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "x", encoding="utf-8") as f:
            json.dump(ScanConfig().model_dump(), f, indent=2)
            f.write("\n")
    except FileExistsError as e:
        raise ConfigError(f"Config already exists: {path}", {"path": str(path)}) from e
    except OSError as e:
        raise TodoIOError(
            f"Could not write config {path}: {e}", path, TodoIOError.NOT_WRITABLE
        ) from e

    logger.info(f"Created config at {path}")
    return path
