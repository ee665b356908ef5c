"""
Root conftest.py for mrdm tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared fixtures for building throwaway projects on disk
3. Scripted operator input for reconciliation tests
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from mrdm.config import ScanConfig, store_path

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/cli/" in norm:
            item.add_marker(pytest.mark.cli)
        if "/todo/" in norm:
            item.add_marker(pytest.mark.todo)


def pytest_configure(config):
    """Register custom markers."""
    for name, desc in [
        ("cli", "Command line tests"),
        ("todo", "Annotation engine tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# PROJECT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MRDM_LOG_LEVEL from the developer's shell out of tests."""
    monkeypatch.delenv("MRDM_LOG_LEVEL", raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty project root with a ``src/`` directory."""
    (tmp_path / "src").mkdir()
    return tmp_path


@pytest.fixture
def write_source(project: Path) -> Callable[[str, str], Path]:
    """Write a file under the project root and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = project / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")
        return path

    return _write


@pytest.fixture
def write_store(project: Path) -> Callable[[dict[str, dict[str, Any]]], Path]:
    """Write ``.mrdm/todos.json`` with the given items."""

    def _write(items: dict[str, dict[str, Any]]) -> Path:
        path = store_path(project)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"items": items}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_store(project: Path) -> Callable[[], dict[str, dict[str, Any]]]:
    """Read back the raw ``items`` mapping of the store."""

    def _read() -> dict[str, dict[str, Any]]:
        return json.loads(store_path(project).read_text(encoding="utf-8"))["items"]

    return _read


@pytest.fixture
def config() -> ScanConfig:
    """Configuration scanning everything under src/ for TODO and FIXME."""
    return ScanConfig(patterns=["TODO", "FIXME"], include=["src/**/*"])


# =============================================================================
# OPERATOR INPUT
# =============================================================================


class ScriptedInput:
    """Replays canned answers in place of ``input()`` and records the prompts.

    Raises EOFError once the answers run out, like a closed stdin.
    """

    def __init__(self, answers: Iterable[str]):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture
def scripted_input() -> Callable[..., ScriptedInput]:
    """Factory: ``scripted_input("d", "")`` answers two prompts."""
    return lambda *answers: ScriptedInput(answers)
