"""Tests for ReconciliationEngine and the non-interactive merge."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from mrdm.errors import PromptError
from mrdm.todo import IdAllocator, ReconciliationEngine, TodoItem, merge_scan


def _item(item_id: str, **overrides) -> TodoItem:
    fields = {"title": "x", "category": "TODO", "path": "a", "line": 3, "done": False}
    fields.update(overrides)
    return TodoItem(id=item_id, **fields)


@pytest.fixture
def shown() -> list[str]:
    return []


def _engine(answers, shown: list[str], start: int = 100) -> ReconciliationEngine:
    return ReconciliationEngine(IdAllocator(start), get_input=answers, output=shown.append)


# =============================================================================
# Classification
# =============================================================================


class TestClassify:
    """Test detection of ambiguous ids."""

    def test_deleted_and_resurrected(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {
            "0": _item("0"),
            "1": _item("1", done=True),
            "2": _item("2", done=True),
            "3": _item("3"),
        }
        current = {"1": _item("1"), "3": _item("3")}

        pending = _engine(scripted_input(), shown).classify(previous, current)

        assert pending.deleted == ["0"]
        assert pending.resurrected == ["1"]

    def test_numeric_order(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {i: _item(i) for i in ["10", "9", "2"]}
        pending = _engine(scripted_input(), shown).classify(previous, {})
        assert pending.deleted == ["2", "9", "10"]


# =============================================================================
# Deleted items
# =============================================================================


class TestDeleted:
    """An open item that is no longer in the code."""

    @pytest.mark.parametrize("answer", ["d", "D", " d "])
    def test_done_keeps_item(
        self, answer: str, scripted_input: Callable, shown: list[str]
    ) -> None:
        previous = {"0": _item("0")}
        result = _engine(scripted_input(answer), shown).reconcile(previous, {})

        assert result.items["0"].done is True
        assert result.marked_done == ["0"]
        assert len(shown) == 1

    @pytest.mark.parametrize("answer", ["", "n", "done"])
    def test_anything_else_removes(
        self, answer: str, scripted_input: Callable, shown: list[str]
    ) -> None:
        previous = {"0": _item("0")}
        result = _engine(scripted_input(answer), shown).reconcile(previous, {})

        assert "0" not in result.items
        assert result.removed == ["0"]


# =============================================================================
# Resurrected items
# =============================================================================


class TestResurrected:
    """A done item that shows up in the code again."""

    def test_undo_reopens(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {"1": _item("1", done=True)}
        current = {"1": _item("1", line=9)}

        result = _engine(scripted_input("u"), shown).reconcile(previous, current)

        assert result.items == {"1": _item("1", line=9, done=False)}
        assert result.reopened == ["1"]

    def test_anything_else_duplicates(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {"1": _item("1", done=True)}
        current = {"1": _item("1", title="again")}

        result = _engine(scripted_input(""), shown, start=2).reconcile(previous, current)

        assert result.items["1"].done is True
        assert result.duplicated == {"1": "2"}
        duplicate = result.items["2"]
        assert duplicate.done is False
        assert (duplicate.title, duplicate.category, duplicate.path, duplicate.line) == (
            "again",
            "TODO",
            "a",
            3,
        )

    def test_duplicate_id_comes_from_shared_allocator(
        self, scripted_input: Callable, shown: list[str]
    ) -> None:
        """The new id never reuses one handed out during the scan."""
        allocator = IdAllocator(2)
        scanned_new = allocator.allocate()  # id injected by the scan
        previous = {"0": _item("0"), "1": _item("1", done=True)}
        current = {"1": _item("1"), scanned_new: _item(scanned_new)}

        engine = ReconciliationEngine(
            allocator, get_input=scripted_input("d", "x"), output=shown.append
        )
        result = engine.reconcile(previous, current)

        assert set(result.items) == {"0", "1", "2", "3"}
        assert result.duplicated == {"1": "3"}

    def test_duplicate_skips_ids_present_in_source(
        self, scripted_input: Callable, shown: list[str]
    ) -> None:
        previous = {"1": _item("1", done=True)}
        current = {"1": _item("1"), "5": _item("5")}

        result = _engine(scripted_input(""), shown, start=5).reconcile(previous, current)

        assert result.duplicated == {"1": "6"}
        assert result.items["5"].done is False


# =============================================================================
# Pass-through and prompts
# =============================================================================


class TestMerge:
    """Entries needing no decision."""

    def test_current_overrides_previous(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {"0": _item("0", line=1), "4": _item("4", done=True)}
        current = {"0": _item("0", line=7), "8": _item("8")}

        result = _engine(scripted_input(), shown).reconcile(previous, current)

        assert result.items == {
            "0": _item("0", line=7),
            "4": _item("4", done=True),
            "8": _item("8"),
        }
        assert shown == []

    def test_prompts_in_id_order(self, scripted_input: Callable, shown: list[str]) -> None:
        previous = {
            "10": _item("10", title="ten"),
            "2": _item("2", title="two"),
            "3": _item("3", title="three", done=True),
        }
        current = {"3": _item("3", title="three")}
        answers = scripted_input("d", "", "u")

        _engine(answers, shown).reconcile(previous, current)

        assert [line.split(": ", 1)[1].split(" (")[0] for line in shown] == ["two", "ten", "three"]
        assert len(answers.prompts) == 3

    def test_closed_input_raises_prompt_error(
        self, scripted_input: Callable, shown: list[str]
    ) -> None:
        previous = {"0": _item("0"), "1": _item("1")}
        with pytest.raises(PromptError):
            _engine(scripted_input("d"), shown).reconcile(previous, {})

    def test_interrupt_is_not_wrapped(self, shown: list[str]) -> None:
        """Ctrl-C reaches the caller unchanged."""

        def interrupted(prompt: str) -> str:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            _engine(interrupted, shown).reconcile({"0": _item("0")}, {})


class TestMergeScan:
    """Non-interactive merge used by ``list``."""

    def test_keeps_done_flag_and_refreshes_location(self) -> None:
        previous = {"1": _item("1", done=True, line=1), "2": _item("2")}
        current = {"1": _item("1", line=20, title="moved"), "3": _item("3")}

        merged = merge_scan(previous, current)

        assert list(merged) == ["1", "2", "3"]
        assert merged["1"].done is True
        assert merged["1"].line == 20
        assert merged["1"].title == "moved"
        assert merged["2"] == previous["2"]
