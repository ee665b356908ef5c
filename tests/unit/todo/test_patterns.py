"""Tests for PatternMatcher."""

from __future__ import annotations

import pytest

from mrdm.errors import ConfigError
from mrdm.todo import PatternMatcher

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def matcher() -> PatternMatcher:
    """Matcher for TODO and FIXME."""
    return PatternMatcher(["TODO", "FIXME"])


# =============================================================================
# Matching
# =============================================================================


class TestMatch:
    """Test extraction of annotation fields."""

    def test_fixme_with_id(self, matcher: PatternMatcher) -> None:
        m = matcher.match("// FIXME(2): test")
        assert m is not None
        assert (m.category, m.id, m.title) == ("FIXME", "2", "test")

    def test_todo_with_id(self, matcher: PatternMatcher) -> None:
        m = matcher.match("// TODO(6): test")
        assert m is not None
        assert (m.category, m.id, m.title) == ("TODO", "6", "test")

    def test_without_id(self, matcher: PatternMatcher) -> None:
        m = matcher.match("    // TODO: refactor this")
        assert m is not None
        assert m.id is None
        assert m.title == "refactor this"

    def test_after_code(self, matcher: PatternMatcher) -> None:
        m = matcher.match("let x = 1; // TODO: name it better")
        assert m is not None
        assert m.title == "name it better"

    def test_hash_marker(self, matcher: PatternMatcher) -> None:
        m = matcher.match("x = 1  # FIXME: off by one")
        assert m is not None
        assert m.category == "FIXME"

    def test_string_literal_is_ignored(self, matcher: PatternMatcher) -> None:
        """A category inside a double-quoted string is not an annotation."""
        assert matcher.match('testing("// TODO: test");') is None

    def test_comment_after_string_literal(self, matcher: PatternMatcher) -> None:
        m = matcher.match('print("// not this") // TODO: but this')
        assert m is not None
        assert m.title == "but this"

    def test_unconfigured_category(self, matcher: PatternMatcher) -> None:
        assert matcher.match("// HACK: nope") is None

    def test_id_must_be_ascii_digits(self, matcher: PatternMatcher) -> None:
        """Non-ASCII digits such as Arabic-Indic three are not an id."""
        assert matcher.match("# TODO(\u0663): x") is None
        m = matcher.match("# TODO(3): x")
        assert m is not None
        assert m.id == "3"

    def test_requires_colon(self, matcher: PatternMatcher) -> None:
        assert matcher.match("// TODO fix later") is None

    def test_requires_comment_marker(self, matcher: PatternMatcher) -> None:
        assert matcher.match("TODO: not a comment") is None

    def test_longer_token_not_matched(self, matcher: PatternMatcher) -> None:
        assert matcher.match("// TODOS: plural") is None

    def test_empty_title(self, matcher: PatternMatcher) -> None:
        m = matcher.match("// TODO:")
        assert m is not None
        assert m.title == ""

    def test_custom_markers(self) -> None:
        matcher = PatternMatcher(["TODO"], markers=["--"])
        assert matcher.match("-- TODO: sql") is not None
        assert matcher.match("// TODO: c") is None

    def test_categories_are_escaped(self) -> None:
        matcher = PatternMatcher(["X+Y"])
        assert matcher.match("// X+Y: literal plus") is not None
        assert matcher.match("// XXY: no") is None


# =============================================================================
# Rewriting
# =============================================================================


class TestRewrite:
    """Test id insertion."""

    def test_inserts_after_category(self, matcher: PatternMatcher) -> None:
        line = "    foo(); //  TODO:   keep   spacing "
        m = matcher.match(line)
        assert m is not None
        assert matcher.rewrite(line, m, "12") == "    foo(); //  TODO(12):   keep   spacing "

    def test_rewritten_line_matches_with_id(self, matcher: PatternMatcher) -> None:
        line = "# FIXME: x"
        rewritten = matcher.rewrite(line, matcher.match(line), "3")
        m = matcher.match(rewritten)
        assert m is not None
        assert m.id == "3"


# =============================================================================
# Configuration errors
# =============================================================================


class TestConfigErrors:
    """Test rejection of invalid category sets."""

    def test_empty_categories(self) -> None:
        with pytest.raises(ConfigError):
            PatternMatcher([])

    def test_blank_category(self) -> None:
        with pytest.raises(ConfigError):
            PatternMatcher(["TODO", "  "])

    def test_empty_markers(self) -> None:
        with pytest.raises(ConfigError):
            PatternMatcher(["TODO"], markers=[])

    def test_duplicates_collapse(self) -> None:
        matcher = PatternMatcher(["TODO", "TODO", "FIXME"])
        assert matcher.categories == ("TODO", "FIXME")
