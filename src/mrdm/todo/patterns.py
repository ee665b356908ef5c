"""Annotation matching rule.

A single regular expression recognizes annotation comments such as::

    // TODO: make this faster
    # FIXME(12): handle empty input

Named groups:
    prefix: Everything before the comment marker. Balanced double-quoted
        substrings are skipped as units, so ``print("// TODO: x")`` does not
        match. Escaped quotes and multi-line strings are not handled.
    marker: The line comment marker (``//``, ``#``, ...).
    category: One of the configured categories.
    id: Optional decimal id inside parentheses.
    title: The rest of the line after the colon.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from mrdm.errors import ConfigError

# Skip over "..." as a unit; [^"] cannot consume a quote so a lone quote ends the prefix
_PREFIX = r'(?P<prefix>(?:"[^"\n]*"|[^"\n])*?)'
_ID = r"(?:\((?P<id>[0-9]+)\))?"
_TITLE = r":\s*(?P<title>.*?)\s*$"


@dataclass(frozen=True)
class AnnotationMatch:
    """Fields extracted from one matching line.

    Attributes:
        category: Matched category token.
        id: Explicit id found in the line, or None.
        title: Title text with surrounding whitespace removed.
        insert_at: Offset right after the category token, where a new id goes.
    """

    category: str
    id: str | None
    title: str
    insert_at: int


class PatternMatcher:
    """Compiled annotation rule for a set of categories.

    Instances are immutable and can be shared between concurrent scans.

    Example:
        >>> matcher = PatternMatcher(["TODO", "FIXME"])
        >>> m = matcher.match("    // FIXME(2): test")
        >>> (m.category, m.id, m.title)
        ('FIXME', '2', 'test')
        >>> line = "// TODO: x"
        >>> matcher.rewrite(line, matcher.match(line), "7")
        '// TODO(7): x'

    Attributes:
        categories: Categories in configured order.
        markers: Comment markers in configured order.
    """

    def __init__(
        self,
        categories: Iterable[str],
        markers: Iterable[str] = ("//", "#"),
    ) -> None:
        """Compile the rule.

        Args:
            categories: Non-empty ordered set of category tokens.
            markers: Non-empty set of line comment markers.

        Raises:
            ConfigError: If either set is empty, contains blank entries,
                or the rule fails to compile.
        """
        self.categories = _dedupe(categories, "category")
        self.markers = _dedupe(markers, "comment marker")

        # Longest first so "TODOS" is preferred over "TODO" when both are configured
        category_alt = "|".join(
            re.escape(c) for c in sorted(self.categories, key=len, reverse=True)
        )
        marker_alt = "|".join(re.escape(m) for m in sorted(self.markers, key=len, reverse=True))
        source = (
            rf"^{_PREFIX}(?P<marker>{marker_alt})\s*"
            rf"(?P<category>{category_alt}){_ID}{_TITLE}"
        )
        try:
            self._regex = re.compile(source)
        except re.error as e:
            raise ConfigError(f"Invalid annotation rule: {e}", {"pattern": source}) from e

    @property
    def pattern(self) -> str:
        """Source of the compiled regular expression."""
        return self._regex.pattern

    def match(self, line: str) -> AnnotationMatch | None:
        """Match one line (without its line ending).

        Returns:
            The extracted fields, or None if the line holds no annotation.
        """
        m = self._regex.match(line)
        if m is None:
            return None
        return AnnotationMatch(
            category=m.group("category"),
            id=m.group("id"),
            title=m.group("title"),
            insert_at=m.end("category"),
        )

    @staticmethod
    def rewrite(line: str, match: AnnotationMatch, item_id: str) -> str:
        """Insert ``(<item_id>)`` right after the category token of ``line``."""
        return f"{line[: match.insert_at]}({item_id}){line[match.insert_at :]}"

    def __repr__(self) -> str:
        return f"PatternMatcher(categories={self.categories!r}, markers={self.markers!r})"


def _dedupe(values: Iterable[str], kind: str) -> tuple[str, ...]:
    result: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Blank {kind} in configuration")
        value = value.strip()
        if value not in result:
            result.append(value)
    if not result:
        raise ConfigError(f"At least one {kind} is required")
    return tuple(result)
