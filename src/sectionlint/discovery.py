"""Test discovery: locate test functions and the extent of their bodies.

Discovery is lexical. A dialect's test markers identify where a test starts;
its body style decides where it ends:

- braces: the balanced ``{ ... }`` block opened at or after the marker
- indent: the lines indented deeper than the declaration (Python, Ruby)
- terminator: lines up to the dialect terminator (``GO``, ``End Sub``), the
  next marker, or the end of the file

Attribute markers such as ``[Fact]`` or ``@Test`` carry no name; the name is
taken from the next function declaration within a few lines.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePath
from typing import Final, NamedTuple

import structlog

from sectionlint.dialects.base import Dialect
from sectionlint.lexer import scan_source
from sectionlint.model import SourceLine, TestCase
from sectionlint.sections import split_sections

logger = structlog.get_logger(__name__)

NAME_LOOKAHEAD: Final[int] = 5
"""Lines searched after an attribute marker for the function declaration."""

BRACE_LOOKAHEAD: Final[int] = 10
"""Lines searched after a declaration for the opening brace."""


class _Marker(NamedTuple):
    name: str
    marker_index: int
    declaration_index: int


def discover_test_cases(path: str | PurePath, text: str, dialect: Dialect) -> list[TestCase]:
    """Find every test in a source file and split it into sections.

    Args:
        path: File path, recorded on each TestCase.
        text: Full file contents.
        dialect: Dialect of the file.

    Returns:
        Discovered tests in source order.

    Example:
        >>> from sectionlint.dialects import get_dialect
        >>> source = "def test_total():\\n    # WHEN\\n    actual = 1\\n"
        >>> [t.name for t in discover_test_cases("t.py", source, get_dialect("python"))]
        ['test_total']
    """
    lines = text.splitlines()
    masked, continued = scan_source(lines, dialect)
    file_path = str(path)
    test_cases: list[TestCase] = []

    index = 0
    while index < len(lines):
        marker = _match_marker(lines, index, dialect)
        if marker is None:
            index += 1
            continue

        extent = _body_extent(lines, masked, continued, marker, dialect)
        if extent is None:
            index += 1
            continue

        body_start, body_end, end_index = extent
        body = [SourceLine(number + 1, lines[number]) for number in range(body_start, body_end)]
        test_cases.append(
            TestCase(
                name=marker.name,
                file_path=file_path,
                dialect=dialect.name,
                start_line=marker.marker_index + 1,
                end_line=end_index + 1,
                sections=tuple(split_sections(body, dialect)),
            )
        )
        index = max(end_index, marker.declaration_index) + 1

    logger.debug("tests_discovered", file=file_path, dialect=dialect.name, count=len(test_cases))
    return test_cases


def _match_marker(lines: Sequence[str], index: int, dialect: Dialect) -> _Marker | None:
    line = lines[index]
    for pattern in dialect.test_markers:
        match = pattern.match(line)
        if match is None:
            continue
        groups = match.groupdict()
        name = groups.get("name") or groups.get("name2")
        if name:
            return _Marker(name.strip("`").strip(), index, index)
        return _named_declaration(lines, index, match.end(), dialect)
    return None


def _named_declaration(
    lines: Sequence[str], index: int, offset: int, dialect: Dialect
) -> _Marker | None:
    """Resolve the name of an attribute-style marker."""
    if dialect.function_pattern is None:
        return None
    last = min(len(lines), index + NAME_LOOKAHEAD + 1)
    for candidate in range(index, last):
        text = lines[candidate][offset:] if candidate == index else lines[candidate]
        match = dialect.function_pattern.search(text)
        if match is not None:
            return _Marker(match.group("name").strip("`").strip(), index, candidate)
    return None


def _body_extent(
    lines: Sequence[str],
    masked: Sequence[str],
    continued: Sequence[bool],
    marker: _Marker,
    dialect: Dialect,
) -> tuple[int, int, int] | None:
    """Return (first body index, end index exclusive, last test index)."""
    if dialect.body_style == "indent":
        return _indent_extent(lines, masked, continued, marker.declaration_index)
    if dialect.body_style == "terminator":
        return _terminator_extent(lines, marker.declaration_index, dialect)
    return _brace_extent(masked, marker.declaration_index)


def _brace_extent(masked: Sequence[str], start: int) -> tuple[int, int, int] | None:
    depth = 0
    open_index: int | None = None
    last = min(len(masked), start + BRACE_LOOKAHEAD + 1)

    for number in range(start, len(masked)):
        if open_index is None and number >= last:
            return None
        for ch in masked[number]:
            if ch == "{":
                if open_index is None:
                    open_index = number
                depth += 1
            elif ch == "}" and open_index is not None:
                depth -= 1
                if depth == 0:
                    return open_index + 1, max(number, open_index + 1), number

    if open_index is None:
        return None
    # unbalanced: the body runs to the end of the file
    return open_index + 1, len(masked), len(masked) - 1


def _indent_extent(
    lines: Sequence[str], masked: Sequence[str], continued: Sequence[bool], start: int
) -> tuple[int, int, int]:
    indent = _indentation(lines[start])

    # skip continuation lines of a multi-line signature
    first = start + 1
    depth = masked[start].count("(") - masked[start].count(")")
    while depth > 0 and first < len(lines):
        depth += masked[first].count("(") - masked[first].count(")")
        first += 1

    end = first
    last_content = start
    while end < len(lines):
        text = lines[end]
        # lines inside a multi-line string never end the body
        if text.strip() and not continued[end]:
            if _indentation(text) <= indent:
                break
            last_content = end
        end += 1
    return first, last_content + 1 if last_content >= first else first, max(last_content, start)


def _terminator_extent(
    lines: Sequence[str], start: int, dialect: Dialect
) -> tuple[int, int, int]:
    end = start + 1
    while end < len(lines):
        text = lines[end]
        if dialect.terminator is not None and dialect.terminator.match(text):
            return start + 1, end, end
        if any(pattern.match(text) for pattern in dialect.test_markers):
            return start + 1, end, end - 1
        end += 1
    return start + 1, len(lines), len(lines) - 1


def _indentation(text: str) -> int:
    return len(text.expandtabs(4)) - len(text.expandtabs(4).lstrip())


__all__ = ["BRACE_LOOKAHEAD", "NAME_LOOKAHEAD", "discover_test_cases"]
