"""Section splitter: turns a test body into an ordered list of Sections.

A header is a comment line whose text, once the comment syntax is removed,
starts with one of the recognised labels (case-insensitive), optionally
followed by a colon and a descriptive sentence:

    // GIVEN: a customer with two open orders
    # SYSTEM UNDER TEST
    -- WHEN the balance is recalculated

Splitting never fails. Anything that is not a header is body content of the
currently open section, or of a leading UNLABELED section when no header has
been seen yet.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Final, NamedTuple

from sectionlint.dialects.base import Dialect
from sectionlint.model import Section, SectionKind, SourceLine

_HEADER_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<label>SYSTEM[\s_-]+UNDER[\s_-]+TEST|EXPECTATIONS|BEHAVIOU?R|MOCKING|CAPTURE"
    r"|LOGGING|GIVEN|SETUP|WHEN|THEN)\b\s*:?\s*(?P<description>.*)$",
    re.IGNORECASE,
)


class Header(NamedTuple):
    """A recognised section header."""

    kind: SectionKind
    description: str


def parse_header(line: str, dialect: Dialect) -> Header | None:
    """Recognise a section header comment.

    Args:
        line: Raw source line.
        dialect: Dialect supplying the comment syntax.

    Returns:
        The header kind and its trailing description, or None.

    Example:
        >>> from sectionlint.dialects import get_dialect
        >>> parse_header("    // GIVEN: a valid order", get_dialect("csharp"))
        Header(kind=<SectionKind.GIVEN: 'GIVEN'>, description='a valid order')
    """
    body = dialect.strip_comment_marker(line.strip())
    if body is None:
        return None
    match = _HEADER_RE.match(body)
    if match is None:
        return None
    return Header(_kind_for_label(match.group("label")), match.group("description").strip())


def _kind_for_label(label: str) -> SectionKind:
    normalized = label.upper()
    if normalized.startswith("SYSTEM"):
        return SectionKind.SYSTEM_UNDER_TEST
    if normalized.startswith("BEHAVIO"):
        return SectionKind.BEHAVIOR
    return SectionKind(normalized)


@dataclass
class _OpenSection:
    kind: SectionKind
    start_line: int
    headers: list[SourceLine] = field(default_factory=list)
    lines: list[SourceLine] = field(default_factory=list)

    def close(self, ordinal: int) -> Section:
        last = self.lines[-1].number if self.lines else self.start_line
        if self.headers:
            last = max(last, self.headers[-1].number)
        return Section(
            kind=self.kind,
            ordinal=ordinal,
            start_line=self.start_line,
            end_line=last,
            headers=tuple(self.headers),
            lines=tuple(self.lines),
        )


def split_sections(lines: Sequence[SourceLine], dialect: Dialect) -> list[Section]:
    """Split a test body into sections.

    A header of the same kind as the open section is a sub-header and extends
    that section. Leading content before the first header becomes an
    UNLABELED section when it is not blank. A body with no header at all is
    a single UNLABELED section spanning every line.

    Args:
        lines: Numbered lines of the test body.
        dialect: Dialect supplying the comment syntax.

    Returns:
        Sections in source order with ordinals assigned.
    """
    sections: list[Section] = []
    current: _OpenSection | None = None
    leading: list[SourceLine] = []

    for line in lines:
        header = parse_header(line.text, dialect)
        if header is None:
            if current is None:
                leading.append(line)
            else:
                current.lines.append(line)
            continue

        if current is not None and header.kind is current.kind:
            current.headers.append(line)
            continue

        if current is not None:
            sections.append(current.close(len(sections)))
        elif any(source.text.strip() for source in leading):
            unlabeled = _OpenSection(SectionKind.UNLABELED, leading[0].number, lines=leading)
            sections.append(unlabeled.close(len(sections)))
        current = _OpenSection(header.kind, line.number, headers=[line])

    if current is not None:
        sections.append(current.close(len(sections)))
    elif leading or not sections:
        start = leading[0].number if leading else 0
        sections.append(_OpenSection(SectionKind.UNLABELED, start, lines=leading).close(0))

    return sections


def header_description(section: Section, dialect: Dialect) -> str:
    """Return the descriptive sentence of a section's first header."""
    if not section.headers:
        return ""
    header = parse_header(section.headers[0].text, dialect)
    return header.description if header else ""


__all__ = ["Header", "header_description", "parse_header", "split_sections"]
