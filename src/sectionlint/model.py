"""Core value types shared by the tokenizer, validators and engines.

- SectionKind: The labelled regions a test body is divided into
- PrefixCategory: Lexical prefix families for identifiers
- SourceLine: A single numbered line of source text
- Section: One labelled region of a test
- TestCase: One discovered test function/method
- Identifier: A binding declared or referenced inside a test
- Operand / Assertion: Parsed assertion statements

These are internal working types, so they are plain dataclasses rather than
pydantic models. The reporting contract lives in sectionlint.result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class SectionKind(str, Enum):
    """Kinds of labelled test sections, values are the header labels."""

    GIVEN = "GIVEN"
    CAPTURE = "CAPTURE"
    MOCKING = "MOCKING"
    SETUP = "SETUP"
    SYSTEM_UNDER_TEST = "SYSTEM UNDER TEST"
    WHEN = "WHEN"
    EXPECTATIONS = "EXPECTATIONS"
    THEN = "THEN"
    LOGGING = "LOGGING"
    BEHAVIOR = "BEHAVIOR"
    UNLABELED = "UNLABELED"

    @property
    def label(self) -> str:
        return self.value


CANONICAL_ORDER: tuple[SectionKind, ...] = (
    SectionKind.GIVEN,
    SectionKind.CAPTURE,
    SectionKind.MOCKING,
    SectionKind.SETUP,
    SectionKind.SYSTEM_UNDER_TEST,
    SectionKind.WHEN,
    SectionKind.EXPECTATIONS,
    SectionKind.THEN,
    SectionKind.LOGGING,
    SectionKind.BEHAVIOR,
)
"""Required relative order of recognised sections."""

# Header labels that can open a section. UNLABELED is never written.
HEADER_KINDS: tuple[SectionKind, ...] = CANONICAL_ORDER


class PrefixCategory(str, Enum):
    """Lexical prefix family of an identifier."""

    GIVEN = "given"
    MOCK = "mock"
    FAKE = "fake"
    ENV = "env"
    SUT = "sut"
    ACTUAL = "actual"
    EXPECTED = "expected"
    CAPTURE = "capture"
    OTHER = "other"


class OperandKind(str, Enum):
    """How an assertion operand resolves lexically."""

    LITERAL = "literal"
    IDENTIFIER = "identifier"
    EXPRESSION = "expression"


class SourceLine(NamedTuple):
    """A 1-based line number and the raw text of that line."""

    number: int
    text: str


@dataclass(frozen=True)
class Section:
    """One labelled region of a test body.

    Attributes:
        kind: The section kind (UNLABELED for content before any header).
        ordinal: Zero-based position of the section within its test.
        start_line: First line of the section (the header line if labelled).
        end_line: Last line of the section.
        headers: Header comment lines, more than one when sub-headed.
        lines: Body lines, header lines excluded.
    """

    kind: SectionKind
    ordinal: int
    start_line: int
    end_line: int
    headers: tuple[SourceLine, ...] = ()
    lines: tuple[SourceLine, ...] = ()

    @property
    def is_labeled(self) -> bool:
        return self.kind is not SectionKind.UNLABELED

    @property
    def label(self) -> str:
        return self.kind.label


@dataclass(frozen=True)
class TestCase:
    """One discovered test function or method.

    Attributes:
        name: Test name as written (function name or description string).
        file_path: Path of the file the test was found in.
        dialect: Name of the dialect used to tokenize it.
        start_line: Line of the test marker.
        end_line: Last line of the test body.
        sections: Ordered sections of the body.
    """

    __test__ = False  # not a pytest test class

    name: str
    file_path: str
    dialect: str
    start_line: int
    end_line: int
    sections: tuple[Section, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.file_path}::{self.name}"

    def sections_of(self, kind: SectionKind) -> list[Section]:
        """Return every section of the given kind, in source order."""
        return [section for section in self.sections if section.kind is kind]

    def first_section(self, kind: SectionKind) -> Section | None:
        for section in self.sections:
            if section.kind is kind:
                return section
        return None

    def has_section(self, kind: SectionKind) -> bool:
        return self.first_section(kind) is not None

    @property
    def is_sectioned(self) -> bool:
        """True if at least one section header was recognised."""
        return any(section.is_labeled for section in self.sections)


@dataclass(frozen=True)
class Reference:
    """A use of an identifier at a given line of a section."""

    section: Section
    line: int


@dataclass
class Identifier:
    """A binding declared or referenced inside a test.

    The category is always derived from the name, never supplied.

    Attributes:
        name: Identifier name with any sigil removed.
        category: Prefix family derived from the name.
        declared_in: Section of the first declaration (None if only referenced).
        declared_line: Line of the first declaration.
        references: Every non-declaring use of the identifier.
    """

    name: str
    category: PrefixCategory
    declared_in: Section | None = None
    declared_line: int | None = None
    references: list[Reference] = field(default_factory=list)

    @property
    def is_declared(self) -> bool:
        return self.declared_in is not None

    def referenced_in(self, kind: SectionKind) -> bool:
        return any(ref.section.kind is kind for ref in self.references)


@dataclass(frozen=True)
class Operand:
    """A single side of an assertion statement.

    Attributes:
        text: The operand expression as written.
        kind: Literal, bare identifier path, or a compound expression.
        root: Root identifier for IDENTIFIER operands (``actual`` for
            ``actual.items[0]``).
        category: Prefix category of the root identifier.
    """

    text: str
    kind: OperandKind
    root: str | None = None
    category: PrefixCategory | None = None


@dataclass(frozen=True)
class Assertion:
    """A parsed assertion statement.

    Attributes:
        line: Line number of the statement.
        text: Raw statement text.
        function: Assertion function or keyword (``assertEqual``, ``assert``).
        subject: Receiver the assertion is invoked on, if any
            (``mockRepo`` in ``mockRepo.Verify(...)``).
        operands: Compared operands, context and message arguments removed.
    """

    line: int
    text: str
    function: str
    subject: Operand | None = None
    operands: tuple[Operand, ...] = ()

    @property
    def sides(self) -> tuple[Operand, ...]:
        """Subject (when present) followed by the operands."""
        if self.subject is None:
            return self.operands
        return (self.subject, *self.operands)


__all__ = [
    "CANONICAL_ORDER",
    "HEADER_KINDS",
    "Assertion",
    "Identifier",
    "Operand",
    "OperandKind",
    "PrefixCategory",
    "Reference",
    "Section",
    "SectionKind",
    "SourceLine",
    "TestCase",
]
