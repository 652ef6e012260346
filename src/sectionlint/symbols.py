"""Per-test symbol table.

The table is built in one pass over every section of a TestCase using the
shared lexer, and is then read by both the naming validator and the
cross-reference rules. It records:

- every identifier, keyed by name, with its first declaring section and
  every non-declaring reference
- every declaration statement (a name may be declared more than once)
- every parsed assertion with the section it appears in
- every logical statement with the section it belongs to
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from sectionlint.dialects.base import Dialect
from sectionlint.lexer import (
    Statement,
    categorize,
    find_declarations,
    find_references,
    identifier_key,
    join_statements,
    mask_source,
    parse_assertions,
)
from sectionlint.model import Assertion, Identifier, Reference, Section, SectionKind, TestCase


@dataclass(frozen=True)
class Declaration:
    """One declaring statement for a name.

    Attributes:
        name: Declared name without sigils.
        section: Section containing the statement.
        line: Line of the statement.
        first: True for the first declaration of this name in the test.
    """

    name: str
    section: Section
    line: int
    first: bool


@dataclass(frozen=True)
class LocatedStatement:
    """A logical statement and the section it belongs to."""

    section: Section
    statement: Statement


@dataclass(frozen=True)
class LocatedAssertion:
    """A parsed assertion and the section it belongs to."""

    section: Section
    assertion: Assertion


@dataclass
class SymbolTable:
    """Identifiers, declarations, statements and assertions of one test."""

    test_case: TestCase
    dialect: Dialect
    identifiers: dict[str, Identifier] = field(default_factory=dict)
    declarations: list[Declaration] = field(default_factory=list)
    statements: list[LocatedStatement] = field(default_factory=list)
    assertions: list[LocatedAssertion] = field(default_factory=list)

    def get(self, name: str) -> Identifier | None:
        """Return the identifier with this name, honouring case sensitivity."""
        return self.identifiers.get(identifier_key(self.dialect.normalize_identifier(name), self.dialect))

    def statements_in(self, kind: SectionKind) -> Iterator[LocatedStatement]:
        return (item for item in self.statements if item.section.kind is kind)

    def assertions_in(self, *kinds: SectionKind) -> Iterator[LocatedAssertion]:
        return (item for item in self.assertions if item.section.kind in kinds)

    def declared_in(self, kind: SectionKind) -> list[Identifier]:
        """Identifiers whose first declaration is in a section of this kind."""
        return [
            identifier
            for identifier in self.identifiers.values()
            if identifier.declared_in is not None and identifier.declared_in.kind is kind
        ]

    def is_verifiable(self, identifier: Identifier) -> bool:
        """Whether a MOCKING statement using this identifier marks it verifiable.

        A mock is verifiable when any MOCKING statement that declares or
        references it matches one of the dialect's verifiable markers
        (``.Verifiable()``, ``EXPECT_CALL``, ``every { }`` ...).
        """
        key = identifier_key(identifier.name, self.dialect)
        for item in self.statements_in(SectionKind.MOCKING):
            names = find_declarations(item.statement, self.dialect) + find_references(
                item.statement, self.dialect
            )
            if key not in {identifier_key(name, self.dialect) for name in names}:
                continue
            if any(marker.search(item.statement.text) for marker in self.dialect.verifiable_markers):
                return True
        return False


def build_symbol_table(test_case: TestCase, dialect: Dialect) -> SymbolTable:
    """Build the symbol table of a test in a single pass over its sections.

    Args:
        test_case: Test to index.
        dialect: Dialect the test is written in.

    Returns:
        Populated SymbolTable.
    """
    table = SymbolTable(test_case=test_case, dialect=dialect)

    for section in test_case.sections:
        masked = mask_source([line.text for line in section.lines], dialect)
        for statement in join_statements(section.lines, masked):
            table.statements.append(LocatedStatement(section, statement))
            for assertion in parse_assertions(statement, dialect):
                table.assertions.append(LocatedAssertion(section, assertion))

            declared = find_declarations(statement, dialect)
            declared_keys = {identifier_key(name, dialect) for name in declared}
            for name in declared:
                key = identifier_key(name, dialect)
                existing = table.identifiers.get(key)
                if existing is None:
                    table.identifiers[key] = Identifier(
                        name=name,
                        category=categorize(name),
                        declared_in=section,
                        declared_line=statement.line,
                    )
                    table.declarations.append(Declaration(name, section, statement.line, True))
                elif existing.declared_in is None:
                    # referenced before it was declared
                    existing.declared_in = section
                    existing.declared_line = statement.line
                    table.declarations.append(Declaration(name, section, statement.line, True))
                else:
                    table.declarations.append(Declaration(name, section, statement.line, False))

            for name in find_references(statement, dialect):
                key = identifier_key(name, dialect)
                if key in declared_keys:
                    continue
                identifier = table.identifiers.get(key)
                if identifier is None:
                    identifier = Identifier(name=name, category=categorize(name))
                    table.identifiers[key] = identifier
                identifier.references.append(Reference(section, statement.line))

    return table


__all__ = [
    "Declaration",
    "LocatedAssertion",
    "LocatedStatement",
    "SymbolTable",
    "build_symbol_table",
]
