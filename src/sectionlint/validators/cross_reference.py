"""CrossReferenceValidator for relationships between sections.

These rules need both the section map and the symbol table: where a name was
declared, and where it is used.

- no-literal-assertion: THEN and BEHAVIOR assertions compare actual* and
  expected* identifiers (BEHAVIOR also accepts mock* and capture*)
- sut-construction-purity: the SUT is constructed from env* identifiers
- expectations-independence: EXPECTATIONS never reads actual* results
- unverified-mock: verifiable mocks are referenced in BEHAVIOR
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

import structlog

from sectionlint.lexer import (
    Statement,
    argument_value,
    call_arguments,
    categorize,
    classify_operand,
    find_declarations,
    find_references,
    mask_strings,
)
from sectionlint.model import OperandKind, PrefixCategory, SectionKind
from sectionlint.rules import (
    EXPECTATIONS_INDEPENDENCE,
    NO_LITERAL_ASSERTION,
    SUT_CONSTRUCTION_PURITY,
    UNVERIFIED_MOCK,
    RuleSet,
)

if TYPE_CHECKING:
    from sectionlint.config import AnalysisConfig
    from sectionlint.model import Operand, TestCase
    from sectionlint.result import Violation
    from sectionlint.symbols import SymbolTable

logger = structlog.get_logger(__name__)

_ASSERTION_CATEGORIES: Final[dict[SectionKind, frozenset[PrefixCategory]]] = {
    SectionKind.THEN: frozenset({PrefixCategory.ACTUAL, PrefixCategory.EXPECTED}),
    SectionKind.BEHAVIOR: frozenset(
        {
            PrefixCategory.ACTUAL,
            PrefixCategory.EXPECTED,
            PrefixCategory.MOCK,
            PrefixCategory.CAPTURE,
        }
    ),
}

# Categories that may never be passed, even nested, into the SUT constructor
_SUT_FORBIDDEN_NESTED: Final[frozenset[PrefixCategory]] = frozenset(
    {PrefixCategory.MOCK, PrefixCategory.FAKE, PrefixCategory.GIVEN}
)

# Field assignment on the test instance (self.sut = Service(...))
_MEMBER_SUT_RE: Final[re.Pattern[str]] = re.compile(
    r"(?<![\w$@.])(?:self|this)\s*\.\s*(?P<name>[A-Za-z_]\w*)\s*=(?![=>])"
)


class CrossReferenceValidator:
    """Evaluates the cross-section rules of one test.

    Example:
        >>> from sectionlint.config import AnalysisConfig
        >>> from sectionlint.rules import RuleSet
        >>> config = AnalysisConfig()
        >>> validator = CrossReferenceValidator(config, RuleSet.from_config(config))
        >>> violations = validator.validate(test_case, table)
    """

    def __init__(self, config: AnalysisConfig, rules: RuleSet) -> None:
        """Initialize CrossReferenceValidator.

        Args:
            config: The analysis configuration.
            rules: Enabled rules and their severities.
        """
        self.config = config
        self._rules = rules
        self._log = logger.bind(component="CrossReferenceValidator")

    def validate(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Run every enabled cross-reference rule against a test.

        Args:
            test_case: The test being analysed.
            table: Its symbol table.

        Returns:
            Cross-reference violations.
        """
        violations: list[Violation] = []
        if self._rules.is_enabled(NO_LITERAL_ASSERTION):
            violations.extend(self.check_assertion_operands(test_case, table))
        if self._rules.is_enabled(SUT_CONSTRUCTION_PURITY):
            violations.extend(self.check_sut_construction(test_case, table))
        if self._rules.is_enabled(EXPECTATIONS_INDEPENDENCE):
            violations.extend(self.check_expectations_independence(test_case, table))
        if self._rules.is_enabled(UNVERIFIED_MOCK):
            violations.extend(self.check_mock_verification(test_case, table))

        if violations:
            self._log.debug(
                "cross_reference_violations_found",
                test=test_case.qualified_name,
                count=len(violations),
            )
        return violations

    # -------------------------------------------------------------------------
    # no-literal-assertion
    # -------------------------------------------------------------------------

    def check_assertion_operands(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Report THEN/BEHAVIOR assertions with a literal or non-result operand.

        Identifiers outside the allowed families are reported when they are
        given*, env*, mock* (outside BEHAVIOR), sut*, fake*, or any other
        name declared in this test. Names the test never declares (types,
        enum members, matcher namespaces) are accepted. One violation is
        reported per statement.
        """
        violations: list[Violation] = []
        for item in table.assertions_in(SectionKind.THEN, SectionKind.BEHAVIOR):
            allowed = _ASSERTION_CATEGORIES[item.section.kind]
            offending = [
                offense
                for offense in (
                    self._operand_offense(operand, allowed, table)
                    for operand in item.assertion.sides
                )
                if offense is not None
            ]
            if not offending:
                continue
            described = ", ".join(description for description, _ in offending)
            violations.append(
                self._rules.violation(
                    NO_LITERAL_ASSERTION,
                    test_case=test_case,
                    line=item.assertion.line,
                    section=item.section,
                    identifier=next((name for _, name in offending if name), None),
                    message=(
                        f"Assertion '{_shorten(item.assertion.text)}' in {item.section.label} "
                        f"uses {described}; compare actual* and expected* identifiers"
                    ),
                    suggestion="Declare the value as expected* in EXPECTATIONS and assert against it",
                )
            )
        return violations

    def _operand_offense(
        self,
        operand: Operand,
        allowed: frozenset[PrefixCategory],
        table: SymbolTable,
    ) -> tuple[str, str | None] | None:
        """Return (description, identifier) for an offending operand, else None."""
        if operand.kind is OperandKind.LITERAL:
            return f"literal {operand.text}", None
        if operand.kind is OperandKind.EXPRESSION:
            return self._expression_offense(operand.text, allowed, table)
        if operand.root is None:
            return None
        if operand.root in self.config.ignored_identifiers or operand.category in allowed:
            return None
        category = operand.category or PrefixCategory.OTHER
        if category is PrefixCategory.OTHER:
            identifier = table.get(operand.root)
            if identifier is None or not identifier.is_declared:
                return None
        return f"{category.value} identifier '{operand.root}'", operand.root

    def _expression_offense(
        self,
        text: str,
        allowed: frozenset[PrefixCategory],
        table: SymbolTable,
    ) -> tuple[str, str] | None:
        # only prefixed names count inside expressions; helpers and types are free
        nested = Statement(0, text, mask_strings(text, table.dialect))
        for name in find_references(nested, table.dialect):
            if name in self.config.ignored_identifiers:
                continue
            category = categorize(name)
            if category is PrefixCategory.OTHER or category in allowed:
                continue
            return f"{category.value} identifier '{name}' in '{_shorten(text, 40)}'", name
        return None

    # -------------------------------------------------------------------------
    # sut-construction-purity
    # -------------------------------------------------------------------------

    def check_sut_construction(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Report non-env* arguments of the call that constructs the SUT.

        The construction call is the first call after a sut* name that is
        declared or assigned in SYSTEM UNDER TEST. One violation is reported
        per offending argument.
        """
        violations: list[Violation] = []
        for item in table.statements_in(SectionKind.SYSTEM_UNDER_TEST):
            sut_name = self._constructed_sut(item.statement, table)
            if sut_name is None:
                continue
            position = _assignment_end(item.statement, sut_name) or _name_end(
                item.statement, sut_name, table
            )
            if position is None:
                continue
            arguments = call_arguments(item.statement.text, item.statement.masked, position)
            for argument in arguments or []:
                reason = self._impure_argument(argument, table)
                if reason is None:
                    continue
                violations.append(
                    self._rules.violation(
                        SUT_CONSTRUCTION_PURITY,
                        test_case=test_case,
                        line=item.statement.line,
                        section=item.section,
                        identifier=sut_name,
                        message=f"'{sut_name}' is constructed with {reason}; pass env* identifiers",
                        suggestion="Bind the dependency to an env* variable in SETUP first",
                    )
                )
        return violations

    def _constructed_sut(self, statement: Statement, table: SymbolTable) -> str | None:
        for name in find_declarations(statement, table.dialect):
            if categorize(name) is PrefixCategory.SUT:
                return name
        for match in _MEMBER_SUT_RE.finditer(statement.masked):
            if categorize(match.group("name")) is PrefixCategory.SUT:
                return match.group("name")
        # assignment to an existing field or variable (_sut = new Service(...))
        for name in find_references(statement, table.dialect):
            if categorize(name) is not PrefixCategory.SUT:
                continue
            end = _name_end(statement, name, table)
            if end is not None and re.match(r"\s*=(?!=)", statement.masked[end:]):
                return name
        return None

    def _impure_argument(self, argument: str, table: SymbolTable) -> str | None:
        """Return why an argument is not allowed, or None if it is."""
        value = argument_value(argument)
        operand = classify_operand(value, table.dialect)
        if operand.kind is OperandKind.LITERAL:
            if self.config.allow_trivial_sut_literals:
                return None
            return f"literal {operand.text}"
        if operand.kind is OperandKind.IDENTIFIER and operand.root is not None:
            if operand.category is PrefixCategory.ENV or operand.root in self.config.ignored_identifiers:
                return None
            return f"{operand.category.value if operand.category else 'other'} identifier '{operand.root}'"

        nested = Statement(0, value, mask_strings(value, table.dialect))
        for name in find_references(nested, table.dialect):
            category = categorize(name)
            if category in _SUT_FORBIDDEN_NESTED:
                return f"{category.value} identifier '{name}'"
        return None

    # -------------------------------------------------------------------------
    # expectations-independence
    # -------------------------------------------------------------------------

    def check_expectations_independence(
        self, test_case: TestCase, table: SymbolTable
    ) -> list[Violation]:
        """Report each actual* identifier referenced from EXPECTATIONS."""
        violations: list[Violation] = []
        for identifier in table.identifiers.values():
            if identifier.category is not PrefixCategory.ACTUAL:
                continue
            references = [
                reference
                for reference in identifier.references
                if reference.section.kind is SectionKind.EXPECTATIONS
            ]
            if not references:
                continue
            first = references[0]
            violations.append(
                self._rules.violation(
                    EXPECTATIONS_INDEPENDENCE,
                    test_case=test_case,
                    line=first.line,
                    section=first.section,
                    identifier=identifier.name,
                    message=(
                        f"EXPECTATIONS references '{identifier.name}'; expected values "
                        "must not be derived from actual results"
                    ),
                    suggestion="Compute the expected value from given* inputs only",
                )
            )
        return violations

    # -------------------------------------------------------------------------
    # unverified-mock
    # -------------------------------------------------------------------------

    def check_mock_verification(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Report verifiable mocks that BEHAVIOR never references.

        Only evaluated when a BEHAVIOR section exists; a missing BEHAVIOR
        section is reported by behavior-required-when-mocked instead.
        """
        if not test_case.has_section(SectionKind.BEHAVIOR):
            return []
        violations: list[Violation] = []
        for identifier in table.declared_in(SectionKind.MOCKING):
            if identifier.category is not PrefixCategory.MOCK:
                continue
            if identifier.referenced_in(SectionKind.BEHAVIOR) or not table.is_verifiable(identifier):
                continue
            violations.append(
                self._rules.violation(
                    UNVERIFIED_MOCK,
                    test_case=test_case,
                    line=identifier.declared_line or test_case.start_line,
                    section=identifier.declared_in,
                    identifier=identifier.name,
                    message=f"Verifiable mock '{identifier.name}' is never verified in BEHAVIOR",
                    suggestion=f"Verify the expected calls on '{identifier.name}' in BEHAVIOR",
                )
            )
        return violations


def _name_end(statement: Statement, name: str, table: SymbolTable) -> int | None:
    """Return the offset just after the first standalone occurrence of a name."""
    flags = 0 if table.dialect.case_sensitive else re.IGNORECASE
    sigils = re.escape(table.dialect.sigils) if table.dialect.sigils else ""
    prefix = f"[{sigils}]?" if sigils else ""
    match = re.search(rf"(?<![\w$@.]){prefix}{re.escape(name)}\b", statement.masked, flags)
    return match.end() if match else None


def _assignment_end(statement: Statement, name: str) -> int | None:
    """Return the offset after ``self.name =`` or ``this.name =``, if present."""
    for match in _MEMBER_SUT_RE.finditer(statement.masked):
        if match.group("name") == name:
            return match.end()
    return None


def _shorten(text: str, limit: int = 80) -> str:
    collapsed = " ".join(text.split())
    return collapsed if len(collapsed) <= limit else f"{collapsed[: limit - 3]}..."


__all__ = ["CrossReferenceValidator"]
