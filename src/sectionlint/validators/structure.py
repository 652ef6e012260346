"""StructureValidator for section presence, uniqueness and ordering.

Ordering is a linear scan over the labelled sections with a single piece of
state, the last accepted canonical index. A section whose canonical index is
lower than that is reported and the scan continues, so every misplaced
section in a test is reported in one run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sectionlint.lexer import categorize
from sectionlint.model import CANONICAL_ORDER, PrefixCategory, Section, SectionKind
from sectionlint.rules import (
    BEHAVIOR_REQUIRED,
    DUPLICATE_SECTION,
    EXPECTATIONS_PLACEMENT,
    HEADER_DESCRIPTION,
    MERGED_GIVEN_SECTION,
    MISSING_REQUIRED_SECTION,
    SECTION_ORDERING,
    TEST_LACKS_SECTIONING,
    RuleSet,
)
from sectionlint.sections import parse_header

if TYPE_CHECKING:
    from sectionlint.config import AnalysisConfig
    from sectionlint.model import TestCase
    from sectionlint.result import Violation
    from sectionlint.symbols import SymbolTable

logger = structlog.get_logger(__name__)


class StructureValidator:
    """Validates the section layout of one test.

    Example:
        >>> from sectionlint.config import AnalysisConfig
        >>> from sectionlint.rules import RuleSet
        >>> config = AnalysisConfig(allow_mocking_after_setup=True)
        >>> validator = StructureValidator(config, RuleSet.from_config(config))
        >>> violations = validator.validate(test_case, table)
    """

    def __init__(self, config: AnalysisConfig, rules: RuleSet) -> None:
        """Initialize StructureValidator.

        Args:
            config: The analysis configuration.
            rules: Enabled rules and their severities.
        """
        self.config = config
        self._rules = rules
        self._log = logger.bind(component="StructureValidator")
        self._rank = {kind: index for index, kind in enumerate(CANONICAL_ORDER)}
        if config.allow_mocking_after_setup:
            self._rank[SectionKind.MOCKING] = self._rank[SectionKind.SETUP]

    def validate(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Run every structural rule against a test.

        A test with no recognised header only gets test-lacks-sectioning;
        the other structural rules need sections to reason about.

        Args:
            test_case: The test being analysed.
            table: Its symbol table.

        Returns:
            Structural violations.
        """
        if not test_case.is_sectioned:
            if not self._rules.is_enabled(TEST_LACKS_SECTIONING):
                return []
            return [
                self._rules.violation(
                    TEST_LACKS_SECTIONING,
                    test_case=test_case,
                    line=test_case.start_line,
                    message=f"Test '{test_case.name}' has no section headers",
                    suggestion="Divide the test body with // GIVEN, // WHEN and // THEN comments",
                )
            ]

        labeled = [section for section in test_case.sections if section.is_labeled]
        duplicates = self._duplicates(labeled)

        violations: list[Violation] = []
        checks = (
            (DUPLICATE_SECTION, lambda: self.check_duplicates(test_case, duplicates)),
            (SECTION_ORDERING, lambda: self.check_ordering(test_case, labeled, duplicates)),
            (EXPECTATIONS_PLACEMENT, lambda: self.check_expectations_placement(test_case)),
            (BEHAVIOR_REQUIRED, lambda: self.check_behavior_required(test_case, table)),
            (MERGED_GIVEN_SECTION, lambda: self.check_merged_given(test_case, table)),
            (MISSING_REQUIRED_SECTION, lambda: self.check_required_sections(test_case)),
            (HEADER_DESCRIPTION, lambda: self.check_header_descriptions(test_case, table)),
        )
        for rule_id, check in checks:
            if self._rules.is_enabled(rule_id):
                violations.extend(check())

        if violations:
            self._log.debug(
                "structure_violations_found",
                test=test_case.qualified_name,
                rules=sorted({v.rule_id for v in violations}),
            )
        return violations

    @staticmethod
    def _duplicates(labeled: list[Section]) -> list[Section]:
        seen: set[SectionKind] = set()
        duplicates: list[Section] = []
        for section in labeled:
            if section.kind in seen:
                duplicates.append(section)
            seen.add(section.kind)
        return duplicates

    def check_duplicates(self, test_case: TestCase, duplicates: list[Section]) -> list[Violation]:
        """Report every reopened section kind."""
        violations: list[Violation] = []
        for section in duplicates:
            first = test_case.first_section(section.kind)
            first_line = first.start_line if first is not None else section.start_line
            violations.append(
                self._rules.violation(
                    DUPLICATE_SECTION,
                    test_case=test_case,
                    line=section.start_line,
                    section=section,
                    message=(
                        f"{section.label} appears again after line {first_line}; "
                        "a section kind may only appear once"
                    ),
                    suggestion=f"Merge this block into the first {section.label} section",
                )
            )
        return violations

    def check_ordering(
        self,
        test_case: TestCase,
        labeled: list[Section],
        duplicates: list[Section],
    ) -> list[Violation]:
        """Report sections that appear after a section they should precede.

        Duplicated sections are skipped; they are reported as duplicates.
        """
        violations: list[Violation] = []
        last_index = -1
        last_section: Section | None = None
        for section in labeled:
            if section in duplicates:
                continue
            index = self._rank[section.kind]
            if index >= last_index:
                last_index = index
                last_section = section
                continue
            assert last_section is not None
            violations.append(
                self._rules.violation(
                    SECTION_ORDERING,
                    test_case=test_case,
                    line=section.start_line,
                    section=section,
                    message=(
                        f"{section.label} (position {section.ordinal + 1}) appears after "
                        f"{last_section.label}; canonical order places {section.label} "
                        f"before {last_section.label}"
                    ),
                    suggestion=f"Move {section.label} before {last_section.label}",
                )
            )
        return violations

    def check_expectations_placement(self, test_case: TestCase) -> list[Violation]:
        """EXPECTATIONS must follow WHEN and precede THEN, when those exist."""
        expectations = test_case.first_section(SectionKind.EXPECTATIONS)
        if expectations is None:
            return []
        when = test_case.first_section(SectionKind.WHEN)
        then = test_case.first_section(SectionKind.THEN)

        problems: list[str] = []
        if when is not None and when.ordinal > expectations.ordinal:
            problems.append("after WHEN")
        if then is not None and then.ordinal < expectations.ordinal:
            problems.append("before THEN")
        if not problems:
            return []
        return [
            self._rules.violation(
                EXPECTATIONS_PLACEMENT,
                test_case=test_case,
                line=expectations.start_line,
                section=expectations,
                message=f"EXPECTATIONS must appear {' and '.join(problems)}",
                suggestion="Place EXPECTATIONS between WHEN and THEN",
            )
        ]

    def check_behavior_required(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """A test declaring mock* identifiers in MOCKING needs a BEHAVIOR section."""
        if test_case.has_section(SectionKind.BEHAVIOR):
            return []
        mocks = [
            declaration
            for declaration in table.declarations
            if declaration.first
            and declaration.section.kind is SectionKind.MOCKING
            and categorize(declaration.name) is PrefixCategory.MOCK
        ]
        if not mocks:
            return []
        names = ", ".join(declaration.name for declaration in mocks)
        return [
            self._rules.violation(
                BEHAVIOR_REQUIRED,
                test_case=test_case,
                line=mocks[0].line,
                section=mocks[0].section,
                identifier=mocks[0].name,
                message=f"Test declares mocks ({names}) but has no BEHAVIOR section",
                suggestion="Add a // BEHAVIOR section that verifies the mock interactions",
            )
        ]

    def check_merged_given(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Flag GIVEN sections that also act or assert.

        GIVEN is considered merged when it contains an assertion statement or
        declares an actual* result.
        """
        violations: list[Violation] = []
        for section in test_case.sections_of(SectionKind.GIVEN):
            lines = [item.assertion.line for item in table.assertions if item.section is section]
            lines.extend(
                declaration.line
                for declaration in table.declarations
                if declaration.section is section
                and categorize(declaration.name) is PrefixCategory.ACTUAL
            )
            if not lines:
                continue
            violations.append(
                self._rules.violation(
                    MERGED_GIVEN_SECTION,
                    test_case=test_case,
                    line=min(lines),
                    section=section,
                    message="GIVEN contains WHEN/THEN content without its own header",
                    suggestion="Split the section with // WHEN and // THEN headers",
                )
            )
        return violations

    def check_required_sections(self, test_case: TestCase) -> list[Violation]:
        """Report each configured required section the test lacks."""
        return [
            self._rules.violation(
                MISSING_REQUIRED_SECTION,
                test_case=test_case,
                line=test_case.start_line,
                message=f"Test '{test_case.name}' has no {kind.label} section",
                suggestion=f"Add a // {kind.label} section",
            )
            for kind in self.config.required_sections
            if not test_case.has_section(kind)
        ]

    def check_header_descriptions(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Report headers that carry a bare label with no descriptive sentence."""
        violations: list[Violation] = []
        for section in test_case.sections:
            for header_line in section.headers:
                header = parse_header(header_line.text, table.dialect)
                if header is None or header.description:
                    continue
                violations.append(
                    self._rules.violation(
                        HEADER_DESCRIPTION,
                        test_case=test_case,
                        line=header_line.number,
                        section=section,
                        message=f"{section.label} header has no description",
                        suggestion=f"Describe the section, e.g. '// {section.label}: ...'",
                    )
                )
        return violations


__all__ = ["StructureValidator"]
