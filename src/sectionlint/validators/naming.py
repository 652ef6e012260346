"""NamingValidator for identifier and test-name conventions.

Checks every declaration against the prefix family of the section it is
declared in, and checks identifier and test-name shapes (consecutive
underscores, vague test names).

Section to expected prefix:

    GIVEN              given
    CAPTURE            capture
    MOCKING            mock | fake
    SETUP              env | given
    SYSTEM UNDER TEST  sut
    WHEN               actual
    EXPECTATIONS       expected
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

import structlog

from sectionlint.lexer import categorize
from sectionlint.model import PrefixCategory, SectionKind
from sectionlint.rules import CONSECUTIVE_UNDERSCORES, NAMING_PREFIX, VAGUE_TEST_NAME, RuleSet

if TYPE_CHECKING:
    from sectionlint.config import AnalysisConfig
    from sectionlint.model import TestCase
    from sectionlint.result import Violation
    from sectionlint.symbols import Declaration, SymbolTable

logger = structlog.get_logger(__name__)

EXPECTED_PREFIXES: Final[Mapping[SectionKind, tuple[PrefixCategory, ...]]] = MappingProxyType(
    {
        SectionKind.GIVEN: (PrefixCategory.GIVEN,),
        SectionKind.CAPTURE: (PrefixCategory.CAPTURE,),
        SectionKind.MOCKING: (PrefixCategory.MOCK, PrefixCategory.FAKE),
        SectionKind.SETUP: (PrefixCategory.ENV, PrefixCategory.GIVEN),
        SectionKind.SYSTEM_UNDER_TEST: (PrefixCategory.SUT,),
        SectionKind.WHEN: (PrefixCategory.ACTUAL,),
        SectionKind.EXPECTATIONS: (PrefixCategory.EXPECTED,),
    }
)
"""Allowed declaration prefixes per section. Other sections are unchecked."""

_CONSECUTIVE_UNDERSCORES: Final[re.Pattern[str]] = re.compile(r"(?<=[^_])__+(?=[^_])")
_TEST_NAME_PREFIX: Final[re.Pattern[str]] = re.compile(r"^(?:test_?|should_?)", re.IGNORECASE)


def _with_prefix(name: str, prefix: str) -> str:
    """Prefix a name in its own casing style: bar_logger -> env_bar_logger."""
    stripped = name.lstrip("_")
    if "_" in stripped or stripped.islower():
        return f"{prefix}_{stripped}"
    return f"{prefix}{stripped[0].upper()}{stripped[1:]}"


class NamingValidator:
    """Validates declaration prefixes and name shapes of one test.

    Attributes:
        config: The analysis configuration.

    Example:
        >>> from sectionlint.config import AnalysisConfig
        >>> from sectionlint.rules import RuleSet
        >>> config = AnalysisConfig()
        >>> validator = NamingValidator(config, RuleSet.from_config(config))
        >>> violations = validator.validate(test_case, table)
    """

    def __init__(self, config: AnalysisConfig, rules: RuleSet) -> None:
        """Initialize NamingValidator.

        Args:
            config: The analysis configuration (deny list, ignored names).
            rules: Enabled rules and their severities.
        """
        self.config = config
        self._rules = rules
        self._log = logger.bind(component="NamingValidator")

    def validate(self, test_case: TestCase, table: SymbolTable) -> list[Violation]:
        """Validate the test name and every first declaration in the test.

        Re-declarations of a name already declared earlier in the test are
        not checked again.

        Args:
            test_case: The test being analysed.
            table: Its symbol table.

        Returns:
            Naming violations in discovery order.
        """
        violations = self.validate_name_shape(
            test_case, test_case.name, test_case.start_line, is_test_name=True
        )

        for declaration in table.declarations:
            if not declaration.first:
                continue
            violation = self.validate_declaration(test_case, declaration)
            if violation is not None:
                violations.append(violation)
            violations.extend(
                self.validate_name_shape(test_case, declaration.name, declaration.line)
            )

        if violations:
            self._log.debug(
                "naming_violations_found",
                test=test_case.qualified_name,
                count=len(violations),
            )
        return violations

    def validate_declaration(self, test_case: TestCase, declaration: Declaration) -> Violation | None:
        """Check a declared identifier against its section's prefix family.

        Args:
            test_case: The test being analysed.
            declaration: The declaration to check.

        Returns:
            A naming-prefix violation, or None if the name conforms, is
            ignored, or is declared in a section with no naming convention.
        """
        if not self._rules.is_enabled(NAMING_PREFIX):
            return None
        expected = EXPECTED_PREFIXES.get(declaration.section.kind)
        if expected is None or declaration.name in self.config.ignored_identifiers:
            return None

        if categorize(declaration.name) in expected:
            return None

        allowed = " or ".join(category.value for category in expected)
        return self._rules.violation(
            NAMING_PREFIX,
            test_case=test_case,
            line=declaration.line,
            section=declaration.section,
            identifier=declaration.name,
            message=(
                f"'{declaration.name}' is declared in {declaration.section.label} "
                f"but does not start with {allowed}"
            ),
            suggestion=f"Rename to '{_with_prefix(declaration.name, expected[0].value)}'",
        )

    def validate_name_shape(
        self,
        test_case: TestCase,
        name: str,
        line: int,
        *,
        is_test_name: bool = False,
    ) -> list[Violation]:
        """Check a name for consecutive underscores and, for tests, vagueness.

        Args:
            test_case: The test being analysed.
            name: Identifier or test name.
            line: Line to report.
            is_test_name: Whether ``name`` is the test's own name.

        Returns:
            Zero, one or two violations.
        """
        violations: list[Violation] = []
        if name in self.config.ignored_identifiers:
            return violations

        if self._rules.is_enabled(CONSECUTIVE_UNDERSCORES) and _CONSECUTIVE_UNDERSCORES.search(name):
            violations.append(
                self._rules.violation(
                    CONSECUTIVE_UNDERSCORES,
                    test_case=test_case,
                    line=line,
                    identifier=None if is_test_name else name,
                    message=f"'{name}' contains consecutive underscores",
                    suggestion=f"Rename to '{_CONSECUTIVE_UNDERSCORES.sub('_', name)}'",
                )
            )

        if is_test_name and self._rules.is_enabled(VAGUE_TEST_NAME) and self.is_vague(name):
            violations.append(
                self._rules.violation(
                    VAGUE_TEST_NAME,
                    test_case=test_case,
                    line=line,
                    message=f"Test name '{name}' does not describe the behaviour under test",
                    suggestion="Name the scenario and the expected outcome",
                )
            )
        return violations

    def is_vague(self, name: str) -> bool:
        """Whether a test name is on the deny list, with or without a test prefix."""
        normalized = "_".join(name.strip().lower().split())
        candidates = {normalized, _TEST_NAME_PREFIX.sub("", normalized).lstrip("_")}
        return any(candidate in self.config.naming_deny_list for candidate in candidates if candidate)


__all__ = ["EXPECTED_PREFIXES", "NamingValidator"]
