"""Rule catalog and effective rule set.

The catalog (RULES) is an immutable mapping built once at import time and
shared read-only by every worker. A RuleSet resolves, for one
AnalysisConfig, which rules are enabled and with which severity, and is the
single place Violations are created.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, Field

from sectionlint.result import FATAL_RULE_ID, RuleCategory, Severity, Violation

if TYPE_CHECKING:
    from sectionlint.config import AnalysisConfig
    from sectionlint.model import Section, TestCase

# Structural rules
SECTION_ORDERING: Final[str] = "section-ordering"
DUPLICATE_SECTION: Final[str] = "duplicate-section"
EXPECTATIONS_PLACEMENT: Final[str] = "expectations-placement"
BEHAVIOR_REQUIRED: Final[str] = "behavior-required-when-mocked"
MERGED_GIVEN_SECTION: Final[str] = "merged-given-section"
TEST_LACKS_SECTIONING: Final[str] = "test-lacks-sectioning"
MISSING_REQUIRED_SECTION: Final[str] = "missing-required-section"
HEADER_DESCRIPTION: Final[str] = "header-description"

# Naming rules
NAMING_PREFIX: Final[str] = "naming-prefix"
CONSECUTIVE_UNDERSCORES: Final[str] = "consecutive-underscores"
VAGUE_TEST_NAME: Final[str] = "vague-test-name"

# Cross-reference rules
NO_LITERAL_ASSERTION: Final[str] = "no-literal-assertion"
SUT_CONSTRUCTION_PURITY: Final[str] = "sut-construction-purity"
EXPECTATIONS_INDEPENDENCE: Final[str] = "expectations-independence"
UNVERIFIED_MOCK: Final[str] = "unverified-mock"

FATAL_ANALYSIS_ERROR: Final[str] = FATAL_RULE_ID


class Rule(BaseModel):
    """A single checkable constraint.

    Attributes:
        rule_id: Kebab-case identifier used in configuration and reports.
        name: Short human-readable name.
        description: What the rule requires.
        category: Rule family.
        severity: Default severity.
        default_enabled: Whether the rule runs when no rule list is configured.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rule_id: str = Field(..., pattern=r"^[a-z]+(?:-[a-z]+)*$")
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: RuleCategory
    severity: Severity = "error"
    default_enabled: bool = True


_CATALOG: Final[tuple[Rule, ...]] = (
    Rule(
        rule_id=SECTION_ORDERING,
        name="Section ordering",
        description=(
            "Sections must follow the canonical order GIVEN, CAPTURE, MOCKING, SETUP, "
            "SYSTEM UNDER TEST, WHEN, EXPECTATIONS, THEN, LOGGING, BEHAVIOR."
        ),
        category="structural",
    ),
    Rule(
        rule_id=DUPLICATE_SECTION,
        name="Duplicate section",
        description=(
            "A section kind may appear only once per test. Use sub-headers of the "
            "same kind instead of reopening a section later."
        ),
        category="structural",
    ),
    Rule(
        rule_id=EXPECTATIONS_PLACEMENT,
        name="EXPECTATIONS placement",
        description="EXPECTATIONS must come after WHEN and before THEN.",
        category="structural",
    ),
    Rule(
        rule_id=BEHAVIOR_REQUIRED,
        name="BEHAVIOR required when mocked",
        description="A test that declares mock* identifiers in MOCKING must have a BEHAVIOR section.",
        category="structural",
    ),
    Rule(
        rule_id=MERGED_GIVEN_SECTION,
        name="Merged GIVEN section",
        description=(
            "GIVEN must only prepare inputs. Acting on the SUT or asserting inside "
            "GIVEN means the WHEN/THEN headers are missing."
        ),
        category="structural",
        severity="warning",
    ),
    Rule(
        rule_id=TEST_LACKS_SECTIONING,
        name="Test lacks sectioning",
        description="Every test must be divided into labelled sections by header comments.",
        category="structural",
    ),
    Rule(
        rule_id=MISSING_REQUIRED_SECTION,
        name="Missing required section",
        description="A sectioned test must contain every configured required section (WHEN and THEN by default).",
        category="structural",
        severity="warning",
    ),
    Rule(
        rule_id=HEADER_DESCRIPTION,
        name="Header description",
        description="Section headers should carry a descriptive sentence after the label.",
        category="structural",
        severity="warning",
        default_enabled=False,
    ),
    Rule(
        rule_id=NAMING_PREFIX,
        name="Naming prefix",
        description=(
            "Identifiers declared in a section must use that section's prefix: given, "
            "capture, mock/fake, env/given, sut, actual, expected."
        ),
        category="naming",
    ),
    Rule(
        rule_id=CONSECUTIVE_UNDERSCORES,
        name="Consecutive underscores",
        description="Identifiers and test names must not contain consecutive underscores.",
        category="naming",
        severity="warning",
    ),
    Rule(
        rule_id=VAGUE_TEST_NAME,
        name="Vague test name",
        description="Test names must describe the behaviour under test, not 'works' or 'test1'.",
        category="naming",
        severity="warning",
    ),
    Rule(
        rule_id=NO_LITERAL_ASSERTION,
        name="No literal assertion",
        description=(
            "Assertions in THEN and BEHAVIOR must compare actual* and expected* "
            "identifiers, never literals or given*/env*/mock* identifiers "
            "(BEHAVIOR may also use mock*)."
        ),
        category="cross_reference",
    ),
    Rule(
        rule_id=SUT_CONSTRUCTION_PURITY,
        name="SUT construction purity",
        description="Arguments passed when constructing the SUT must be env* identifiers.",
        category="cross_reference",
    ),
    Rule(
        rule_id=EXPECTATIONS_INDEPENDENCE,
        name="EXPECTATIONS independence",
        description="EXPECTATIONS must not be computed from actual* results.",
        category="cross_reference",
    ),
    Rule(
        rule_id=UNVERIFIED_MOCK,
        name="Unverified mock",
        description="Every verifiable mock* configured in MOCKING must be referenced in BEHAVIOR.",
        category="cross_reference",
    ),
    Rule(
        rule_id=FATAL_ANALYSIS_ERROR,
        name="Fatal analysis error",
        description="The file could not be analysed (unreadable input or unsupported dialect).",
        category="fatal",
    ),
)

RULES: Final[MappingProxyType[str, Rule]] = MappingProxyType(
    {rule.rule_id: rule for rule in _CATALOG}
)
"""Immutable rule catalog keyed by rule ID."""

DEFAULT_ENABLED_RULES: Final[frozenset[str]] = frozenset(
    rule.rule_id for rule in _CATALOG if rule.default_enabled
)


def get_rule(rule_id: str) -> Rule:
    """Return a catalog rule by ID.

    Raises:
        KeyError: If the rule ID is unknown.
    """
    return RULES[rule_id]


class RuleSet:
    """Rules enabled for one analysis, with their effective severities.

    The fatal-analysis-error rule is always enabled.

    Example:
        >>> from sectionlint.config import AnalysisConfig
        >>> rules = RuleSet.from_config(AnalysisConfig(severity_overrides={"vague-test-name": "error"}))
        >>> rules.severity("vague-test-name")
        'error'
    """

    def __init__(self, enabled: frozenset[str], severities: dict[str, Severity]) -> None:
        self._enabled = enabled | {FATAL_ANALYSIS_ERROR}
        self._severities = MappingProxyType(dict(severities))

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> RuleSet:
        """Resolve enabled rules and severity overrides from a configuration."""
        enabled = frozenset(config.rules) if config.rules is not None else DEFAULT_ENABLED_RULES
        severities: dict[str, Severity] = {
            rule_id: config.severity_overrides.get(rule_id, rule.severity)
            for rule_id, rule in RULES.items()
        }
        return cls(enabled, severities)

    @property
    def enabled(self) -> frozenset[str]:
        return self._enabled

    def is_enabled(self, rule_id: str) -> bool:
        return rule_id in self._enabled

    def severity(self, rule_id: str) -> Severity:
        return self._severities[rule_id]

    def violation(
        self,
        rule_id: str,
        *,
        test_case: TestCase,
        line: int,
        message: str,
        section: Section | None = None,
        identifier: str | None = None,
        suggestion: str | None = None,
    ) -> Violation:
        """Create a Violation for a test with the rule's effective severity."""
        return Violation(
            rule_id=rule_id,
            severity=self.severity(rule_id),
            category=RULES[rule_id].category,
            file_path=test_case.file_path,
            line=line,
            test_name=test_case.name,
            section=section.label if section is not None else None,
            identifier=identifier,
            message=message,
            suggestion=suggestion,
        )

    def fatal(self, file_path: str, cause: BaseException) -> Violation:
        """Create the synthetic file-level violation for a fatal error."""
        return Violation(
            rule_id=FATAL_ANALYSIS_ERROR,
            severity=self.severity(FATAL_ANALYSIS_ERROR),
            category="fatal",
            file_path=file_path,
            line=0,
            message=str(cause),
            suggestion=getattr(cause, "resolution", None),
        )


__all__ = [
    "BEHAVIOR_REQUIRED",
    "CONSECUTIVE_UNDERSCORES",
    "DEFAULT_ENABLED_RULES",
    "DUPLICATE_SECTION",
    "EXPECTATIONS_INDEPENDENCE",
    "EXPECTATIONS_PLACEMENT",
    "FATAL_ANALYSIS_ERROR",
    "HEADER_DESCRIPTION",
    "MERGED_GIVEN_SECTION",
    "MISSING_REQUIRED_SECTION",
    "NAMING_PREFIX",
    "NO_LITERAL_ASSERTION",
    "RULES",
    "Rule",
    "RuleSet",
    "SECTION_ORDERING",
    "SUT_CONSTRUCTION_PURITY",
    "TEST_LACKS_SECTIONING",
    "UNVERIFIED_MOCK",
    "VAGUE_TEST_NAME",
    "get_rule",
]
