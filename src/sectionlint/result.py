"""Result models returned by the conformance checker.

This module defines the reporting contract between the checker and its
output formatters:
- Violation: A single rule breach with location and remediation advice
- TestCaseGroup: The violations of one test (or one file, for fatal errors)
- Report: Sorted, grouped violations with exit-status semantics

Reports are deterministic: violations are always sorted by
(file, line, rule ID, message) regardless of the order they were produced in.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["error", "warning"]
RuleCategory = Literal["structural", "naming", "cross_reference", "fatal"]

FATAL_RULE_ID = "fatal-analysis-error"


class Violation(BaseModel):
    """A single rule violation with actionable details.

    Attributes:
        rule_id: Kebab-case rule identifier (e.g. "section-ordering").
        severity: "error" (fails the run) or "warning" (advisory).
        category: Rule family the violation belongs to.
        file_path: File the violation was found in.
        line: 1-based line of the offending statement, header or test.
        test_name: Test the violation belongs to (None for file-level errors).
        section: Label of the offending section, if any.
        identifier: Offending identifier name, if any.
        message: Human-readable description of the violation.
        suggestion: Actionable remediation advice.

    Example:
        >>> violation = Violation(
        ...     rule_id="naming-prefix",
        ...     severity="error",
        ...     category="naming",
        ...     file_path="tests/OrderTests.cs",
        ...     line=14,
        ...     test_name="Total_IncludesTax",
        ...     section="SETUP",
        ...     identifier="barLogger",
        ...     message="'barLogger' is declared in SETUP but does not start with env or given",
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Violation",
            "description": "A single test-structure rule violation",
        },
    )

    rule_id: str = Field(
        ...,
        description="Kebab-case rule identifier",
        examples=["section-ordering", "naming-prefix", "no-literal-assertion"],
    )
    severity: Severity = Field(
        ...,
        description="Severity level: error (fails the run) or warning (advisory)",
    )
    category: RuleCategory = Field(
        ...,
        description="Rule family the violation belongs to",
    )
    file_path: str = Field(
        ...,
        description="File the violation was found in",
    )
    line: int = Field(
        ...,
        ge=0,
        description="1-based line number (0 when the file could not be read)",
    )
    test_name: str | None = Field(
        default=None,
        description="Test the violation belongs to (None for file-level errors)",
    )
    section: str | None = Field(
        default=None,
        description="Label of the offending section",
    )
    identifier: str | None = Field(
        default=None,
        description="Offending identifier name",
    )
    message: str = Field(
        ...,
        description="Human-readable description of the violation",
    )
    suggestion: str | None = Field(
        default=None,
        description="Actionable remediation advice",
    )

    @property
    def qualified_test_name(self) -> str | None:
        """Test name qualified by its file path."""
        if self.test_name is None:
            return None
        return f"{self.file_path}::{self.test_name}"

    @property
    def is_fatal(self) -> bool:
        return self.rule_id == FATAL_RULE_ID

    def sort_key(self) -> tuple[str, int, str, str, str]:
        return (self.file_path, self.line, self.rule_id, self.message, self.test_name or "")


class TestCaseGroup(BaseModel):
    """Violations belonging to one test, or to a whole file for fatal errors."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True, extra="forbid")

    file_path: str = Field(..., description="File the test lives in")
    test_name: str | None = Field(
        default=None,
        description="Test name (None for file-level violations)",
    )
    violations: list[Violation] = Field(
        default_factory=list,
        description="Sorted violations of this test",
    )


class Report(BaseModel):
    """Deterministic result of analysing one or more files.

    Attributes:
        violations: Every violation, sorted by (file, line, rule ID, message).
        groups: The same violations grouped by test, in sorted order.
        files: Sorted paths of every analysed file.
        test_count: Number of tests discovered.

    Example:
        >>> report = build_report([], files=["tests/test_orders.py"], test_count=3)
        >>> report.has_errors(), report.exit_code
        (False, 0)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Report",
            "description": "Sorted, grouped test-structure violations",
        },
    )

    violations: list[Violation] = Field(
        default_factory=list,
        description="All violations, sorted",
    )
    groups: list[TestCaseGroup] = Field(
        default_factory=list,
        description="Violations grouped by test",
    )
    files: list[str] = Field(
        default_factory=list,
        description="Analysed files, sorted",
    )
    test_count: int = Field(
        default=0,
        ge=0,
        description="Number of tests discovered",
    )

    def has_errors(self) -> bool:
        """Return True if any violation has severity='error'."""
        return any(v.severity == "error" for v in self.violations)

    @property
    def has_fatal(self) -> bool:
        """Return True if any file failed with a fatal analysis error."""
        return any(v.is_fatal for v in self.violations)

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == "warning")

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 clean, 1 error violations, 2 fatal errors."""
        if self.has_fatal:
            return 2
        if self.has_errors():
            return 1
        return 0

    def counts_by_rule(self) -> dict[str, int]:
        """Return the number of violations per rule ID, sorted by rule ID."""
        counts: dict[str, int] = {}
        for violation in self.violations:
            counts[violation.rule_id] = counts.get(violation.rule_id, 0) + 1
        return dict(sorted(counts.items()))


def build_report(
    violations: Iterable[Violation],
    *,
    files: Iterable[str] = (),
    test_count: int = 0,
) -> Report:
    """Sort and group violations into a Report.

    Args:
        violations: Violations in any order.
        files: Analysed file paths; files of the violations are added.
        test_count: Number of tests discovered.

    Returns:
        Report whose content does not depend on the input order.
    """
    ordered = sorted(violations, key=Violation.sort_key)
    file_set = set(files) | {v.file_path for v in ordered}

    grouped: dict[tuple[str, str], list[Violation]] = {}
    for violation in ordered:
        key = (violation.file_path, violation.test_name or "")
        grouped.setdefault(key, []).append(violation)

    groups = [
        TestCaseGroup(file_path=file_path, test_name=test_name or None, violations=items)
        for (file_path, test_name), items in sorted(grouped.items())
    ]
    return Report(
        violations=ordered,
        groups=groups,
        files=sorted(file_set),
        test_count=test_count,
    )


def merge_reports(reports: Iterable[Report]) -> Report:
    """Combine several reports into one, re-sorting their violations."""
    violations: list[Violation] = []
    files: list[str] = []
    test_count = 0
    for report in reports:
        violations.extend(report.violations)
        files.extend(report.files)
        test_count += report.test_count
    return build_report(violations, files=files, test_count=test_count)


__all__ = [
    "FATAL_RULE_ID",
    "Report",
    "RuleCategory",
    "Severity",
    "TestCaseGroup",
    "Violation",
    "build_report",
    "merge_reports",
]
