"""sectionlint: structural conformance checker for sectioned unit tests.

Tests are divided into labelled sections by header comments (// GIVEN,
// WHEN, // THEN, ...). sectionlint discovers the tests in a source file,
splits them into sections and checks them against a fixed set of rules:

- Structural rules: canonical section order, duplicates, required sections
- Naming rules: identifier prefixes per section, vague test names
- Cross-reference rules: literal-free assertions, SUT construction purity,
  independent expectations, verified mocks

This package provides:
- ConformanceChecker, analyze_file, analyze_project: The analysis engine
- AnalysisConfig: Frozen checker configuration
- Report, Violation: Deterministic, sorted results
- RULES: The rule catalog
- Dialects: Per-language tokenizer adapters (sectionlint.dialects)
- Exporters: text, JSON and SARIF output (sectionlint.exporters)

Example:
    >>> from sectionlint import AnalysisConfig, analyze_file
    >>> report = analyze_file("tests/test_orders.py", source, config=AnalysisConfig())
    >>> report.exit_code
    0

See Also:
    - sectionlint.cli: The ``sectionlint`` command
    - sectionlint.observability: structlog and OpenTelemetry setup
"""

from __future__ import annotations

__version__ = "0.1.0"

from sectionlint.checker import (
    CancellationToken,
    ConformanceChecker,
    SourceFile,
    analyze_file,
    analyze_project,
    read_sources,
)
from sectionlint.config import AnalysisConfig
from sectionlint.dialects import Dialect, available_dialects, dialect_for_path, get_dialect
from sectionlint.errors import (
    ConfigurationError,
    FatalAnalysisError,
    SectionLintError,
    UnreadableSourceError,
    UnsupportedDialectError,
)
from sectionlint.model import PrefixCategory, Section, SectionKind, TestCase
from sectionlint.result import Report, TestCaseGroup, Violation, build_report, merge_reports
from sectionlint.rules import RULES, Rule, RuleSet, get_rule

__all__: list[str] = [
    # Package version
    "__version__",
    # Engine
    "CancellationToken",
    "ConformanceChecker",
    "SourceFile",
    "analyze_file",
    "analyze_project",
    "read_sources",
    # Configuration
    "AnalysisConfig",
    # Dialects
    "Dialect",
    "available_dialects",
    "dialect_for_path",
    "get_dialect",
    # Errors
    "ConfigurationError",
    "FatalAnalysisError",
    "SectionLintError",
    "UnreadableSourceError",
    "UnsupportedDialectError",
    # Model
    "PrefixCategory",
    "Section",
    "SectionKind",
    "TestCase",
    # Results
    "Report",
    "TestCaseGroup",
    "Violation",
    "build_report",
    "merge_reports",
    # Rules
    "RULES",
    "Rule",
    "RuleSet",
    "get_rule",
]
