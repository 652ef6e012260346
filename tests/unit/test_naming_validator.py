"""Unit tests for NamingValidator.

Tests cover the section prefix families, ignored identifiers,
consecutive underscores and vague test names.
"""

from __future__ import annotations

import pytest

from sectionlint.checker import ConformanceChecker
from sectionlint.config import AnalysisConfig
from sectionlint.result import Violation
from sectionlint.rules import RuleSet
from sectionlint.validators import NamingValidator


def _violations(checker: ConformanceChecker, path: str, text: str, rule_id: str) -> list[Violation]:
    report = checker.analyze_file(path, text)
    return [v for v in report.violations if v.rule_id == rule_id]


class TestNamingPrefix:
    """Tests for the naming-prefix rule."""

    @pytest.mark.requirement("naming-prefix")
    def test_setup_declaration_without_env_prefix(self, checker, csharp_source, line_of) -> None:
        """Given barLogger declared in SETUP, the suggestion adds the env prefix."""
        text = csharp_source(
            """
            // SETUP
            var barLogger = new NullLogger();
            """
        )

        violations = _violations(checker, "OrderTests.cs", text, "naming-prefix")

        assert len(violations) == 1
        violation = violations[0]
        assert violation.identifier == "barLogger"
        assert violation.section == "SETUP"
        assert violation.severity == "error"
        assert violation.line == line_of(text, "barLogger")
        assert "does not start with env or given" in violation.message
        assert violation.suggestion == "Rename to 'envBarLogger'"

    @pytest.mark.requirement("naming-prefix")
    def test_snake_case_suggestion(self, checker, python_source) -> None:
        text = python_source(
            """
            # SETUP
            bar_logger = NullLogger()
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "naming-prefix")

        assert violation.suggestion == "Rename to 'env_bar_logger'"

    @pytest.mark.requirement("naming-prefix")
    def test_mocking_accepts_mock_and_fake(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockRepository = new Mock<IOrderRepository>();
            var fakeClock = new FakeClock();
            var clock = new FakeClock();
            """
        )

        violations = _violations(checker, "OrderTests.cs", text, "naming-prefix")

        assert [v.identifier for v in violations] == ["clock"]
        assert "mock or fake" in violations[0].message

    @pytest.mark.requirement("naming-prefix")
    def test_setup_accepts_given(self, checker, python_source) -> None:
        text = python_source(
            """
            # SETUP
            env_clock = FrozenClock()
            given_order = build_order()
            """
        )

        assert _violations(checker, "test_orders.py", text, "naming-prefix") == []

    @pytest.mark.requirement("naming-prefix")
    @pytest.mark.parametrize(
        ("header", "name", "suggestion"),
        [
            ("GIVEN", "items", "given_items"),
            ("CAPTURE", "calls", "capture_calls"),
            ("SYSTEM UNDER TEST", "service", "sut_service"),
            ("WHEN", "result", "actual_result"),
            ("EXPECTATIONS", "total", "expected_total"),
        ],
    )
    def test_each_section_family(
        self, checker, python_source, header: str, name: str, suggestion: str
    ) -> None:
        text = python_source(
            f"""
            # {header}
            {name} = build()
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "naming-prefix")

        assert violation.identifier == name
        assert violation.suggestion == f"Rename to '{suggestion}'"

    @pytest.mark.requirement("naming-prefix")
    def test_sections_without_convention_are_not_checked(self, checker, python_source) -> None:
        text = python_source(
            """
            # WHEN
            actual_total = sut.total()
            # THEN
            delta = actual_total - expected_total
            # LOGGING
            log_lines = read_log()
            """
        )

        assert _violations(checker, "test_orders.py", text, "naming-prefix") == []

    @pytest.mark.requirement("naming-prefix")
    def test_ignored_identifiers(self, checker) -> None:
        """Go's err is exempt even when declared alongside a result."""
        text = "\n".join(
            [
                "func TestTotal(t *testing.T) {",
                "\t// WHEN",
                "\tactualTotal, err := Total(givenItems)",
                "}",
            ]
        )

        assert _violations(checker, "total_test.go", text, "naming-prefix") == []

    @pytest.mark.requirement("naming-prefix")
    def test_redeclaration_reported_once(self, checker, python_source) -> None:
        text = python_source(
            """
            # WHEN
            result = sut.total()
            result = sut.total()
            """
        )

        assert len(_violations(checker, "test_orders.py", text, "naming-prefix")) == 1

    @pytest.mark.requirement("naming-prefix")
    def test_custom_ignored_identifiers(self, python_source) -> None:
        config = AnalysisConfig(ignored_identifiers=frozenset({"result"}))
        text = python_source(
            """
            # WHEN
            result = sut.total()
            """
        )

        violations = _violations(ConformanceChecker(config), "test_orders.py", text, "naming-prefix")

        assert violations == []


class TestConsecutiveUnderscores:
    """Tests for the consecutive-underscores rule."""

    @pytest.mark.requirement("consecutive-underscores")
    def test_test_name_and_identifier(self, checker, python_source) -> None:
        text = python_source(
            """
            # GIVEN
            given__items = []
            """,
            name="test_total__includes_tax",
        )

        violations = _violations(checker, "test_orders.py", text, "consecutive-underscores")

        assert [(v.line, v.identifier) for v in violations] == [(1, None), (3, "given__items")]
        assert violations[0].severity == "warning"
        assert violations[1].suggestion == "Rename to 'given_items'"

    @pytest.mark.requirement("consecutive-underscores")
    def test_leading_and_trailing_underscores_are_allowed(self, checker, python_source) -> None:
        text = python_source(
            """
            # GIVEN
            given_items__ = []
            """,
            name="test__",
        )

        assert _violations(checker, "test_orders.py", text, "consecutive-underscores") == []


class TestVagueTestName:
    """Tests for the vague-test-name rule."""

    @pytest.mark.requirement("vague-test-name")
    @pytest.mark.parametrize("name", ["test_works", "test1", "test_ok", "test_Simple"])
    def test_vague_python_names(self, checker, python_source, name: str) -> None:
        text = python_source(
            """
            # WHEN
            actual_total = sut.total()
            """,
            name=name,
        )

        violations = _violations(checker, "test_orders.py", text, "vague-test-name")

        assert len(violations) == 1
        assert violations[0].line == 1
        assert violations[0].test_name == name

    @pytest.mark.requirement("vague-test-name")
    def test_descriptive_name_is_accepted(self, checker, csharp_source) -> None:
        text = csharp_source("// WHEN\nvar actualTotal = sut.Total();", name="Total_WithTax_AddsRate")

        assert _violations(checker, "OrderTests.cs", text, "vague-test-name") == []

    @pytest.mark.requirement("vague-test-name")
    def test_is_vague_normalises_spacing_and_prefixes(self) -> None:
        config = AnalysisConfig()
        validator = NamingValidator(config, RuleSet.from_config(config))

        assert validator.is_vague("It Works")
        assert validator.is_vague("should_pass") is False
        assert validator.is_vague("Test_Foo")
        assert validator.is_vague("adds tax to each line") is False

    @pytest.mark.requirement("vague-test-name")
    def test_deny_list_is_configurable(self, python_source) -> None:
        config = AnalysisConfig(naming_deny_list=frozenset({"Checkout"}))
        text = python_source("# WHEN\nactual_total = sut.total()", name="test_checkout")

        violations = _violations(ConformanceChecker(config), "test_orders.py", text, "vague-test-name")

        assert len(violations) == 1
