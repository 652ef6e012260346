"""Unit tests for StructureValidator.

Tests cover ordering, duplicates, EXPECTATIONS placement, the BEHAVIOR
requirement, merged GIVEN sections, unsectioned tests, required sections
and header descriptions.
"""

from __future__ import annotations

import itertools

import pytest

from sectionlint.checker import ConformanceChecker
from sectionlint.config import AnalysisConfig
from sectionlint.model import CANONICAL_ORDER, SectionKind
from sectionlint.result import Violation


def _violations(checker: ConformanceChecker, path: str, text: str, rule_id: str) -> list[Violation]:
    report = checker.analyze_file(path, text)
    return [v for v in report.violations if v.rule_id == rule_id]


def _python_body(*labels: str) -> str:
    return "\n".join(f"# {label}\npass" for label in labels)


class TestSectionOrdering:
    """Tests for the section-ordering rule."""

    @pytest.mark.requirement("section-ordering")
    def test_setup_after_when(self, checker, csharp_source, line_of) -> None:
        """Given GIVEN, WHEN, SETUP, SETUP is reported against WHEN."""
        text = csharp_source(
            """
            // GIVEN
            var givenItems = new[] { 1, 2 };
            // WHEN
            var actualTotal = Total(givenItems);
            // SETUP
            var envClock = new FrozenClock();
            """
        )

        violations = _violations(checker, "OrderTests.cs", text, "section-ordering")

        assert len(violations) == 1
        violation = violations[0]
        assert "SETUP (position 3) appears after WHEN" in violation.message
        assert violation.section == "SETUP"
        assert violation.line == line_of(text, "// SETUP")
        assert violation.suggestion == "Move SETUP before WHEN"

        missing = _violations(checker, "OrderTests.cs", text, "missing-required-section")
        assert [v.message for v in missing] == [
            "Test 'Total_IncludesTaxForEachLine' has no THEN section"
        ]
        assert missing[0].severity == "warning"

    @pytest.mark.requirement("section-ordering")
    def test_every_misplaced_section_is_reported(self, checker, python_source) -> None:
        text = python_source(_python_body("THEN", "WHEN", "GIVEN"))

        violations = _violations(checker, "test_orders.py", text, "section-ordering")

        assert [v.section for v in violations] == ["WHEN", "GIVEN"]

    @pytest.mark.requirement("section-ordering")
    @pytest.mark.parametrize(
        "order",
        list(itertools.permutations(["GIVEN", "SETUP", "WHEN", "THEN"])),
        ids=lambda order: "-".join(order),
    )
    def test_only_canonical_order_is_clean(self, checker, python_source, order) -> None:
        text = python_source(_python_body(*order))
        rank = [CANONICAL_ORDER.index(SectionKind(label)) for label in order]

        violations = _violations(checker, "test_orders.py", text, "section-ordering")

        if rank == sorted(rank):
            assert violations == []
        else:
            assert len(violations) >= 1

    @pytest.mark.requirement("section-ordering")
    def test_mocking_after_setup_is_configurable(self, python_source) -> None:
        text = python_source(_python_body("SETUP", "MOCKING", "WHEN", "THEN"))

        strict = _violations(ConformanceChecker(), "test_orders.py", text, "section-ordering")
        relaxed = _violations(
            ConformanceChecker(AnalysisConfig(allow_mocking_after_setup=True)),
            "test_orders.py",
            text,
            "section-ordering",
        )

        assert [v.section for v in strict] == ["MOCKING"]
        assert relaxed == []


class TestDuplicateSection:
    """Tests for the duplicate-section rule."""

    @pytest.mark.requirement("duplicate-section")
    def test_reopened_section(self, checker, python_source, line_of) -> None:
        text = python_source(_python_body("GIVEN", "WHEN", "GIVEN", "THEN"))

        duplicates = _violations(checker, "test_orders.py", text, "duplicate-section")
        ordering = _violations(checker, "test_orders.py", text, "section-ordering")

        assert len(duplicates) == 1
        assert duplicates[0].line == 6
        assert "appears again after line 2" in duplicates[0].message
        # duplicates are not also reported as misordered
        assert ordering == []

    @pytest.mark.requirement("duplicate-section")
    def test_sub_headers_are_not_duplicates(self, checker, python_source) -> None:
        text = python_source(
            """
            # GIVEN: an order
            given_order = build_order()
            # GIVEN: a customer
            given_customer = build_customer()
            # WHEN
            pass
            # THEN
            pass
            """
        )

        assert _violations(checker, "test_orders.py", text, "duplicate-section") == []


class TestExpectationsPlacement:
    """Tests for the expectations-placement rule."""

    @pytest.mark.requirement("expectations-placement")
    def test_expectations_after_then(self, checker, python_source) -> None:
        text = python_source(_python_body("WHEN", "THEN", "EXPECTATIONS"))

        (violation,) = _violations(checker, "test_orders.py", text, "expectations-placement")

        assert violation.message == "EXPECTATIONS must appear before THEN"

    @pytest.mark.requirement("expectations-placement")
    def test_expectations_before_when(self, checker, python_source) -> None:
        text = python_source(_python_body("GIVEN", "EXPECTATIONS", "WHEN", "THEN"))

        (violation,) = _violations(checker, "test_orders.py", text, "expectations-placement")

        assert violation.message == "EXPECTATIONS must appear after WHEN"

    @pytest.mark.requirement("expectations-placement")
    def test_expectations_between_when_and_then(self, checker, python_source) -> None:
        text = python_source(_python_body("WHEN", "EXPECTATIONS", "THEN"))

        assert _violations(checker, "test_orders.py", text, "expectations-placement") == []


class TestBehaviorRequired:
    """Tests for the behavior-required-when-mocked rule."""

    @pytest.mark.requirement("behavior-required-when-mocked")
    def test_mocks_without_behavior(self, checker, csharp_source, line_of) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockPublisher = new Mock<IPublisher>();
            // WHEN
            var actualSent = Send(mockPublisher.Object);
            // THEN
            Assert.True(actualSent);
            """
        )

        (violation,) = _violations(checker, "NotifierTests.cs", text, "behavior-required-when-mocked")

        assert violation.identifier == "mockPublisher"
        assert violation.line == line_of(text, "var mockPublisher")
        assert "mockPublisher" in violation.message

    @pytest.mark.requirement("behavior-required-when-mocked")
    def test_fakes_do_not_require_behavior(self, checker, python_source) -> None:
        text = python_source(
            """
            # MOCKING
            fake_clock = FakeClock()
            # WHEN
            actual_now = fake_clock.now()
            # THEN
            assert actual_now == expected_now
            """
        )

        assert _violations(checker, "test_clock.py", text, "behavior-required-when-mocked") == []


class TestMergedGivenSection:
    """Tests for the merged-given-section rule."""

    @pytest.mark.requirement("merged-given-section")
    def test_given_that_acts_and_asserts(self, checker, python_source, line_of) -> None:
        text = python_source(
            """
            # GIVEN
            given_items = [1, 2]
            actual_total = total(given_items)
            assert actual_total == 3
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "merged-given-section")

        assert violation.line == line_of(text, "actual_total = total")
        assert violation.severity == "warning"

    @pytest.mark.requirement("merged-given-section")
    def test_given_with_inputs_only(self, checker, python_source) -> None:
        text = python_source("# GIVEN\ngiven_items = [1, 2]\n# WHEN\npass\n# THEN\npass")

        assert _violations(checker, "test_orders.py", text, "merged-given-section") == []


class TestUnsectionedTests:
    """Tests for test-lacks-sectioning and missing-required-section."""

    @pytest.mark.requirement("test-lacks-sectioning")
    def test_unsectioned_test_gets_a_single_violation(self, checker, python_source) -> None:
        text = python_source(
            """
            x = 1
            y = 2
            """
        )

        report = checker.analyze_file("test_orders.py", text)

        assert [v.rule_id for v in report.violations] == ["test-lacks-sectioning"]
        assert report.violations[0].line == 1
        assert report.exit_code == 1

    @pytest.mark.requirement("missing-required-section")
    def test_required_sections_are_configurable(self, python_source) -> None:
        checker = ConformanceChecker(AnalysisConfig(required_sections=["given", "behaviour"]))
        text = python_source(_python_body("WHEN", "THEN"))

        violations = _violations(checker, "test_orders.py", text, "missing-required-section")

        assert [v.message for v in violations] == [
            "Test 'test_total_includes_tax_for_each_line' has no BEHAVIOR section",
            "Test 'test_total_includes_tax_for_each_line' has no GIVEN section",
        ]


class TestHeaderDescription:
    """Tests for the opt-in header-description rule."""

    @pytest.mark.requirement("header-description")
    def test_disabled_by_default(self, checker, python_source) -> None:
        text = python_source(_python_body("WHEN", "THEN"))

        assert _violations(checker, "test_orders.py", text, "header-description") == []

    @pytest.mark.requirement("header-description")
    def test_bare_headers_are_reported_when_enabled(self, python_source) -> None:
        checker = ConformanceChecker(AnalysisConfig(rules=frozenset({"header-description"})))
        text = python_source("# WHEN: totals are computed\npass\n# THEN\npass")

        report = checker.analyze_file("test_orders.py", text)

        assert [(v.rule_id, v.line, v.section) for v in report.violations] == [
            ("header-description", 4, "THEN")
        ]
