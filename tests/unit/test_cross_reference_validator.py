"""Unit tests for CrossReferenceValidator.

Tests cover literal and non-result assertion operands, SUT construction
purity, EXPECTATIONS independence and mock verification.
"""

from __future__ import annotations

import textwrap

import pytest

from sectionlint.checker import ConformanceChecker
from sectionlint.config import AnalysisConfig
from sectionlint.result import Violation


def _violations(checker: ConformanceChecker, path: str, text: str, rule_id: str) -> list[Violation]:
    report = checker.analyze_file(path, text)
    return [v for v in report.violations if v.rule_id == rule_id]


class TestNoLiteralAssertion:
    """Tests for the no-literal-assertion rule."""

    @pytest.mark.requirement("no-literal-assertion")
    def test_literal_expected_value(self, checker, python_source, line_of) -> None:
        """Given self.assertEqual(42, actual_result), exactly one violation is reported."""
        text = python_source(
            """
            # GIVEN
            given_items = [10, 32]
            # SYSTEM UNDER TEST
            sut = OrderCalculator()
            # WHEN
            actual_result = sut.total(given_items)
            # THEN
            self.assertEqual(42, actual_result)
            """
        )

        report = checker.analyze_file("test_orders.py", text)

        assert len(report.violations) == 1
        violation = report.violations[0]
        assert violation.rule_id == "no-literal-assertion"
        assert violation.line == line_of(text, "assertEqual")
        assert violation.section == "THEN"
        assert "literal 42" in violation.message

    @pytest.mark.requirement("no-literal-assertion")
    def test_given_identifier_in_then(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // WHEN
            var actualTotal = Total(givenTotal);
            // THEN
            Assert.Equal(givenTotal, actualTotal);
            """
        )

        (violation,) = _violations(checker, "OrderTests.cs", text, "no-literal-assertion")

        assert violation.identifier == "givenTotal"
        assert "given identifier 'givenTotal'" in violation.message

    @pytest.mark.requirement("no-literal-assertion")
    def test_mock_is_allowed_only_in_behavior(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockClock = new Mock<IClock>();
            // WHEN
            var actualClock = Resolve();
            // THEN
            Assert.Same(mockClock.Object, actualClock);
            // BEHAVIOR
            mockClock.Verify(c => c.Now, Times.Once());
            """
        )

        violations = _violations(checker, "ClockTests.cs", text, "no-literal-assertion")

        assert [v.section for v in violations] == ["THEN"]
        assert violations[0].identifier == "mockClock"

    @pytest.mark.requirement("no-literal-assertion")
    def test_one_violation_per_statement(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // WHEN
            var actualTotal = Total();
            // THEN
            Assert.Equal(1, 2);
            """
        )

        (violation,) = _violations(checker, "OrderTests.cs", text, "no-literal-assertion")

        assert "literal 1, literal 2" in violation.message

    @pytest.mark.requirement("no-literal-assertion")
    def test_undeclared_names_are_accepted(self, checker, csharp_source) -> None:
        """Types and enum members are not declared in the test and are not flagged."""
        text = csharp_source(
            """
            // WHEN
            var actualStatus = Pay();
            // THEN
            Assert.Equal(OrderStatus.Paid, actualStatus);
            """
        )

        assert _violations(checker, "OrderTests.cs", text, "no-literal-assertion") == []

    @pytest.mark.requirement("no-literal-assertion")
    def test_declared_name_outside_families_is_flagged(self, checker, python_source) -> None:
        text = python_source(
            """
            # WHEN
            actual_total = sut.total()
            result = 5
            # THEN
            assert actual_total == result
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "no-literal-assertion")

        assert violation.identifier == "result"

    @pytest.mark.requirement("no-literal-assertion")
    def test_unary_assertions_on_actual(self, checker, python_source) -> None:
        text = python_source(
            """
            # WHEN
            actual_order = repository.find(given_id)
            # THEN
            assert actual_order is None
            """
        )

        assert _violations(checker, "test_orders.py", text, "no-literal-assertion") == []

    @pytest.mark.requirement("no-literal-assertion")
    @pytest.mark.parametrize(
        ("assertion", "described", "identifier"),
        [
            ("assert actual_items == [1, 2, 3]", "literal [1, 2, 3]", None),
            ('assert actual_items == {"a": 1}', 'literal {"a": 1}', None),
            ("assert actual_items == (1, 2)", "literal (1, 2)", None),
            ('assert actual_items == """x"""', 'literal """x"""', None),
            ("assert actual_items == given_count + 1", "given identifier 'given_count'", "given_count"),
            ("self.assertEqual(actual_items, -given_count)", "given identifier 'given_count'", "given_count"),
        ],
    )
    def test_collections_and_expressions_are_checked(
        self, checker, python_source, assertion: str, described: str, identifier: str | None
    ) -> None:
        """Given a THEN assertion on a literal collection or a given* expression, one violation is reported."""
        text = python_source(
            f"""
            # GIVEN
            given_count = 2
            # WHEN
            actual_items = build(given_count)
            # THEN
            {assertion}
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "no-literal-assertion")

        assert described in violation.message
        assert violation.identifier == identifier

    @pytest.mark.requirement("no-literal-assertion")
    def test_javascript_matchers_on_literals_and_given_expressions(self, checker) -> None:
        text = textwrap.dedent(
            """
            it("builds the items", () => {
              // GIVEN
              const givenCount = 2;
              // WHEN
              const actualItems = build(givenCount);
              // THEN
              expect(actualItems).toEqual([1, 2, 3]);
              expect(actualItems).toEqual({ a: 1 });
              expect(actualItems.length).toBe(givenCount * 2);
            });
            """
        ).lstrip("\n")

        violations = _violations(checker, "orders.test.js", text, "no-literal-assertion")

        messages = [v.message for v in violations]
        assert len(messages) == 3
        assert "literal [1, 2, 3]" in messages[0]
        assert "literal { a: 1 }" in messages[1]
        assert "given identifier 'givenCount'" in messages[2]

    @pytest.mark.requirement("no-literal-assertion")
    def test_rust_macro_literal_and_constructor_expression(self, checker) -> None:
        text = textwrap.dedent(
            """
            #[test]
            fn builds_the_order() {
                // GIVEN
                let given_count = 2;
                // WHEN
                let actual_order = build(given_count);
                // THEN
                assert_eq!(actual_order.items, vec![1, 2]);
                assert_eq!(actual_order, Order::new(given_count));
            }
            """
        ).lstrip("\n")

        violations = _violations(checker, "orders.rs", text, "no-literal-assertion")

        assert [v.identifier for v in violations] == [None, "given_count"]
        assert "literal vec![1, 2]" in violations[0].message

    @pytest.mark.requirement("no-literal-assertion")
    def test_expression_of_result_names_is_accepted(self, checker, csharp_source) -> None:
        """Expressions built only from actual* and expected* names, helpers and types pass."""
        text = csharp_source(
            """
            // WHEN
            var actualItems = Build();
            // THEN
            Assert.Equal(expectedItems.Count + 1, Enumerable.Count(actualItems));
            """
        )

        assert _violations(checker, "OrderTests.cs", text, "no-literal-assertion") == []

    @pytest.mark.requirement("no-literal-assertion")
    def test_numeric_tolerance_is_not_a_literal_operand(self, checker) -> None:
        text = textwrap.dedent(
            """
            class OrderTest {
                @Test
                void totalIncludesTax() {
                    // WHEN
                    double actualTotal = order.total();
                    // THEN
                    assertEquals(expectedTotal, actualTotal, 0.001);
                }
            }
            """
        ).lstrip("\n")

        assert _violations(checker, "OrderTest.java", text, "no-literal-assertion") == []

    @pytest.mark.requirement("no-literal-assertion")
    def test_unindented_fixture_string_keeps_later_sections(self, checker) -> None:
        """Given a triple-quoted fixture with column-0 lines, THEN is still analysed."""
        text = "\n".join(
            [
                "def test_parse_title():",
                "    # GIVEN",
                '    given_text = """',
                "title: x",
                '"""',
                "    # WHEN",
                "    actual_title = parse(given_text)",
                "    # THEN",
                '    assert actual_title == "x"',
                "",
            ]
        )

        report = checker.analyze_file("test_parse.py", text)

        rule_ids = [v.rule_id for v in report.violations]
        assert "missing-required-section" not in rule_ids
        (violation,) = [v for v in report.violations if v.rule_id == "no-literal-assertion"]
        assert 'literal "x"' in violation.message


class TestSutConstructionPurity:
    """Tests for the sut-construction-purity rule."""

    SUT_BODY = """
        // SYSTEM UNDER TEST
        var sut = new OrderService(mockRepository.Object, givenName, "literal");
    """

    @pytest.mark.requirement("sut-construction-purity")
    def test_non_env_arguments(self, checker, csharp_source) -> None:
        text = csharp_source(self.SUT_BODY)

        violations = _violations(checker, "OrderTests.cs", text, "sut-construction-purity")

        assert len(violations) == 2
        assert {v.identifier for v in violations} == {"sut"}
        messages = " | ".join(v.message for v in violations)
        assert "mock identifier 'mockRepository'" in messages
        assert "given identifier 'givenName'" in messages

    @pytest.mark.requirement("sut-construction-purity")
    def test_literals_can_be_disallowed(self, csharp_source) -> None:
        checker = ConformanceChecker(AnalysisConfig(allow_trivial_sut_literals=False))
        text = csharp_source(self.SUT_BODY)

        violations = _violations(checker, "OrderTests.cs", text, "sut-construction-purity")

        assert len(violations) == 3

    @pytest.mark.requirement("sut-construction-purity")
    def test_keyword_arguments(self, checker, python_source) -> None:
        text = python_source(
            """
            # SYSTEM UNDER TEST
            sut = OrderService(repository=env_repository, clock=mock_clock)
            """
        )

        (violation,) = _violations(checker, "test_orders.py", text, "sut-construction-purity")

        assert "mock_clock" in violation.message

    @pytest.mark.requirement("sut-construction-purity")
    def test_assignment_to_existing_field(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // SYSTEM UNDER TEST
            _sut = new OrderService(envRepository, givenName);
            """
        )

        violations = _violations(checker, "OrderTests.cs", text, "sut-construction-purity")

        assert [v.identifier for v in violations] == ["_sut"]

    @pytest.mark.requirement("sut-construction-purity")
    @pytest.mark.parametrize(
        ("statement", "path", "language"),
        [
            ("self.sut = OrderService(mock_repository)", "test_orders.py", "python"),
            ("this.sut = new OrderService(mockRepository);", "OrderTests.cs", "csharp"),
        ],
    )
    def test_assignment_to_instance_field(
        self, checker, python_source, csharp_source, statement: str, path: str, language: str
    ) -> None:
        """Given self.sut or this.sut assigned in SYSTEM UNDER TEST, its arguments are checked."""
        build = python_source if language == "python" else csharp_source
        comment = "#" if language == "python" else "//"
        text = build(
            f"""
            {comment} SYSTEM UNDER TEST
            {statement}
            """
        )

        (violation,) = _violations(checker, path, text, "sut-construction-purity")

        assert violation.identifier == "sut"
        assert "mock identifier" in violation.message

    @pytest.mark.requirement("sut-construction-purity")
    def test_env_arguments_are_clean(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // SYSTEM UNDER TEST
            var sut = new OrderService(envRepository, logger: envLogger);
            """
        )

        assert _violations(checker, "OrderTests.cs", text, "sut-construction-purity") == []


class TestExpectationsIndependence:
    """Tests for the expectations-independence rule."""

    @pytest.mark.requirement("expectations-independence")
    def test_expected_value_derived_from_actual(self, checker, python_source, line_of) -> None:
        text = python_source(
            """
            # WHEN
            actual_total = sut.total(given_items)
            # EXPECTATIONS
            expected_total = actual_total
            expected_tax = actual_total * 0.2
            # THEN
            assert actual_total == expected_total
            """
        )

        violations = _violations(checker, "test_orders.py", text, "expectations-independence")

        assert len(violations) == 1
        assert violations[0].identifier == "actual_total"
        assert violations[0].line == line_of(text, "expected_total = actual_total")

    @pytest.mark.requirement("expectations-independence")
    def test_expected_value_from_given(self, checker, python_source) -> None:
        text = python_source(
            """
            # WHEN
            actual_total = sut.total(given_items)
            # EXPECTATIONS
            expected_total = sum(given_items)
            """
        )

        assert _violations(checker, "test_orders.py", text, "expectations-independence") == []


class TestUnverifiedMock:
    """Tests for the unverified-mock rule."""

    @pytest.mark.requirement("unverified-mock")
    def test_verifiable_mock_missing_from_behavior(self, checker, csharp_source, line_of) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockRepository = new Mock<IOrderRepository>(MockBehavior.Strict);
            var mockClock = new Mock<IClock>();
            mockClock.Setup(c => c.Now).Returns(DateTime.UnixEpoch).Verifiable();
            // SETUP
            var envRepository = mockRepository.Object;
            var envClock = mockClock.Object;
            // SYSTEM UNDER TEST
            var sut = new OrderService(envRepository, envClock);
            // WHEN
            sut.Save();
            // BEHAVIOR
            mockRepository.Verify(r => r.Save(), Times.Once());
            """
        )

        violations = _violations(checker, "OrderTests.cs", text, "unverified-mock")

        assert [v.identifier for v in violations] == ["mockClock"]
        assert violations[0].line == line_of(text, "var mockClock")
        assert violations[0].section == "MOCKING"
        assert _violations(checker, "OrderTests.cs", text, "no-literal-assertion") == []

    @pytest.mark.requirement("unverified-mock")
    def test_loose_mocks_need_no_verification(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockClock = new Mock<IClock>();
            var mockRepository = new Mock<IOrderRepository>(MockBehavior.Strict);
            // WHEN
            Run(mockClock.Object, mockRepository.Object);
            // BEHAVIOR
            mockRepository.VerifyAll();
            """
        )

        assert _violations(checker, "OrderTests.cs", text, "unverified-mock") == []

    @pytest.mark.requirement("unverified-mock")
    def test_not_evaluated_without_behavior(self, checker, csharp_source) -> None:
        text = csharp_source(
            """
            // MOCKING
            var mockClock = new Mock<IClock>(MockBehavior.Strict);
            // WHEN
            Run(mockClock.Object);
            """
        )

        assert _violations(checker, "OrderTests.cs", text, "unverified-mock") == []
        assert len(_violations(checker, "OrderTests.cs", text, "behavior-required-when-mocked")) == 1
