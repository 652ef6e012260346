"""Shared pytest fixtures for sectionlint tests.

This module provides fixtures used across all test tiers (unit, integration).
Source builders wrap a test body in a minimal file of the given language so
individual tests only spell out the part they are about.

NOTE: Do NOT add __init__.py to test directories - pytest uses importlib mode
which can cause namespace collisions with __init__.py files.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterator

import pytest
import structlog

from sectionlint.checker import ConformanceChecker
from sectionlint.config import AnalysisConfig
from sectionlint.observability import reset_tracer


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): mark test as validating a specific behaviour or rule",
    )


@pytest.fixture(autouse=True)
def reset_observability() -> Iterator[None]:
    """Reset structlog and cached tracers so CLI runs do not leak into other tests."""
    yield
    structlog.reset_defaults()
    reset_tracer()


def _indent(body: str, prefix: str) -> list[str]:
    return [
        f"{prefix}{line}" if line.strip() else ""
        for line in textwrap.dedent(body).strip("\n").splitlines()
    ]


@pytest.fixture
def default_config() -> AnalysisConfig:
    """Provide the default analysis configuration."""
    return AnalysisConfig()


@pytest.fixture
def checker(default_config: AnalysisConfig) -> ConformanceChecker:
    """Provide a checker with the default configuration."""
    return ConformanceChecker(default_config)


@pytest.fixture
def csharp_source() -> Callable[..., str]:
    """Build a C# xUnit test file around a method body.

    Usage:
        text = csharp_source('''
            // WHEN
            var actualTotal = sut.Total();
        ''', name="Total_IncludesTax")
    """

    def build(body: str, name: str = "Total_IncludesTaxForEachLine") -> str:
        lines = [
            "using Xunit;",
            "",
            "public class OrderTests",
            "{",
            "    [Fact]",
            f"    public void {name}()",
            "    {",
            *_indent(body, "        "),
            "    }",
            "}",
        ]
        return "\n".join(lines) + "\n"

    return build


@pytest.fixture
def python_source() -> Callable[..., str]:
    """Build a Python test module around a function body."""

    def build(body: str, name: str = "test_total_includes_tax_for_each_line") -> str:
        lines = [f"def {name}():", *_indent(body, "    ")]
        return "\n".join(lines) + "\n"

    return build


@pytest.fixture
def line_of() -> Callable[[str, str], int]:
    """Return the 1-based line of the first line containing a snippet."""

    def find(text: str, snippet: str) -> int:
        for number, line in enumerate(text.splitlines(), start=1):
            if snippet in line:
                return number
        msg = f"{snippet!r} not found"
        raise AssertionError(msg)

    return find
