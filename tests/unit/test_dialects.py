"""Unit tests for the dialect registry."""

from __future__ import annotations

import pytest

from sectionlint.dialects import (
    available_dialects,
    dialect_for_path,
    get_dialect,
    supported_extensions,
)
from sectionlint.errors import FatalAnalysisError, UnsupportedDialectError


class TestDialectRegistry:
    """Tests for name and extension lookup."""

    @pytest.mark.requirement("dialects")
    def test_all_languages_are_registered(self) -> None:
        assert available_dialects() == sorted(
            [
                "c",
                "cpp",
                "csharp",
                "dart",
                "go",
                "java",
                "javascript",
                "kotlin",
                "objective-c",
                "php",
                "python",
                "r",
                "ruby",
                "rust",
                "scala",
                "tsql",
                "typescript",
                "visual-basic",
            ]
        )

    @pytest.mark.requirement("dialects")
    @pytest.mark.parametrize(
        ("alias", "name"),
        [("C#", "csharp"), ("ts", "typescript"), ("c++", "cpp"), (" VB ", "visual-basic"), ("t-sql", "tsql")],
    )
    def test_aliases_resolve_case_insensitively(self, alias: str, name: str) -> None:
        assert get_dialect(alias).name == name

    @pytest.mark.requirement("dialects")
    @pytest.mark.parametrize(
        ("path", "name"),
        [
            ("tests/OrderTests.cs", "csharp"),
            ("spec/order_spec.rb", "ruby"),
            ("src/order.test.TSX", "typescript"),
            ("test/order_test.h", "c"),
            ("db/tests/order.sql", "tsql"),
            ("tests/test_orders.py", "python"),
        ],
    )
    def test_dialect_inferred_from_extension(self, path: str, name: str) -> None:
        assert dialect_for_path(path).name == name

    @pytest.mark.requirement("fatal-analysis-error")
    def test_unknown_extension_is_fatal(self) -> None:
        with pytest.raises(UnsupportedDialectError) as exc_info:
            dialect_for_path("notes/readme.md")

        assert isinstance(exc_info.value, FatalAnalysisError)
        assert exc_info.value.dialect == ".md"
        assert "SL-E102" in str(exc_info.value)
        assert "--dialect" in exc_info.value.resolution

    @pytest.mark.requirement("fatal-analysis-error")
    def test_unknown_name_reports_available_dialects(self) -> None:
        with pytest.raises(UnsupportedDialectError) as exc_info:
            get_dialect("cobol", path="legacy.cbl")

        assert exc_info.value.path == "legacy.cbl"
        assert "python" in exc_info.value.available

    def test_supported_extensions(self) -> None:
        extensions = supported_extensions()

        assert {".cs", ".py", ".sql", ".vb", ".kt"} <= extensions
        assert ".md" not in extensions


class TestCommentMarkers:
    """Tests for Dialect.strip_comment_marker."""

    @pytest.mark.parametrize(
        ("dialect_name", "line", "body"),
        [
            ("csharp", "/// GIVEN", "GIVEN"),
            ("python", "#  WHEN: acting", "WHEN: acting"),
            ("tsql", "-- THEN", "THEN"),
            ("visual-basic", "REM SETUP", "SETUP"),
            ("java", "* BEHAVIOR", "BEHAVIOR"),
        ],
    )
    def test_comment_syntax_is_removed(self, dialect_name: str, line: str, body: str) -> None:
        assert get_dialect(dialect_name).strip_comment_marker(line) == body

    def test_code_is_not_a_comment(self) -> None:
        assert get_dialect("python").strip_comment_marker("given = 1") is None

    def test_sigils_are_stripped(self) -> None:
        assert get_dialect("php").normalize_identifier("$envClock") == "envClock"
        assert get_dialect("tsql").normalize_identifier("@givenId") == "givenId"
        assert get_dialect("csharp").normalize_identifier("givenId") == "givenId"
