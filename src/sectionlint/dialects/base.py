"""Dialect descriptor used to tokenize test sources of one language.

A Dialect isolates every language-specific lexical quirk (comment syntax,
test markers, declaration forms, assertion styles, sigils) so that the
section splitter, the naming validator and the rule engines stay language
agnostic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final, Literal

BodyStyle = Literal["braces", "indent", "terminator"]

DEFAULT_LITERAL_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "true",
        "false",
        "True",
        "False",
        "TRUE",
        "FALSE",
        "null",
        "NULL",
        "nil",
        "None",
        "undefined",
        "nullptr",
        "Nothing",
        "NaN",
    }
)

# Names that can precede an assertion call without being a compared operand
DEFAULT_ASSERTION_NAMESPACES: Final[frozenset[str]] = frozenset(
    {
        "Assert",
        "assert",
        "Assertions",
        "CollectionAssert",
        "StringAssert",
        "ClassicAssert",
        "Expect",
        "expect",
        "require",
        "self",
        "this",
        "t",
        "suite",
        "s",
        "tSQLt",
        "Truth",
        "testthat",
        "XCTest",
        "Mockito",
        "Verify",
    }
)

# Keywords never treated as identifiers, across all supported languages
DEFAULT_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        "abstract", "and", "as", "assert", "async", "auto", "await", "begin",
        "bool", "boolean", "break", "byte", "case", "catch", "char", "class",
        "const", "continue", "declare", "def", "default", "defer", "del",
        "delete", "dim", "do", "double", "dynamic", "elif", "else", "end",
        "enum", "except", "exec", "extends", "final", "finally", "float", "fn",
        "for", "foreach", "from", "fun", "func", "function", "go", "if",
        "impl", "implements", "import", "in", "instanceof", "int", "interface",
        "is", "lambda", "let", "long", "loop", "match", "mut", "namespace",
        "new", "not", "object", "of", "or", "override", "package", "pass",
        "private", "protected", "pub", "public", "raise", "ref", "return",
        "self", "short", "static", "string", "struct", "sub", "super",
        "switch", "then", "this", "throw", "throws", "trait", "try", "type",
        "typeof", "unless", "unsigned", "use", "using", "val", "var", "void",
        "when", "where", "while", "with", "yield", "out", "it", "Dim", "As",
        "New", "Sub", "End", "Function", "Set", "Call", "EXEC", "SELECT",
        "FROM", "WHERE", "INSERT", "INTO", "VALUES", "DECLARE", "INT",
        "VARCHAR", "NVARCHAR", "AND", "OR", "NOT", "AS", "IS",
    }
    | DEFAULT_LITERAL_KEYWORDS
)


@dataclass(frozen=True)
class Dialect:
    """Lexical conventions needed to tokenize one language's test files.

    Attributes:
        name: Registry key (e.g. "csharp").
        display_name: Human-readable name (e.g. "C#").
        extensions: File extensions handled by this dialect.
        comment_prefixes: Line comment tokens, longest first.
        block_comment: Block comment delimiters, if the language has them.
        test_markers: Patterns that start a test. A ``name`` group, when it
            matches, carries the test name; otherwise the name is taken
            from the next line matching ``function_pattern``.
        function_pattern: Declaration that follows an attribute-style marker.
        body_style: How the test body extent is found.
        terminator: Line pattern ending a body for ``terminator`` style.
        declaration_patterns: Patterns with a ``names`` group listing the
            comma-separated identifiers a statement declares.
        assertion_head: Start of an assertion call, up to and including the
            opening parenthesis. Groups: ``subject`` (optional receiver)
            and ``func``.
        command_assertions: Paren-less assertion commands with ``func`` and
            ``args`` groups (``assert_equal a, b``, ``EXEC tSQLt.AssertEquals``).
        infix_assertions: Infix matchers with ``lhs``, ``func``, ``rhs``
            groups (``actual shouldBe expected``).
        assert_statement: Keyword assertion statement with an ``expr`` group.
        context_args: Leading assertion arguments that are test handles.
        sigils: Characters stripped from the front of identifiers.
        verifiable_markers: Patterns marking a mock configuration as
            verifiable when found on a MOCKING line.
        literal_keywords: Keywords that are literal values.
        keywords: Words never reported as identifiers.
        assertion_namespaces: Receivers that are assertion libraries rather
            than operands.
        case_sensitive: Whether the language's identifiers are case sensitive.
        string_quotes: Characters that open and close string literals.
        backslash_escapes: Whether backslash escapes the next character in
            a string (T-SQL and VB double the quote instead).
        multiline_strings: Delimiters of strings that may span lines, longest
            first (Python and Kotlin triple quotes).
    """

    name: str
    display_name: str
    extensions: tuple[str, ...]
    comment_prefixes: tuple[str, ...]
    test_markers: tuple[re.Pattern[str], ...]
    declaration_patterns: tuple[re.Pattern[str], ...]
    assertion_head: re.Pattern[str]
    body_style: BodyStyle = "braces"
    block_comment: tuple[str, str] | None = None
    function_pattern: re.Pattern[str] | None = None
    terminator: re.Pattern[str] | None = None
    command_assertions: tuple[re.Pattern[str], ...] = ()
    infix_assertions: tuple[re.Pattern[str], ...] = ()
    assert_statement: re.Pattern[str] | None = None
    context_args: frozenset[str] = frozenset()
    sigils: str = ""
    verifiable_markers: tuple[re.Pattern[str], ...] = ()
    literal_keywords: frozenset[str] = DEFAULT_LITERAL_KEYWORDS
    keywords: frozenset[str] = DEFAULT_KEYWORDS
    assertion_namespaces: frozenset[str] = DEFAULT_ASSERTION_NAMESPACES
    case_sensitive: bool = True
    string_quotes: str = "\"'`"
    backslash_escapes: bool = True
    multiline_strings: tuple[str, ...] = ()
    aliases: tuple[str, ...] = field(default=())

    def strip_comment_marker(self, stripped_line: str) -> str | None:
        """Return the text of a comment line without its comment syntax.

        Args:
            stripped_line: A source line with surrounding whitespace removed.

        Returns:
            The comment body, or None if the line is not a comment.
        """
        for prefix in self.comment_prefixes:
            if stripped_line.startswith(prefix):
                return stripped_line[len(prefix):].lstrip("/#-'!*< ").strip()
        if self.block_comment is not None:
            opener, closer = self.block_comment
            if stripped_line.startswith(opener):
                body = stripped_line[len(opener):]
                if body.endswith(closer):
                    body = body[: -len(closer)]
                return body.strip("* ").strip()
            if stripped_line.startswith("* ") or stripped_line == "*":
                return stripped_line.lstrip("* ").strip()
        return None

    def normalize_identifier(self, token: str) -> str:
        """Remove sigils (``$`` in PHP, ``@`` in T-SQL) from a token."""
        return token.lstrip(self.sigils) if self.sigils else token


def compile_all(*patterns: str, flags: int = 0) -> tuple[re.Pattern[str], ...]:
    """Compile several patterns with the same flags."""
    return tuple(re.compile(pattern, flags) for pattern in patterns)


__all__ = [
    "DEFAULT_ASSERTION_NAMESPACES",
    "DEFAULT_KEYWORDS",
    "DEFAULT_LITERAL_KEYWORDS",
    "BodyStyle",
    "Dialect",
    "compile_all",
]
