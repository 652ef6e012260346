"""Lexical helpers shared by the section splitter, validators and engines.

Everything here works on source text, not on a syntax tree:
- mask_source / scan_source: blank out string contents and comments, keeping
  offsets, with block comments and triple-quoted strings spanning lines
- join_statements: merge lines of one parenthesised statement
- identifier_prefix / categorize: prefix family of an identifier
- find_declarations / find_references: bindings in a statement
- parse_assertions / classify_operand: assertion statements and operands
- split_arguments / call_arguments: argument lists of calls

Masking keeps every character offset stable, so spans found in masked text
slice the original text directly.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from sectionlint.dialects.base import Dialect
from sectionlint.model import Assertion, Operand, OperandKind, PrefixCategory, SourceLine

MAX_STATEMENT_LINES: Final[int] = 20
"""Upper bound on physical lines merged into one logical statement."""

_PREFIX_RE: Final[re.Pattern[str]] = re.compile(
    r"[A-Z]{2,}(?=[A-Z][a-z]|[^A-Za-z]|$)|[A-Z]?[a-z]+|[A-Z]"
)
_IDENTIFIER_RE: Final[re.Pattern[str]] = re.compile(r"(?<![\w$@])[$@]?[A-Za-z_]\w*")
_BARE_IDENTIFIER_RE: Final[re.Pattern[str]] = re.compile(r"^[$@]?[A-Za-z_]\w*$")
_DECLARED_NAME_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?:mut\s+|ref\s+|\.\.\.)?[*&]*\s*(`[^`]+`|[$@]?[A-Za-z_]\w*)"
)
_NUMBER_RE: Final[re.Pattern[str]] = re.compile(
    r"^[-+]?(?:0[xXbBoO][\da-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][-+]?\d+)?|\.\d+)[a-zA-Z]*$"
)
_STRING_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?:[rbfuRBFU]{1,2}|@|\$|@\$|\$@|N|L|u8|u|U)?"
    r"(?:(?P<t>\"\"\"|''').*?(?P=t)|(?P<q>\"|'|`)(?:\\.|(?!(?P=q)).)*(?P=q))$",
    re.DOTALL,
)
_EMPTY_COLLECTIONS: Final[frozenset[str]] = frozenset(
    {"[]", "{}", "()", "@[]", "@{}", "array()", "list()", "c()", "vec![]"}
)
_COLLECTION_OPEN_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?:vec!\[|@\[|@\{|\[|\{|\(|(?:array|arrayOf|listOf|setOf|mapOf|c)\()"
)
_PAIR_SEPARATORS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"=>"),
    re.compile(r"\s+to\s+"),
    re.compile(r"(?<=[\w\"'`\])])\s*:(?!:)"),
)
_TOLERANCE_ASSERTION_RE: Final[re.Pattern[str]] = re.compile(
    r"(?i)equal|close|near|approx|delta|within"
)
_IDENTIFIER_PATH_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<root>[$@]?[A-Za-z_]\w*)"
    r"(?P<rest>(?:\s*(?:\.|->|::|\?\.|!!\.)\s*[A-Za-z_]\w*(?:\(\s*\))?|\[[^\[\]]*\])*)"
    r"(?:\(\s*\))?!?$"
)
_MEMBER_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_]\w*")
_SELF_NAMES: Final[frozenset[str]] = frozenset({"self", "this", "me", "Me"})
_NAMED_ARGUMENT_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*[A-Za-z_]\w*\s*(?::(?!:)|=(?![=>]))\s*(?P<value>.+)$", re.DOTALL
)
_ARGUMENT_MODIFIERS_RE: Final[re.Pattern[str]] = re.compile(r"^(?:ref|out|in|params)\s+")
_COMPARISON_RE: Final[re.Pattern[str]] = re.compile(r"===|!==|==|!=|<>")
_PYTHON_COMPARISON_RE: Final[re.Pattern[str]] = re.compile(
    r"\s+is\s+not\s+|\s+is\s+|\s+not\s+in\s+|\s+in\s+|==|!=|<=|>=|<|>"
)
_UNARY_ASSERTION_RE: Final[re.Pattern[str]] = re.compile(
    r"(?i)true|false|null|nil|none|empty|that|ok|truthy|falsy|defined|throws|raises"
)
_CHAIN_STEP_RE: Final[re.Pattern[str]] = re.compile(
    r"\s*(?:\.|->|\?\.)\s*(?P<member>\w+)\s*(?:<[^<>()]*>\s*)?"
)
_RUBY_MATCHER_RE: Final[re.Pattern[str]] = re.compile(r"\s*(?P<matcher>\w+[?!]?)")
_RUBY_TO_STEPS: Final[frozenset[str]] = frozenset({"to", "not_to", "to_not"})
_CALL_OPEN_RE: Final[re.Pattern[str]] = re.compile(r"[\w>\]]\s*!?\s*\(")

# Words a C-like "type name" pattern can pick up that never start a declaration
_STATEMENT_WORDS: Final[frozenset[str]] = frozenset(
    {
        "return", "throw", "delete", "new", "else", "case", "goto", "yield",
        "await", "typeof", "sizeof", "using", "namespace", "co_return",
        "co_await", "break", "continue", "do",
    }
)

_OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: Final[frozenset[str]] = frozenset(_OPENERS.values())

_CATEGORY_BY_PREFIX: Final[dict[str, PrefixCategory]] = {
    category.value: category
    for category in PrefixCategory
    if category is not PrefixCategory.OTHER
}


@dataclass(frozen=True)
class Statement:
    """A logical statement: one or more physical lines joined by spaces.

    Attributes:
        line: Line number of the first physical line.
        text: Original text.
        masked: Same text with string contents and comments blanked.
    """

    line: int
    text: str
    masked: str


# =============================================================================
# Masking
# =============================================================================


def mask_source(lines: Sequence[str], dialect: Dialect) -> list[str]:
    """Blank out string contents and comments in each line.

    String delimiters are kept so literals remain recognisable; their content
    and any comment text become spaces. Block comments may span lines.

    Args:
        lines: Physical source lines.
        dialect: Dialect supplying comment and quote syntax.

    Returns:
        Masked lines, each the same length as its input line.
    """
    masked, _ = scan_source(lines, dialect)
    return masked


def scan_source(lines: Sequence[str], dialect: Dialect) -> tuple[list[str], list[bool]]:
    """Mask each line and record which lines start inside a multi-line token.

    Args:
        lines: Physical source lines.
        dialect: Dialect supplying comment and quote syntax.

    Returns:
        The masked lines, and for each line whether it begins inside a block
        comment or a multi-line string opened on an earlier line.
    """
    masked: list[str] = []
    continued: list[bool] = []
    pending: str | None = None
    for line in lines:
        continued.append(pending is not None)
        text, pending = _mask_line(line, dialect, pending)
        masked.append(text)
    return masked, continued


def mask_strings(line: str, dialect: Dialect) -> str:
    """Mask a single line with no block comment or string open."""
    text, _ = _mask_line(line, dialect, None)
    return text


def _mask_line(line: str, dialect: Dialect, pending: str | None) -> tuple[str, str | None]:
    """Mask one line.

    ``pending`` is the closing delimiter of a block comment or multi-line
    string left open by the previous line; the delimiter still open at the
    end of this line is returned.
    """
    out = list(line)
    quote: str | None = None
    escape = False
    i = 0
    length = len(line)
    block_open, block_close = dialect.block_comment or ("", "")
    in_block = pending is not None and pending == block_close
    long_quote = pending if pending is not None and not in_block else None

    while i < length:
        ch = line[i]

        if in_block:
            if block_close and line.startswith(block_close, i):
                for j in range(i, i + len(block_close)):
                    out[j] = " "
                i += len(block_close)
                in_block = False
                continue
            out[i] = " "
            i += 1
            continue

        if long_quote is not None:
            if escape:
                escape = False
                out[i] = " "
            elif ch == "\\" and dialect.backslash_escapes:
                escape = True
                out[i] = " "
            elif line.startswith(long_quote, i):
                i += len(long_quote)
                long_quote = None
                continue
            else:
                out[i] = " "
            i += 1
            continue

        if quote is not None:
            if escape:
                escape = False
                out[i] = " "
            elif ch == "\\" and dialect.backslash_escapes:
                escape = True
                out[i] = " "
            elif ch == quote:
                quote = None
            else:
                out[i] = " "
            i += 1
            continue

        if block_open and line.startswith(block_open, i):
            in_block = True
            for j in range(i, i + len(block_open)):
                out[j] = " "
            i += len(block_open)
            continue

        if _starts_line_comment(line, i, dialect):
            for j in range(i, length):
                out[j] = " "
            break

        opened = next((d for d in dialect.multiline_strings if line.startswith(d, i)), None)
        if opened is not None:
            long_quote = opened
            i += len(opened)
            continue

        if ch in dialect.string_quotes:
            quote = ch

        i += 1

    if in_block:
        return "".join(out), block_close
    return "".join(out), long_quote


def _starts_line_comment(line: str, index: int, dialect: Dialect) -> bool:
    for prefix in dialect.comment_prefixes:
        if not line.startswith(prefix, index):
            continue
        if prefix == "#" and dialect.name == "php" and line.startswith("#[", index):
            return False
        if prefix.strip().isalpha():
            # word prefixes such as REM only count at the start of a statement
            return line[:index].strip() == ""
        return True
    return False


# =============================================================================
# Statements
# =============================================================================


def join_statements(lines: Sequence[SourceLine], masked: Sequence[str]) -> list[Statement]:
    """Merge physical lines into logical statements.

    Lines are joined while a parenthesis or bracket opened on an earlier line
    is still open, up to MAX_STATEMENT_LINES lines. Blank lines are skipped.

    Args:
        lines: Numbered source lines.
        masked: Masked text of the same lines.

    Returns:
        Logical statements in source order.
    """
    statements: list[Statement] = []
    pending_text: list[str] = []
    pending_masked: list[str] = []
    start_line = 0
    depth = 0

    for source_line, masked_text in zip(lines, masked):
        if not pending_text and not masked_text.strip():
            continue
        if not pending_text:
            start_line = source_line.number
        pending_text.append(source_line.text)
        pending_masked.append(masked_text)
        depth += _paren_balance(masked_text)
        if depth <= 0 or len(pending_text) >= MAX_STATEMENT_LINES:
            statements.append(
                Statement(start_line, " ".join(pending_text), " ".join(pending_masked))
            )
            pending_text, pending_masked, depth = [], [], 0

    if pending_text:
        statements.append(Statement(start_line, " ".join(pending_text), " ".join(pending_masked)))
    return statements


def _paren_balance(masked: str) -> int:
    return masked.count("(") + masked.count("[") - masked.count(")") - masked.count("]")


# =============================================================================
# Identifiers
# =============================================================================


def identifier_prefix(name: str) -> str:
    """Return the lower-cased leading word of an identifier.

    The leading word ends at a camelCase/PascalCase boundary, an underscore
    or a digit: ``givenName`` -> ``given``, ``Given_Name`` -> ``given``,
    ``SUTFactory`` -> ``sut``.
    """
    stripped = name.strip("`").lstrip("_$@")
    match = _PREFIX_RE.match(stripped)
    return match.group(0).lower() if match else ""


def categorize(name: str) -> PrefixCategory:
    """Return the prefix category of an identifier name."""
    return _CATEGORY_BY_PREFIX.get(identifier_prefix(name), PrefixCategory.OTHER)


def identifier_key(name: str, dialect: Dialect) -> str:
    """Key under which an identifier is tracked in a symbol table."""
    return name if dialect.case_sensitive else name.lower()


def find_declarations(statement: Statement, dialect: Dialect) -> list[str]:
    """Return the names a statement declares, in order, without sigils."""
    names: list[str] = []
    for pattern in dialect.declaration_patterns:
        for match in pattern.finditer(statement.masked):
            groups = match.groupdict()
            if groups.get("type") in _STATEMENT_WORDS:
                continue
            raw = statement.text[match.start("names"):match.end("names")]
            for piece in raw.split(","):
                name_match = _DECLARED_NAME_RE.match(piece)
                if name_match is None:
                    continue
                name = dialect.normalize_identifier(name_match.group(1))
                if name == "_" or name in dialect.keywords or name in names:
                    continue
                names.append(name)
    return names


def find_references(statement: Statement, dialect: Dialect) -> list[str]:
    """Return root identifiers used in a statement, without sigils.

    Member names (after ``.``, ``->``, ``::``), Ruby symbols, keywords and
    literal keywords are skipped. Each name is listed once.
    """
    masked = statement.masked
    keywords = (
        dialect.keywords
        if dialect.case_sensitive
        else frozenset(keyword.lower() for keyword in dialect.keywords)
    )
    found: list[str] = []
    for match in _IDENTIFIER_RE.finditer(masked):
        if _is_member_access(masked, match.start()):
            continue
        name = dialect.normalize_identifier(match.group(0))
        if not name or name in found:
            continue
        if (name if dialect.case_sensitive else name.lower()) in keywords:
            continue
        found.append(name)
    return found


def _is_member_access(masked: str, start: int) -> bool:
    before = masked[:start].rstrip()
    if not before:
        return False
    if before.endswith(("->", "::", "?.", "!!.")):
        return True
    if before.endswith("."):
        return not before.endswith("..")
    # Ruby symbols (:name) but not ternaries (a ? b : c) or named args
    return before.endswith(":") and not before.endswith("::") and start > 0 and masked[start - 1] == ":"


# =============================================================================
# Calls and arguments
# =============================================================================


def matching_close(masked: str, open_index: int) -> int | None:
    """Return the index of the bracket closing the one at ``open_index``."""
    stack: list[str] = []
    for index in range(open_index, len(masked)):
        ch = masked[index]
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return index
    return None


def split_arguments(text: str, masked: str | None = None) -> list[str]:
    """Split an argument list on top-level commas.

    Args:
        text: Original argument text (without the surrounding parentheses).
        masked: Masked version of ``text``; computed naively if omitted.

    Returns:
        Stripped argument texts; empty arguments are dropped.
    """
    masked = text if masked is None else masked
    parts: list[str] = []
    depth = 0
    start = 0
    for index, ch in enumerate(masked):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return [part.strip() for part in parts if part.strip()]


def _split_masked(text: str, masked: str) -> list[tuple[str, str]]:
    """Like split_arguments but keeps the masked text of each argument."""
    pieces: list[tuple[str, str]] = []
    depth = 0
    start = 0
    for index, ch in enumerate(masked):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            pieces.append((text[start:index], masked[start:index]))
            start = index + 1
    pieces.append((text[start:], masked[start:]))
    return [(t.strip(), m.strip()) for t, m in pieces if t.strip()]


def call_arguments(text: str, masked: str, after: int = 0) -> list[str] | None:
    """Return the arguments of the first call found at or after ``after``.

    A call is an identifier, ``>`` or ``]`` followed by ``(``; a ``(``
    directly at ``after`` (C++ ``Foo sut(a, b)``) counts as well.

    Returns:
        The argument texts, or None if no call is found.
    """
    segment = masked[after:]
    stripped = segment.lstrip()
    if stripped.startswith("("):
        open_index = after + (len(segment) - len(stripped))
    else:
        match = _CALL_OPEN_RE.search(masked, after)
        if match is None:
            return None
        open_index = match.end() - 1
    close_index = matching_close(masked, open_index)
    if close_index is None:
        return None
    return split_arguments(text[open_index + 1:close_index], masked[open_index + 1:close_index])


def argument_value(argument: str) -> str:
    """Strip a named-argument label and passing modifiers from an argument.

    ``logger: envLogger`` and ``logger=env_logger`` both give the value;
    ``ref envX`` gives ``envX``.
    """
    match = _NAMED_ARGUMENT_RE.match(argument)
    value = match.group("value") if match else argument
    return _ARGUMENT_MODIFIERS_RE.sub("", value.strip()).lstrip("&*").strip()


# =============================================================================
# Operands
# =============================================================================


def classify_operand(text: str, dialect: Dialect) -> Operand:
    """Classify an assertion operand as literal, identifier path or expression.

    Args:
        text: Operand text as written.
        dialect: Dialect supplying literal keywords and sigils.

    Returns:
        Operand with root identifier and category set for identifiers.
    """
    value = text.strip()
    if _is_literal(value, dialect):
        return Operand(text=value, kind=OperandKind.LITERAL)

    match = _IDENTIFIER_PATH_RE.match(value.lstrip("&*"))
    if match is None:
        return Operand(text=value, kind=OperandKind.EXPRESSION)

    root = dialect.normalize_identifier(match.group("root"))
    if root in _SELF_NAMES:
        members = _MEMBER_RE.findall(match.group("rest"))
        if not members:
            return Operand(text=value, kind=OperandKind.EXPRESSION)
        root = members[0]
    if root in dialect.literal_keywords:
        return Operand(text=value, kind=OperandKind.LITERAL)
    return Operand(
        text=value,
        kind=OperandKind.IDENTIFIER,
        root=root,
        category=categorize(root),
    )


def _is_literal(value: str, dialect: Dialect) -> bool:
    if not value:
        return False
    if _NUMBER_RE.match(value) or _STRING_RE.match(value):
        return True
    if value in _EMPTY_COLLECTIONS:
        return True
    if value.startswith(":") and _BARE_IDENTIFIER_RE.match(value[1:]):
        return True
    if _is_collection_literal(value, dialect):
        return True
    if dialect.case_sensitive:
        return value in dialect.literal_keywords
    return value.lower() in {keyword.lower() for keyword in dialect.literal_keywords}


def _is_collection_literal(value: str, dialect: Dialect) -> bool:
    """True for a list, tuple, set, map or macro literal built only from literals."""
    opener = _COLLECTION_OPEN_RE.match(value)
    if opener is None:
        return False
    masked = mask_strings(value, dialect)
    if matching_close(masked, opener.end() - 1) != len(value) - 1:
        return False
    elements = _split_masked(value[opener.end():-1], masked[opener.end():-1])
    if not elements:
        return False
    for text, element_masked in elements:
        pair = _split_pair(text, element_masked)
        if pair is None:
            if not _is_literal(text, dialect):
                return False
            continue
        key, item = pair
        if not (_is_literal(key, dialect) or _BARE_IDENTIFIER_RE.match(key)):
            return False
        if not _is_literal(item, dialect):
            return False
    return True


def _split_pair(text: str, masked: str) -> tuple[str, str] | None:
    """Split a map entry such as ``"a": 1``, ``a => 1`` or ``a to 1``."""
    for separator in _PAIR_SEPARATORS:
        for match in separator.finditer(masked):
            if _depth_at(masked, match.start()) == 0:
                return text[: match.start()].strip(), text[match.end():].strip()
    return None


# =============================================================================
# Assertions
# =============================================================================


def parse_assertions(statement: Statement, dialect: Dialect) -> list[Assertion]:
    """Find the assertion statements in a logical statement.

    Recognises, in order of precedence: keyword ``assert`` statements
    (Python), paren-less assertion commands (minitest, tSQLt), infix
    matchers (``shouldBe``) and assertion calls with optional receivers and
    chained matchers.

    Args:
        statement: Logical statement to scan.
        dialect: Dialect supplying the assertion patterns.

    Returns:
        Parsed assertions (usually zero or one).
    """
    if dialect.assert_statement is not None:
        match = dialect.assert_statement.match(statement.masked)
        if match is not None:
            return [_parse_assert_statement(statement, match, dialect)]

    for pattern in dialect.command_assertions:
        match = pattern.match(statement.masked)
        if match is not None:
            operands = _operands_from_span(statement, match.start("args"), match.end("args"), dialect)
            return [_assertion(statement, match.group("func"), None, operands, dialect)]

    for pattern in dialect.infix_assertions:
        match = pattern.match(statement.masked)
        if match is not None:
            lhs = statement.text[match.start("lhs"):match.end("lhs")]
            rhs = statement.text[match.start("rhs"):match.end("rhs")]
            operands = [classify_operand(lhs, dialect), classify_operand(rhs, dialect)]
            return [_assertion(statement, match.group("func"), None, operands, dialect)]

    assertions: list[Assertion] = []
    consumed_until = -1
    for match in dialect.assertion_head.finditer(statement.masked):
        if match.start() < consumed_until:
            continue
        open_index = match.end() - 1
        close_index = matching_close(statement.masked, open_index)
        if close_index is None:
            continue
        operands = _operands_from_span(statement, open_index + 1, close_index, dialect)
        operands.extend(_chained_operands(statement, close_index + 1, dialect))
        subject = _subject_operand(statement, match, dialect)
        func = re.sub(r"\s+", "", match.group("func"))
        assertions.append(_assertion(statement, func, subject, operands, dialect))
        consumed_until = close_index
    return assertions


def _parse_assert_statement(
    statement: Statement, match: re.Match[str], dialect: Dialect
) -> Assertion:
    start, end = match.start("expr"), match.end("expr")
    pieces = _split_masked(statement.text[start:end], statement.masked[start:end])
    condition_text, condition_masked = pieces[0] if pieces else ("", "")
    operands: list[Operand] = []
    cursor = 0
    for comparison in _PYTHON_COMPARISON_RE.finditer(condition_masked):
        if _depth_at(condition_masked, comparison.start()) != 0:
            continue
        operands.append(classify_operand(condition_text[cursor:comparison.start()], dialect))
        cursor = comparison.end()
        if comparison.group(0).strip() in {"is", "is not"}:
            rest = condition_text[cursor:].strip()
            if rest in {"None", "True", "False"}:
                # identity checks against singletons are unary assertions
                return Assertion(
                    line=statement.line,
                    text=statement.text.strip(),
                    function="assert",
                    operands=tuple(operands),
                )
    operands.append(classify_operand(condition_text[cursor:], dialect))
    return Assertion(
        line=statement.line,
        text=statement.text.strip(),
        function="assert",
        operands=tuple(op for op in operands if op.text),
    )


def _depth_at(masked: str, index: int) -> int:
    depth = 0
    for ch in masked[:index]:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
    return depth


def _operands_from_span(
    statement: Statement, start: int, end: int, dialect: Dialect
) -> list[Operand]:
    pieces = _split_masked(statement.text[start:end], statement.masked[start:end])
    if len(pieces) == 1:
        text, masked = pieces[0]
        comparison = _COMPARISON_RE.search(masked)
        if comparison is not None and _depth_at(masked, comparison.start()) == 0:
            return [
                classify_operand(text[: comparison.start()], dialect),
                classify_operand(text[comparison.end():], dialect),
            ]
    return [classify_operand(text, dialect) for text, _ in pieces]


def _chained_operands(statement: Statement, position: int, dialect: Dialect) -> list[Operand]:
    """Collect operands of matchers chained after an assertion call."""
    operands: list[Operand] = []
    masked = statement.masked
    while position < len(masked):
        step = _CHAIN_STEP_RE.match(masked, position)
        if step is None:
            break
        position = step.end()
        if position < len(masked) and masked[position] == "(":
            close_index = matching_close(masked, position)
            if close_index is None:
                break
            operands.extend(_operands_from_span(statement, position + 1, close_index, dialect))
            position = close_index + 1
            continue
        if step.group("member") in _RUBY_TO_STEPS:
            matcher = _RUBY_MATCHER_RE.match(masked, position)
            if matcher is None:
                break
            position = matcher.end()
            if position < len(masked) and masked[position] == "(":
                close_index = matching_close(masked, position)
                if close_index is None:
                    break
                operands.extend(_operands_from_span(statement, position + 1, close_index, dialect))
            else:
                rest = statement.text[position:].strip().rstrip("}").strip()
                if rest:
                    operands.append(classify_operand(rest, dialect))
            break
    return operands


def _subject_operand(
    statement: Statement, match: re.Match[str], dialect: Dialect
) -> Operand | None:
    if match.group("subject") is None:
        return None
    subject_text = statement.text[match.start("subject"):match.end("subject")]
    root_match = _IDENTIFIER_RE.match(subject_text)
    root = dialect.normalize_identifier(root_match.group(0)) if root_match else ""
    if root in dialect.assertion_namespaces or subject_text in dialect.assertion_namespaces:
        return None
    return classify_operand(subject_text, dialect)


def _assertion(
    statement: Statement,
    func: str,
    subject: Operand | None,
    operands: list[Operand],
    dialect: Dialect,
) -> Assertion:
    operands = _drop_context_arguments(operands, dialect)
    operands = _drop_message_arguments(func, operands)
    return Assertion(
        line=statement.line,
        text=statement.text.strip(),
        function=func,
        subject=subject,
        operands=tuple(operands),
    )


def _drop_context_arguments(operands: list[Operand], dialect: Dialect) -> list[Operand]:
    if operands and operands[0].text in dialect.context_args:
        return operands[1:]
    return operands


def _drop_message_arguments(func: str, operands: list[Operand]) -> list[Operand]:
    """Remove string-literal failure messages from an operand list."""

    def is_message(operand: Operand) -> bool:
        return operand.kind is OperandKind.LITERAL and _STRING_RE.match(operand.text) is not None

    if len(operands) >= 3:
        if is_message(operands[0]):
            operands = operands[1:]
        if len(operands) >= 3 and is_message(operands[-1]):
            operands = operands[:-1]
    elif len(operands) == 2 and _UNARY_ASSERTION_RE.search(func) and is_message(operands[-1]):
        operands = operands[:-1]
    if (
        len(operands) == 3
        and _TOLERANCE_ASSERTION_RE.search(func)
        and operands[-1].kind is OperandKind.LITERAL
        and _NUMBER_RE.match(operands[-1].text)
    ):
        # delta or precision of a two-value comparison
        operands = operands[:-1]
    return operands


__all__ = [
    "MAX_STATEMENT_LINES",
    "Statement",
    "argument_value",
    "call_arguments",
    "categorize",
    "classify_operand",
    "find_declarations",
    "find_references",
    "identifier_key",
    "identifier_prefix",
    "join_statements",
    "mask_strings",
    "mask_source",
    "matching_close",
    "parse_assertions",
    "scan_source",
    "split_arguments",
]
