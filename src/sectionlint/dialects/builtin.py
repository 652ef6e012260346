"""Built-in dialect definitions.

Each definition captures only the lexical conventions the checker needs:
comment syntax, how tests are marked, how bindings are declared and how
assertions are written. Patterns are deliberately permissive; anything a
pattern misses degrades to "not recognised" rather than to an error.
"""

from __future__ import annotations

import re
from typing import Final

from sectionlint.dialects.base import Dialect, compile_all

# Receiver of an assertion call: ``self.``, ``$this->``, ``mockRepo.``
_RECEIVER: Final[str] = (
    r"(?:(?P<subject>[$@]?[A-Za-z_]\w*(?:\s*(?:\.|->|::|\?\.)\s*[A-Za-z_]\w*)*)"
    r"\s*(?:\.|->|::|\?\.)\s*)?"
)

# Assertion namespaces whose every method is an assertion (Assert.AreEqual)
_NAMESPACED: Final[str] = (
    r"(?:Assert|CollectionAssert|StringAssert|ClassicAssert|Assertions|assert|require"
    r"|Truth|XCTest)\.\w+"
)

_ASSERT_FUNCS: Final[str] = (
    r"(?P<func>"
    + _NAMESPACED
    + r"|assert\w*|Assert\w*|refute\w*|expect\w*|Expect\w*|EXPECT_\w+|ASSERT_\w+"
    r"|XCTAssert\w*|STAssert\w*|should\w*|Should\w*|verify\w*|Verify\w*"
    r"|TEST_ASSERT\w*|ck_assert\w*|CHECK\w*|REQUIRE\w*|OCMVerify\w*)"
)

_ASSERTION_HEAD: Final[re.Pattern[str]] = re.compile(
    rf"(?<![\w$@]){_RECEIVER}{_ASSERT_FUNCS}\s*!?\s*(?:<[^<>()]*>\s*)?\("
)

_GENERIC_VERIFIABLE: Final[tuple[re.Pattern[str], ...]] = compile_all(
    r"\bverifiable\b", flags=re.IGNORECASE
)

_JVM_TYPED_DECLARATION: Final[str] = (
    r"(?:^|[\s;{(])(?:final\s+)?(?P<type>var|[A-Z][\w.]*(?:<[^=;()]*>)?(?:\[\])*\??"
    r"|int|long|double|float|decimal|bool|boolean|string|char|byte|short|object|dynamic)"
    r"\s+(?P<names>[A-Za-z_]\w*)\s*(?:=(?!=)|;)"
)

CSHARP: Final[Dialect] = Dialect(
    name="csharp",
    display_name="C#",
    extensions=(".cs",),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*\[\s*(?:Test|Fact|Theory|TestMethod|TestCase|DataTestMethod)\b[^\]]*\]",
    ),
    function_pattern=re.compile(
        r"\b(?:public|private|internal|protected)?\s*(?:static\s+)?(?:async\s+)?"
        r"[\w<>\[\],.?]+\s+(?P<name>\w+)\s*\("
    ),
    declaration_patterns=compile_all(
        _JVM_TYPED_DECLARATION,
        r"\bout\s+var\s+(?P<names>[A-Za-z_]\w*)",
        r"\bvar\s*\((?P<names>[^)]*)\)\s*=",
    ),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\.Verifiable\s*\(", r"MockBehavior\.Strict"),
    aliases=("c#", "cs"),
)

JAVA: Final[Dialect] = Dialect(
    name="java",
    display_name="Java",
    extensions=(".java",),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(r"^\s*@(?:Test|ParameterizedTest|RepeatedTest)\b"),
    function_pattern=re.compile(
        r"\b(?:public\s+|protected\s+|private\s+)?(?:static\s+)?(?:final\s+)?"
        r"[\w<>\[\],.]+\s+(?P<name>\w+)\s*\("
    ),
    declaration_patterns=compile_all(_JVM_TYPED_DECLARATION),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\bexpect\s*\(", r"\boneOf\s*\(", r"\bexpectLastCall\s*\("),
)

KOTLIN: Final[Dialect] = Dialect(
    name="kotlin",
    display_name="Kotlin",
    extensions=(".kt", ".kts"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(r"^\s*@(?:Test|ParameterizedTest)\b"),
    function_pattern=re.compile(r"\bfun\s+(?P<name>`[^`]+`|\w+)\s*\("),
    declaration_patterns=compile_all(
        r"\b(?:val|var|lateinit\s+var)\s+(?P<names>`[^`]+`|[A-Za-z_]\w*)",
        r"\b(?:val|var)\s*\((?P<names>[^)]*)\)\s*=",
    ),
    assertion_head=_ASSERTION_HEAD,
    infix_assertions=compile_all(
        r"^\s*(?P<lhs>[A-Za-z_][\w.()]*)\s+(?P<func>should\w*)\s+(?P<rhs>.+?)\s*$"
    ),
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\bevery\s*\{", r"\bcoEvery\s*\{", r"\bexpect\s*\("),
    multiline_strings=('"""',),
)

SCALA: Final[Dialect] = Dialect(
    name="scala",
    display_name="Scala",
    extensions=(".scala", ".sc"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*test\s*\(\s*\"(?P<name>[^\"]+)\"",
        r"^\s*(?:it|they)\s+(?:should|must|can)\s+\"(?P<name>[^\"]+)\"\s+in\s*\{",
        r"^\s*\"(?P<name>[^\"]+)\"\s+(?:in|should|must|when)\s*\{",
        r"^\s*@Test\b",
    ),
    function_pattern=re.compile(r"\bdef\s+(?P<name>\w+)"),
    declaration_patterns=compile_all(
        r"\b(?:val|var|lazy\s+val)\s+(?P<names>[A-Za-z_]\w*)",
        r"\b(?:val|var)\s*\((?P<names>[^)]*)\)\s*=",
    ),
    assertion_head=_ASSERTION_HEAD,
    infix_assertions=compile_all(
        r"^\s*(?P<lhs>[A-Za-z_][\w.()]*)\s+(?P<func>should(?:\s+(?:be|equal))?|shouldBe|shouldEqual|mustBe)\s+(?P<rhs>.+?)\s*$"
    ),
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\.expects\s*\("),
    multiline_strings=('"""',),
)

GO: Final[Dialect] = Dialect(
    name="go",
    display_name="Go",
    extensions=(".go",),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*func\s+(?P<name>Test\w*)\s*\(\s*\w+\s+\*testing\.T\s*\)",
    ),
    declaration_patterns=compile_all(
        r"(?:^|[\s;{])(?P<names>[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s*:=",
        r"\bvar\s+(?P<names>[A-Za-z_]\w*)",
    ),
    assertion_head=_ASSERTION_HEAD,
    context_args=frozenset({"t", "b", "suite.T()", "s.T()"}),
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\.On\s*\(", r"\.EXPECT\s*\(\s*\)"),
)

_C_TYPED_DECLARATION: Final[str] = (
    r"^\s*(?:(?:const|static|volatile|unsigned|signed|struct|enum|auto|register|__block)\s+)*"
    r"(?P<type>[A-Za-z_][\w:]*(?:<[^;=()]*>)?)(?:\s*[*&]+\s*|\s+)(?P<names>[A-Za-z_]\w*)"
    r"\s*(?:=(?!=)|;|\{|\[)"
)

C: Final[Dialect] = Dialect(
    name="c",
    display_name="C",
    extensions=(".c", ".h"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*(?:static\s+)?void\s+(?P<name>[Tt]est_?\w*)\s*\(",
        r"^\s*START_TEST\s*\(\s*(?P<name>\w+)\s*\)",
    ),
    declaration_patterns=compile_all(_C_TYPED_DECLARATION),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\bexpect_\w+\s*\(", r"\bwill_return\s*\("),
)

CPP: Final[Dialect] = Dialect(
    name="cpp",
    display_name="C++",
    extensions=(".cpp", ".cc", ".cxx", ".hpp", ".hh"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*TEST(?:_F|_P)?\s*\(\s*\w+\s*,\s*(?P<name>\w+)\s*\)",
        r"^\s*(?:TEST_CASE|SCENARIO)\s*\(\s*\"(?P<name>[^\"]+)\"",
        r"^\s*BOOST_(?:AUTO|FIXTURE)_TEST_CASE\s*\(\s*(?P<name>\w+)",
    ),
    declaration_patterns=compile_all(
        _C_TYPED_DECLARATION,
        r"^\s*(?P<type>[A-Z][\w:]*(?:<[^;=()]*>)?)\s+(?P<names>[a-z_]\w*)\s*\(",
    ),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\bEXPECT_CALL\s*\("),
    aliases=("c++", "cplusplus"),
)

OBJECTIVE_C: Final[Dialect] = Dialect(
    name="objective-c",
    display_name="Objective-C",
    extensions=(".m", ".mm"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(r"^\s*-\s*\(\s*void\s*\)\s*(?P<name>test\w*)\b"),
    declaration_patterns=compile_all(_C_TYPED_DECLARATION),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\bOCMExpect\s*\(", r"\[\s*\[\s*\w+\s+expect\s*\]"),
    aliases=("objc", "objectivec"),
)

RUST: Final[Dialect] = Dialect(
    name="rust",
    display_name="Rust",
    extensions=(".rs",),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(r"^\s*#\[\s*(?:[\w:]+::)?test\b[^\]]*\]"),
    function_pattern=re.compile(r"\bfn\s+(?P<name>\w+)\s*\("),
    declaration_patterns=compile_all(
        r"\blet\s+(?:mut\s+)?(?P<names>[A-Za-z_]\w*)",
        r"\blet\s+(?:mut\s+)?\((?P<names>[^)]*)\)",
    ),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\.expect_\w+\s*\("),
    string_quotes='"',
)

_JS_DECLARATIONS: Final[tuple[re.Pattern[str], ...]] = compile_all(
    r"\b(?:const|let|var)\s+(?P<names>[A-Za-z_$][\w$]*)",
    r"\b(?:const|let|var)\s*[\[{](?P<names>[^\]}]*)[\]}]\s*=",
)

_JS_MARKERS: Final[tuple[re.Pattern[str], ...]] = compile_all(
    r"^\s*(?:it|test)(?:\.(?:only|skip|concurrent|each\([^)]*\)))?\s*\(\s*(?P<q>['\"`])(?P<name>.+?)(?P=q)",
)

JAVASCRIPT: Final[Dialect] = Dialect(
    name="javascript",
    display_name="JavaScript",
    extensions=(".js", ".jsx", ".mjs", ".cjs"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=_JS_MARKERS,
    declaration_patterns=_JS_DECLARATIONS,
    assertion_head=_ASSERTION_HEAD,
    sigils="",
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\.expects\s*\("),
    aliases=("js",),
)

TYPESCRIPT: Final[Dialect] = Dialect(
    name="typescript",
    display_name="TypeScript",
    extensions=(".ts", ".tsx", ".mts", ".cts"),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=_JS_MARKERS,
    declaration_patterns=_JS_DECLARATIONS,
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\.expects\s*\("),
    aliases=("ts",),
)

DART: Final[Dialect] = Dialect(
    name="dart",
    display_name="Dart",
    extensions=(".dart",),
    comment_prefixes=("//",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*(?:test|testWidgets)\s*\(\s*(?P<q>['\"])(?P<name>.+?)(?P=q)",
    ),
    declaration_patterns=compile_all(
        r"\b(?:final|var|const|late\s+final|late)\s+(?:[A-Z]\w*(?:<[^=;]*>)?\??\s+)?"
        r"(?P<names>[A-Za-z_]\w*)\s*(?:=(?!=)|;)",
        r"^\s*(?P<type>[A-Z]\w*(?:<[^=;]*>)?\??|int|double|bool|num)\s+"
        r"(?P<names>[a-z_]\w*)\s*=(?!=)",
    ),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE,
    multiline_strings=('"""', "'''"),
)

PHP: Final[Dialect] = Dialect(
    name="php",
    display_name="PHP",
    extensions=(".php",),
    comment_prefixes=("//", "#"),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*(?:public\s+)?(?:static\s+)?function\s+(?P<name>test\w*)\s*\(",
        r"^\s*(?:\*\s*@test\b|#\[\s*Test\s*\])",
        r"^\s*(?:it|test)\s*\(\s*(?P<q>['\"])(?P<name>.+?)(?P=q)",
    ),
    function_pattern=re.compile(r"\bfunction\s+(?P<name>\w+)\s*\("),
    declaration_patterns=compile_all(r"^\s*\$(?P<names>[A-Za-z_]\w*)\s*=(?![=>])"),
    assertion_head=_ASSERTION_HEAD,
    sigils="$",
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"->expects\s*\(", r"->shouldReceive\s*\("),
)

RUBY: Final[Dialect] = Dialect(
    name="ruby",
    display_name="Ruby",
    extensions=(".rb",),
    comment_prefixes=("#",),
    test_markers=compile_all(
        r"^\s*(?:it|specify|scenario)\s*\(?\s*(?P<q>['\"])(?P<name>.+?)(?P=q)\s*\)?\s*(?:do|\{)",
        r"^\s*def\s+(?P<name>test_\w+)",
        r"^\s*test\s*\(?\s*(?P<q2>['\"])(?P<name2>.+?)(?P=q2)\s*\)?\s*do",
    ),
    body_style="indent",
    declaration_patterns=compile_all(
        r"^\s*(?P<names>@?[A-Za-z_]\w*(?:\s*,\s*@?[A-Za-z_]\w*)*)\s*=(?![=~>])",
        r"\blet!?\s*\(\s*:(?P<names>\w+)\s*\)",
        r"\bsubject\s*\(\s*:(?P<names>\w+)\s*\)",
    ),
    assertion_head=_ASSERTION_HEAD,
    command_assertions=compile_all(
        r"^\s*(?P<func>assert\w*|refute\w*)\s+(?P<args>[^(\s].*?)\s*$",
    ),
    sigils="@",
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\bexpect\s*\(\s*@?\w+\s*\)\s*\.to\s+receive\b", r"\.should_receive\b"),
    string_quotes="\"'",
    aliases=("rb",),
)

R: Final[Dialect] = Dialect(
    name="r",
    display_name="R",
    extensions=(".r", ".R"),
    comment_prefixes=("#",),
    test_markers=compile_all(r"^\s*test_that\s*\(\s*(?P<q>['\"])(?P<name>.+?)(?P=q)"),
    declaration_patterns=compile_all(r"^\s*(?P<names>[A-Za-z_.][\w.]*)\s*(?:<-|=(?!=))"),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE,
    string_quotes="\"'",
)

PYTHON: Final[Dialect] = Dialect(
    name="python",
    display_name="Python",
    extensions=(".py",),
    comment_prefixes=("#",),
    test_markers=compile_all(r"^\s*(?:async\s+)?def\s+(?P<name>test\w*)\s*\("),
    body_style="indent",
    declaration_patterns=compile_all(
        r"^\s*(?P<names>[A-Za-z_]\w*(?:\s*,\s*[A-Za-z_]\w*)*)\s*(?::\s*[^=]+)?=(?!=)",
        r"\bwith\s+.+?\bas\s+(?P<names>[A-Za-z_]\w*)",
    ),
    assertion_head=_ASSERTION_HEAD,
    assert_statement=re.compile(r"^\s*assert\s+(?P<expr>.+?)\s*$"),
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\bautospec\s*=\s*True"),
    string_quotes="\"'",
    multiline_strings=('"""', "'''"),
    aliases=("py",),
)

TSQL: Final[Dialect] = Dialect(
    name="tsql",
    display_name="T-SQL",
    extensions=(".sql",),
    comment_prefixes=("--",),
    block_comment=("/*", "*/"),
    test_markers=compile_all(
        r"^\s*CREATE\s+(?:OR\s+ALTER\s+)?PROC(?:EDURE)?\s+(?:\[?\w+\]?\.)?"
        r"(?:\[(?P<name>test[^\]]*)\]|(?P<name2>test\w*))",
        flags=re.IGNORECASE,
    ),
    body_style="terminator",
    terminator=re.compile(r"^\s*GO\s*;?\s*$", re.IGNORECASE),
    declaration_patterns=compile_all(
        r"^\s*(?:SET|SELECT)\s+@(?P<names>\w+)\s*=",
        flags=re.IGNORECASE,
    ),
    assertion_head=_ASSERTION_HEAD,
    command_assertions=compile_all(
        r"^\s*(?:EXEC(?:UTE)?\s+)?tSQLt\.(?P<func>Assert\w*|Fail)\s+(?P<args>.+?)\s*;?\s*$",
        flags=re.IGNORECASE,
    ),
    sigils="@",
    verifiable_markers=_GENERIC_VERIFIABLE
    + compile_all(r"\btSQLt\.SpyProcedure\b", flags=re.IGNORECASE),
    case_sensitive=False,
    string_quotes="'",
    backslash_escapes=False,
    aliases=("t-sql", "sql", "tsqlt"),
)

VISUAL_BASIC: Final[Dialect] = Dialect(
    name="visual-basic",
    display_name="Visual Basic",
    extensions=(".vb",),
    comment_prefixes=("'", "REM "),
    test_markers=compile_all(
        r"^\s*<\s*(?:Test|Fact|Theory|TestMethod)(?:\(\))?\s*>",
        flags=re.IGNORECASE,
    ),
    function_pattern=re.compile(r"\bSub\s+(?P<name>\w+)\s*\(", re.IGNORECASE),
    body_style="terminator",
    terminator=re.compile(r"^\s*End\s+Sub\b", re.IGNORECASE),
    declaration_patterns=compile_all(r"\bDim\s+(?P<names>[A-Za-z_]\w*)", flags=re.IGNORECASE),
    assertion_head=_ASSERTION_HEAD,
    verifiable_markers=_GENERIC_VERIFIABLE + compile_all(r"\.Verifiable\s*\("),
    case_sensitive=False,
    string_quotes='"',
    backslash_escapes=False,
    aliases=("vb", "vbnet", "visualbasic"),
)

BUILTIN_DIALECTS: Final[tuple[Dialect, ...]] = (
    CSHARP,
    JAVASCRIPT,
    TYPESCRIPT,
    KOTLIN,
    JAVA,
    GO,
    C,
    OBJECTIVE_C,
    PHP,
    RUBY,
    R,
    CPP,
    RUST,
    SCALA,
    DART,
    TSQL,
    VISUAL_BASIC,
    PYTHON,
)

__all__ = ["BUILTIN_DIALECTS"]
