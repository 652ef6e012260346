"""ConformanceChecker: the orchestrator of a test-structure analysis.

For each file the checker discovers tests, splits them into sections, builds
one symbol table per test, runs the naming and structure validators over it,
then the cross-reference validator, and collects the violations into a
Report.

Files are analysed in a thread pool. Sources are read fully into memory
before analysis starts, so analysis itself never touches the filesystem.
A file that cannot be analysed (unreadable, unsupported dialect) becomes a
single synthetic fatal-analysis-error violation and the run continues.

Example:
    >>> from sectionlint.checker import ConformanceChecker, read_sources
    >>> from sectionlint.config import AnalysisConfig
    >>>
    >>> checker = ConformanceChecker(AnalysisConfig(max_workers=8))
    >>> reports = checker.analyze_project(read_sources(["tests/OrderTests.cs"]))
    >>> for violation in reports[0].violations:
    ...     print(f"{violation.line}: {violation.rule_id}: {violation.message}")
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

import structlog

from sectionlint.config import AnalysisConfig
from sectionlint.dialects import Dialect, dialect_for_path, get_dialect
from sectionlint.discovery import discover_test_cases
from sectionlint.errors import FatalAnalysisError, UnreadableSourceError
from sectionlint.model import TestCase
from sectionlint.observability import get_tracer
from sectionlint.result import Report, Violation, build_report
from sectionlint.rules import RuleSet
from sectionlint.symbols import build_symbol_table
from sectionlint.validators import CrossReferenceValidator, NamingValidator, StructureValidator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """A source file read into memory, or the reason it could not be.

    Attributes:
        path: Path as given by the caller.
        text: File contents (None when ``error`` is set).
        dialect: Dialect name (None to infer it from the extension).
        error: Fatal error raised while reading or resolving the dialect.
    """

    path: str
    text: str | None = None
    dialect: str | None = None
    error: FatalAnalysisError | None = None


FileInput = SourceFile | tuple[str, str] | tuple[str, str, str | None]


class CancellationToken:
    """Run-level cancellation flag shared with worker threads.

    Cancelling stops files that have not started yet; reports already
    produced stay valid and are returned.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


def read_sources(paths: Iterable[str | Path], dialect: str | None = None) -> list[SourceFile]:
    """Read every file up front.

    Args:
        paths: Files to read.
        dialect: Dialect forced for every file (None infers it per file).

    Returns:
        One SourceFile per path, in input order. Failures are recorded on
        the SourceFile instead of being raised.
    """
    sources: list[SourceFile] = []
    for raw_path in paths:
        path = str(raw_path)
        try:
            resolved = get_dialect(dialect, path=path) if dialect else dialect_for_path(path)
        except FatalAnalysisError as e:
            sources.append(SourceFile(path=path, dialect=dialect, error=e))
            continue
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            error = UnreadableSourceError(path, str(e))
            sources.append(SourceFile(path=path, dialect=resolved.name, error=error))
            continue
        sources.append(SourceFile(path=path, text=text, dialect=resolved.name))
    return sources


class ConformanceChecker:
    """Analyses test sources against the configured rules.

    The checker holds no per-run state; one instance can analyse many files
    concurrently. The RuleSet and validators are built once at construction
    and are read-only afterwards.

    Attributes:
        config: The analysis configuration.
        rules: Enabled rules and their effective severities.
    """

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        """Initialize ConformanceChecker.

        Args:
            config: Analysis configuration. Defaults to AnalysisConfig().
        """
        self.config = config if config is not None else AnalysisConfig()
        self.rules = RuleSet.from_config(self.config)
        self._naming = NamingValidator(self.config, self.rules)
        self._structure = StructureValidator(self.config, self.rules)
        self._cross_reference = CrossReferenceValidator(self.config, self.rules)
        self._log = logger.bind(component="ConformanceChecker")

    def analyze_file(
        self,
        path: str | Path,
        text: str,
        dialect: Dialect | str | None = None,
    ) -> Report:
        """Analyse one file that is already in memory.

        Args:
            path: File path, used for reporting and dialect inference.
            text: File contents.
            dialect: Dialect or dialect name. Falls back to the configured
                dialect, then to the file extension.

        Returns:
            Report for the file. Fatal errors are reported, not raised.
        """
        file_path = str(path)
        with get_tracer().start_as_current_span("sectionlint.analyze_file") as span:
            span.set_attribute("sectionlint.file", file_path)
            test_cases: list[TestCase] = []
            try:
                resolved = self._resolve_dialect(file_path, dialect)
                span.set_attribute("sectionlint.dialect", resolved.name)
                test_cases = discover_test_cases(file_path, text, resolved)
                violations: list[Violation] = []
                for test_case in test_cases:
                    violations.extend(self._analyze(test_case, resolved))
            except FatalAnalysisError as e:
                self._log.warning(
                    "file_analysis_failed",
                    file=file_path,
                    error_code=e.error_code,
                    error=str(e),
                )
                violations = [self.rules.fatal(file_path, e)]

            report = build_report(violations, files=[file_path], test_count=len(test_cases))
            span.set_attribute("sectionlint.tests", report.test_count)
            span.set_attribute("sectionlint.violations", len(report.violations))

        self._log.debug(
            "file_analyzed",
            file=file_path,
            tests=report.test_count,
            violations=len(report.violations),
        )
        return report

    def analyze_source(self, source: SourceFile) -> Report:
        """Analyse a SourceFile produced by read_sources."""
        if source.error is not None:
            self._log.warning(
                "file_analysis_failed",
                file=source.path,
                error_code=source.error.error_code,
                error=str(source.error),
            )
            return build_report([self.rules.fatal(source.path, source.error)], files=[source.path])
        return self.analyze_file(source.path, source.text or "", source.dialect)

    def analyze_test_case(self, test_case: TestCase, dialect: Dialect | None = None) -> list[Violation]:
        """Run every validator against one discovered test.

        Args:
            test_case: The test to analyse.
            dialect: Its dialect; looked up from ``test_case.dialect`` if omitted.

        Returns:
            Unsorted violations of the test.
        """
        resolved = dialect if dialect is not None else get_dialect(test_case.dialect)
        return self._analyze(test_case, resolved)

    def _analyze(self, test_case: TestCase, dialect: Dialect) -> list[Violation]:
        table = build_symbol_table(test_case, dialect)
        violations = self._naming.validate(test_case, table)
        violations.extend(self._structure.validate(test_case, table))
        violations.extend(self._cross_reference.validate(test_case, table))
        return violations

    def analyze_project(
        self,
        files: Iterable[FileInput],
        cancel_token: CancellationToken | None = None,
        *,
        fail_fast: bool = False,
    ) -> list[Report]:
        """Analyse many files in parallel.

        Args:
            files: SourceFile values or (path, text[, dialect]) tuples.
            cancel_token: Token that stops files not yet started.
            fail_fast: Cancel the remaining files after the first fatal error.

        Returns:
            One report per analysed file, sorted by file path. Files skipped
            because of cancellation have no report.
        """
        sources = [_as_source(item) for item in files]
        token = cancel_token if cancel_token is not None else CancellationToken()
        if not sources:
            return []

        log = self._log.bind(total_files=len(sources), max_workers=self.config.max_workers)
        log.info("project_analysis_started")

        def _analyze_single(source: SourceFile) -> Report | None:
            if token.is_cancelled:
                return None
            return self.analyze_source(source)

        reports: list[Report] = []
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            future_to_path: dict[Future[Report | None], str] = {
                executor.submit(_analyze_single, source): source.path for source in sources
            }
            for future in as_completed(future_to_path):
                if future.cancelled():
                    continue
                report = future.result()
                if report is None:
                    continue
                reports.append(report)
                if fail_fast and report.has_fatal and not token.is_cancelled:
                    log.warning(
                        "project_analysis_cancelled",
                        reason="fatal_error",
                        file=future_to_path[future],
                    )
                    token.cancel()
                if token.is_cancelled:
                    for pending in future_to_path:
                        pending.cancel()

        reports.sort(key=lambda report: report.files)
        log.info(
            "project_analysis_completed",
            analyzed=len(reports),
            skipped=len(sources) - len(reports),
            violations=sum(len(report.violations) for report in reports),
        )
        return reports

    def _resolve_dialect(self, path: str, dialect: Dialect | str | None) -> Dialect:
        if isinstance(dialect, Dialect):
            return dialect
        name = dialect or self.config.dialect
        if name:
            return get_dialect(name, path=path)
        return dialect_for_path(path)


def _as_source(item: FileInput) -> SourceFile:
    if isinstance(item, SourceFile):
        return item
    path, text, *rest = item
    return SourceFile(path=str(path), text=text, dialect=rest[0] if rest else None)


def analyze_file(
    path: str | Path,
    text: str,
    dialect: Dialect | str | None = None,
    config: AnalysisConfig | None = None,
) -> Report:
    """Analyse one in-memory file with a fresh checker."""
    return ConformanceChecker(config).analyze_file(path, text, dialect)


def analyze_project(
    files: Sequence[FileInput],
    config: AnalysisConfig | None = None,
    cancel_token: CancellationToken | None = None,
) -> list[Report]:
    """Analyse many in-memory files with a fresh checker."""
    return ConformanceChecker(config).analyze_project(files, cancel_token)


__all__ = [
    "CancellationToken",
    "ConformanceChecker",
    "FileInput",
    "SourceFile",
    "analyze_file",
    "analyze_project",
    "read_sources",
]
