"""Exception hierarchy for sectionlint.

All exceptions inherit from SectionLintError, the base exception class.
Rule breaches are never raised: they are reported as Violation values.
These exceptions cover the failures that stop analysis of a single file
or stop the tool before analysis starts.

Exception Hierarchy:
    SectionLintError (base)
    ├── FatalAnalysisError           # SL-E100: File cannot be analysed
    │   ├── UnreadableSourceError    # SL-E101: File cannot be read/decoded
    │   └── UnsupportedDialectError  # SL-E102: No dialect for the file
    └── ConfigurationError           # SL-E110: Invalid configuration
"""

from __future__ import annotations


class SectionLintError(Exception):
    """Base exception for all sectionlint errors.

    Attributes:
        error_code: The SL-E* error code.
        resolution: Suggested resolution for the error.
    """

    error_code: str = "SL-E000"
    resolution: str = "Check the sectionlint invocation"


class FatalAnalysisError(SectionLintError):
    """SL-E100: A file could not be analysed at all.

    Caught at the file-processing boundary and converted into a single
    synthetic violation so the rest of the run continues.

    Attributes:
        path: The file that failed.
        cause: Human-readable description of the failure.
    """

    error_code: str = "SL-E100"

    def __init__(self, path: str, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"[{self.error_code}] Cannot analyse '{path}': {cause}")


class UnreadableSourceError(FatalAnalysisError):
    """SL-E101: The file could not be read or decoded."""

    error_code: str = "SL-E101"
    resolution: str = "Check that the file exists, is readable and is UTF-8 encoded"


class UnsupportedDialectError(FatalAnalysisError):
    """SL-E102: No dialect is registered for the file or the requested name.

    Attributes:
        dialect: The dialect name or file extension that was requested.
        available: Names of the registered dialects.
    """

    error_code: str = "SL-E102"

    def __init__(self, path: str, dialect: str, available: list[str]) -> None:
        self.dialect = dialect
        self.available = available
        self.resolution = f"Pass --dialect with one of: {', '.join(available)}"
        super().__init__(path, f"unsupported dialect '{dialect}'")


class ConfigurationError(SectionLintError):
    """SL-E110: The configuration file is missing or invalid.

    Attributes:
        source: Where the configuration came from (file path or "inline").
    """

    error_code: str = "SL-E110"
    resolution: str = "Fix the configuration file and re-run"

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"[{self.error_code}] Invalid configuration in {source}: {message}")


__all__ = [
    "ConfigurationError",
    "FatalAnalysisError",
    "SectionLintError",
    "UnreadableSourceError",
    "UnsupportedDialectError",
]
