"""CLI utility functions and error handling.

This module provides shared utilities for the sectionlint CLI, including:
- Exit code constants
- Output helpers for consistent stderr/stdout usage

Reports go to stdout; every other message goes to stderr so that
``sectionlint check --format json > report.json`` stays machine readable.

Example:
    from sectionlint.cli.utils import error_exit, ExitCode

    if not path.exists():
        error_exit("Path not found", path=str(path))
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes of ``sectionlint check``.

    These match Report.exit_code so CI pipelines can branch on them.
    """

    SUCCESS = 0
    """No error-severity violations."""

    VIOLATIONS = 1
    """At least one error-severity violation."""

    FATAL = 2
    """A file could not be analysed, or the invocation itself failed."""


def _with_context(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if context_str:
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Args:
        message: Error message to display.
        **context: Optional context key-value pairs to include.

    Example:
        error("Config file not found", path="sectionlint.yaml")
        # Output: Error: Config file not found (path=sectionlint.yaml)
    """
    click.echo(_with_context("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.FATAL,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with a code.

    Args:
        message: Error message to display.
        exit_code: Exit code to use (default: FATAL).
        **context: Optional context key-value pairs to include.

    Raises:
        SystemExit: Always exits with the specified code.
    """
    error(message, **context)
    sys.exit(exit_code)


def warn(message: str, **context: str | int | bool | None) -> None:
    """Print a warning message to stderr.

    Example:
        warn("Skipping file with unknown extension", path="notes.txt")
    """
    click.echo(_with_context("Warning", message, context), err=True)


def success(message: str) -> None:
    """Print a message to stdout."""
    click.echo(message)


def info(message: str) -> None:
    """Print an informational message to stderr.

    Used for progress updates and status information that should
    not be captured by stdout redirection.
    """
    click.echo(message, err=True)


__all__ = ["ExitCode", "error", "error_exit", "info", "success", "warn"]
