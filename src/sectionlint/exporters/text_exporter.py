"""Plain-text exporter for Report.

Violations are grouped by file, then by test, in the report's sorted order:

    tests/OrderTests.cs
      Total_IncludesTax
        14  error    naming-prefix  [SETUP] 'barLogger' is declared in SETUP ...
                     -> Rename to 'envBarLogger'

    2 tests in 1 file: 1 error, 0 warnings
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from sectionlint.result import Report, Violation

logger = structlog.get_logger(__name__)

_INDENT = "  "


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _format_violation(violation: Violation) -> list[str]:
    section = f"[{violation.section}] " if violation.section else ""
    lines = [
        f"{_INDENT * 2}{violation.line:<4} {violation.severity:<8} "
        f"{violation.rule_id}  {section}{violation.message}"
    ]
    if violation.suggestion:
        lines.append(f"{_INDENT * 2}{'':<4} {'':<8} -> {violation.suggestion}")
    return lines


def summary_line(report: Report) -> str:
    """One-line totals, e.g. ``3 tests in 2 files: 1 error, 2 warnings``."""
    return (
        f"{_plural(report.test_count, 'test')} in {_plural(len(report.files), 'file')}: "
        f"{_plural(report.error_count, 'error')}, {_plural(report.warning_count, 'warning')}"
    )


def render_text(report: Report) -> str:
    """Render a report as human-readable text.

    Args:
        report: Report to render.

    Returns:
        The text report, ending with a summary line and a newline.
    """
    lines: list[str] = []
    current_file: str | None = None
    for group in report.groups:
        if group.file_path != current_file:
            if current_file is not None:
                lines.append("")
            lines.append(group.file_path)
            current_file = group.file_path
        lines.append(f"{_INDENT}{group.test_name or '<file>'}")
        for violation in group.violations:
            lines.extend(_format_violation(violation))

    if lines:
        lines.append("")
    lines.append(summary_line(report))
    return "\n".join(lines) + "\n"


def export_text(report: Report, output_path: Path) -> Path:
    """Write the text report to a file.

    Args:
        report: Report to export.
        output_path: Path where the report should be written.

    Returns:
        The output path where the file was written.

    Raises:
        OSError: If file write fails due to permissions or disk space.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_text(report), encoding="utf-8")

    logger.bind(component="text_exporter", output_path=str(output_path)).info(
        "text_export_complete",
        violations_count=len(report.violations),
    )
    return output_path


__all__ = ["export_text", "render_text", "summary_line"]
