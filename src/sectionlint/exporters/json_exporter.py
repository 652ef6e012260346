"""JSON exporter for Report.

Serializes the Report model with pydantic's model_dump() and adds a summary
block with counts and the process exit status, so CI jobs can read the
outcome without recomputing it.

Example:
    >>> from sectionlint.exporters.json_exporter import export_json
    >>> export_json(report, Path("output/sectionlint.json"))
    PosixPath('output/sectionlint.json')
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from sectionlint.result import Report

logger = structlog.get_logger(__name__)


def build_json_document(report: Report) -> dict[str, Any]:
    """Build the JSON-compatible document for a report."""
    data = report.model_dump(mode="json")
    data["summary"] = {
        "files": len(report.files),
        "tests": report.test_count,
        "violations": len(report.violations),
        "errors": report.error_count,
        "warnings": report.warning_count,
        "by_rule": report.counts_by_rule(),
        "exit_code": report.exit_code,
    }
    return data


def render_json(report: Report) -> str:
    """Render a report as pretty-printed JSON."""
    return json.dumps(build_json_document(report), indent=2, ensure_ascii=False) + "\n"


def export_json(
    report: Report,
    output_path: Path,
) -> Path:
    """Export a Report to a JSON file.

    Args:
        report: Report to export.
        output_path: Path where JSON file should be written.

    Returns:
        The output path where the file was written.

    Raises:
        OSError: If file write fails due to permissions or disk space.
    """
    log = logger.bind(
        component="json_exporter",
        output_path=str(output_path),
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_json(report), encoding="utf-8")

    log.info(
        "json_export_complete",
        violations_count=len(report.violations),
        exit_code=report.exit_code,
    )
    return output_path


__all__ = ["build_json_document", "export_json", "render_json"]
