"""SARIF 2.1.0 exporter for Report.

Exports a Report to SARIF (Static Analysis Results Interchange Format)
version 2.1.0, compatible with GitHub Code Scanning and other SARIF consumers.

SARIF Specification: https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html

Example:
    >>> from sectionlint.exporters.sarif_exporter import export_sarif
    >>> export_sarif(report, Path("output/sectionlint.sarif"))
    PosixPath('output/sectionlint.sarif')
"""

from __future__ import annotations

import json
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

import structlog

from sectionlint import __version__
from sectionlint.rules import RULES

if TYPE_CHECKING:
    from sectionlint.result import Report, Violation

logger = structlog.get_logger(__name__)

SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
SARIF_VERSION = "2.1.0"

TOOL_NAME = "sectionlint"


def render_sarif(report: Report) -> str:
    """Render a report as a SARIF 2.1.0 JSON document."""
    return json.dumps(build_sarif_document(report), indent=2, ensure_ascii=False) + "\n"


def export_sarif(
    report: Report,
    output_path: Path,
) -> Path:
    """Export a Report to SARIF 2.1.0 format.

    Args:
        report: Report to export.
        output_path: Path where SARIF file should be written.

    Returns:
        The output path where the file was written.

    Raises:
        OSError: If file write fails due to permissions or disk space.
    """
    log = logger.bind(
        component="sarif_exporter",
        output_path=str(output_path),
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_sarif(report), encoding="utf-8")

    log.info(
        "sarif_export_complete",
        violations_count=len(report.violations),
        rules_count=len(_get_unique_rule_ids(report.violations)),
    )
    return output_path


def build_sarif_document(report: Report) -> dict[str, Any]:
    """Build the complete SARIF document structure.

    Args:
        report: Report to convert.

    Returns:
        SARIF document as dictionary.
    """
    rule_ids = sorted(_get_unique_rule_ids(report.violations))
    rule_index = {rule_id: index for index, rule_id in enumerate(rule_ids)}

    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "rules": [_build_rule(rule_id) for rule_id in rule_ids],
                    }
                },
                "invocations": [
                    {
                        "executionSuccessful": not report.has_fatal,
                        "exitCode": report.exit_code,
                    }
                ],
                "results": [
                    _build_result(violation, rule_index[violation.rule_id])
                    for violation in report.violations
                ],
            }
        ],
    }


def _get_unique_rule_ids(violations: list[Violation]) -> set[str]:
    return {v.rule_id for v in violations}


def _build_rule(rule_id: str) -> dict[str, Any]:
    """Build a SARIF reportingDescriptor from the rule catalog."""
    rule = RULES.get(rule_id)
    if rule is None:
        return {"id": rule_id, "shortDescription": {"text": rule_id}}
    return {
        "id": rule.rule_id,
        "name": "".join(part.capitalize() for part in rule.rule_id.split("-")),
        "shortDescription": {"text": rule.name},
        "fullDescription": {"text": rule.description},
        "defaultConfiguration": {"level": _map_severity_to_level(rule.severity)},
        "properties": {"category": rule.category},
    }


def _build_result(violation: Violation, rule_index: int) -> dict[str, Any]:
    """Build a SARIF result from a violation.

    Args:
        violation: Violation to convert.
        rule_index: Index of the violation's rule in the driver's rules.

    Returns:
        SARIF result object.
    """
    physical_location: dict[str, Any] = {
        "artifactLocation": {"uri": PurePath(violation.file_path).as_posix()},
    }
    # line 0 marks file-level errors, which have no region
    if violation.line > 0:
        physical_location["region"] = {"startLine": violation.line}

    location: dict[str, Any] = {"physicalLocation": physical_location}
    if violation.test_name:
        location["logicalLocations"] = [
            {"name": violation.test_name, "kind": "function"},
        ]

    text = violation.message
    if violation.suggestion:
        text = f"{text}. {violation.suggestion}"

    result: dict[str, Any] = {
        "ruleId": violation.rule_id,
        "ruleIndex": rule_index,
        "level": _map_severity_to_level(violation.severity),
        "message": {"text": text},
        "locations": [location],
    }
    properties = {
        key: value
        for key, value in (("section", violation.section), ("identifier", violation.identifier))
        if value
    }
    if properties:
        result["properties"] = properties
    return result


def _map_severity_to_level(severity: str) -> str:
    """Map violation severity to SARIF level.

    Args:
        severity: Violation severity ("error" or "warning").

    Returns:
        SARIF level ("error", "warning", or "note").
    """
    mapping = {
        "error": "error",
        "warning": "warning",
    }
    return mapping.get(severity, "note")


__all__ = ["build_sarif_document", "export_sarif", "render_sarif"]
