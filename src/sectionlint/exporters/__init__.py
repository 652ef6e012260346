"""Exporters for analysis reports.

This module contains exporters for different output formats:
- text: Human-readable report grouped by file and test
- json: Report model dump plus a summary block
- sarif: SARIF 2.1.0 for GitHub Code Scanning and other SARIF consumers

Each format has a ``render_*`` function returning a string and an
``export_*`` function writing it to a file.

Example:
    >>> from sectionlint.exporters import export_sarif, render
    >>> print(render(report, "text"))
    >>> export_sarif(report, Path("output/sectionlint.sarif"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Final

from sectionlint.exporters.json_exporter import export_json, render_json
from sectionlint.exporters.sarif_exporter import export_sarif, render_sarif
from sectionlint.exporters.text_exporter import export_text, render_text

if TYPE_CHECKING:
    from sectionlint.result import Report

RENDERERS: Final[dict[str, Callable[[Report], str]]] = {
    "text": render_text,
    "json": render_json,
    "sarif": render_sarif,
}

OUTPUT_FORMATS: Final[tuple[str, ...]] = tuple(RENDERERS)


def render(report: Report, output_format: str) -> str:
    """Render a report in the named format.

    Args:
        report: Report to render.
        output_format: One of OUTPUT_FORMATS.

    Returns:
        The rendered document.

    Raises:
        ValueError: If the format is unknown.
    """
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        msg = f"Unknown output format '{output_format}'. Available: {', '.join(OUTPUT_FORMATS)}"
        raise ValueError(msg)
    return renderer(report)


__all__: list[str] = [
    "OUTPUT_FORMATS",
    "RENDERERS",
    "export_json",
    "export_sarif",
    "export_text",
    "render",
    "render_json",
    "render_sarif",
    "render_text",
]
