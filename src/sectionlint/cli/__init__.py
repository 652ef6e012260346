"""Command-line interface for sectionlint.

Example:
    $ sectionlint check tests/ --format sarif --output sectionlint.sarif
    $ sectionlint rules
    $ sectionlint dialects
"""

from __future__ import annotations

from sectionlint.cli.main import cli, main

__all__: list[str] = ["cli", "main"]
