"""Main entry point for the sectionlint CLI.

Commands:
    sectionlint check: Analyse test files and report violations
    sectionlint rules: List the rule catalog
    sectionlint dialects: List supported dialects and their extensions

Example:
    $ sectionlint --help
    $ sectionlint check tests/ --config sectionlint.yaml --format json
    $ sectionlint check OrderTests.cs --dialect csharp --fail-fast
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from importlib.metadata import version as get_version
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from sectionlint.checker import ConformanceChecker, read_sources
from sectionlint.cli.config_loader import load_config
from sectionlint.cli.utils import ExitCode, error, error_exit, info, success, warn
from sectionlint.dialects import available_dialects, get_dialect, supported_extensions
from sectionlint.errors import ConfigurationError
from sectionlint.exporters import OUTPUT_FORMATS, export_json, export_sarif, export_text, render
from sectionlint.exporters.text_exporter import summary_line
from sectionlint.observability import configure_logging
from sectionlint.result import merge_reports
from sectionlint.rules import RULES

logger = structlog.get_logger(__name__)


def _get_version() -> str:
    """Get the sectionlint package version.

    Returns:
        Version string from package metadata, or 'unknown' if not installed.
    """
    try:
        return get_version("sectionlint")
    except Exception:
        return "unknown"


def collect_files(paths: Iterable[str]) -> list[str]:
    """Expand the command-line paths into the files to analyse.

    Files named explicitly are always included. Directories are walked
    recursively for files with a known dialect extension, skipping hidden
    directories.

    Args:
        paths: Files and directories from the command line.

    Returns:
        Unique file paths, in command-line order with directory contents sorted.
    """
    extensions = supported_extensions()
    seen: set[str] = set()
    files: list[str] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            candidates = sorted(
                candidate
                for candidate in path.rglob("*")
                if candidate.is_file()
                and candidate.suffix.lower() in extensions
                and not any(part.startswith(".") for part in candidate.relative_to(path).parts)
            )
        else:
            candidates = [path]
        for candidate in candidates:
            key = str(candidate)
            if key not in seen:
                seen.add(key)
                files.append(key)
    return files


@click.group(
    name="sectionlint",
    help="sectionlint - structural conformance checker for sectioned unit tests.",
    epilog="Use 'sectionlint <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="sectionlint",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Root command group for the sectionlint CLI."""
    ctx.ensure_object(dict)
    # logs go to stderr; reports own stdout
    configure_logging("WARNING")


@cli.command(name="check", help="Analyse test files and report structure violations.")
@click.argument("paths", nargs=-1, required=True, type=click.Path())
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (default: ./sectionlint.yaml if present).",
)
@click.option(
    "--dialect",
    default=None,
    help="Force a dialect for every file instead of inferring it from the extension.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(1, 64),
    default=None,
    help="Number of files analysed concurrently (overrides max_workers).",
)
@click.option(
    "--fail-fast",
    is_flag=True,
    default=False,
    help="Stop scheduling files after the first fatal analysis error.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.option("--log-json", is_flag=True, default=False, help="Emit logs as JSON lines.")
@click.pass_context
def check_command(
    ctx: click.Context,
    paths: tuple[str, ...],
    config_path: str | None,
    dialect: str | None,
    output_format: str,
    output_path: str | None,
    jobs: int | None,
    fail_fast: bool,
    verbose: bool,
    log_json: bool,
) -> None:
    """Analyse test files and exit with 0 (clean), 1 (errors) or 2 (fatal)."""
    configure_logging("DEBUG" if verbose else "WARNING", json_output=log_json)

    try:
        config = load_config(config_path).with_overrides(dialect=dialect, max_workers=jobs)
    except ConfigurationError as e:
        error_exit(str(e), exit_code=ExitCode.FATAL)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        error_exit(f"Invalid option: {messages}", exit_code=ExitCode.FATAL)

    files = collect_files(paths)
    if not files:
        warn("No test files found", paths=", ".join(paths))

    sources = read_sources(files, dialect=config.dialect)
    checker = ConformanceChecker(config)
    try:
        report = merge_reports(checker.analyze_project(sources, fail_fast=fail_fast))
    except Exception as e:
        logger.exception("check_command_failed", error=str(e))
        error_exit(f"Analysis failed: {e}", exit_code=ExitCode.FATAL)

    if output_path is None:
        click.echo(render(report, output_format), nl=False)
    else:
        exporters = {"text": export_text, "json": export_json, "sarif": export_sarif}
        try:
            written = exporters[output_format](report, Path(output_path))
        except OSError as e:
            error_exit(f"Cannot write report: {e}", exit_code=ExitCode.FATAL, path=output_path)
        info(f"Report written to {written}")

    if output_format != "text" or output_path is not None:
        info(summary_line(report))
    ctx.exit(report.exit_code)


@cli.command(name="rules", help="List the rule catalog.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
def rules_command(output_format: str) -> None:
    """Print every rule with its category, default severity and status."""
    rules = sorted(RULES.values(), key=lambda rule: (rule.category, rule.rule_id))
    if output_format == "json":
        success(json.dumps([rule.model_dump(mode="json") for rule in rules], indent=2))
        return

    width = max(len(rule.rule_id) for rule in rules)
    for rule in rules:
        status = "" if rule.default_enabled else "  (disabled by default)"
        success(f"{rule.rule_id:<{width}}  {rule.severity:<7}  {rule.category:<15}  {rule.name}{status}")


@cli.command(name="dialects", help="List supported dialects and their file extensions.")
def dialects_command() -> None:
    """Print every registered dialect."""
    names = available_dialects()
    width = max(len(name) for name in names)
    for name in names:
        dialect = get_dialect(name)
        success(f"{name:<{width}}  {dialect.display_name:<14}  {' '.join(dialect.extensions)}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the sectionlint CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        # with standalone_mode=False, ctx.exit(code) is returned rather than raised
        exit_code = cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(ExitCode.FATAL)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(ExitCode.FATAL)
    except Exception as e:
        # unexpected errors outside a command still exit as fatal
        error(f"Unexpected error: {e}")
        sys.exit(ExitCode.FATAL)
    sys.exit(exit_code if isinstance(exit_code, int) else ExitCode.SUCCESS)


if __name__ == "__main__":
    main()
