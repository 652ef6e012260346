"""End-to-end tests for `sectionlint check`.

These run the real CLI over files on disk: discovery, configuration
loading, parallel analysis, exit codes and every output format.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from sectionlint.cli.main import cli

CLEAN_TEST = '''\
def test_total_includes_tax_for_each_line():
    # GIVEN
    given_items = [10, 32]
    # SYSTEM UNDER TEST
    sut = OrderCalculator()
    # WHEN
    actual_total = sut.total(given_items)
    # EXPECTATIONS
    expected_total = 42
    # THEN
    assert actual_total == expected_total
'''

LITERAL_ASSERTION_TEST = '''\
def test_total_includes_tax_for_each_line():
    # GIVEN
    given_items = [10, 32]
    # SYSTEM UNDER TEST
    sut = OrderCalculator()
    # WHEN
    actual_total = sut.total(given_items)
    # THEN
    assert actual_total == 42
'''

CSHARP_MISORDERED_TEST = """\
using Xunit;

public class OrderTests
{
    [Fact]
    public void Total_IncludesTaxForEachLine()
    {
        // WHEN
        var actualTotal = sut.Total();
        // SETUP
        var envClock = new FixedClock();
        // THEN
        Assert.Equal(expectedTotal, actualTotal);
    }
}
"""


class TestExitCodes:
    """Exit status reflects the worst outcome of the run."""

    @pytest.mark.requirement("exit-codes")
    def test_clean_run(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", CLEAN_TEST)

        result = cli_runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 0
        assert result.stdout == "1 test in 1 file: 0 errors, 0 warnings\n"

    @pytest.mark.requirement("exit-codes")
    def test_error_violation(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", LITERAL_ASSERTION_TEST)

        result = cli_runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        assert "no-literal-assertion" in result.stdout
        assert "literal 42" in result.stdout

    @pytest.mark.requirement("fatal-analysis-error")
    def test_fatal_file_does_not_stop_the_run(self, cli_runner: CliRunner, write_file) -> None:
        """Given an unsupported file next to a valid one, both are reported."""
        notes = write_file("notes.txt", "nothing to see")
        clean = write_file("tests/test_orders.py", CLEAN_TEST)

        result = cli_runner.invoke(cli, ["check", str(notes), str(clean), "--format", "json"])

        assert result.exit_code == 2
        document = json.loads(result.stdout)
        assert document["summary"]["exit_code"] == 2
        assert document["summary"]["tests"] == 1
        assert [v["rule_id"] for v in document["violations"]] == ["fatal-analysis-error"]
        assert document["violations"][0]["line"] == 0

    def test_missing_file_is_fatal(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(tmp_path / "test_missing.py")])

        assert result.exit_code == 2
        assert "SL-E101" in result.stdout

    def test_no_files_found(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 0
        assert "No test files found" in result.stderr


class TestDirectoryAnalysis:
    def test_walks_tree_and_reports_in_file_order(
        self, cli_runner: CliRunner, write_file, tmp_path: Path
    ) -> None:
        write_file("tests/b/test_orders.py", LITERAL_ASSERTION_TEST)
        write_file("tests/a/OrderTests.cs", CSHARP_MISORDERED_TEST)
        write_file("tests/.cache/test_stale.py", LITERAL_ASSERTION_TEST)

        result = cli_runner.invoke(cli, ["check", str(tmp_path / "tests"), "--format", "json", "-j", "2"])

        assert result.exit_code == 1
        document = json.loads(result.stdout)
        assert document["files"] == [
            str(tmp_path / "tests" / "a" / "OrderTests.cs"),
            str(tmp_path / "tests" / "b" / "test_orders.py"),
        ]
        assert document["summary"]["tests"] == 2
        rule_ids = {v["rule_id"] for v in document["violations"]}
        assert {"section-ordering", "no-literal-assertion"} <= rule_ids
        files_in_order = [v["file_path"] for v in document["violations"]]
        assert files_in_order == sorted(files_in_order)


class TestConfiguration:
    """Configuration file and option handling."""

    @pytest.mark.requirement("configuration")
    def test_config_file_disables_rule(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", LITERAL_ASSERTION_TEST)
        config = write_file("lint.yaml", "disable:\n  - no-literal-assertion\n")

        result = cli_runner.invoke(cli, ["check", str(path), "--config", str(config)])

        assert result.exit_code == 0

    def test_severity_override_downgrades_to_warning(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", LITERAL_ASSERTION_TEST)
        config = write_file("lint.yaml", "severity_overrides:\n  no-literal-assertion: warning\n")

        result = cli_runner.invoke(cli, ["check", str(path), "--config", str(config)])

        assert result.exit_code == 0
        assert "1 warning" in result.stdout

    def test_default_config_file_is_picked_up(
        self,
        cli_runner: CliRunner,
        write_file,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        write_file("tests/test_orders.py", LITERAL_ASSERTION_TEST)
        write_file("sectionlint.yaml", "disable: [no-literal-assertion]\n")
        monkeypatch.chdir(tmp_path)

        result = cli_runner.invoke(cli, ["check", "tests"])

        assert result.exit_code == 0

    def test_invalid_config_is_fatal(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", CLEAN_TEST)
        config = write_file("lint.yaml", "max_workers: 0\n")

        result = cli_runner.invoke(cli, ["check", str(path), "--config", str(config)])

        assert result.exit_code == 2
        assert "SL-E110" in result.stderr

    def test_unknown_dialect_option(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", CLEAN_TEST)

        result = cli_runner.invoke(cli, ["check", str(path), "--dialect", "cobol"])

        assert result.exit_code == 2
        assert "Invalid option" in result.stderr

    def test_forced_dialect(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/orders.txt", CLEAN_TEST)

        result = cli_runner.invoke(cli, ["check", str(path), "--dialect", "py"])

        assert result.exit_code == 0


class TestOutputFiles:
    """Reports written with --output."""

    @pytest.mark.requirement("sarif-output")
    def test_sarif_file(self, cli_runner: CliRunner, write_file, tmp_path: Path) -> None:
        path = write_file("tests/test_orders.py", LITERAL_ASSERTION_TEST)
        output = tmp_path / "out" / "sectionlint.sarif"

        result = cli_runner.invoke(
            cli, ["check", str(path), "--format", "sarif", "--output", str(output)]
        )

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Report written to" in result.stderr
        document = json.loads(output.read_text(encoding="utf-8"))
        run = document["runs"][0]
        assert [rule["id"] for rule in run["tool"]["driver"]["rules"]] == ["no-literal-assertion"]
        assert run["results"][0]["locations"][0]["physicalLocation"]["region"] == {"startLine": 9}

    def test_text_file(self, cli_runner: CliRunner, write_file, tmp_path: Path) -> None:
        path = write_file("tests/test_orders.py", CLEAN_TEST)
        output = tmp_path / "report.txt"

        result = cli_runner.invoke(cli, ["check", str(path), "--output", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "1 test in 1 file: 0 errors, 0 warnings\n"
        assert "1 test in 1 file" in result.stderr


class TestLogging:
    def test_verbose_json_logs_go_to_stderr(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("tests/test_orders.py", CLEAN_TEST)

        result = cli_runner.invoke(cli, ["check", str(path), "--verbose", "--log-json", "--format", "json"])

        assert result.exit_code == 0
        assert '"event": "project_analysis_started"' in result.stderr
        json.loads(result.stdout)
