"""
Tests for CLI module.

Tests command-line interface commands and output against a temporary
database selected through a YAML config file.
"""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from blockscan import __version__
from blockscan.cli import app
from blockscan.config import load_config
from blockscan.storage import BlockingMethod, Database, JobQueue, ScanResult, ScanResultRepository


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Config pointing at a temporary database, console logging off."""
    path = temp_dir / "config.yaml"
    path.write_text(yaml.safe_dump({
        "storage": {"database_path": str(temp_dir / "cli.db")},
        "logging": {"log_to_console": False},
    }))
    return path


def open_db(config_file: Path) -> Database:
    return Database.create(load_config(config_file))


def only_scan_id(config_file: Path) -> str:
    db = open_db(config_file)
    try:
        rows = db.fetch_all("SELECT scan_id FROM scan_totals")
    finally:
        db.close()
    assert len(rows) == 1
    return rows[0]["scan_id"]


class TestCLI:
    """Tests for CLI basics."""

    def test_cli_help(self, runner: CliRunner):
        """CLI should show help."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", ["enqueue", "work", "results", "status", "config"])
    def test_command_help(self, runner: CliRunner, command: str):
        result = runner.invoke(app, [command, "--help"])

        assert result.exit_code == 0

    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestEnqueueCommand:
    """Tests for the enqueue command."""

    def test_enqueue_urls(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            app,
            ["--config", str(config_file), "enqueue", "https://a.example", "https://b.example"],
        )

        assert result.exit_code == 0, result.output
        scan_id = only_scan_id(config_file)
        assert scan_id in result.output

        db = open_db(config_file)
        try:
            queue = JobQueue(db)
            assert queue.get_total(scan_id) == 2
            assert queue.pending_for_scan(scan_id) == 2
        finally:
            db.close()

    def test_enqueue_file_dedupes(self, runner: CliRunner, config_file: Path, temp_dir: Path):
        csv_path = temp_dir / "sites.csv"
        csv_path.write_text("name,url\nA,https://a.example\nA again,https://a.example\n")

        result = runner.invoke(
            app,
            ["--config", str(config_file), "enqueue", "--file", str(csv_path), "https://b.example"],
        )

        assert result.exit_code == 0, result.output
        db = open_db(config_file)
        try:
            assert JobQueue(db).get_total(only_scan_id(config_file)) == 2
        finally:
            db.close()

    def test_enqueue_nothing_is_input_error(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(app, ["--config", str(config_file), "enqueue", "not-a-url"])

        assert result.exit_code == 2
        assert "empty" in result.output.lower()

    def test_enqueue_file_without_urls(self, runner: CliRunner, config_file: Path, temp_dir: Path):
        csv_path = temp_dir / "empty.csv"
        csv_path.write_text("name\nfoo\n")

        result = runner.invoke(app, ["--config", str(config_file), "enqueue", "--file", str(csv_path)])

        assert result.exit_code == 2
        assert "empty" in result.output.lower()

    def test_enqueue_empty_file_with_urls(self, runner: CliRunner, config_file: Path, temp_dir: Path):
        """A file without URLs does not reject URLs given on the command line."""
        csv_path = temp_dir / "empty.csv"
        csv_path.write_text("name\nfoo\n")

        result = runner.invoke(
            app,
            ["--config", str(config_file), "enqueue", "--file", str(csv_path), "https://a.example"],
        )

        assert result.exit_code == 0, result.output
        db = open_db(config_file)
        try:
            assert JobQueue(db).get_total(only_scan_id(config_file)) == 1
        finally:
            db.close()


class TestWorkCommand:
    """Tests for the work command that need no browser."""

    def test_empty_queue(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(app, ["--config", str(config_file), "work"])

        assert result.exit_code == 0, result.output
        assert "No jobs in queue." in result.output

    def test_malformed_entry_exits_nonzero(self, runner: CliRunner, config_file: Path):
        db = open_db(config_file)
        try:
            JobQueue(db).push_raw("not json")
        finally:
            db.close()

        result = runner.invoke(app, ["--config", str(config_file), "work", "--jobs", "2"])

        assert result.exit_code == 1
        assert "Malformed queue payload" in result.output

    def test_unknown_identity(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            app, ["--config", str(config_file), "work", "--identity", "NoSuchBot"])

        assert result.exit_code == 2


class TestResultsCommand:
    """Tests for the results command."""

    def test_results_json_progress(self, runner: CliRunner, config_file: Path):
        runner.invoke(app, ["--config", str(config_file), "enqueue", "https://a.example"])
        scan_id = only_scan_id(config_file)

        result = runner.invoke(app, ["--config", str(config_file), "results", scan_id, "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"results": [], "isComplete": False}

        db = open_db(config_file)
        try:
            ScanResultRepository(db).insert_if_absent(ScanResult(
                scan_id=scan_id,
                url="https://a.example",
                is_blocked=True,
                blocking_method=BlockingMethod.ROBOTS_TXT,
                details="Specifically blocked: GPTBot",
            ))
        finally:
            db.close()

        result = runner.invoke(app, ["--config", str(config_file), "results", scan_id, "--json"])

        assert json.loads(result.output) == {
            "results": [{
                "url": "https://a.example",
                "isBlocked": True,
                "blockingMethod": "robots.txt",
                "details": "Specifically blocked: GPTBot",
            }],
            "isComplete": True,
        }

    def test_results_table(self, runner: CliRunner, config_file: Path):
        db = open_db(config_file)
        try:
            JobQueue(db).set_total("scan1", 1)
            ScanResultRepository(db).insert_if_absent(ScanResult(
                scan_id="scan1",
                url="https://a.example",
                is_blocked=False,
                blocking_method=BlockingMethod.NONE,
                details="Passed All Tests",
            ))
        finally:
            db.close()

        result = runner.invoke(app, ["--config", str(config_file), "results", "scan1"])

        assert result.exit_code == 0, result.output
        assert "https://a.example" in result.output
        assert "Scan complete" in result.output
        assert "By method: none 1" in result.output

    def test_results_unknown_scan(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(app, ["--config", str(config_file), "results", "missing"])

        assert result.exit_code == 0
        assert "No results yet" in result.output


class TestOtherCommands:
    def test_status(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(app, ["--config", str(config_file), "status"])

        assert result.exit_code == 0, result.output
        assert "Queued jobs" in result.output

    def test_config_show(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(app, ["--config", str(config_file), "config", "--show"])

        assert result.exit_code == 0, result.output
        assert "worker" in result.output
        assert "time_budget_seconds" in result.output

    def test_config_init(self, runner: CliRunner, temp_dir: Path):
        output = temp_dir / "generated.yaml"

        result = runner.invoke(app, ["config", "--init", "--output", str(output)])

        assert result.exit_code == 0, result.output
        generated = yaml.safe_load(output.read_text())
        assert generated["worker"]["time_budget_seconds"] == 45.0
        assert load_config(output).browser.navigation_timeout_ms == 20000
