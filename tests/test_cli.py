"""Tests for the command line interface."""

from contextlib import asynccontextmanager

import pytest
from typer.testing import CliRunner

from site_batch import ThrottledError, cli
from site_batch.testing import MockSessionFactory

runner = CliRunner()

SITES = ["https://contoso.example/sites/alpha", "https://contoso.example/sites/beta"]


@pytest.fixture
def sites_file(tmp_path):
    path = tmp_path / "sites.txt"
    path.write_text("\n".join(SITES) + "\n")
    return path


@pytest.fixture
def mock_factory(monkeypatch):
    """Replace the HTTP-backed factory and keep logging configuration out of the test run."""
    factory = MockSessionFactory()

    @asynccontextmanager
    async def fake_open_session_factory(settings):
        yield factory

    monkeypatch.setattr(cli, "open_session_factory", fake_open_session_factory)
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    return factory


def test_run_dry_run(mock_factory, sites_file):
    result = runner.invoke(
        cli.app, ["run", "--operation", "get-policy", "--sites", str(sites_file), "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert mock_factory.connect_calls == SITES
    assert all(s.calls == [] for s in mock_factory.sessions)
    assert "2/2 succeeded" in result.output


def test_run_executes_operation(mock_factory, sites_file):
    result = runner.invoke(cli.app, ["run", "-o", "get-policy-status", "-s", str(sites_file)])

    assert result.exit_code == 0, result.output
    assert [s.calls for s in mock_factory.sessions] == [["get_policy_status"]] * 2


def test_run_reports_failures(mock_factory, sites_file, monkeypatch):
    monkeypatch.setenv("SITE_BATCH_MAX_RETRIES", "1")
    monkeypatch.setenv("SITE_BATCH_INITIAL_BACKOFF", "0")
    mock_factory.scripts = {SITES[0]: [ThrottledError("429")], SITES[1]: [ValueError("bad")]}

    result = runner.invoke(cli.app, ["run", "-o", "get-policy", "-s", str(sites_file)])

    assert result.exit_code == 0, result.output
    assert "2 target(s) failed" in result.output


def test_sites_file_from_settings(mock_factory, sites_file, monkeypatch):
    monkeypatch.setenv("SITE_BATCH_SITES_FILE", str(sites_file))

    result = runner.invoke(cli.app, ["run", "-o", "get-policy", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert mock_factory.connect_calls == SITES


def test_missing_sites_file(mock_factory, tmp_path):
    result = runner.invoke(
        cli.app, ["run", "-o", "get-policy", "-s", str(tmp_path / "nope.txt")]
    )

    assert result.exit_code == 1
    assert mock_factory.connect_calls == []


def test_empty_sites_file(mock_factory, tmp_path):
    path = tmp_path / "sites.txt"
    path.write_text("# none yet\n")

    result = runner.invoke(cli.app, ["run", "-o", "get-policy", "-s", str(path)])

    assert result.exit_code == 0
    assert "empty" in result.output
    assert mock_factory.connect_calls == []


def test_unknown_operation(mock_factory, sites_file):
    result = runner.invoke(cli.app, ["run", "-o", "purge", "-s", str(sites_file)])

    assert result.exit_code == 2
    assert mock_factory.connect_calls == []


def test_invalid_configuration(mock_factory, sites_file, monkeypatch):
    monkeypatch.setenv("SITE_BATCH_MAX_RETRIES", "zero")

    result = runner.invoke(cli.app, ["run", "-o", "get-policy", "-s", str(sites_file)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_menu_runs_selected_operations_until_quit(mock_factory, sites_file):
    result = runner.invoke(
        cli.app, ["menu", "-s", str(sites_file), "--dry-run"], input="1\n3\nq\n"
    )

    assert result.exit_code == 0, result.output
    assert "Loaded" in result.output
    # Each selection is a full batch over the same list
    assert mock_factory.connect_calls == SITES * 2


def test_menu_rejects_unbuildable_operation(mock_factory, sites_file, monkeypatch):
    monkeypatch.setenv("SITE_BATCH_CLEANUP_MODE", "count_limits")

    result = runner.invoke(cli.app, ["menu", "-s", str(sites_file)], input="4\nq\n")

    assert result.exit_code == 0, result.output
    assert "Cannot build operation" in result.output
    assert mock_factory.connect_calls == []


def test_inconsistent_backoff_settings(mock_factory, sites_file, monkeypatch):
    monkeypatch.setenv("SITE_BATCH_MAX_BACKOFF", "10")

    result = runner.invoke(cli.app, ["run", "-o", "get-policy", "-s", str(sites_file), "--dry-run"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "max_wait" in result.output
    assert mock_factory.connect_calls == []


def test_menu_blank_input_prompts_again(mock_factory, sites_file):
    result = runner.invoke(cli.app, ["menu", "-s", str(sites_file)], input="\n\nq\n")

    assert result.exit_code == 0, result.output
    assert result.output.count("Select an operation") == 3
    assert mock_factory.connect_calls == []
