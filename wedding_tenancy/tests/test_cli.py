"""Tests for the typer CLI that do not need a database."""

import pytest
from typer.testing import CliRunner

import cli
from cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


def test_purge_event_asks_for_confirmation():
    result = runner.invoke(app, ["purge-event", "3"], input="n\n")

    assert result.exit_code == 1
    assert "Delete event 3" in result.output


def test_commands_are_registered():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for name in ("create-event", "list-events", "stats", "reconcile-rooms", "purge-event", "migrate"):
        assert name in result.output
