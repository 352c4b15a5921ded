"""CLI commands that need no running services."""
from typer.testing import CliRunner

from briefly.cli import app_cli

runner = CliRunner()


def test_health_command_shows_config():
    result = runner.invoke(app_cli, ["health"])

    assert result.exit_code == 0
    assert "summarization-jobs" in result.stdout
    assert "llm_model" in result.stdout


def test_help_lists_commands():
    result = runner.invoke(app_cli, ["--help"])

    assert result.exit_code == 0
    for command in ("health", "init-db", "run-server", "run-worker", "submit", "status"):
        assert command in result.stdout


def test_health_command_names_missing_provider_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("BRIEFLY_LLM_API_KEY", raising=False)

    result = runner.invoke(app_cli, ["health"])

    assert result.exit_code == 0
    assert "GROQ_API_KEY" in result.stdout
