"""Tests for the Typer command-line interface."""

from __future__ import annotations

from typer.testing import CliRunner

from news_curator import cli


runner = CliRunner()


def test_sources_command_lists_registry():
    result = runner.invoke(cli.app, ["sources"])

    assert result.exit_code == 0
    assert "CoinDesk" in result.output


def test_run_exits_with_code_2_when_api_key_missing(monkeypatch, tmp_path):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)

    result = runner.invoke(
        cli.app,
        ["run", "--output", str(tmp_path), "--no-progress", "--no-log-file"],
    )

    assert result.exit_code == 2
    assert "Missing API key" in result.output


def test_sources_command_rejects_invalid_sources_file(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text("sources: nope\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["sources", "--sources", str(path)])

    assert result.exit_code == 2
    assert "Invalid sources file" in result.output


def test_sources_command_merges_extra_sources(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text(
        "sources:\n  - name: My Digest\n    url: https://digest.example/feed\n    tier: 1\n",
        encoding="utf-8",
    )

    result = runner.invoke(cli.app, ["sources", "--sources", str(path)])

    assert result.exit_code == 0
    assert "My Digest" in result.output
