"""Tests for the CLI module."""

import json

from click.testing import CliRunner

from inbox_threat_scorer.cli import cli


def _links_file(tmp_path, links):
    path = tmp_path / "links.json"
    path.write_text(json.dumps(links), encoding="utf-8")
    return str(path)


def test_cli_help():
    """CLI --help should work and show commands."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "scan-inbox" in result.output
    assert "scan-message" in result.output
    assert "scan-links" in result.output
    assert "export" in result.output
    assert "auth" in result.output
    assert "providers" in result.output


def test_cli_version():
    """CLI --version should show version."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_scan_inbox_no_credentials(tmp_path, monkeypatch):
    """Scan without credentials should show clear error."""
    import inbox_threat_scorer.auth as auth_module

    monkeypatch.setattr(auth_module, "CREDENTIALS_PATH", tmp_path / "nonexistent.json")
    monkeypatch.setattr(auth_module, "TOKEN_PATH", tmp_path / "token.json")
    monkeypatch.setattr(auth_module, "CONFIG_DIR", tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, ["scan-inbox", "--offline"])
    assert result.exit_code != 0
    assert "Credentials file not found" in result.output or "Error" in result.output


def test_scan_links_offline(tmp_path):
    path = _links_file(tmp_path, [{"href": "https://bit.ly/abc", "text": "Click here"}])

    runner = CliRunner()
    result = runner.invoke(cli, ["scan-links", path, "--offline"])
    assert result.exit_code == 0
    assert "DANGER" in result.output
    assert "local heuristics" in result.output


def test_scan_links_json_output(tmp_path):
    path = _links_file(tmp_path, [{"href": "https://example.com", "text": "example.com"}])

    runner = CliRunner()
    result = runner.invoke(cli, ["scan-links", path, "--offline", "--json"])
    assert result.exit_code == 0
    assert '"level": "safe"' in result.output


def test_scan_links_without_api_key_falls_back(tmp_path, monkeypatch):
    """A provider that needs a key and has none degrades to heuristics."""
    monkeypatch.delenv("THREAT_SCORER_API_KEY", raising=False)
    path = _links_file(tmp_path, [{"href": "https://bit.ly/abc", "text": "Click here"}])

    runner = CliRunner()
    result = runner.invoke(cli, ["scan-links", path, "--provider", "openai"])
    assert result.exit_code == 0
    assert "requires an API key" in result.output
    assert "DANGER" in result.output


def test_scan_links_invalid_file(tmp_path):
    path = tmp_path / "links.json"
    path.write_text("{not json", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["scan-links", str(path), "--offline"])
    assert result.exit_code != 0
    assert "Could not read links" in result.output


def test_export_csv(tmp_path):
    path = _links_file(tmp_path, [{"href": "http://login-portal.example.net/", "text": "Sign in"}])
    out = tmp_path / "out.csv"

    runner = CliRunner()
    result = runner.invoke(cli, ["export", "--source", path, "--format", "csv", "-o", str(out)])
    assert result.exit_code == 0
    assert "Results saved" in result.output
    assert "warning" in out.read_text(encoding="utf-8")
