"""
Integration tests for CLI commands.

Tests the basic functionality of CLI commands and error handling.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from guardian.cli import app

runner = CliRunner()

EVAL_CODE = "function run(input) {\n  return eval(input);\n}\n"


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep .env discovery and GUARDIAN_* overrides away from the tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("GUARDIAN_SCAN_MAX_WORKERS", "GUARDIAN_LOGGING_LEVEL", "GUARDIAN_WATCH_ENABLED"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.js").write_text(EVAL_CODE, encoding="utf-8")
    (root / "src" / "clean.js").write_text("const total = add(a, b);\n", encoding="utf-8")
    (root / "notes.yaml").write_text("# TODO: fill in\nname: demo\n", encoding="utf-8")
    return root


class TestCLIHelp:
    """Test CLI help and usage information."""

    def test_main_help(self):
        """Main help should display available commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scan" in result.stdout
        assert "check" in result.stdout
        assert "watch" in result.stdout
        assert "config" in result.stdout
        assert "audit" in result.stdout

    def test_scan_help(self):
        result = runner.invoke(app, ["scan", "--help"])

        assert result.exit_code == 0
        assert "--include" in result.stdout
        assert "--max-size" in result.stdout
        assert "--workers" in result.stdout

    def test_watch_help(self):
        result = runner.invoke(app, ["watch", "--help"])

        assert result.exit_code == 0
        assert "--debounce" in result.stdout


class TestScanCommand:
    def test_json_output(self, workspace):
        result = runner.invoke(app, ["scan", str(workspace), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["summary"]["total_files"] == 3
        assert payload["summary"]["files_with_issues"] == 2
        assert [Path(r["file_path"]).name for r in payload["results"]] == ["app.js", "notes.yaml"]
        assert payload["results"][0]["severity"] == "high"

    def test_include_option(self, workspace):
        result = runner.invoke(app, ["scan", str(workspace), "--json", "--include", "**/*.js"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["summary"]["total_files"] == 2
        assert [Path(r["file_path"]).name for r in payload["results"]] == ["app.js"]

    def test_exclude_option_adds_to_defaults(self, workspace):
        result = runner.invoke(app, ["scan", str(workspace), "--json", "-e", "src/"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [Path(r["file_path"]).name for r in payload["results"]] == ["notes.yaml"]

    def test_depth_option(self, workspace):
        result = runner.invoke(app, ["scan", str(workspace), "--json", "--depth", "0"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["summary"]["total_files"] == 1

    def test_table_output(self, workspace):
        result = runner.invoke(app, ["scan", str(workspace)])

        assert result.exit_code == 0
        assert "Scan Complete" in result.stdout
        assert "Files With Issues" in result.stdout

    def test_no_issues(self, tmp_path):
        root = tmp_path / "clean"
        root.mkdir()
        (root / "a.js").write_text("const total = add(a, b);\n", encoding="utf-8")

        result = runner.invoke(app, ["scan", str(root)])

        assert result.exit_code == 0
        assert "No issues found." in result.stdout

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestCheckCommand:
    def test_json_report(self, workspace):
        result = runner.invoke(app, ["check", str(workspace / "src" / "app.js"), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["severity"] == "high"
        assert payload["vulnerabilities"] == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval() (Found 1 occurrence)"
        ]
        assert payload["metrics"]["maintainability_score"] == 100
        assert 1 <= len(payload["suggestions"]) <= 5
        assert payload["analysis"]["complexity"] >= 1

    def test_rich_report(self, workspace):
        result = runner.invoke(app, ["check", str(workspace / "src" / "app.js")])

        assert result.exit_code == 0
        assert "eval()" in result.stdout
        assert "Technical Debt" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "missing.js")])

        assert result.exit_code == 1
        assert "Not a file" in result.stdout

    def test_directory_is_rejected(self, workspace):
        result = runner.invoke(app, ["check", str(workspace)])

        assert result.exit_code == 1


class TestAuditCommand:
    @pytest.fixture
    def dockerfile(self, tmp_path: Path) -> Path:
        path = tmp_path / "Dockerfile"
        path.write_text("FROM node:latest\nUSER root\nEXPOSE 22\n", encoding="utf-8")
        return path

    def test_json_report(self, dockerfile):
        result = runner.invoke(
            app, ["audit", str(dockerfile), "--kind", "devops", "--context", "dockerfile", "--json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["file_path"] == str(dockerfile)
        assert payload["severity"] == "high"
        assert len(payload["issues"]["container"]) == 3
        assert payload["vulnerabilities"][1]["cwe"] == "CWE-250"
        assert payload["error"] is None

    def test_rich_report(self, dockerfile):
        result = runner.invoke(app, ["audit", str(dockerfile), "-k", "devops"])

        assert result.exit_code == 0
        assert "Container:" in result.stdout
        assert "Matched Rules" in result.stdout

    def test_no_issues(self, tmp_path):
        path = tmp_path / "schema.sql"
        path.write_text("SELECT 1;\n", encoding="utf-8")

        result = runner.invoke(app, ["audit", str(path), "--kind", "database"])

        assert result.exit_code == 0
        assert "No issues found" in result.stdout

    def test_unknown_kind(self, dockerfile):
        result = runner.invoke(app, ["audit", str(dockerfile), "--kind", "cobol"])

        assert result.exit_code == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["audit", str(tmp_path / "missing.tf"), "--kind", "devops"])

        assert result.exit_code == 1
        assert "Not a file" in result.stdout


class TestConfigCommand:
    def test_defaults_as_json(self):
        result = runner.invoke(app, ["config", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["scan"]["max_workers"] == 3
        assert payload["watch"]["debounce_ms"] == 500

    def test_config_file(self, tmp_path):
        config_file = tmp_path / "guardian.yaml"
        config_file.write_text("scan:\n  max_workers: 7\n", encoding="utf-8")

        result = runner.invoke(app, ["config", "--json", "--config", str(config_file)])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["scan"]["max_workers"] == 7

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["config", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1

    def test_yaml_output(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "max_workers" in result.stdout
