"""Tests for the CLI interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from blastradius.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def changed_repo(git_repo):
    """The fixture repository with two relevant commits and one unrelated one."""
    repo, base, git = git_repo
    (repo / "app" / "core.py").write_text("from shared import tools\nX = 1\n")
    git("commit", "-q", "-am", "Change core")
    (repo / "unused" / "__init__.py").write_text("import lib\nY = 2\n")
    git("commit", "-q", "-am", "Touch unused")
    (repo / "lib" / "util.py").write_text("def helper():\n    return 2\n")
    git("commit", "-q", "-am", "Update util")
    return repo, base, git


class TestCLIDiff:
    def test_diff_text(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(main, ["diff", "app", "--since", base, "--path", str(repo)])
        assert result.exit_code == 0, result.output
        assert "Blast Radius" in result.output
        assert "Update util" in result.output

    def test_diff_modules(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "modules", "-p", str(repo)]
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["app", "lib"]

    def test_diff_files(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "files", "-p", str(repo)]
        )
        assert result.output.splitlines() == ["app/core.py", "lib/util.py"]

    def test_diff_commits(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "commits", "-p", str(repo)]
        )
        lines = result.output.splitlines()
        assert [line.split(" ", 1)[1] for line in lines] == ["Update util", "Change core"]

    def test_diff_json_includes_paths(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "json", "-p", str(repo)]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["root"] == "app"
        assert data["revision"] == base
        assert data["modules"] == [
            {"identity": "app", "path_from_root": ["app"]},
            {"identity": "lib", "path_from_root": ["app", "lib"]},
        ]

    def test_diff_markdown(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "markdown", "-p", str(repo)]
        )
        assert result.output.startswith("## Blast radius of `app`")

    def test_diff_html(self, runner: CliRunner, changed_repo):
        repo, base, _ = changed_repo
        result = runner.invoke(
            main, ["diff", "app", "-s", base, "--format", "html", "-p", str(repo)]
        )
        assert result.exit_code == 0, result.output
        report = Path(result.output.strip())
        try:
            assert "lib/util.py" in report.read_text(encoding="utf-8")
        finally:
            report.unlink()

    def test_diff_unknown_revision(self, runner: CliRunner, changed_repo):
        repo, _, _ = changed_repo
        result = runner.invoke(main, ["diff", "app", "-s", "no-such-rev", "-p", str(repo)])
        assert result.exit_code == 1
        assert "Error running command" in result.output

    def test_diff_unresolvable_import(self, runner: CliRunner, changed_repo):
        repo, base, git = changed_repo
        (repo / "lib" / "extra.py").write_text("import requests\n")
        git("add", "-A")
        git("commit", "-q", "-m", "Use requests")

        result = runner.invoke(main, ["diff", "app", "-s", base, "-p", str(repo)])
        assert result.exit_code == 1
        assert "cannot resolve" in result.output

        result = runner.invoke(
            main,
            ["diff", "app", "-s", base, "--foreign", "requests", "--format", "modules",
             "-p", str(repo)],
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["app", "lib"]

    def test_diff_nonexistent_path(self, runner: CliRunner):
        result = runner.invoke(main, ["diff", "app", "-s", "HEAD", "-p", "/nonexistent/path"])
        assert result.exit_code != 0


class TestCLIGraph:
    def test_deps(self, runner: CliRunner, tmp_source_tree: Path):
        result = runner.invoke(main, ["deps", "app", "--json", "-p", str(tmp_source_tree)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["app"] == ["app/vendor/shared", "lib", "testsupport"]
        assert "unused" not in data

    def test_deps_text(self, runner: CliRunner, tmp_source_tree: Path):
        result = runner.invoke(main, ["deps", "lib", "-p", str(tmp_source_tree)])
        assert result.output.splitlines() == ["lib", "  shared", "shared"]

    def test_why(self, runner: CliRunner, tmp_source_tree: Path):
        result = runner.invoke(
            main, ["why", "unused", "app.vendor.shared", "-p", str(tmp_source_tree)]
        )
        assert result.exit_code != 0
        result = runner.invoke(main, ["why", "unused", "shared", "-p", str(tmp_source_tree)])
        assert result.exit_code == 0, result.output
        assert "lib" in result.output

    def test_why_same_module(self, runner: CliRunner, tmp_source_tree: Path):
        result = runner.invoke(main, ["why", "lib", "lib", "-p", str(tmp_source_tree)])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "lib"

    def test_stats(self, runner: CliRunner, tmp_source_tree: Path):
        result = runner.invoke(main, ["stats", "app", "-p", str(tmp_source_tree)])
        assert result.exit_code == 0, result.output
        assert "Module Graph Statistics" in result.output


class TestCLIConfig:
    def test_config_show(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["config", "show", "--path", str(tmp_path)])
        assert result.exit_code == 0
        assert "vendor_segment" in result.output

    def test_config_set_and_get(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(
            main, ["config", "set", "resolver.foreign_modules", '["requests"]', "--path", str(tmp_path)]
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / ".blastradius" / "config.json").exists()

        result = runner.invoke(main, ["config", "get", "resolver.foreign_modules", "--path", str(tmp_path)])
        assert "requests" in result.output

    def test_config_unknown_key(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["config", "set", "nope", "1", "--path", str(tmp_path)])
        assert result.exit_code == 1


class TestCLIVersion:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCLIConfigErrors:
    def test_config_set_wrong_type(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["config", "set", "git.timeout", "abc", "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid value for git.timeout" in result.output
        assert not (tmp_path / ".blastradius" / "config.json").exists()

    @pytest.mark.parametrize("command", [["diff", "app", "-s", "HEAD"], ["deps", "app"], ["stats", "app"]])
    def test_malformed_config_file(self, runner: CliRunner, tmp_path: Path, command):
        (tmp_path / ".blastradius").mkdir()
        (tmp_path / ".blastradius" / "config.json").write_text("{not json")

        result = runner.invoke(main, [*command, "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "JSON" in result.output
        assert "Traceback" not in result.output
