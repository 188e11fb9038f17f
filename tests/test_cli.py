"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from conftest import AWS_KEY, PRIVATE_KEY_HEADER
from commit_airlock import __version__
from commit_airlock.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def diff_file(tmp_path, make_diff):
    def _write(files: dict[str, list[str]]):
        path = tmp_path / "staged.diff"
        path.write_text(make_diff(files), encoding="utf-8")
        return str(path)

    return _write


class TestScanDiffFile:
    """scan --diff-file"""

    def test_secret_rejects_commit(self, runner, diff_file):
        path = diff_file({"app.py": ["import os", f'AWS_SECRET = "{AWS_KEY}"']})

        result = runner.invoke(cli, ["scan", "--diff-file", path])

        assert result.exit_code == 1
        assert "app.py:2: possible AWS access key detected" in result.output
        assert "--no-verify" in result.output
        assert AWS_KEY not in result.output

    def test_each_finding_is_reported(self, runner, diff_file):
        path = diff_file({
            "a.py": ['password = "hunter2"'],
            "keys/id_rsa": [PRIVATE_KEY_HEADER],
        })

        result = runner.invoke(cli, ["scan", "--diff-file", path])

        assert result.exit_code == 1
        assert "a.py:1: possible Password assignment detected" in result.output
        assert "keys/id_rsa:1: possible Private key header detected" in result.output
        assert "hunter2" not in result.output

    def test_clean_diff_is_silent(self, runner, diff_file):
        path = diff_file({"app.py": ["timeout = 30"]})

        result = runner.invoke(cli, ["scan", "--diff-file", path])

        assert result.exit_code == 0
        assert result.output == ""

    def test_stdin(self, runner, make_diff):
        diff = make_diff({"app.py": ['password = "hunter2"']})

        result = runner.invoke(cli, ["scan", "--diff-file", "-"], input=diff)

        assert result.exit_code == 1
        assert "app.py:1: possible Password assignment detected" in result.output

    def test_malformed_diff_is_fatal(self, runner, tmp_path):
        path = tmp_path / "broken.diff"
        path.write_text("--- a/x\n+++ b/x\n@@ -0,0 +1,5 @@\n+one\n", encoding="utf-8")

        result = runner.invoke(cli, ["scan", "--diff-file", str(path)])

        assert result.exit_code == 2
        assert "commit-airlock: error:" in result.output

    def test_unreadable_diff_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", "--diff-file", str(tmp_path / "missing.diff")])

        assert result.exit_code == 2

    def test_extra_rules(self, runner, diff_file, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text(
            "rules:\n  - label: Internal token\n    regex: 'isvc_[0-9a-f]{8}'\n",
            encoding="utf-8",
        )
        path = diff_file({"svc.py": ["t = isvc_deadbeef"]})

        result = runner.invoke(cli, ["scan", "--diff-file", path, "--rules", str(rules)])

        assert result.exit_code == 1
        assert "svc.py:1: possible Internal token detected" in result.output

    def test_invalid_rules_file_is_fatal(self, runner, diff_file, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("rules:\n  - label: Broken\n    regex: '(unclosed'\n", encoding="utf-8")
        path = diff_file({"app.py": ["timeout = 30"]})

        result = runner.invoke(cli, ["scan", "--diff-file", path, "--rules", str(rules)])

        assert result.exit_code == 2
        assert "cannot load rules" in result.output

    def test_unreadable_rules_file_is_fatal(self, runner, diff_file, tmp_path, monkeypatch):
        rules = tmp_path / "rules.yaml"
        rules.write_text("rules: []\n", encoding="utf-8")
        path = diff_file({"app.py": ["timeout = 30"]})

        def deny(rules_file):
            raise PermissionError(13, "Permission denied", str(rules_file))

        monkeypatch.setattr("commit_airlock.cli.load_rules_from_yaml", deny)

        result = runner.invoke(cli, ["scan", "--diff-file", path, "--rules", str(rules)])

        assert result.exit_code == 2
        assert "cannot load rules" in result.output
        assert "Permission denied" in result.output

    def test_rule_label_clash_is_fatal(self, runner, diff_file, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("rules:\n  - label: AWS access key\n    regex: 'zzz'\n", encoding="utf-8")
        path = diff_file({"app.py": ["timeout = 30"]})

        result = runner.invoke(cli, ["scan", "--diff-file", path, "--rules", str(rules)])

        assert result.exit_code == 2
        assert "Duplicate rule label" in result.output

    def test_json_logging(self, runner, diff_file):
        path = diff_file({"app.py": ["timeout = 30"]})

        result = runner.invoke(
            cli,
            ["--log-level", "info", "--log-format", "json", "scan", "--diff-file", path],
        )

        assert result.exit_code == 0
        records = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
        complete = [r for r in records if r.get("event") == "scan_complete"]
        assert complete and complete[0]["service"] == "commit-airlock"
        assert complete[0]["scan_id"] != "-"


class TestScanStaged:
    """scan against the git staging area."""

    def test_staged_secret(self, runner, git_repo, stage):
        stage("config.py", f'timeout = 30\nAWS_SECRET = "{AWS_KEY}"\n')

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 1
        assert "config.py:2: possible AWS access key detected" in result.output

    def test_staged_clean(self, runner, git_repo, stage):
        stage("config.py", "timeout = 30\n")

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 0
        assert result.output == ""

    def test_repository_rules_file(self, runner, git_repo, stage):
        (git_repo / ".commit-airlock.yaml").write_text(
            "rules:\n  - label: Internal token\n    regex: 'isvc_[0-9a-f]{8}'\n",
            encoding="utf-8",
        )
        stage("svc.py", "t = isvc_deadbeef\n")

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 1
        assert "svc.py:1: possible Internal token detected" in result.output

    @pytest.mark.parametrize(
        "content",
        ["x = 1\nfoo\x0cbar\ny = 2\n", "a\rb\n", 'var s = "x\u2028y";\n', "one\r\ntwo\r\n"],
    )
    def test_unusual_line_characters_are_clean(self, runner, git_repo, stage, content):
        stage("notes.txt", content)

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 0, result.output
        assert result.output == ""

    def test_secret_after_carriage_return(self, runner, git_repo, stage):
        stage("config.py", 'timeout = 30\nok\rpassword = "hunter2"\n')

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 1
        assert "config.py:2: possible Password assignment detected" in result.output

    def test_unreadable_staging_area(self, runner, git_repo, monkeypatch):
        def deny(cwd=None):
            raise PermissionError(13, "Permission denied", str(cwd))

        monkeypatch.setattr("commit_airlock.cli.read_staged_diff", deny)

        result = runner.invoke(cli, ["scan", "--repo", str(git_repo)])

        assert result.exit_code == 2
        assert "commit-airlock: error:" in result.output
        assert "Permission denied" in result.output

    def test_not_a_repository(self, runner, git_repo, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()

        result = runner.invoke(cli, ["scan", "--repo", str(plain)])

        assert result.exit_code == 2
        assert "commit-airlock: error:" in result.output


class TestOtherCommands:
    """install, uninstall, rules and --version."""

    def test_install_and_uninstall(self, runner, git_repo):
        result = runner.invoke(cli, ["install", "--repo", str(git_repo)])

        assert result.exit_code == 0
        assert "Installed pre-commit hook" in result.output
        assert (git_repo / ".githooks" / "pre-commit").exists()

        result = runner.invoke(cli, ["uninstall", "--repo", str(git_repo)])

        assert result.exit_code == 0
        assert "Removed" in result.output
        assert not (git_repo / ".githooks" / "pre-commit").exists()

    def test_install_copy_refuses_foreign_hook(self, runner, git_repo):
        hook = git_repo / ".git" / "hooks" / "pre-commit"
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")

        result = runner.invoke(cli, ["install", "--mode", "copy", "--repo", str(git_repo)])

        assert result.exit_code == 2
        assert "--force" in result.output

    def test_uninstall_nothing(self, runner, git_repo):
        result = runner.invoke(cli, ["uninstall", "--repo", str(git_repo)])

        assert result.exit_code == 0
        assert "No commit-airlock hook found" in result.output

    def test_rules(self, runner):
        result = runner.invoke(cli, ["rules"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("AWS access key")
        assert "case-sensitive" in lines[0]
        assert any(l.startswith("Password assignment") and "ignore-case" in l for l in lines)

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
