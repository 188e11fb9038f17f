"""Pytest fixtures and configuration."""

import logging
import shutil
import subprocess

import pytest


# Built at runtime so this file does not itself look like it holds secrets
AWS_KEY = "AKIA" + "IOSFODNN7EXAMPLE"
PRIVATE_KEY_HEADER = "-----BEGIN RSA " + "PRIVATE KEY-----"


def build_diff(files: dict[str, list[str]]) -> str:
    """Build a ``git diff --cached --unified=0`` style diff of new files."""
    chunks = []
    for path, lines in files.items():
        chunks.append(f"diff --git a/{path} b/{path}")
        chunks.append("new file mode 100644")
        chunks.append("index 0000000..1111111")
        chunks.append("--- /dev/null")
        chunks.append(f"+++ b/{path}")
        chunks.append(f"@@ -0,0 +1,{len(lines)} @@")
        chunks.extend("+" + line for line in lines)
    return "\n".join(chunks) + "\n"


def run_git(repo, *args) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's own settings out of the tests."""
    for name in (
        "COMMIT_AIRLOCK_LOG_LEVEL",
        "COMMIT_AIRLOCK_LOG_FORMAT",
        "COMMIT_AIRLOCK_RULES_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def make_diff():
    """Factory for unified diffs that add new files."""
    return build_diff


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """An empty git repository isolated from user and system config."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)

    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def stage(git_repo):
    """Write a file into the test repository and stage it."""

    def _stage(name: str, content: str):
        path = git_repo / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        run_git(git_repo, "add", name)
        return path

    return _stage


@pytest.fixture
def commit(git_repo):
    """Commit whatever is staged, skipping hooks."""

    def _commit(message: str = "commit"):
        run_git(git_repo, "commit", "-q", "--no-verify", "-m", message)

    return _commit
