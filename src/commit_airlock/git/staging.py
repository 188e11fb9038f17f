"""Access to the git staging area and repository layout."""

import subprocess
from pathlib import Path
from typing import Optional

from commit_airlock.logging.setup import get_logger

logger = get_logger(__name__)


# Added, copied, modified and renamed files; deletions add no lines
STAGED_DIFF_ARGS = [
    "-c",
    "core.quotePath=false",
    "diff",
    "--cached",
    "--unified=0",
    "--no-color",
    "--no-ext-diff",
    "--diff-filter=ACMR",
]


class GitError(RuntimeError):
    """Raised when git is missing or a git command fails."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


def run_git(args: list[str], cwd: Optional[Path | str] = None) -> str:
    """Run a git command and return its stdout.

    Args:
        args: Arguments after ``git``.
        cwd: Working directory, defaults to the process cwd.

    Raises:
        GitError: If git cannot be started or exits non-zero.
    """
    cmd = ["git", *args]
    logger.debug("Running git", extra={"event": "git_command", "args": args})
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except OSError as e:
        raise GitError(f"Cannot run git: {e}") from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", "replace").strip()
        raise GitError(
            stderr or f"git {' '.join(args)} exited with {proc.returncode}",
            returncode=proc.returncode,
        )

    # Staged content is not guaranteed to be UTF-8; patterns are ASCII
    return proc.stdout.decode("utf-8", "replace")


def read_staged_diff(cwd: Optional[Path | str] = None) -> str:
    """Return the unified diff of the staged changeset with no context lines."""
    return run_git(STAGED_DIFF_ARGS, cwd=cwd)


def _resolve(output: str, cwd: Optional[Path | str]) -> Path:
    path = Path(output.strip())
    if not path.is_absolute():
        path = Path(cwd or Path.cwd()) / path
    return path.resolve()


def find_repo_root(cwd: Optional[Path | str] = None) -> Path:
    """Return the top-level directory of the working tree."""
    return _resolve(run_git(["rev-parse", "--show-toplevel"], cwd=cwd), cwd)


def find_hooks_dir(cwd: Optional[Path | str] = None) -> Path:
    """Return the local, untracked hook directory (``<git-common-dir>/hooks``).

    This ignores ``core.hooksPath`` on purpose: it is the directory git uses
    when no hooks path is configured.
    """
    return _resolve(run_git(["rev-parse", "--git-common-dir"], cwd=cwd), cwd) / "hooks"


def get_config(
    key: str,
    cwd: Optional[Path | str] = None,
    local: bool = False,
) -> Optional[str]:
    """Read a git config value, or None when unset.

    Args:
        key: Config key, e.g. ``core.hooksPath``.
        cwd: Directory inside the repository.
        local: Only read the repository's own config file.
    """
    args = ["config", "--local", "--get", key] if local else ["config", "--get", key]
    try:
        value = run_git(args, cwd=cwd).strip()
    except GitError as e:
        # "git config --get" exits 1 for a missing key
        if e.returncode == 1:
            return None
        raise
    return value or None


def set_config(key: str, value: str, cwd: Optional[Path | str] = None) -> None:
    """Set a repository-local git config value."""
    run_git(["config", key, value], cwd=cwd)


def unset_config(key: str, cwd: Optional[Path | str] = None) -> None:
    """Remove a repository-local git config value."""
    run_git(["config", "--unset", key], cwd=cwd)
