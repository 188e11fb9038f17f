"""Git integration: staged diff and repository layout."""

from commit_airlock.git.staging import (
    GitError,
    find_hooks_dir,
    find_repo_root,
    get_config,
    read_staged_diff,
    run_git,
    set_config,
    unset_config,
)

__all__ = [
    "GitError",
    "find_hooks_dir",
    "find_repo_root",
    "get_config",
    "read_staged_diff",
    "run_git",
    "set_config",
    "unset_config",
]
