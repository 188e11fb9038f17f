"""Pre-commit hook installation.

Two setups are supported:

- ``hooks-path``: the hook lives in a tracked directory of the repository
  (``.githooks/`` by default) and ``core.hooksPath`` points git at it, so
  every clone that runs the install shares the same hook.
- ``copy``: the hook is written into git's local, untracked hook directory
  (``.git/hooks``) and marked executable.

Either way, ``git commit --no-verify`` skips the hook.
"""

import os
import stat
from enum import Enum
from pathlib import Path
from typing import Optional

from commit_airlock.git.staging import (
    find_hooks_dir,
    find_repo_root,
    get_config,
    set_config,
    unset_config,
)
from commit_airlock.logging.setup import get_logger

logger = get_logger(__name__)


HOOK_NAME = "pre-commit"
HOOK_MARKER = "# installed by commit-airlock"
DEFAULT_HOOKS_PATH = ".githooks"

HOOK_SCRIPT = f"""#!/bin/sh
{HOOK_MARKER}
# Rejects commits whose staged lines look like credentials.
# Skip once with: git commit --no-verify
if command -v commit-airlock >/dev/null 2>&1; then
    exec commit-airlock scan
fi
exec python3 -m commit_airlock.main scan
"""


class InstallMode(str, Enum):
    """Where the hook is installed."""
    HOOKS_PATH = "hooks-path"
    COPY = "copy"


class HookInstallError(RuntimeError):
    """Raised when the hook cannot be installed safely."""


def is_managed_hook(path: Path) -> bool:
    """Return True if ``path`` is a hook written by this installer."""
    try:
        return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def _write_hook(path: Path, force: bool) -> None:
    if path.exists() and not is_managed_hook(path) and not force:
        raise HookInstallError(
            f"{path} already exists and was not installed by commit-airlock; "
            "use --force to overwrite it"
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(HOOK_SCRIPT, encoding="utf-8")
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def install_hook(
    mode: InstallMode | str = InstallMode.HOOKS_PATH,
    repo: Optional[Path | str] = None,
    force: bool = False,
    hooks_path: str = DEFAULT_HOOKS_PATH,
) -> Path:
    """Install the pre-commit hook.

    Args:
        mode: ``hooks-path`` or ``copy``.
        repo: Any directory inside the repository. Defaults to the cwd.
        force: Overwrite a pre-commit hook not written by this installer.
        hooks_path: Tracked hook directory, relative to the repository root
            (``hooks-path`` mode only).

    Returns:
        Path of the installed hook script.

    Raises:
        HookInstallError: If a foreign hook exists and ``force`` is False.
        GitError: If the repository cannot be inspected or configured.
    """
    mode = InstallMode(mode)
    root = find_repo_root(repo)

    if mode is InstallMode.HOOKS_PATH:
        hook_dir = (root / hooks_path).resolve()
        if root not in hook_dir.parents and hook_dir != root:
            raise HookInstallError(f"Hooks path must be inside the repository: {hooks_path}")
        target = hook_dir / HOOK_NAME
        _write_hook(target, force)
        set_config("core.hooksPath", Path(os.path.relpath(hook_dir, root)).as_posix(), cwd=root)
    else:
        target = find_hooks_dir(root) / HOOK_NAME
        _write_hook(target, force)
        configured = get_config("core.hooksPath", cwd=root)
        if configured:
            logger.warning(
                "core.hooksPath is set; git will not run hooks from the local hook directory",
                extra={"event": "hooks_path_override", "hooks_path": configured},
            )

    logger.info(
        "Installed pre-commit hook",
        extra={"event": "hook_installed", "mode": mode.value, "path": str(target)},
    )
    return target


def uninstall_hook(repo: Optional[Path | str] = None) -> list[Path]:
    """Remove hooks written by this installer.

    Foreign hooks are left alone. ``core.hooksPath`` is unset when it points
    at a directory whose hook was removed.

    Returns:
        Paths of the removed hook scripts.
    """
    root = find_repo_root(repo)
    removed: list[Path] = []

    configured = get_config("core.hooksPath", cwd=root, local=True)
    candidates = [find_hooks_dir(root) / HOOK_NAME]
    tracked_dir: Optional[Path] = None
    if configured:
        tracked_dir = (root / configured).resolve()
        candidates.append(tracked_dir / HOOK_NAME)
    else:
        candidates.append(root / DEFAULT_HOOKS_PATH / HOOK_NAME)

    for path in candidates:
        if path.is_file() and is_managed_hook(path):
            path.unlink()
            removed.append(path)
            logger.info("Removed pre-commit hook", extra={"event": "hook_removed", "path": str(path)})

    if tracked_dir is not None and (tracked_dir / HOOK_NAME) in removed:
        unset_config("core.hooksPath", cwd=root)

    return removed
