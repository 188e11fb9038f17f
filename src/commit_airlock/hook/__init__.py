"""Pre-commit hook installation."""

from commit_airlock.hook.installer import (
    HOOK_SCRIPT,
    HookInstallError,
    InstallMode,
    install_hook,
    is_managed_hook,
    uninstall_hook,
)

__all__ = [
    "HOOK_SCRIPT",
    "HookInstallError",
    "InstallMode",
    "install_hook",
    "is_managed_hook",
    "uninstall_hook",
]
