"""Command line interface.

Commands:
    scan       scan the staged changeset (the pre-commit hook entry point)
    install    install the pre-commit hook
    uninstall  remove hooks installed by this tool
    rules      list the active rules

Exit codes for ``scan``: 0 clean, 1 possible secrets found, 2 fatal error.
"""

from pathlib import Path
from typing import Optional

import click
import yaml

from commit_airlock import __version__
from commit_airlock.config.pattern_loader import load_rules_from_yaml, resolve_rules_path
from commit_airlock.core.diff_parser import DiffParseError
from commit_airlock.core.secret_scanner.patterns import PatternRule, RuleSetError, build_rule_set
from commit_airlock.core.secret_scanner.scanner import SecretScanner
from commit_airlock.git.staging import GitError, find_repo_root, read_staged_diff
from commit_airlock.hook.installer import (
    DEFAULT_HOOKS_PATH,
    HookInstallError,
    InstallMode,
    install_hook,
    uninstall_hook,
)
from commit_airlock.logging.setup import get_logger, new_scan_id, setup_logging
from commit_airlock.report import emit_report

logger = get_logger(__name__)


class FatalError(click.ClickException):
    """A local fault that aborts the command with exit code 2."""

    exit_code = 2

    def show(self, file=None) -> None:
        click.echo(f"commit-airlock: error: {self.format_message()}", err=True)


def _load_extra_rules(rules_path: Optional[Path], repo_root: Optional[Path]) -> list[PatternRule]:
    path = resolve_rules_path(rules_path, repo_root)
    if path is None:
        return []
    try:
        rules = load_rules_from_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise FatalError(f"cannot load rules from {path}: {e}") from e
    logger.info("Loaded extra rules", extra={"event": "rules_loaded", "path": str(path), "count": len(rules)})
    return rules


@click.group()
@click.version_option(__version__, prog_name="commit-airlock")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error", "critical"], case_sensitive=False),
    default=None,
    help="Log level (default: COMMIT_AIRLOCK_LOG_LEVEL or warning).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Log format (default: COMMIT_AIRLOCK_LOG_FORMAT or text).",
)
def cli(log_level: Optional[str], log_format: Optional[str]) -> None:
    """Block commits whose staged changes look like they contain secrets."""
    try:
        setup_logging(
            level=log_level,
            json_format=None if log_format is None else log_format == "json",
        )
    except ValueError as e:
        raise FatalError(f"invalid logging configuration: {e}") from e
    new_scan_id()


@cli.command()
@click.option(
    "--diff-file",
    type=click.File("rb"),
    default=None,
    help="Scan this unified diff ('-' for stdin) instead of the staged changes.",
)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with extra rules.",
)
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory inside the repository (default: current directory).",
)
@click.pass_context
def scan(ctx: click.Context, diff_file, rules_path: Optional[Path], repo: Optional[Path]) -> None:
    """Scan staged additions and reject the commit on any finding."""
    try:
        if diff_file is not None:
            repo_root = find_repo_root(repo) if repo is not None else None
            diff_text = diff_file.read().decode("utf-8", "replace")
        else:
            repo_root = find_repo_root(repo)
            diff_text = read_staged_diff(repo_root)

        scanner = SecretScanner(extra_rules=_load_extra_rules(rules_path, repo_root))
        result = scanner.scan_diff(diff_text)
    except (GitError, DiffParseError, RuleSetError, OSError) as e:
        logger.error("Scan aborted", extra={"event": "scan_failed", "error_type": type(e).__name__})
        raise FatalError(str(e)) from e

    emit_report(result)
    ctx.exit(result.exit_code)


@cli.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in InstallMode]),
    default=InstallMode.HOOKS_PATH.value,
    show_default=True,
    help="hooks-path: tracked directory + core.hooksPath; copy: local .git/hooks.",
)
@click.option(
    "--hooks-path",
    default=DEFAULT_HOOKS_PATH,
    show_default=True,
    help="Tracked hook directory for hooks-path mode.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing pre-commit hook.")
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory inside the repository (default: current directory).",
)
def install(mode: str, hooks_path: str, force: bool, repo: Optional[Path]) -> None:
    """Install the pre-commit hook."""
    try:
        target = install_hook(mode=mode, repo=repo, force=force, hooks_path=hooks_path)
    except (GitError, HookInstallError, OSError) as e:
        raise FatalError(str(e)) from e
    click.echo(f"Installed pre-commit hook at {target}")
    click.echo("Skip it for a single commit with: git commit --no-verify")


@cli.command()
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory inside the repository (default: current directory).",
)
def uninstall(repo: Optional[Path]) -> None:
    """Remove hooks installed by commit-airlock."""
    try:
        removed = uninstall_hook(repo=repo)
    except (GitError, OSError) as e:
        raise FatalError(str(e)) from e
    if not removed:
        click.echo("No commit-airlock hook found")
    for path in removed:
        click.echo(f"Removed {path}")


@cli.command("rules")
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with extra rules.",
)
def list_rules(rules_path: Optional[Path]) -> None:
    """List the active rules in evaluation order."""
    try:
        rule_set = build_rule_set(_load_extra_rules(rules_path, None))
    except RuleSetError as e:
        raise FatalError(str(e)) from e
    for rule in rule_set:
        case = "ignore-case" if rule.ignore_case else "case-sensitive"
        click.echo(f"{rule.label:<28} {rule.severity.value:<9} {case}")
