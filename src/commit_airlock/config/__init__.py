"""Configuration module for commit-airlock."""

from commit_airlock.config.pattern_loader import (
    DEFAULT_RULES_FILENAME,
    RuleConfig,
    load_rules_from_yaml,
    resolve_rules_path,
)

__all__ = [
    "DEFAULT_RULES_FILENAME",
    "RuleConfig",
    "load_rules_from_yaml",
    "resolve_rules_path",
]
