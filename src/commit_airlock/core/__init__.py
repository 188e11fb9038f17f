"""Core modules for staged diff parsing and secret detection."""

from commit_airlock.core.diff_parser import (
    DiffParseError,
    StagedLine,
    group_by_file,
    parse_unified_diff,
)
from commit_airlock.core.secret_scanner import (
    Finding,
    PatternRule,
    RuleSet,
    RuleSetError,
    ScanResult,
    SecretScanner,
    Severity,
)

__all__ = [
    "DiffParseError",
    "StagedLine",
    "group_by_file",
    "parse_unified_diff",
    "Finding",
    "PatternRule",
    "RuleSet",
    "RuleSetError",
    "ScanResult",
    "SecretScanner",
    "Severity",
]
