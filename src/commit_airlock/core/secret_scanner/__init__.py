"""
Secret scanning

Detects credentials in the lines a commit would add.

Main components:
- PatternRule: a named secret detector
- RuleSet: validated, ordered rules used for one invocation
- SecretScanner: scans staged additions
- Finding: a rule match on one staged line (location and rule only)
"""

from commit_airlock.core.secret_scanner.patterns import (
    BUILTIN_RULES,
    PatternRule,
    RuleSet,
    RuleSetError,
    Severity,
    build_rule_set,
    get_builtin_rules,
    get_rule_by_label,
)
from commit_airlock.core.secret_scanner.scanner import (
    Finding,
    ScanResult,
    SecretScanner,
    scan,
)

__all__ = [
    "BUILTIN_RULES",
    "PatternRule",
    "RuleSet",
    "RuleSetError",
    "Severity",
    "Finding",
    "ScanResult",
    "SecretScanner",
    "build_rule_set",
    "get_builtin_rules",
    "get_rule_by_label",
    "scan",
]
