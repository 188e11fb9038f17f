"""
Built-in secret patterns

Detection rules for credentials that commonly leak into commits: cloud
provider keys, vendor tokens, PEM private keys and keyword assignments such
as ``password = "..."``.

Structured token shapes are matched case-sensitively. Keyword rules are
matched case-insensitively.

References:
- GitHub Secret Scanning
- GitLab Secret Detection
- truffleHog
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Pattern


class Severity(str, Enum):
    """Rule severity. Informational only: every finding blocks the commit."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class RuleSetError(ValueError):
    """Raised when a rule set cannot be built from the given rules."""


@dataclass(frozen=True)
class PatternRule:
    """A named secret detector.

    Attributes:
        label: Unique, human readable name used in reports.
        pattern: Compiled regular expression tested against each added line.
        severity: Informational severity.
        description: Short explanation of what the rule catches.
    """
    label: str
    pattern: Pattern
    severity: Severity
    description: str = ""

    @property
    def ignore_case(self) -> bool:
        return bool(self.pattern.flags & re.IGNORECASE)

    def matches(self, line: str) -> bool:
        """Return True if the rule matches anywhere in ``line``."""
        return self.pattern.search(line) is not None


# Right-hand side of a keyword assignment: a quoted literal of 4+ characters
# or a bare token of 8+ characters. A bare token must hold a digit or a symbol
# other than "_" and ".", must not be all digits and must not be an attribute
# chain, so names like new_password or settings.DB_PASSWORD do not count as
# values. Calls and subscripts never match. Values starting with $, %, { or <
# are references or placeholders.
_VALUE_CHAR = r'[^\s"\'`(){}\[\]<>,;]'
_VALUE_END = r'(?=[\s,;]|$)'
_ASSIGNED_VALUE = (
    r'\s*[:=]\s*(?:'
    r'"(?![$%{<])[^"\s]{4,}"'
    r"|'(?![$%{<])[^'\s]{4,}'"
    r'|(?![$%{<])'
    + r'(?!\d+' + _VALUE_END + r')'
    + r'(?![A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+' + _VALUE_END + r')'
    + r'(?=' + _VALUE_CHAR + r'*[^\sA-Za-z_."\'`(){}\[\]<>,;])'
    + _VALUE_CHAR + r'{8,}' + _VALUE_END
    + r')'
)


def _assignment(keyword: str) -> Pattern:
    """Compile a case-insensitive ``<keyword> = <value>`` rule."""
    return re.compile(
        rf"""(?<![A-Za-z0-9])(?:{keyword})(?:[_.-][A-Za-z0-9_]*)?["']?{_ASSIGNED_VALUE}""",
        re.IGNORECASE,
    )


BUILTIN_RULES: tuple[PatternRule, ...] = (
    # Structured token shapes
    PatternRule(
        label="AWS access key",
        pattern=re.compile(
            r"(?<![A-Z0-9])(?:AKIA|ASIA|AGPA|AIDA|AROA|ANPA|ANVA|AIPA)[0-9A-Z]{16}(?![0-9A-Z])"
        ),
        severity=Severity.CRITICAL,
        description="AWS access key ID",
    ),
    PatternRule(
        label="AWS secret access key",
        pattern=re.compile(
            r"""aws_secret_access_key["']?\s*[:=]\s*["']?[A-Za-z0-9/+]{40}(?![A-Za-z0-9/+])""",
            re.IGNORECASE,
        ),
        severity=Severity.CRITICAL,
        description="AWS secret access key assignment",
    ),
    PatternRule(
        label="GitHub token",
        pattern=re.compile(
            r"\b(?:gh[pousr]_[A-Za-z0-9]{36}|github_pat_[A-Za-z0-9]{22}_[A-Za-z0-9]{59})"
        ),
        severity=Severity.CRITICAL,
        description="GitHub personal access, OAuth, app or refresh token",
    ),
    PatternRule(
        label="Google API key",
        pattern=re.compile(r"\bAIza[0-9A-Za-z_\-]{35}"),
        severity=Severity.CRITICAL,
        description="Google Cloud API key",
    ),
    PatternRule(
        label="Google OAuth token",
        pattern=re.compile(r"\bya29\.[0-9A-Za-z_\-]{20,}"),
        severity=Severity.HIGH,
        description="Google OAuth access token",
    ),
    PatternRule(
        label="Stripe API key",
        pattern=re.compile(r"\b[rs]k_(?:live|test)_[0-9A-Za-z]{24,}"),
        severity=Severity.CRITICAL,
        description="Stripe secret or restricted key",
    ),
    PatternRule(
        label="Slack token",
        pattern=re.compile(r"\bxox[abposr]-[0-9]{10,13}-[0-9A-Za-z\-]{10,}"),
        severity=Severity.HIGH,
        description="Slack bot, user or app token",
    ),
    PatternRule(
        label="Private key header",
        pattern=re.compile(r"-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY(?: BLOCK)?-----"),
        severity=Severity.CRITICAL,
        description="PEM, OpenSSH or PGP private key block",
    ),
    # Keyword rules
    PatternRule(
        label="Bearer token",
        pattern=re.compile(r"\bbearer\s+[A-Za-z0-9\-._~+/]{16,}=*", re.IGNORECASE),
        severity=Severity.HIGH,
        description="Bearer credential in an Authorization header",
    ),
    PatternRule(
        label="Password assignment",
        pattern=_assignment(r"password|passwd|pwd"),
        severity=Severity.HIGH,
        description="Password assigned a literal value",
    ),
    PatternRule(
        label="Secret assignment",
        pattern=_assignment(r"secret"),
        severity=Severity.HIGH,
        description="Secret assigned a literal value",
    ),
    PatternRule(
        label="Token assignment",
        pattern=_assignment(r"token|api[_-]?key|access[_-]?key"),
        severity=Severity.MEDIUM,
        description="Token or API key assigned a literal value",
    ),
)


def get_builtin_rules(min_severity: Optional[str] = None) -> list[PatternRule]:
    """Return the built-in rules in evaluation order.

    Args:
        min_severity: Drop rules below this severity (critical > high > medium > low).

    Returns:
        List of pattern rules.
    """
    rules = list(BUILTIN_RULES)
    if min_severity:
        floor = SEVERITY_ORDER[Severity(min_severity)]
        rules = [r for r in rules if SEVERITY_ORDER[r.severity] >= floor]
    return rules


def get_rule_by_label(label: str) -> Optional[PatternRule]:
    """Look up a built-in rule by label."""
    for rule in BUILTIN_RULES:
        if rule.label == label:
            return rule
    return None


class RuleSet:
    """An ordered, validated, immutable collection of pattern rules.

    Raises:
        RuleSetError: On an empty label, a duplicate label, a pattern that is
            not a compiled regular expression, or a pattern that matches the
            empty string (it would flag every line).
    """

    def __init__(self, rules: Iterable[PatternRule]):
        self._rules = tuple(rules)
        seen: set[str] = set()
        for rule in self._rules:
            if not rule.label:
                raise RuleSetError("Rule label cannot be empty")
            if rule.label in seen:
                raise RuleSetError(f"Duplicate rule label: {rule.label}")
            if not isinstance(rule.pattern, re.Pattern):
                raise RuleSetError(f"Rule {rule.label!r} does not have a compiled pattern")
            if rule.pattern.search("") is not None:
                raise RuleSetError(f"Rule {rule.label!r} matches empty input")
            seen.add(rule.label)

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self._rules]

    def first_match(self, line: str) -> Optional[PatternRule]:
        """Return the first rule, in order, that matches ``line``."""
        for rule in self._rules:
            if rule.matches(line):
                return rule
        return None


def build_rule_set(extra_rules: Iterable[PatternRule] = ()) -> RuleSet:
    """Build the rule set for one invocation: built-ins followed by extras."""
    return RuleSet([*BUILTIN_RULES, *extra_rules])
