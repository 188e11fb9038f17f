"""
Secret scanner

Tests every staged line against the rule set and collects findings.
"""

import time
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from commit_airlock.core.diff_parser import StagedLine, parse_unified_diff
from commit_airlock.core.secret_scanner.patterns import (
    PatternRule,
    RuleSet,
    Severity,
    build_rule_set,
)
from commit_airlock.logging.setup import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Finding:
    """A rule match on one staged line.

    Only the location and the rule are kept. The matched text is never
    stored, so a finding can be printed or logged without re-leaking it.
    """
    path: str
    line_number: int
    rule_label: str
    severity: Severity

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line_number}"


@dataclass(frozen=True)
class ScanResult:
    """Result of scanning one staged changeset."""
    findings: tuple[Finding, ...]
    lines_scanned: int
    files_scanned: int
    scan_time_ms: float = 0.0

    @property
    def total_count(self) -> int:
        return len(self.findings)

    @property
    def blocked(self) -> bool:
        """Whether the commit must be rejected. Severity does not matter."""
        return bool(self.findings)

    @property
    def exit_code(self) -> int:
        return 1 if self.blocked else 0

    def get_by_rule(self, label: str) -> list[Finding]:
        return [f for f in self.findings if f.rule_label == label]

    def get_by_path(self, path: str) -> list[Finding]:
        return [f for f in self.findings if f.path == path]

    def summary(self) -> str:
        """One-line summary of the scan."""
        if not self.findings:
            return f"No secrets found in {self.lines_scanned} added lines"
        files = len({f.path for f in self.findings})
        noun = "secret" if self.total_count == 1 else "secrets"
        return f"{self.total_count} possible {noun} in {files} file(s)"


class SecretScanner:
    """Scans staged additions for secrets.

    Each added line yields at most one finding: the first rule, in rule set
    order, that matches it. Built-in token shapes are ordered before keyword
    rules, so ``AWS_SECRET = "AKIA..."`` reports the AWS key rather than a
    generic secret assignment.

    Example:
        >>> scanner = SecretScanner()
        >>> result = scanner.scan_diff(staged_diff_text)
        >>> for finding in result.findings:
        ...     print(finding.location, finding.rule_label)
    """

    def __init__(
        self,
        *,
        rules: Optional[RuleSet] = None,
        extra_rules: Iterable[PatternRule] = (),
    ):
        """Initialize the scanner.

        Args:
            rules: Complete rule set to use. Defaults to the built-in rules.
            extra_rules: Rules appended to the built-in set. Ignored when
                ``rules`` is given.

        Raises:
            RuleSetError: If the combined rules are invalid.
        """
        self._rules = rules if rules is not None else build_rule_set(extra_rules)

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def scan(self, staged: Union[str, Iterable[StagedLine]]) -> ScanResult:
        """Scan staged additions.

        Args:
            staged: Unified diff text, or already parsed staged lines.

        Returns:
            ScanResult with findings in diff order.

        Raises:
            DiffParseError: If diff text is malformed.
        """
        if isinstance(staged, str):
            return self.scan_diff(staged)
        return self.scan_lines(staged)

    def scan_diff(self, diff_text: str) -> ScanResult:
        """Parse unified diff text and scan the lines it adds."""
        return self.scan_lines(parse_unified_diff(diff_text))

    def scan_lines(self, lines: Iterable[StagedLine]) -> ScanResult:
        """Scan parsed staged lines."""
        start_time = time.perf_counter()

        findings: list[Finding] = []
        paths: set[str] = set()
        count = 0
        for line in lines:
            count += 1
            paths.add(line.path)
            rule = self._rules.first_match(line.content)
            if rule is None:
                continue
            finding = Finding(
                path=line.path,
                line_number=line.line_number,
                rule_label=rule.label,
                severity=rule.severity,
            )
            findings.append(finding)
            logger.debug(
                "Possible secret detected",
                extra={
                    "event": "finding",
                    "path": finding.path,
                    "line_number": finding.line_number,
                    "rule": finding.rule_label,
                },
            )

        scan_time = (time.perf_counter() - start_time) * 1000

        result = ScanResult(
            findings=tuple(findings),
            lines_scanned=count,
            files_scanned=len(paths),
            scan_time_ms=scan_time,
        )
        logger.info(
            result.summary(),
            extra={
                "event": "scan_complete",
                "lines_scanned": result.lines_scanned,
                "files_scanned": result.files_scanned,
                "findings": result.total_count,
                "scan_time_ms": round(scan_time, 3),
            },
        )
        return result


def scan(staged: Union[str, Iterable[StagedLine]], extra_rules: Iterable[PatternRule] = ()) -> ScanResult:
    """Scan staged additions with a freshly built rule set."""
    return SecretScanner(extra_rules=extra_rules).scan(staged)
