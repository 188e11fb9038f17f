"""Human-readable rejection report.

Only locations and rule labels are printed. Matched values never reach the
terminal.
"""

import sys
from typing import Optional, TextIO

from commit_airlock.core.secret_scanner.scanner import Finding, ScanResult


BYPASS_HINT = "git commit --no-verify"


def format_finding(finding: Finding) -> str:
    """Format one finding as ``<path>:<line>: possible <label> detected``."""
    return f"{finding.path}:{finding.line_number}: possible {finding.rule_label} detected"


def render_report(result: ScanResult) -> list[str]:
    """Render the report lines for a scan. Empty when nothing was found."""
    if not result.findings:
        return []
    lines = [format_finding(f) for f in result.findings]
    lines.append(
        f"commit rejected: {result.summary()}. "
        f"Remove the values from the staged changes, or bypass the check with '{BYPASS_HINT}'."
    )
    return lines


def emit_report(result: ScanResult, stream: Optional[TextIO] = None) -> None:
    """Write the report to ``stream`` (stderr by default)."""
    out = stream or sys.stderr
    for line in render_report(result):
        print(line, file=out)
