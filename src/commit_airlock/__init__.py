"""
commit-airlock: keep credentials out of commits

A git pre-commit hook that scans the lines a commit would add and rejects
the commit when any of them looks like an API key, token, private key or
password.
"""

__version__ = "1.0.0"

from commit_airlock.core.secret_scanner import Finding, ScanResult, SecretScanner, scan

__all__ = [
    "Finding",
    "ScanResult",
    "SecretScanner",
    "scan",
]
