"""YAML loader for extra secret rules.

Teams can add detectors for their own credential formats without modifying
code. Extra rules are appended after the built-in rules; they cannot replace
or suppress them.

Example YAML configuration:

    rules:
      - label: Internal service token
        regex: "isvc_[0-9a-f]{32}"
        severity: high
        ignore_case: false
        description: Token issued by the internal service mesh
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from commit_airlock.core.secret_scanner.patterns import PatternRule, Severity


DEFAULT_RULES_FILENAME = ".commit-airlock.yaml"


@dataclass
class RuleConfig:
    """Configuration for a single extra rule.

    Attributes:
        label: Unique label printed in reports.
        regex: Regular expression tested against each added line.
        severity: One of critical, high, medium, low.
        ignore_case: Match case-insensitively.
        description: Free-form description.
    """

    label: str
    regex: str
    severity: str = Severity.MEDIUM.value
    ignore_case: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.label:
            raise ValueError("Rule label cannot be empty")
        if not self.regex:
            raise ValueError("Regex pattern cannot be empty")
        if self.severity not in {s.value for s in Severity}:
            raise ValueError(f"Unknown severity for rule {self.label!r}: {self.severity}")
        if not isinstance(self.ignore_case, bool):
            raise ValueError(
                f"ignore_case for rule {self.label!r} must be true or false, got: {self.ignore_case!r}"
            )

    def to_rule(self) -> PatternRule:
        """Compile into a PatternRule.

        Raises:
            ValueError: If the regex does not compile.
        """
        try:
            pattern = re.compile(self.regex, re.IGNORECASE if self.ignore_case else 0)
        except re.error as e:
            raise ValueError(f"Invalid regex for rule {self.label!r}: {e}") from e
        return PatternRule(
            label=self.label,
            pattern=pattern,
            severity=Severity(self.severity),
            description=self.description,
        )


def load_rules_from_yaml(path: Path | str) -> list[PatternRule]:
    """Load extra rules from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        List of compiled PatternRule objects.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist.
        ValueError: If the YAML structure or a rule is invalid.
        yaml.YAMLError: If the YAML is malformed.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return []

    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML structure: expected dict, got {type(data).__name__}")

    rules_data = data.get("rules", [])

    if not isinstance(rules_data, list):
        raise ValueError(
            f"Invalid rules structure: expected list, got {type(rules_data).__name__}"
        )

    rules = []
    for i, r in enumerate(rules_data):
        if not isinstance(r, dict):
            raise ValueError(f"Rule {i} is not a dict: {type(r).__name__}")

        if "label" not in r:
            raise ValueError(f"Rule {i} missing required field: label")
        if "regex" not in r:
            raise ValueError(f"Rule {i} missing required field: regex")

        config = RuleConfig(
            label=str(r["label"]),
            regex=str(r["regex"]),
            severity=str(r.get("severity", Severity.MEDIUM.value)).lower(),
            ignore_case=r.get("ignore_case", False),
            description=str(r.get("description", "")),
        )
        rules.append(config.to_rule())

    return rules


def resolve_rules_path(
    explicit: Optional[Path | str] = None,
    repo_root: Optional[Path] = None,
) -> Optional[Path]:
    """Pick the extra rules file for this invocation.

    Order: explicit path, COMMIT_AIRLOCK_RULES_PATH, then
    ``<repo_root>/.commit-airlock.yaml`` if it exists.
    """
    if explicit:
        return Path(explicit)
    env_path = os.getenv("COMMIT_AIRLOCK_RULES_PATH")
    if env_path:
        return Path(env_path)
    if repo_root is not None:
        candidate = repo_root / DEFAULT_RULES_FILENAME
        if candidate.is_file():
            return candidate
    return None
