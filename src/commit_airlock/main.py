"""
commit-airlock entry point

Run with: commit-airlock scan
Or: python -m commit_airlock.main scan
"""

import os
import sys
from typing import Optional

from commit_airlock.cli import cli
from commit_airlock.logging.setup import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    VALID_LOG_FORMATS,
    VALID_LOG_LEVELS,
)


def validate_environment() -> list[str]:
    """Validate environment variables at startup.

    Returns:
        List of validation error messages (empty if all valid).
    """
    errors = []

    log_level = os.getenv("COMMIT_AIRLOCK_LOG_LEVEL", DEFAULT_LOG_LEVEL).lower()
    if log_level not in VALID_LOG_LEVELS:
        errors.append(
            f"COMMIT_AIRLOCK_LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, got: {log_level}"
        )

    log_format = os.getenv("COMMIT_AIRLOCK_LOG_FORMAT", DEFAULT_LOG_FORMAT).lower()
    if log_format not in VALID_LOG_FORMATS:
        errors.append(
            f"COMMIT_AIRLOCK_LOG_FORMAT must be one of {sorted(VALID_LOG_FORMATS)}, got: {log_format}"
        )

    rules_path = os.getenv("COMMIT_AIRLOCK_RULES_PATH")
    if rules_path and not os.path.isfile(rules_path):
        errors.append(f"COMMIT_AIRLOCK_RULES_PATH does not point to a file: {rules_path}")

    return errors


def main(argv: Optional[list[str]] = None) -> None:
    """Validate the environment, then run the CLI."""
    validation_errors = validate_environment()
    if validation_errors:
        for error in validation_errors:
            print(f"commit-airlock: error: {error}", file=sys.stderr)
        sys.exit(2)

    cli(args=argv, prog_name="commit-airlock")


if __name__ == "__main__":
    main()
