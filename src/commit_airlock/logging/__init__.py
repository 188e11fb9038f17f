"""Logging configuration module for commit-airlock."""

from commit_airlock.logging.setup import get_logger, new_scan_id, setup_logging

__all__ = ["get_logger", "new_scan_id", "setup_logging"]
