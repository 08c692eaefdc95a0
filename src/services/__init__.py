"""
Services package - Application services for smwallet.

Contains:
- configure_logging: Console and daily-file logging setup
"""

from .logging import configure_logging, get_log_file_path, cleanup_old_logs

__all__ = [
    "configure_logging",
    "get_log_file_path",
    "cleanup_old_logs",
]
