"""
Logging - Application logging configuration and disk persistence.

Provides:
- Python logging configuration with console and optional file output
- Log persistence to daily files: smwallet-YYYY-MM-DD.log
- Automatic cleanup of old log files

Wallet code never logs seed phrases, keys or passwords.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from utils import get_logs_dir


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILE_PREFIX = "smwallet-"


def configure_logging(level: int = logging.INFO, retention_days: int = 0) -> None:
    """
    Configure Python logging for the application.

    Sets up a root logger with console output and, if retention_days > 0,
    a file handler writing to today's log file.

    Args:
        level: Logging level (default: INFO)
        retention_days: Keep daily log files this long (0 = console only)
    """
    root_logger = logging.getLogger()

    # Only configure if not already configured
    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    # Console handler with simple format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if retention_days > 0:
        file_handler = logging.FileHandler(get_log_file_path(), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)
        cleanup_old_logs(retention_days)


def get_log_file_path(date: Optional[datetime] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return get_logs_dir() / filename


def cleanup_old_logs(retention_days: int) -> int:
    """
    Delete log files older than retention_days.

    Args:
        retention_days: Delete files older than this (0 = delete all)

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in get_logs_dir().glob(f"{LOG_FILE_PREFIX}*.log"):
        # Parse date from filename
        try:
            date_str = file_path.stem.replace(LOG_FILE_PREFIX, "")
            file_date = datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            # Skip files that don't match expected format
            continue

        if file_date < cutoff_date:
            try:
                file_path.unlink()
                deleted_count += 1
            except OSError as e:
                logging.getLogger(__name__).warning(f"Could not delete {file_path.name}: {e}")

    return deleted_count
