"""
Shared utility functions for smwallet.

Contains path helpers and common utilities used across packages.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path


APP_DIR_ENV = "SMWALLET_HOME"


def get_app_dir() -> Path:
    """Get the application data directory ($SMWALLET_HOME or ~/.smwallet)."""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        app_dir = Path(override)
    elif getattr(sys, 'frozen', False):
        # Running as compiled
        app_dir = Path(sys.executable).parent / "data"
    else:
        app_dir = Path.home() / ".smwallet"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_wallet_dir() -> Path:
    """Get the wallet storage directory."""
    return get_app_dir() / "wallets"


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def now_time_string() -> str:
    """Current UTC time as ISO-8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
