"""Cross-platform path handling using platformdirs.

Provides XDG-compliant paths with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from platformdirs import user_cache_dir, user_config_dir, user_log_dir

logger = logging.getLogger(__name__)

APP_NAME = "shelfmark"
APPAUTHOR: Literal[False] = False  # Avoid "CompanyName/AppName" nesting on Windows


def _env_override(env_var: str) -> Path | None:
    """Return the path in ``env_var`` if it is set."""
    v = os.environ.get(env_var)
    return Path(v).expanduser() if v else None


def cache_dir(*, ensure: bool = True) -> Path:
    """Get application cache directory.

    Linux: ~/.cache/shelfmark
    macOS: ~/Library/Caches/shelfmark
    Windows: C:\\Users\\<user>\\AppData\\Local\\shelfmark\\Cache

    Override with SHELFMARK_CACHE_DIR env var.

    Args:
        ensure: Create directory if it doesn't exist

    Returns:
        Path to cache directory
    """
    d = _env_override("SHELFMARK_CACHE_DIR") or Path(user_cache_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def covers_dir(*, ensure: bool = True) -> Path:
    """Directory holding cached cover images (``<cache_dir>/covers``)."""
    d = cache_dir(ensure=ensure) / "covers"
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def log_dir(*, ensure: bool = True) -> Path:
    """Get application log directory.

    Override with SHELFMARK_LOG_DIR env var.
    """
    d = _env_override("SHELFMARK_LOG_DIR") or Path(user_log_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def default_config_file() -> Path:
    """Location of the optional ``config.yaml``.

    Override the directory with SHELFMARK_CONFIG_DIR env var. Not created.
    """
    base = _env_override("SHELFMARK_CONFIG_DIR") or Path(user_config_dir(APP_NAME, APPAUTHOR))
    return base / "config.yaml"
