"""Location of the Vector CLI's on-disk configuration."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from vector_common.constants import APP_NAME, CONFIG_FILE, CREDENTIALS_FILE, ENV_CONFIG_DIR


def _platform_config_root() -> Path:
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    return Path.home() / ".config"


def config_dir() -> Path:
    """Resolve the config directory.

    Resolution order:
    1. ``VECTOR_CONFIG_DIR``
    2. ``$XDG_CONFIG_HOME/vector``
    3. The platform's per-user config directory
    """
    override = os.environ.get(ENV_CONFIG_DIR)
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return _platform_config_root() / APP_NAME


def config_file() -> Path:
    return config_dir() / CONFIG_FILE


def credentials_file() -> Path:
    return config_dir() / CREDENTIALS_FILE
