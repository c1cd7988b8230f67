"""XDG-compliant directory paths for local panel state."""

import os
from pathlib import Path

APP_DIR_NAME = "heypanel"


def get_config_dir() -> Path:
    """Get XDG-compliant configuration directory.

    Priority:
    1. $XDG_CONFIG_HOME/heypanel/
    2. ~/.config/heypanel/

    Returns:
        Path to configuration directory
    """
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        path = Path(config_home) / APP_DIR_NAME
    else:
        path = Path.home() / ".config" / APP_DIR_NAME

    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def get_data_dir() -> Path:
    """Get XDG-compliant data directory.

    The remembered credential lives here.

    Priority:
    1. $XDG_DATA_HOME/heypanel/
    2. ~/.local/share/heypanel/

    Returns:
        Path to data directory
    """
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        path = Path(data_home) / APP_DIR_NAME
    else:
        path = Path.home() / ".local" / "share" / APP_DIR_NAME

    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def get_cache_dir() -> Path:
    """Get XDG-compliant cache directory for discovery results.

    Priority:
    1. $XDG_CACHE_HOME/heypanel/
    2. ~/.cache/heypanel/
    3. /tmp/heypanel-{uid}/ (last resort with proper permissions)

    Returns:
        Path to cache directory
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    if cache_home:
        path = Path(cache_home) / APP_DIR_NAME
        path.mkdir(parents=True, exist_ok=True, mode=0o700)
        return path

    home = Path.home()
    if home.exists():
        path = home / ".cache" / APP_DIR_NAME
        path.mkdir(parents=True, exist_ok=True, mode=0o700)
        return path

    path = Path(f"/tmp/{APP_DIR_NAME}-{os.getuid()}")
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path
