"""Steam and Pictures path constants and utilities."""

import os
import logging
from pathlib import Path
from typing import Optional

from shotlinks.errors import BootstrapError

logger = logging.getLogger(__name__)


# shotlinks data directory
SHOTLINKS_DATA_DIR = os.path.expanduser("~/.local/share/shotlinks")
SETTINGS_PATH = os.path.join(SHOTLINKS_DATA_DIR, "settings.json")

# Default name of the managed folder inside Pictures
DEFAULT_PICTURES_DIRECTORY_NAME = "Steam Screenshots"

# Well-known Steam install locations, checked in order
STEAM_PATH_CANDIDATES = [
    os.path.expanduser("~/.steam/steam"),
    os.path.expanduser("~/.local/share/Steam"),
    os.path.expanduser("~/Library/Application Support/Steam"),
    "C:/Program Files (x86)/Steam",
]

# Steam's screenshot app id and the on-disk layout below userdata/<account>/
SCREENSHOTS_APP_ID = "760"
REMOTE_DIR_NAME = "remote"
SCREENSHOTS_DIR_NAME = "screenshots"


def find_steam_path(steam_path: Optional[str] = None) -> Path:
    """Locate the Steam installation directory.

    Args:
        steam_path: Explicit Steam root; wins over auto-detection

    Raises:
        BootstrapError: if no Steam installation can be found
    """
    if steam_path:
        path = Path(os.path.expanduser(steam_path))
        if not path.is_dir():
            raise BootstrapError(f"Steam path {path} is not a directory")
        return path

    for candidate in STEAM_PATH_CANDIDATES:
        if os.path.exists(os.path.join(candidate, "steamapps")):
            logger.debug(f"[Paths] Found Steam at {candidate}")
            return Path(candidate)

    raise BootstrapError("Failed to locate Steam on this computer")


def find_pictures_path(pictures_path: Optional[str] = None) -> Path:
    """Locate the user's Pictures directory.

    Explicit path first, then $XDG_PICTURES_DIR, then ~/Pictures.
    """
    if pictures_path:
        return Path(os.path.expanduser(pictures_path))

    xdg_pictures = os.environ.get("XDG_PICTURES_DIR")
    if xdg_pictures:
        return Path(os.path.expandvars(os.path.expanduser(xdg_pictures)))

    home = Path.home()
    if not home.is_dir():
        raise BootstrapError("Failed to find picture directory")
    return home / "Pictures"


def get_userdata_path(steam_path: Path) -> Path:
    """Get Steam's userdata directory (one folder per 32-bit account id)."""
    return Path(steam_path) / "userdata"


def get_user_screenshots_root(steam_path: Path, account_id: int) -> Path:
    """Get userdata/<account>/760/remote, holding one folder per app id."""
    return get_userdata_path(steam_path) / str(account_id) / SCREENSHOTS_APP_ID / REMOTE_DIR_NAME


def get_app_screenshots_path(steam_path: Path, account_id: int, app_id: int) -> Path:
    """Get the screenshots folder Steam writes for one user and app."""
    return get_user_screenshots_root(steam_path, account_id) / str(app_id) / SCREENSHOTS_DIR_NAME


def get_shortcuts_vdf_path(steam_path: Path, account_id: int) -> Path:
    """Get a user's binary shortcuts.vdf path."""
    return get_userdata_path(steam_path) / str(account_id) / "config" / "shortcuts.vdf"


def parse_numeric_name(name: str) -> Optional[int]:
    """Parse a folder name made only of ASCII digits; anything else is None."""
    if name and name.isascii() and name.isdigit():
        return int(name)
    return None
