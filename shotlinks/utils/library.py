"""
Installed Steam App Discovery

Lists installed Steam apps by reading the app manifests in every Steam
library folder. Each manifest names the app's install directory under
<library>/steamapps/common; its last path component is the game's name.
"""

import os
import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import vdf

logger = logging.getLogger(__name__)

APPMANIFEST_PATTERN = re.compile(r'^appmanifest_(\d+)\.acf$')


@dataclass(frozen=True)
class InstalledApp:
    """An installed Steam app"""
    app_id: int
    install_path: str

    @property
    def name(self) -> str:
        return Path(self.install_path).name


# Installed apps keyed by 32-bit app id. A value of None means a manifest
# exists but could not be read or has no install directory.
InstalledApps = Dict[int, Optional[InstalledApp]]


def _lower_keys(data: dict) -> dict:
    return {str(k).lower(): v for k, v in data.items()}


def get_library_folders(steam_path: Path) -> List[Path]:
    """
    Get every Steam library folder, starting with the Steam root itself.

    Handles both the current libraryfolders.vdf layout ("path" sub-keys) and
    the legacy one (numeric keys mapping straight to a path string).
    """
    steam_path = Path(steam_path)
    paths = [steam_path]

    for vdf_path in (steam_path / "steamapps" / "libraryfolders.vdf",
                     steam_path / "config" / "libraryfolders.vdf"):
        if not vdf_path.exists():
            continue
        try:
            with open(vdf_path, 'r', encoding='utf-8', errors='ignore') as f:
                data = _lower_keys(vdf.load(f))
        except (OSError, SyntaxError) as e:
            logger.warning(f"[Library] Error reading {vdf_path}: {e}")
            continue

        folders = data.get('libraryfolders') or {}
        for key, value in folders.items():
            if not str(key).isdigit():
                continue
            if isinstance(value, dict):
                folder = _lower_keys(value).get('path')
            else:
                folder = value
            if folder:
                paths.append(Path(folder))
        break

    # Deduplicate while preserving order
    seen = set()
    unique_paths = []
    for p in paths:
        real_path = os.path.realpath(p)
        if real_path not in seen:
            seen.add(real_path)
            unique_paths.append(p)

    logger.debug(f"[Library] Found {len(unique_paths)} library folders: {unique_paths}")
    return unique_paths


def read_app_manifest(manifest_path: Path, app_id: int) -> Optional[InstalledApp]:
    """Read one appmanifest_<id>.acf; None if it is unreadable or has no installdir."""
    try:
        with open(manifest_path, 'r', encoding='utf-8', errors='ignore') as f:
            data = _lower_keys(vdf.load(f))
    except (OSError, SyntaxError) as e:
        logger.warning(f"[Library] Error reading manifest {manifest_path}: {e}")
        return None

    app_state = data.get('appstate')
    if not isinstance(app_state, dict):
        return None

    install_dir = _lower_keys(app_state).get('installdir')
    if not install_dir:
        logger.debug(f"[Library] Manifest {manifest_path} has no installdir")
        return None

    install_path = manifest_path.parent / "common" / install_dir
    return InstalledApp(app_id=app_id, install_path=str(install_path))


def load_installed_apps(steam_path: Path) -> InstalledApps:
    """Load every installed app across all library folders."""
    apps: InstalledApps = {}

    for library in get_library_folders(steam_path):
        steamapps = Path(library) / "steamapps"
        if not steamapps.is_dir():
            logger.debug(f"[Library] Library folder {library} has no steamapps directory")
            continue

        try:
            entries = list(os.scandir(steamapps))
        except OSError as e:
            logger.warning(f"[Library] Cannot list {steamapps}: {e}")
            continue

        for entry in entries:
            match = APPMANIFEST_PATTERN.match(entry.name)
            if not match:
                continue
            app_id = int(match.group(1)) & 0xFFFFFFFF
            app = read_app_manifest(Path(entry.path), app_id)
            # First library wins, but a readable manifest beats a broken one
            if apps.get(app_id) is None:
                apps[app_id] = app

    logger.info(f"[Library] Found {len(apps)} installed apps")
    return apps
