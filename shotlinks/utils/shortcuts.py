"""Non-Steam shortcut loading using the proven ValvePython vdf library"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import vdf

from .paths import get_shortcuts_vdf_path
from .shortcut_id import shortcut_identity, SHORTCUT_APPID_MASK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Shortcut:
    """A shortcuts.vdf entry, reduced to the fields screenshot folders are named from."""
    raw_id: int
    name: str
    exe: str

    @property
    def masked_id(self) -> int:
        return self.raw_id & SHORTCUT_APPID_MASK

    @property
    def shortcut_id(self) -> int:
        return shortcut_identity(self.exe, self.name)

    def matches(self, app_id: int) -> bool:
        """True if a screenshot folder named `app_id` belongs to this shortcut."""
        return self.masked_id == app_id or self.shortcut_id == app_id


def load_shortcuts_vdf(path: str) -> Dict[str, Any]:
    """Load and parse shortcuts.vdf file using vdf library"""
    try:
        with open(path, 'rb') as f:
            data = vdf.binary_loads(f.read())
        return data
    except FileNotFoundError:
        # Return empty structure if file doesn't exist
        return {"shortcuts": {}}
    except Exception as e:
        logger.error(f"[Shortcuts] Error parsing shortcuts list {path}: {e}")
        return {"shortcuts": {}}


def _get_field(entry: Dict[str, Any], name: str) -> Optional[Any]:
    """Case-insensitive field lookup; Steam has written both AppName and appname."""
    lowered = name.lower()
    for key, value in entry.items():
        if key.lower() == lowered:
            return value
    return None


def parse_shortcuts(data: Dict[str, Any]) -> List[Shortcut]:
    """Convert parsed shortcuts.vdf data into Shortcut records, in file order."""
    shortcuts_table = _get_field(data, 'shortcuts') or {}
    shortcuts = []
    for index, entry in shortcuts_table.items():
        if not isinstance(entry, dict):
            continue
        raw_id = _get_field(entry, 'appid')
        name = _get_field(entry, 'AppName')
        exe = _get_field(entry, 'Exe')
        if name is None or exe is None:
            logger.debug(f"[Shortcuts] Skipping incomplete shortcut entry {index}")
            continue
        try:
            raw_id = int(raw_id or 0) & 0xFFFFFFFF
        except (TypeError, ValueError):
            logger.debug(f"[Shortcuts] Shortcut {name!r} has an invalid appid {raw_id!r}")
            raw_id = 0
        shortcuts.append(Shortcut(raw_id=raw_id, name=str(name), exe=str(exe)))
    return shortcuts


def load_shortcuts(steam_path: Path, account_id: int) -> List[Shortcut]:
    """Load one user's non-Steam shortcuts; missing or broken files give an empty list."""
    path = get_shortcuts_vdf_path(steam_path, account_id)
    shortcuts = parse_shortcuts(load_shortcuts_vdf(str(path)))
    logger.debug(f"[Shortcuts] Loaded {len(shortcuts)} shortcuts for account {account_id}")
    return shortcuts
