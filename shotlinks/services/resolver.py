"""
App name resolution.

Turns the numeric folder name Steam gives a game's screenshots into the
game's name. Sources are tried in a fixed order and the first hit wins:

1. Built-in pseudo-apps (Steam itself, dedicated servers, ...)
2. Installed Steam apps, by 32-bit app id; the name is the install folder
3. Non-Steam shortcuts, by masked appid or Big Picture shortcut id, in file order

A miss is a normal outcome: callers fall back to the numeric id.
"""

import logging
from typing import Dict, Iterable, Optional

from shotlinks.utils.library import InstalledApps
from shotlinks.utils.shortcuts import Shortcut

logger = logging.getLogger(__name__)

# Never mutated after import
BUILTIN_APPS: Dict[int, str] = {
    0: "Steam",
    5: "Dedicated Server",
    7: "Steam Client",
    910: "Steam Media Player",
}


def resolve_app_name(
    app_id: int,
    installed_apps: InstalledApps,
    shortcuts: Iterable[Shortcut],
) -> Optional[str]:
    """Resolve an app id to a display name, or None if nothing knows it."""
    builtin = BUILTIN_APPS.get(app_id)
    if builtin is not None:
        return builtin

    app = installed_apps.get(app_id & 0xFFFFFFFF)
    if app is not None and app.name:
        return app.name

    for shortcut in shortcuts:
        # An unnamed shortcut cannot name a link
        if shortcut.name and shortcut.matches(app_id):
            return shortcut.name

    logger.debug(f"[Resolver] No name known for app {app_id}")
    return None
