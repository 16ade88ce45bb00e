"""
Screenshot link reconciliation.

The only code that creates or removes symlinks. Each game gets one link in
the user's target folder, named after the game (or its numeric app id while
the name is unknown), pointing at Steam's screenshots folder for that game.

Anything at a link path that is not a symlink is user content: it is
reported and left alone.

Filesystem errors never propagate. They are logged and returned as a failed
ReconcileResult so the surrounding scan or watch loop can carry on.
"""

import os
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from shotlinks.services.resolver import resolve_app_name
from shotlinks.utils.library import InstalledApps
from shotlinks.utils.paths import parse_numeric_name
from shotlinks.utils.shortcuts import Shortcut

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of reconciling one app's link"""
    app_id: int
    link_path: str
    source_dir: str
    success: bool
    conflict: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _remove_symlink(path: Path) -> None:
    try:
        os.unlink(path)
    except (IsADirectoryError, PermissionError):
        # Windows directory symlinks are removed like directories
        if os.name != 'nt':
            raise
        os.rmdir(path)


def reconcile_link(
    source_dir: Path,
    target_dir: Path,
    app_id: int,
    resolved_name: Optional[str],
    label: str = "",
) -> ReconcileResult:
    """
    Create or refresh the link for one app.

    Args:
        source_dir: Steam's screenshots folder for the app
        target_dir: Folder holding the links
        app_id: Numeric app id, used as the link name when unresolved
        resolved_name: Game name, or None
        label: Log prefix identifying the user

    Returns:
        ReconcileResult describing what happened
    """
    link_name = resolved_name if resolved_name else str(app_id)
    link_path = Path(target_dir) / link_name
    result = ReconcileResult(app_id=app_id, link_path=str(link_path),
                             source_dir=str(source_dir), success=False)
    prefix = f"[Reconcile] [{label}; {app_id}]" if label else f"[Reconcile] [{app_id}]"

    if link_path.is_symlink():
        try:
            _remove_symlink(link_path)
        except FileNotFoundError:
            logger.debug(f"{prefix} {link_path} vanished before it could be unlinked")
        except OSError as e:
            result.error = f"Error unlinking {link_path}: {e}"
            logger.error(f"{prefix} {result.error}")
            return result
    elif os.path.lexists(link_path):
        result.conflict = True
        result.error = f"{link_path} exists and is not a symlink; leaving it alone"
        logger.warning(f"{prefix} {result.error}")
        return result

    try:
        os.symlink(source_dir, link_path, target_is_directory=True)
    except OSError as e:
        result.error = f"Error symlinking {source_dir} to {link_path}: {e}"
        logger.error(f"{prefix} {result.error}")
        return result

    logger.debug(f"{prefix} Linked {link_path} -> {source_dir}")
    result.success = True
    return result


def link_app_screenshots(
    source_dir: Path,
    target_dir: Path,
    app_id: int,
    installed_apps: InstalledApps,
    shortcuts: Iterable[Shortcut],
    label: str = "",
) -> ReconcileResult:
    """Resolve an app's name and reconcile its link. Shared by scan and watch."""
    name = resolve_app_name(app_id, installed_apps, shortcuts)
    if name is None:
        logger.info(f"[Reconcile] [{label}; {app_id}] Name unknown, linking as {app_id}")
    return reconcile_link(source_dir, target_dir, app_id, name, label=label)


def cleanup_numeric_links(
    target_dir: Path,
    installed_apps: InstalledApps,
    shortcuts: Iterable[Shortcut],
    label: str = "",
) -> int:
    """
    Remove numeric-named symlinks whose app now has a known name.

    Entries that are not symlinks are never touched. Returns the number of
    links removed.
    """
    shortcuts = list(shortcuts)
    removed = 0

    try:
        entries = list(os.scandir(target_dir))
    except OSError as e:
        logger.error(f"[Reconcile] [{label}] Cannot list {target_dir} for cleanup: {e}")
        return 0

    for entry in entries:
        app_id = parse_numeric_name(entry.name)
        if app_id is None:
            continue

        if resolve_app_name(app_id, installed_apps, shortcuts) is None:
            continue

        if not entry.is_symlink():
            logger.warning(
                f"[Reconcile] [{label}] App {app_id} has a name, but {entry.path} is not a symlink; skipping"
            )
            continue

        try:
            _remove_symlink(Path(entry.path))
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.error(f"[Reconcile] [{label}] Error unlinking {entry.path}: {e}")
            continue

        logger.info(f"[Reconcile] [{label}] App {app_id} has a name; removed numeric link {entry.path}")
        removed += 1

    return removed
