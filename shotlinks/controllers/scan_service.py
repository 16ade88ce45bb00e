"""Full scan of every user's Steam screenshot folders.

Links every <userdata>/<account>/760/remote/<app id>/screenshots folder into
the user's target folder, then removes numeric links whose game has since
become known. A problem with one user is logged and the scan moves on.
"""

import os
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from shotlinks.services.reconciler import (
    ReconcileResult,
    cleanup_numeric_links,
    link_app_screenshots,
)
from shotlinks.utils.library import InstalledApps, load_installed_apps
from shotlinks.utils.paths import SCREENSHOTS_DIR_NAME, get_user_screenshots_root, parse_numeric_name
from shotlinks.utils.shortcuts import Shortcut, load_shortcuts
from shotlinks.utils.steam_user import SteamAccount, load_steam_accounts

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    """Counts for one scan, or one watch batch"""
    users: int = 0
    linked: int = 0
    conflicts: int = 0
    failed: int = 0
    removed: int = 0
    # Watch entries that never reached reconciliation (unknown or unselected user)
    skipped: int = 0

    def record(self, result: ReconcileResult) -> None:
        if result.success:
            self.linked += 1
        elif result.conflict:
            self.conflicts += 1
        else:
            self.failed += 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def user_target_dir(destination_root: Path, account: SteamAccount, single_user: bool) -> Optional[Path]:
    """Folder a user's links go in.

    With a single-user filter links go straight into the destination root;
    otherwise into a subfolder named after the user's PersonaName, or None if
    the account has no PersonaName.
    """
    if single_user:
        return Path(destination_root)
    if not account.persona_name:
        return None
    return Path(destination_root) / account.persona_name


class ScanService:
    """Links every user's screenshot folders in one pass."""

    def __init__(
        self,
        steam_path: Path,
        destination_root: Path,
        user_filter: Optional[int] = None,
        account_loader: Callable[[Path], List[SteamAccount]] = load_steam_accounts,
        installed_apps_loader: Callable[[Path], InstalledApps] = load_installed_apps,
        shortcuts_loader: Callable[[Path, int], List[Shortcut]] = load_shortcuts,
    ):
        self.steam_path = Path(steam_path)
        self.destination_root = Path(destination_root)
        self.user_filter = user_filter
        self.account_loader = account_loader
        self.installed_apps_loader = installed_apps_loader
        self.shortcuts_loader = shortcuts_loader

    def _selected(self, account: SteamAccount) -> bool:
        if self.user_filter is None:
            return True
        try:
            return account.steam64_id == self.user_filter
        except ValueError:
            return False

    def run(self) -> ScanSummary:
        """Scan all (or the filtered) users.

        Raises:
            BootstrapError: if the account list cannot be loaded
        """
        accounts = self.account_loader(self.steam_path)
        installed_apps = self.installed_apps_loader(self.steam_path)
        summary = ScanSummary()

        selected = [account for account in accounts if self._selected(account)]
        if self.user_filter is not None and not selected:
            logger.warning(f"[Scan] No Steam user with id {self.user_filter}")

        for account in selected:
            if self.scan_user(account, installed_apps, summary):
                summary.users += 1

        logger.info(
            f"[Scan] Done: {summary.users} users, {summary.linked} linked, "
            f"{summary.conflicts} conflicts, {summary.failed} failed, {summary.removed} removed"
        )
        return summary

    def scan_user(self, account: SteamAccount, installed_apps: InstalledApps, summary: ScanSummary) -> bool:
        """Link one user's screenshot folders. Returns False if the user was skipped."""
        label = account.steam64_str
        logger.info(f"[Scan] [{label}] Processing user")

        try:
            account_id = account.account_id
        except ValueError as e:
            logger.error(f"[Scan] [{label}] Invalid Steam64 id, skipping user: {e}")
            return False

        screenshots_root = get_user_screenshots_root(self.steam_path, account_id)
        if not screenshots_root.is_dir():
            logger.info(f"[Scan] [{label}] User does not have a Steam screenshot folder")
            return False

        target_dir = user_target_dir(self.destination_root, account, self.user_filter is not None)
        if target_dir is None:
            logger.error(f"[Scan] [{label}] Failed to retrieve account PersonaName, skipping user")
            return False

        try:
            os.makedirs(target_dir, exist_ok=True)
            entries = list(os.scandir(screenshots_root))
        except OSError as e:
            logger.error(f"[Scan] [{label}] Cannot prepare {target_dir} from {screenshots_root}: {e}")
            return False

        shortcuts = self.shortcuts_loader(self.steam_path, account_id)

        for entry in entries:
            app_id = parse_numeric_name(entry.name)
            if app_id is None or not entry.is_dir():
                logger.debug(f"[Scan] [{label}] Skipping {entry.path}")
                continue
            source_dir = Path(entry.path) / SCREENSHOTS_DIR_NAME
            result = link_app_screenshots(source_dir, target_dir, app_id, installed_apps, shortcuts, label=label)
            summary.record(result)

        summary.removed += cleanup_numeric_links(target_dir, installed_apps, shortcuts, label=label)
        return True
