"""
Watch mode: link new screenshot folders as Steam creates them.

Consumes debounced batches of changed paths below Steam's userdata folder.
Each path shaped like <userdata>/<account id>/760/remote/<app id>/... names
one (user, app) pair, which is reconciled exactly like a scan would. Batches
are processed one at a time, one entry at a time.

The account list is re-read for every entry. Installed apps and shortcuts
are re-read too, unless refresh_library_per_event is off, in which case the
snapshot taken when watching started is used.

No cleanup pass runs here; watch mode only ever adds folders.
"""

import os
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from shotlinks.controllers.scan_service import ScanSummary, user_target_dir
from shotlinks.errors import BootstrapError
from shotlinks.services.reconciler import ReconcileResult, link_app_screenshots
from shotlinks.utils.debounce import ChangeEvent
from shotlinks.utils.library import InstalledApps, load_installed_apps
from shotlinks.utils.paths import (
    REMOTE_DIR_NAME,
    SCREENSHOTS_APP_ID,
    get_app_screenshots_path,
    get_userdata_path,
    parse_numeric_name,
)
from shotlinks.utils.shortcuts import Shortcut, load_shortcuts
from shotlinks.utils.steam_user import SteamAccount, find_account, load_steam_accounts

logger = logging.getLogger(__name__)


def parse_screenshot_event(userdata_path: Path, path: str) -> Optional[Tuple[int, int]]:
    """
    Extract (account id, app id) from a changed path.

    The path must sit at or below <userdata>/<account id>/760/remote/<app id>;
    anything else gives None.
    """
    try:
        parts = Path(path).relative_to(userdata_path).parts
    except ValueError:
        return None

    if len(parts) < 4:
        return None
    if parts[1] != SCREENSHOTS_APP_ID or parts[2] != REMOTE_DIR_NAME:
        return None

    account_id = parse_numeric_name(parts[0])
    app_id = parse_numeric_name(parts[3])
    if account_id is None or app_id is None:
        return None
    return account_id, app_id


class WatchService:
    """Reconciles one (user, app) pair per changed screenshot folder."""

    def __init__(
        self,
        steam_path: Path,
        destination_root: Path,
        user_filter: Optional[int] = None,
        refresh_library_per_event: bool = True,
        account_loader: Callable[[Path], List[SteamAccount]] = load_steam_accounts,
        installed_apps_loader: Callable[[Path], InstalledApps] = load_installed_apps,
        shortcuts_loader: Callable[[Path, int], List[Shortcut]] = load_shortcuts,
    ):
        self.steam_path = Path(steam_path)
        self.userdata_path = get_userdata_path(self.steam_path)
        self.destination_root = Path(destination_root)
        self.user_filter = user_filter
        self.refresh_library_per_event = refresh_library_per_event
        self.account_loader = account_loader
        self.installed_apps_loader = installed_apps_loader
        self.shortcuts_loader = shortcuts_loader

        self._installed_snapshot: Optional[InstalledApps] = None
        self._shortcuts_snapshot: Dict[int, List[Shortcut]] = {}

    def _installed_apps(self) -> InstalledApps:
        if self.refresh_library_per_event:
            return self.installed_apps_loader(self.steam_path)
        if self._installed_snapshot is None:
            self._installed_snapshot = self.installed_apps_loader(self.steam_path)
        return self._installed_snapshot

    def _shortcuts(self, account_id: int) -> List[Shortcut]:
        if self.refresh_library_per_event:
            return self.shortcuts_loader(self.steam_path, account_id)
        if account_id not in self._shortcuts_snapshot:
            self._shortcuts_snapshot[account_id] = self.shortcuts_loader(self.steam_path, account_id)
        return self._shortcuts_snapshot[account_id]

    def run(self, event_source: Iterable[List[ChangeEvent]]) -> None:
        """Process batches until the event source is exhausted or closed."""
        if not self.refresh_library_per_event:
            self._installed_apps()

        logger.info(f"[Watch] Waiting for new screenshot folders under {self.userdata_path}")
        for batch in event_source:
            self.process_batch(batch)
        logger.info("[Watch] Event source closed")

    def process_batch(self, batch: Iterable[ChangeEvent]) -> ScanSummary:
        """Reconcile every distinct (user, app) pair named by a batch."""
        summary = ScanSummary()
        pairs: Dict[Tuple[int, int], str] = {}

        for event in batch:
            pair = parse_screenshot_event(self.userdata_path, event.path)
            if pair is None:
                logger.debug(f"[Watch] Ignoring {event.path}")
                continue
            if not os.path.exists(event.path):
                logger.debug(f"[Watch] Discarding event for deleted path {event.path}")
                continue
            pairs.setdefault(pair, event.path)

        for (account_id, app_id), path in pairs.items():
            try:
                result = self.handle_entry(account_id, app_id)
            except Exception as e:
                logger.error(f"[Watch] [{account_id}; {app_id}] Error handling {path}: {e}", exc_info=True)
                summary.failed += 1
                continue
            if result is None:
                summary.skipped += 1
            else:
                summary.record(result)

        return summary

    def handle_entry(self, account_id: int, app_id: int) -> Optional[ReconcileResult]:
        """Reconcile one user's link for one app; None if the entry was skipped."""
        try:
            accounts = self.account_loader(self.steam_path)
        except BootstrapError as e:
            logger.error(f"[Watch] [{account_id}; {app_id}] Cannot load Steam users: {e}")
            return None

        account = find_account(accounts, account_id)
        if account is None:
            logger.error(f"[Watch] [{account_id}; {app_id}] No Steam user matches account id {account_id}")
            return None

        single_user = self.user_filter is not None
        if single_user and account.steam64_id != self.user_filter:
            logger.debug(f"[Watch] [{account.steam64_str}; {app_id}] Not the selected user, ignoring")
            return None

        target_dir = user_target_dir(self.destination_root, account, single_user)
        if target_dir is None:
            logger.error(f"[Watch] [{account.steam64_str}; {app_id}] Failed to retrieve account PersonaName")
            return None

        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as e:
            logger.error(f"[Watch] [{account.steam64_str}; {app_id}] Cannot create {target_dir}: {e}")
            return None

        source_dir = get_app_screenshots_path(self.steam_path, account_id, app_id)
        return link_app_screenshots(
            source_dir,
            target_dir,
            app_id,
            self._installed_apps(),
            self._shortcuts(account_id),
            label=account.steam64_str,
        )
