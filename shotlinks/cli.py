"""
Command-line entry point.

Usage: shotlinks [options] [scan|watch]
  scan:  link every user's screenshot folders once, then remove stale numeric links
  watch: scan, then keep linking new screenshot folders as Steam creates them

Exit codes:
  0: Success (individual link failures are logged, not fatal)
  1: Steam, the Pictures folder, settings or the account list could not be loaded
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from shotlinks import __version__
from shotlinks.controllers.scan_service import ScanService
from shotlinks.controllers.watch_service import WatchService
from shotlinks.errors import BootstrapError
from shotlinks.settings import Settings, load_settings
from shotlinks.utils.debounce import DebouncedWatcher
from shotlinks.utils.paths import find_pictures_path, find_steam_path, get_userdata_path
from shotlinks.utils.steam_user import load_steam_accounts

logger = logging.getLogger("shotlinks")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shotlinks",
        description="Symlink your Steam games' screenshot directories into your Pictures folder",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-p", "--pictures-directory-name",
                        help="Name of the directory to manage inside your Pictures folder "
                             "(default: Steam Screenshots)")
    parser.add_argument("--pictures-path", help="Pictures folder to use instead of the detected one")
    parser.add_argument("--steam-path", help="Steam installation to use instead of the detected one")
    parser.add_argument("--settings", help="Settings JSON file to read")
    parser.add_argument("-u", "--user", type=int, metavar="STEAM64",
                        help="Only process this Steam user, linking straight into the managed directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("scan", help="Link all screenshot folders once (default)")
    watch = subparsers.add_parser("watch", help="Scan, then link new screenshot folders as they appear")
    watch.add_argument("--debounce", type=float, metavar="SECONDS",
                       help="Quiet period before a burst of changes is processed")
    watch.add_argument("--no-initial-scan", action="store_true", help="Skip the scan before watching")
    return parser


def configure_logging(settings: Settings, verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, str(settings.log_level).upper(), None)
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level)


def run_watch(settings: Settings, steam_path: Path, destination_root: Path, user_filter: Optional[int]) -> None:
    userdata_path = get_userdata_path(steam_path)
    if not userdata_path.is_dir():
        raise BootstrapError(f"Steam userdata folder not found at {userdata_path}")

    if settings.initial_scan:
        ScanService(steam_path, destination_root, user_filter=user_filter).run()
    else:
        # Fail before watching if the account list is unusable
        load_steam_accounts(steam_path)

    service = WatchService(
        steam_path,
        destination_root,
        user_filter=user_filter,
        refresh_library_per_event=settings.refresh_library_per_event,
    )
    watcher = DebouncedWatcher(str(userdata_path), debounce_seconds=settings.debounce_seconds)
    try:
        watcher.start()
    except OSError as e:
        raise BootstrapError(f"Cannot watch {userdata_path}: {e}") from e

    try:
        service.run(watcher)
    except KeyboardInterrupt:
        logger.info("[Watch] Interrupted, stopping")
    finally:
        watcher.close()


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except BootstrapError as e:
        configure_logging(Settings(), args.verbose)
        logger.error(str(e))
        return 1

    configure_logging(settings, args.verbose)

    command = getattr(args, "command", None) or "scan"
    settings = settings.merged(
        pictures_directory_name=args.pictures_directory_name,
        pictures_path=args.pictures_path,
        steam_path=args.steam_path,
        debounce_seconds=getattr(args, "debounce", None),
        initial_scan=False if getattr(args, "no_initial_scan", False) else None,
    )

    try:
        steam_path = find_steam_path(settings.steam_path)
        destination_root = find_pictures_path(settings.pictures_path) / settings.pictures_directory_name
        logger.info(f"Managing {destination_root} from Steam at {steam_path}")

        if command == "watch":
            run_watch(settings, steam_path, destination_root, args.user)
        else:
            ScanService(steam_path, destination_root, user_filter=args.user).run()
    except BootstrapError as e:
        logger.error(str(e))
        return 1

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
