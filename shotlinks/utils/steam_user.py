"""
Steam User Utilities

Reads the local Steam accounts from Steam's loginusers.vdf file.

The file is keyed by Steam64 id; Steam's userdata folders are named by the
32-bit account id, which is the lower 32 bits of the Steam64 id.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import vdf

from shotlinks.errors import BootstrapError

logger = logging.getLogger(__name__)


def steam64_to_account_id(steam64_id: int) -> int:
    """Convert a Steam64 id to its account id (userdata folder name)."""
    return steam64_id & 0xFFFFFFFF


@dataclass
class SteamAccount:
    """One entry of loginusers.vdf.

    Fields are kept as read; `steam64_id` and `account_id` raise ValueError
    for a malformed key so callers can skip just that user.
    """
    steam64_str: str
    persona_name: Optional[str] = None

    @property
    def steam64_id(self) -> int:
        value = int(self.steam64_str)
        if value < 0 or value > 0xFFFFFFFFFFFFFFFF:
            raise ValueError(f"Steam64 id out of range: {self.steam64_str}")
        return value

    @property
    def account_id(self) -> int:
        return steam64_to_account_id(self.steam64_id)


def get_loginusers_path(steam_path: Path) -> Path:
    return Path(steam_path) / "config" / "loginusers.vdf"


def load_steam_accounts(steam_path: Path) -> List[SteamAccount]:
    """
    Load every account listed in loginusers.vdf, in file order.

    Args:
        steam_path: Path to Steam installation

    Returns:
        List of SteamAccount entries

    Raises:
        BootstrapError: if the file is missing, unreadable or has no users table
    """
    loginusers_path = get_loginusers_path(steam_path)

    if not os.path.exists(loginusers_path):
        raise BootstrapError(f"loginusers.vdf not found at {loginusers_path}")

    try:
        with open(loginusers_path, 'r', encoding='utf-8', errors='ignore') as f:
            data = vdf.load(f)
    except (OSError, SyntaxError) as e:
        raise BootstrapError(f"Error reading {loginusers_path}: {e}") from e

    users = data.get('users')
    if not isinstance(users, dict):
        raise BootstrapError("Failed to find any Steam users")

    accounts = []
    for steam64_id_str, user_info in users.items():
        persona_name = None
        if isinstance(user_info, dict):
            persona_name = user_info.get('PersonaName')
        accounts.append(SteamAccount(steam64_str=steam64_id_str, persona_name=persona_name))

    logger.debug(f"[SteamUser] Loaded {len(accounts)} accounts from {loginusers_path}")
    return accounts


def find_account(accounts: List[SteamAccount], account_id: int) -> Optional[SteamAccount]:
    """Find the account whose 32-bit account id matches; malformed entries never match."""
    for account in accounts:
        try:
            if account.account_id == account_id:
                return account
        except ValueError:
            logger.debug(f"[SteamUser] Ignoring invalid Steam64ID: {account.steam64_str}")
    return None
