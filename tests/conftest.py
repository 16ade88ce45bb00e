from __future__ import annotations

from pathlib import Path
import sys
from typing import Dict, List

import pytest
import vdf

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

STEAM64_BASE = 76561197960265728


def steam64(account_id: int) -> int:
    return STEAM64_BASE + account_id


class FakeSteam:
    """Builds a throwaway Steam install under tmp_path."""

    def __init__(self, root: Path):
        self.root = root
        (root / "steamapps").mkdir(parents=True)
        (root / "config").mkdir()
        (root / "userdata").mkdir()

    @property
    def userdata(self) -> Path:
        return self.root / "userdata"

    def write_users(self, users: Dict[str, Dict[str, str]]) -> None:
        with open(self.root / "config" / "loginusers.vdf", "w") as f:
            f.write(vdf.dumps({"users": users}, pretty=True))

    def add_user(self, account_id: int, persona_name: str) -> None:
        path = self.root / "config" / "loginusers.vdf"
        users = {}
        if path.exists():
            with open(path) as f:
                users = vdf.load(f)["users"]
        users[str(steam64(account_id))] = {"AccountName": persona_name.lower(), "PersonaName": persona_name}
        self.write_users(users)

    def install_app(self, app_id: int, install_dir: str) -> Path:
        manifest = {"AppState": {"appid": str(app_id), "name": install_dir, "installdir": install_dir}}
        with open(self.root / "steamapps" / f"appmanifest_{app_id}.acf", "w") as f:
            f.write(vdf.dumps(manifest, pretty=True))
        return self.root / "steamapps" / "common" / install_dir

    def write_shortcuts(self, account_id: int, shortcuts: List[Dict]) -> None:
        config = self.userdata / str(account_id) / "config"
        config.mkdir(parents=True, exist_ok=True)
        data = {"shortcuts": {str(i): entry for i, entry in enumerate(shortcuts)}}
        with open(config / "shortcuts.vdf", "wb") as f:
            f.write(vdf.binary_dumps(data))

    def add_screenshots(self, account_id: int, app_id: int) -> Path:
        path = self.userdata / str(account_id) / "760" / "remote" / str(app_id) / "screenshots"
        path.mkdir(parents=True, exist_ok=True)
        return path


@pytest.fixture
def fake_steam(tmp_path: Path) -> FakeSteam:
    return FakeSteam(tmp_path / "Steam")


@pytest.fixture
def pictures(tmp_path: Path) -> Path:
    path = tmp_path / "Pictures" / "Steam Screenshots"
    path.parent.mkdir(parents=True)
    return path
