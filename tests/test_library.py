from __future__ import annotations

import os
from pathlib import Path

import vdf

from conftest import FakeSteam
from shotlinks.utils.library import get_library_folders, load_installed_apps


def _write_library_folders(steam_root: Path, folders: dict) -> None:
    with open(steam_root / "steamapps" / "libraryfolders.vdf", "w") as f:
        f.write(vdf.dumps({"libraryfolders": folders}, pretty=True))


def test_installed_app_from_manifest(fake_steam: FakeSteam) -> None:
    install_path = fake_steam.install_app(2020, "MyGame")

    apps = load_installed_apps(fake_steam.root)

    assert apps[2020].install_path == str(install_path)
    assert apps[2020].name == "MyGame"


def test_manifest_without_installdir_is_incomplete(fake_steam: FakeSteam) -> None:
    with open(fake_steam.root / "steamapps" / "appmanifest_3030.acf", "w") as f:
        f.write(vdf.dumps({"AppState": {"appid": "3030"}}, pretty=True))
    (fake_steam.root / "steamapps" / "appmanifest_4040.acf").write_text("{{{ not vdf")

    apps = load_installed_apps(fake_steam.root)

    assert 3030 in apps and apps[3030] is None
    assert 4040 in apps and apps[4040] is None


def test_apps_from_extra_library_folders(fake_steam: FakeSteam, tmp_path: Path) -> None:
    extra = tmp_path / "SDCard"
    (extra / "steamapps").mkdir(parents=True)
    with open(extra / "steamapps" / "appmanifest_999.acf", "w") as f:
        f.write(vdf.dumps({"AppState": {"appid": "999", "installdir": "Card Game"}}, pretty=True))
    _write_library_folders(fake_steam.root, {
        "0": {"path": str(fake_steam.root), "label": ""},
        "1": {"path": str(extra), "label": ""},
    })

    apps = load_installed_apps(fake_steam.root)

    assert apps[999].install_path == str(extra / "steamapps" / "common" / "Card Game")


def test_legacy_library_folders_format(fake_steam: FakeSteam, tmp_path: Path) -> None:
    extra = tmp_path / "Old Library"
    _write_library_folders(fake_steam.root, {"TimeNextStatsReport": "1234", "1": str(extra)})

    assert get_library_folders(fake_steam.root) == [fake_steam.root, extra]


def test_unlistable_library_is_skipped(fake_steam: FakeSteam, tmp_path: Path, monkeypatch) -> None:
    fake_steam.install_app(2020, "MyGame")
    broken = tmp_path / "Unplugged"
    (broken / "steamapps").mkdir(parents=True)
    _write_library_folders(fake_steam.root, {
        "0": {"path": str(broken), "label": ""},
        "1": {"path": str(fake_steam.root), "label": ""},
    })

    real_scandir = os.scandir

    def scandir(path):
        if Path(path) == broken / "steamapps":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)

    apps = load_installed_apps(fake_steam.root)

    assert apps[2020].name == "MyGame"
