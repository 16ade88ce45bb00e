from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import FakeSteam, steam64
from shotlinks.controllers.scan_service import ScanService
from shotlinks.errors import BootstrapError
from shotlinks.utils.shortcut_id import shortcut_identity


def _snapshot(root: Path) -> dict:
    return {
        str(path.relative_to(root)): os.readlink(path)
        for path in sorted(root.rglob("*"))
        if path.is_symlink()
    }


@pytest.fixture
def populated(fake_steam: FakeSteam) -> FakeSteam:
    fake_steam.add_user(1001, "Alice")
    fake_steam.install_app(2020, "MyGame")
    fake_steam.write_shortcuts(1001, [
        {"appid": -1363942080, "AppName": "Second Life", "Exe": '"/Applications/Second Life Viewer.app"'},
    ])
    fake_steam.add_screenshots(1001, 2020)
    fake_steam.add_screenshots(1001, shortcut_identity('"/Applications/Second Life Viewer.app"', "Second Life"))
    fake_steam.add_screenshots(1001, 555)
    return fake_steam


def test_scan_links_by_name(populated: FakeSteam, pictures: Path) -> None:
    summary = ScanService(populated.root, pictures).run()

    user_dir = pictures / "Alice"
    assert summary.users == 1
    assert summary.linked == 3
    assert (user_dir / "MyGame").is_symlink()
    assert (user_dir / "Second Life").is_symlink()
    assert (user_dir / "555").is_symlink()
    assert os.readlink(user_dir / "MyGame") == str(populated.add_screenshots(1001, 2020))


def test_scan_is_idempotent(populated: FakeSteam, pictures: Path) -> None:
    ScanService(populated.root, pictures).run()
    first = _snapshot(pictures)
    ScanService(populated.root, pictures).run()
    assert _snapshot(pictures) == first


def test_scan_removes_numeric_link_once_name_known(populated: FakeSteam, pictures: Path) -> None:
    ScanService(populated.root, pictures).run()
    assert (pictures / "Alice" / "555").is_symlink()

    populated.install_app(555, "Now Installed")
    summary = ScanService(populated.root, pictures).run()

    assert summary.removed == 1
    assert not os.path.lexists(pictures / "Alice" / "555")
    assert (pictures / "Alice" / "Now Installed").is_symlink()


def test_scan_never_overwrites_user_content(populated: FakeSteam, pictures: Path) -> None:
    real_dir = pictures / "Alice" / "MyGame"
    real_dir.mkdir(parents=True)
    (real_dir / "mine.png").write_bytes(b"data")

    summary = ScanService(populated.root, pictures).run()

    assert summary.conflicts == 1
    assert not real_dir.is_symlink()
    assert (real_dir / "mine.png").read_bytes() == b"data"


def test_scan_skips_user_without_screenshots(fake_steam: FakeSteam, pictures: Path) -> None:
    fake_steam.add_user(1001, "Alice")
    fake_steam.add_user(2002, "Bob")
    fake_steam.add_screenshots(2002, 10)

    summary = ScanService(fake_steam.root, pictures).run()

    assert summary.users == 1
    assert not (pictures / "Alice").exists()
    assert (pictures / "Bob" / "10").is_symlink()


def test_scan_skips_malformed_user_and_continues(fake_steam: FakeSteam, pictures: Path) -> None:
    fake_steam.write_users({
        "not-a-number": {"PersonaName": "Broken"},
        str(steam64(2002)): {"PersonaName": "Bob"},
        str(steam64(3003)): {"AccountName": "nopersona"},
    })
    fake_steam.add_screenshots(2002, 10)
    fake_steam.add_screenshots(3003, 10)

    summary = ScanService(fake_steam.root, pictures).run()

    assert summary.users == 1
    assert (pictures / "Bob" / "10").is_symlink()


def test_scan_keeps_numeric_link_for_unnamed_shortcut(fake_steam: FakeSteam, pictures: Path) -> None:
    fake_steam.add_user(1001, "Alice")
    fake_steam.write_shortcuts(1001, [{"appid": 0x800123, "AppName": "", "Exe": "x.exe"}])
    fake_steam.add_screenshots(1001, 0x123)

    for _ in range(2):
        summary = ScanService(fake_steam.root, pictures).run()
        assert summary.removed == 0
        assert os.listdir(pictures / "Alice") == [str(0x123)]
        assert (pictures / "Alice" / str(0x123)).is_symlink()


def test_scan_ignores_non_numeric_entries(populated: FakeSteam, pictures: Path) -> None:
    (populated.userdata / "1001" / "760" / "remote" / "thumbnails").mkdir()
    (populated.userdata / "1001" / "760" / "remote" / "12345").write_text("not a dir")

    summary = ScanService(populated.root, pictures).run()

    assert summary.linked == 3
    assert not os.path.lexists(pictures / "Alice" / "thumbnails")
    assert not os.path.lexists(pictures / "Alice" / "12345")


def test_single_user_filter_links_into_root(populated: FakeSteam, pictures: Path) -> None:
    populated.add_user(2002, "Bob")
    populated.add_screenshots(2002, 10)

    summary = ScanService(populated.root, pictures, user_filter=steam64(1001)).run()

    assert summary.users == 1
    assert (pictures / "MyGame").is_symlink()
    assert not (pictures / "Alice").exists()
    assert not (pictures / "Bob").exists()


def test_missing_loginusers_is_bootstrap_error(fake_steam: FakeSteam, pictures: Path) -> None:
    with pytest.raises(BootstrapError):
        ScanService(fake_steam.root, pictures).run()
