from __future__ import annotations

from pathlib import Path

import pytest

from raspi_writer.lib import display
from raspi_writer.lib.catalog import DisplayOption, load_display_catalog


@pytest.fixture
def no_system(monkeypatch):
    calls = {"apt": [], "cmd": []}
    monkeypatch.setattr(display, "apt_has_package", lambda p, dry_run=False: p != "missing-pkg")
    monkeypatch.setattr(display, "apt_install", lambda pkgs, check=True, dry_run=False: calls["apt"].append(list(pkgs)) or True)
    monkeypatch.setattr(display, "run_cmd", lambda argv, dry_run=False: calls["cmd"].append(list(argv)))
    return calls


def _by_id(display_id: str) -> DisplayOption:
    return display.find_display(load_display_catalog(), display_id)


def test_overlay_appended_once(tmp_path: Path, no_system) -> None:
    cfg = tmp_path / "boot" / "config.txt"
    cfg.parent.mkdir(parents=True)
    cfg.write_text("dtparam=audio=on", encoding="utf-8")

    first = display.apply_display(_by_id("ili9341"), target_root=str(tmp_path))
    second = display.apply_display(_by_id("ili9341"), target_root=str(tmp_path))

    assert cfg.read_text(encoding="utf-8") == "dtparam=audio=on\ndtoverlay=fb_ili9341\n"
    assert first["overlays_added"] == ["fb_ili9341"]
    assert second["overlays_added"] == []


def test_firmware_boot_config_preferred_when_present(tmp_path: Path, no_system) -> None:
    fw = tmp_path / "boot" / "firmware" / "config.txt"
    fw.parent.mkdir(parents=True)
    fw.write_text("", encoding="utf-8")

    display.apply_display(_by_id("waveshare7"), target_root=str(tmp_path))

    assert "dtoverlay=vc4-kms-v3d" in fw.read_text(encoding="utf-8")
    assert not (tmp_path / "boot" / "config.txt").exists()


def test_vendor_package_installed_when_known(tmp_path: Path, no_system) -> None:
    summary = display.apply_display(_by_id("waveshare35a"), target_root=str(tmp_path))
    assert no_system["apt"] == [["waveshare35a"]]
    assert summary["packages"] == ["waveshare35a"]
    assert summary["reboot_required"] is True


def test_missing_vendor_package_does_not_block_overlay(tmp_path: Path, no_system) -> None:
    opt = DisplayOption(id="x", description="X", packages=("missing-pkg",), overlays=("x-overlay",))
    summary = display.apply_display(opt, target_root=str(tmp_path))
    assert no_system["apt"] == []
    assert summary["overlays_added"] == ["x-overlay"]


def test_touchscreen_runs_raspi_config(tmp_path: Path, no_system) -> None:
    display.apply_display(_by_id("rpi7touch"), target_root=str(tmp_path))
    assert no_system["cmd"] == [["raspi-config", "nonint", "do_touchscreen", "0"]]


def test_hdmi_default_changes_nothing(tmp_path: Path, no_system) -> None:
    summary = display.apply_display(_by_id("none"), target_root=str(tmp_path))
    assert summary == {"display": "none", "overlays_added": [], "packages": []}
    assert not (tmp_path / "boot").exists()


def test_unknown_or_missing_choice_falls_back_to_hdmi() -> None:
    options = load_display_catalog()
    assert display.find_display(options, None).id == "none"
    assert display.find_display(options, "hologram").id == "none"


def test_dry_run_writes_nothing(tmp_path: Path, no_system) -> None:
    display.apply_display(_by_id("ili9341"), target_root=str(tmp_path), dry_run=True)
    assert not (tmp_path / "boot").exists()
