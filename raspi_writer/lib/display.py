from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .catalog import DisplayOption
from .command import run_cmd
from .env import PATHS
from .files import append_line_once, rooted
from .pkg import apt_has_package, apt_install

logger = logging.getLogger(__name__)

SMALL_DISPLAY_WARNING = (
    "Small display detected. GUI apps may have scaling issues. "
    "Consider terminal-based apps like Vim or WordGrinder."
)


def boot_config_path(target_root: str) -> str:
    """Bookworm moved config.txt under /boot/firmware; older images keep /boot."""
    for candidate in PATHS.boot_config_candidates:
        if rooted(target_root, candidate).exists():
            return candidate
    return PATHS.boot_config_candidates[-1]


def find_display(options: List[DisplayOption], display_id: Optional[str]) -> DisplayOption:
    by_id = {o.id: o for o in options}
    if display_id and display_id in by_id:
        return by_id[display_id]
    if display_id:
        logger.warning("Unknown display %r, using HDMI", display_id)
    default = next((o for o in options if o.default), None)
    if default is None:
        raise ValueError("display catalog has no default entry")
    return default


def apply_display(option: DisplayOption, *, target_root: str = "/", dry_run: bool = False) -> Dict[str, Any]:
    """Apply a display choice and return a summary for the state file."""

    summary: Dict[str, Any] = {"display": option.id, "overlays_added": [], "packages": []}
    if not (option.packages or option.overlays or option.commands):
        logger.info("Using HDMI display, no GPIO configuration needed.")
        return summary

    # Vendor driver packages are optional; their absence must not stop the overlay.
    pkgs = [p for p in option.packages if apt_has_package(p, dry_run=dry_run)]
    if pkgs and apt_install(pkgs, check=False, dry_run=dry_run):
        summary["packages"] = pkgs

    cfg_rel = boot_config_path(target_root)
    summary["boot_config"] = str(Path(target_root) / cfg_rel.lstrip("/"))
    for overlay in option.overlays:
        if append_line_once(target_root, cfg_rel, f"dtoverlay={overlay}", dry_run=dry_run):
            summary["overlays_added"].append(overlay)

    for argv in option.commands:
        run_cmd(list(argv), dry_run=dry_run)

    summary["reboot_required"] = True
    logger.info("Display %s configured (overlays=%s)", option.id, ",".join(summary["overlays_added"]) or "-")
    return summary
