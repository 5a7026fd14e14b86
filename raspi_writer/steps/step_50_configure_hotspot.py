from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..config import InstallerConfig
from ..lib.hotspot import (
    AUTH_DESCRIPTIONS,
    AUTH_TYPES,
    DEFAULT_SSID,
    HotspotSettings,
    apply_hotspot,
    validate_passphrase,
    validate_ssid,
)
from ..lib.prompt import Operator
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ConfigureHotspotStep:
    step_id = "50_configure_hotspot"

    def __init__(self, operator: Operator) -> None:
        self.operator = operator

    def _ask(self) -> Optional[HotspotSettings]:
        if not self.operator.confirm(
            "Set up a Wi-Fi hotspot? (Will activate only if no known Wi-Fi networks are found)"
        ):
            return None

        ssid = self.operator.input_text("Enter Wi-Fi Hotspot SSID", DEFAULT_SSID) or DEFAULT_SSID
        auth = self.operator.menu(
            "Wi-Fi Authentication",
            "Select Wi-Fi Authentication Type",
            [(a, AUTH_DESCRIPTIONS[a]) for a in AUTH_TYPES],
        ) or "WPA-PSK"

        passphrase = ""
        if auth != "OPEN":
            hint = "5 or 13 characters" if auth == "WEP" else "8+ characters"
            passphrase = self.operator.password(f"Enter Wi-Fi Hotspot Password ({hint})") or ""
        return HotspotSettings(ssid=ssid, auth_type=auth, passphrase=passphrase)

    def _from_preseed(self, raw: Dict[str, Any]) -> HotspotSettings:
        return HotspotSettings(
            ssid=str(raw.get("ssid") or DEFAULT_SSID),
            auth_type=str(raw.get("auth_type") or "WPA-PSK"),
            passphrase=str(raw.get("passphrase") or ""),
        )

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        raw_cfg = state.get("config") or {}
        cfg = InstallerConfig(raw_cfg)

        preseed = raw_cfg.get("hotspot")
        if preseed is False:
            settings = None
        elif isinstance(preseed, dict):
            settings = self._from_preseed(preseed)
        else:
            settings = self._ask()

        if settings is None:
            logger.info("Hotspot setup skipped.")
            record_decision(state, "hotspot", {"enabled": False})
            return state

        try:
            validate_ssid(settings.ssid)
            validate_passphrase(settings.auth_type, settings.passphrase)
        except ValueError as e:
            logger.warning("Hotspot settings rejected: %s", e)
            self.operator.message(f"Invalid hotspot settings ({e}). Hotspot setup cancelled.")
            record_decision(state, "hotspot", {"enabled": False, "reason": str(e)})
            return state

        summary = apply_hotspot(settings, target_root=cfg.target_root, dry_run=cfg.dry_run)
        record_decision(state, "hotspot", {"enabled": True, **summary})
        self.operator.message(
            f"Wi-Fi hotspot configured (SSID: {settings.ssid}). Activates on boot if no known "
            "Wi-Fi networks are found. Reboot to apply."
        )
        return state
