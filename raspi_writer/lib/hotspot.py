"""Wi-Fi access point that only comes up when no known network is in range.

We write configuration for hostapd, dnsmasq and systemd-networkd plus an
if-pre-up hook that starts or stops the AP. The daemons do the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from .command import run_cmd
from .env import PATHS
from .files import write_file
from .pkg import apt_install, apt_update

logger = logging.getLogger(__name__)

DEFAULT_SSID = "RPi-Writers-Hotspot"
AUTH_TYPES = ("WPA-PSK", "WPA3-PSK", "OPEN", "WEP")
AUTH_DESCRIPTIONS = {
    "WPA-PSK": "WPA2 Personal",
    "WPA3-PSK": "WPA3 Personal",
    "OPEN": "No password",
    "WEP": "WEP (less secure)",
}


@dataclass(frozen=True)
class HotspotSettings:
    ssid: str = DEFAULT_SSID
    auth_type: str = "WPA-PSK"
    passphrase: str = ""
    interface: str = "wlan0"
    channel: int = 7
    address: str = "192.168.4.1/24"
    dhcp_range: str = "192.168.4.2,192.168.4.20,255.255.255.0,24h"


def validate_ssid(ssid: str) -> str:
    s = (ssid or "").strip()
    if not s or len(s.encode("utf-8")) > 32 or "\n" in s:
        raise ValueError("SSID must be 1-32 bytes on a single line")
    return s


def validate_passphrase(auth_type: str, passphrase: str) -> str:
    if auth_type not in AUTH_TYPES:
        raise ValueError(f"unknown auth type {auth_type!r}")
    pw = passphrase or ""
    if "\n" in pw:
        raise ValueError("passphrase must be a single line")
    if auth_type == "OPEN":
        return ""
    if auth_type == "WEP":
        if len(pw) not in (5, 13):
            raise ValueError("WEP keys must be 5 or 13 characters")
        return pw
    if not 8 <= len(pw) <= 63:
        raise ValueError("WPA passphrases must be 8-63 characters")
    return pw


def render_hostapd(s: HotspotSettings) -> str:
    lines = [
        f"interface={s.interface}",
        "driver=nl80211",
        f"ssid={s.ssid}",
        "hw_mode=g",
        f"channel={s.channel}",
        "wmm_enabled=0",
        "macaddr_acl=0",
        "auth_algs=1",
        "ignore_broadcast_ssid=0",
    ]
    if s.auth_type in {"WPA-PSK", "WPA3-PSK"}:
        lines += ["wpa=2", f"wpa_passphrase={s.passphrase}"]
        if s.auth_type == "WPA3-PSK":
            lines += ["wpa_key_mgmt=SAE", "ieee80211w=2"]
        else:
            lines += ["wpa_key_mgmt=WPA-PSK"]
    elif s.auth_type == "WEP":
        lines += ["wep_default_key=0", f'wep_key0="{s.passphrase}"']
    return "\n".join(lines) + "\n"


def render_dnsmasq(s: HotspotSettings) -> str:
    return f"interface={s.interface}\ndhcp-range={s.dhcp_range}\n"


def render_network(s: HotspotSettings) -> str:
    return "\n".join(
        [
            "[Match]",
            f"Name={s.interface}",
            "[Network]",
            f"Address={s.address}",
            "DHCPServer=yes",
            "",
        ]
    )


def render_hook(s: HotspotSettings) -> str:
    # Known = a saved NetworkManager Wi-Fi connection whose name is currently visible.
    return "\n".join(
        [
            "#!/bin/sh",
            f'if [ "$IFACE" = "{s.interface}" ]; then',
            "    known=$(nmcli -t -f NAME,TYPE connection show | sed -n 's/:802-11-wireless$//p')",
            "    visible=$(nmcli -t -f SSID dev wifi list 2>/dev/null)",
            '    if [ -n "$known" ] && printf \'%s\\n\' "$visible" | grep -Fxq -e "$known"; then',
            "        systemctl stop hostapd",
            "        systemctl stop dnsmasq",
            "    else",
            "        systemctl start hostapd",
            "        systemctl start dnsmasq",
            "    fi",
            "fi",
            "",
        ]
    )


def hotspot_files(s: HotspotSettings) -> Dict[str, str]:
    return {
        PATHS.hostapd_conf: render_hostapd(s),
        PATHS.dnsmasq_conf: render_dnsmasq(s),
        PATHS.wlan_network: render_network(s),
        PATHS.hotspot_hook: render_hook(s),
    }


def apply_hotspot(s: HotspotSettings, *, target_root: str = "/", dry_run: bool = False) -> Dict[str, Any]:
    validate_ssid(s.ssid)
    validate_passphrase(s.auth_type, s.passphrase)

    apt_update(dry_run=dry_run)
    apt_install(["hostapd", "dnsmasq"], dry_run=dry_run)

    written: List[str] = []
    for rel, contents in hotspot_files(s).items():
        mode = 0o755 if rel == PATHS.hotspot_hook else None
        written.append(str(write_file(target_root, rel, contents, mode=mode, dry_run=dry_run)))

    run_cmd(["systemctl", "unmask", "hostapd"], dry_run=dry_run)
    run_cmd(["systemctl", "enable", "hostapd"], dry_run=dry_run)
    run_cmd(["systemctl", "enable", "dnsmasq"], dry_run=dry_run)

    logger.info("Wi-Fi hotspot configured (SSID=%s auth=%s)", s.ssid, s.auth_type)
    return {"ssid": s.ssid, "auth_type": s.auth_type, "files": written}
