from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/"
    state_default: str = "/var/lib/raspi-writer/state.json"
    log_default: str = "/var/log/raspi-writer.log"
    install_log_dir: str = "/tmp"
    download_dir: str = "/tmp/raspi-writer"
    boot_config_candidates: tuple[str, ...] = ("/boot/firmware/config.txt", "/boot/config.txt")
    hostapd_conf: str = "/etc/hostapd/hostapd.conf"
    dnsmasq_conf: str = "/etc/dnsmasq.conf"
    wlan_network: str = "/etc/systemd/network/wlan0.network"
    hotspot_hook: str = "/etc/network/if-pre-up.d/check_wifi_hotspot"


PATHS = Paths()
