from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Any, Dict, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

MODEL_PATHS = (Path("/proc/device-tree/model"), Path("/sys/firmware/devicetree/base/model"))


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv7l": "armhf",
        "armv6l": "armhf",
    }.get(m, m)


def _read_text(path: Path) -> Optional[str]:
    try:
        # device-tree strings are NUL terminated
        txt = path.read_text(encoding="utf-8", errors="ignore").replace("\x00", "").strip()
        return txt or None
    except Exception:
        return None


def _userland_arch(*, dry_run: bool) -> Optional[str]:
    """dpkg's view wins: a 64-bit kernel can run a 32-bit (armhf) userland."""
    try:
        r = run_cmd(["dpkg", "--print-architecture"], check=False, dry_run=dry_run)
    except Exception:
        return None
    out = (r.stdout or "").strip()
    return out or None


def is_pi_zero_model(model: Optional[str]) -> bool:
    return "raspberry pi zero" in (model or "").lower()


def detect_board(dry_run: bool = False) -> Dict[str, Any]:
    machine = platform.machine()
    arch = _userland_arch(dry_run=dry_run) or normalize_arch(machine)
    model = next((m for m in (_read_text(p) for p in MODEL_PATHS) if m), None)

    board: Dict[str, Any] = {
        "machine": machine,
        "arch": arch,
        "model": model,
        "is_raspberry_pi": "raspberry pi" in (model or "").lower(),
        "is_pi_zero": is_pi_zero_model(model),
        "is_64bit": arch in {"arm64", "amd64"},
    }

    # RAM (best-effort)
    try:
        for line in Path("/proc/meminfo").read_text(encoding="utf-8").splitlines():
            if line.startswith("MemTotal:"):
                board["ram_mb"] = int(line.split()[1]) // 1024
                break
    except Exception:
        pass

    logger.info("Board: model=%s arch=%s pi_zero=%s", model or "unknown", arch, board["is_pi_zero"])
    return board
