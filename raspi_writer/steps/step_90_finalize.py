from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import run_cmd
from ..lib.prompt import Operator

logger = logging.getLogger(__name__)

REEDSY_NOTE = (
    "Note: For Reedsy Studio, open Chromium and visit https://studio.reedsy.com "
    "to format eBooks and print books for free."
)


class FinalizeStep:
    step_id = "90_finalize"

    def __init__(self, operator: Operator) -> None:
        self.operator = operator

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        exe = state.get("execution") or {}
        dry_run = bool(cfg.get("dry_run", False))
        report = exe.get("install_report") or {}

        lines = ["Setup complete! Reboot to apply changes."]
        for label in ("installed", "failed", "skipped"):
            ids = report.get(label) or []
            if ids:
                lines.append(f"{label.capitalize()}: {', '.join(ids)}")
        lines += ["", REEDSY_NOTE]

        logger.info("Finalize summary: %s", exe.get("decisions") or {})
        self.operator.message("\n".join(lines), title="Raspi-Writer")

        if bool(cfg.get("finalize_reboot", False)):
            run_cmd(["sync"], dry_run=dry_run)
            run_cmd(["reboot"], dry_run=dry_run)
        return state
