from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import InstallerConfig
from ..lib.catalog import load_display_catalog
from ..lib.display import SMALL_DISPLAY_WARNING, apply_display, find_display
from ..lib.prompt import Operator
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ConfigureDisplayStep:
    step_id = "40_configure_display"

    def __init__(self, operator: Operator) -> None:
        self.operator = operator

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        raw_cfg = state.get("config") or {}
        cfg = InstallerConfig(raw_cfg)
        options = load_display_catalog()

        display_id = raw_cfg.get("display")
        if display_id is None:
            display_id = self.operator.radiolist(
                "Select GPIO Display",
                "Choose a GPIO display (select 'none' for HDMI)",
                [(o.id, o.description, o.default) for o in options],
            )
            if display_id is None:
                logger.info("Display selection cancelled, defaulting to HDMI.")

        option = find_display(options, display_id)
        summary = apply_display(option, target_root=cfg.target_root, dry_run=cfg.dry_run)
        record_decision(state, "display", summary)

        if summary.get("reboot_required"):
            self.operator.message(f"{option.description} configured. Reboot required.")
        if option.small:
            self.operator.message(SMALL_DISPLAY_WARNING)
        return state
