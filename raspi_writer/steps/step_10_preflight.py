from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.hwdetect import detect_board
from ..lib.prompt import Operator
from ..state_store import record_decision

logger = logging.getLogger(__name__)

WELCOME = (
    "Welcome to the Raspi-Writer installer!\n\n"
    "A full installation with all software may take 20-60 minutes, depending on your "
    "network speed and Raspberry Pi model (e.g., Pi Zero is slower). "
    "Ensure a stable internet connection."
)


class PreflightStep:
    step_id = "10_preflight"

    def __init__(self, operator: Operator) -> None:
        self.operator = operator

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = bool(cfg.get("dry_run", False))

        board = detect_board(dry_run=dry_run)
        state["board"] = board

        self.operator.message(WELCOME, title="Raspi-Writer")

        preseed = cfg.get("pi_zero")
        if preseed is None:
            is_zero = self.operator.confirm(
                "Is this a Raspberry Pi Zero (W or newer)?",
                default=bool(board.get("is_pi_zero")),
            )
        else:
            is_zero = bool(preseed)
        if is_zero != bool(board.get("is_pi_zero")):
            logger.info("Pi Zero answer (%s) differs from detected model %r", is_zero, board.get("model"))

        record_decision(state, "pi_zero", is_zero)
        record_decision(state, "is_64bit", bool(board.get("is_64bit")))
        return state
