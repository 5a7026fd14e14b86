from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..lib.catalog import filter_selection, load_software_catalog, unavailable_reason
from ..lib.prompt import Operator
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class SelectionCancelled(RuntimeError):
    pass


class SelectSoftwareStep:
    step_id = "20_select_software"

    def __init__(self, operator: Operator) -> None:
        self.operator = operator

    def _ask(self, items: List[tuple], is_pi_zero: bool) -> List[str]:
        text = "Choose software to install"
        if is_pi_zero:
            text += " (Pi Zero: heavy apps disabled)"
        chosen = self.operator.checklist("Select Software for Writers and Publishers", text, items)
        if chosen is None:
            raise SelectionCancelled("Cancelled by user.")
        return chosen

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        decisions = (state.get("execution") or {}).get("decisions") or {}
        is_pi_zero = bool(decisions.get("pi_zero", False))
        is_64bit = bool(decisions.get("is_64bit", True))

        catalog = load_software_catalog()

        preseed = cfg.get("software")
        if preseed is None:
            items = []
            for e in catalog:
                why = unavailable_reason(e, is_pi_zero=is_pi_zero, is_64bit=is_64bit)
                if why and e.requires_64bit and not is_64bit:
                    # Not offered at all on 32-bit systems.
                    continue
                desc = f"{e.description} (Disabled: {why})" if why else e.description
                items.append((e.id, desc, False))
            selected = self._ask(items, is_pi_zero)
        elif isinstance(preseed, str):
            selected = [preseed]
        else:
            selected = [str(s) for s in preseed]

        entries, rejected = filter_selection(catalog, selected, is_pi_zero=is_pi_zero, is_64bit=is_64bit)
        if rejected:
            lines = "\n".join(f"- {sid}: {why}" for sid, why in rejected.items())
            self.operator.message(f"These selections will not be installed:\n{lines}")

        plan = state.setdefault("execution", {}).setdefault("plan", {})
        plan["software"] = [e.id for e in entries]
        record_decision(state, "software_rejected", rejected)
        logger.info("Selected software: %s", ",".join(plan["software"]) or "(none)")
        return state
