"""Ordered installer steps with resume.

Each finished step is written into state["execution"]["completed_steps"], so
a rerun after a crash or a reboot picks up at the first unfinished step.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    step_id: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]


def _window(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    ids = [s.step_id for s in steps]
    for flag, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in ids:
            raise ValueError(f"{flag}: unknown step {value!r} (known: {', '.join(ids)})")

    lo = ids.index(start_at) if start_at else 0
    hi = ids.index(stop_after) + 1 if stop_after else len(ids)
    if start_at and stop_after and hi <= lo:
        raise ValueError(f"stop_after {stop_after!r} comes before start_at {start_at!r}")
    return list(steps[lo:hi])


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> PipelineResult:
    """Run the steps between start_at and stop_after (inclusive).

    Completed steps are skipped unless force is set. Wall time per step goes
    to state["execution"]["timings"].
    """

    ran: List[str] = []
    skipped: List[str] = []
    exe = state.setdefault("execution", {})
    timings = exe.setdefault("timings", {})

    for step in _window(steps, start_at, stop_after):
        sid = step.step_id
        exe["current_step"] = sid

        if is_step_completed(state, sid) and not force:
            logger.info("Step %s already done; skipping", sid)
            skipped.append(sid)
            continue

        logger.info("Step %s starting", sid)
        t0 = time.monotonic()
        state = step.run(state)
        exe = state.setdefault("execution", {})
        timings = exe.setdefault("timings", timings)
        timings[sid] = round(time.monotonic() - t0, 2)
        mark_step_completed(state, sid)
        ran.append(sid)

    exe["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
