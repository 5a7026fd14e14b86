from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from typing import Any, Dict, List, Optional

from .config import load_preseed
from .lib.pkg import ensure_tool
from .lib.prompt import ConsoleOperator, Operator, WhiptailOperator
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import Step, run_pipeline
from .state_store import ensure_defaults, load_state, merge_config, save_state
from .steps import (
    ConfigureDisplayStep,
    ConfigureHotspotStep,
    FinalizeStep,
    InstallSoftwareStep,
    PreflightStep,
    SelectionCancelled,
    SelectSoftwareStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "/var/lib/raspi-writer/state.json"


def build_steps(operator: Operator) -> List[Step]:
    return [
        PreflightStep(operator),
        SelectSoftwareStep(operator),
        InstallSoftwareStep(operator),
        ConfigureDisplayStep(operator),
        ConfigureHotspotStep(operator),
        FinalizeStep(operator),
    ]


def require_root(*, dry_run: bool) -> None:
    if dry_run:
        return
    if hasattr(os, "geteuid") and os.geteuid() != 0:
        raise PermissionError("This script must be run as root. Use sudo.")


def make_operator(ui: str, *, dry_run: bool = False) -> Operator:
    if ui == "console" or not sys.stdin.isatty():
        return ConsoleOperator()
    if ui != "whiptail":
        raise ValueError(f"unknown ui {ui!r}")
    if not shutil.which("whiptail"):
        if dry_run:
            logger.info("whiptail missing; using console prompts for the dry run")
            return ConsoleOperator()
        ensure_tool("whiptail")
    return WhiptailOperator()


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    config_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: Optional[bool] = None,
    ui: Optional[str] = None,
    operator: Optional[Operator] = None,
) -> Dict[str, Any]:
    """Run the installer, persisting state for resume."""

    actual_log_path = configure_logging(log_path=log_path)

    state = ensure_defaults(load_state(state_path))
    if config_path:
        merge_config(state, load_preseed(config_path))
    overrides: Dict[str, Any] = {}
    if dry_run is not None:
        overrides["dry_run"] = dry_run
    if ui is not None:
        overrides["ui"] = ui
    merge_config(state, overrides)

    cfg = state["config"]
    state.setdefault("execution", {}).setdefault("paths", {})["log_path_actual"] = actual_log_path

    require_root(dry_run=bool(cfg.get("dry_run")))
    if operator is None:
        operator = make_operator(str(cfg.get("ui") or "whiptail"), dry_run=bool(cfg.get("dry_run")))

    try:
        result = run_pipeline(
            state=state,
            steps=build_steps(operator),
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        state.setdefault("execution", {}).setdefault("summary", {})["ran_steps"] = result.ran_steps
        state.setdefault("execution", {}).setdefault("summary", {})["skipped_steps"] = result.skipped_steps
        return state
    except SelectionCancelled:
        logger.info("Cancelled by user.")
        raise
    except Exception as e:
        logger.exception("Installer failed")
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="raspi-writer",
        description="Install writing and publishing software on a Raspberry Pi.",
    )
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--config", default=None, help="YAML preseed with answers (software, display, hotspot, ...)")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_install_software)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", default=None, help="Log commands without running them")
    p.add_argument("--ui", choices=["whiptail", "console"], default=None, help="Prompt front end")

    args = p.parse_args(argv)

    try:
        run(
            state_path=args.state,
            log_path=args.log,
            config_path=args.config,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
            dry_run=args.dry_run,
            ui=args.ui,
        )
    except PermissionError as e:
        print(e, file=sys.stderr)
        return 1
    except SelectionCancelled as e:
        print(e)
        return 1
    print("Setup complete. Please reboot your Raspberry Pi.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
