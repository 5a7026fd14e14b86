from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

REDACTED = "***"


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML state requested but PyYAML is not available. Use JSON state.") from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    if _detect_format(p) in {"yaml", "yml"}:
        data = _yaml().safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return _forget_redacted(data)


def _forget_redacted(state: Dict[str, Any]) -> Dict[str, Any]:
    cfg = state.get("config") or {}
    hotspot = cfg.get("hotspot")
    if isinstance(hotspot, dict) and hotspot.get("passphrase") == REDACTED:
        # Asked again unless --config supplies the passphrase.
        logger.info("Saved hotspot settings have no passphrase; hotspot will be asked again")
        cfg["hotspot"] = None
    return state


def _redacted(state: Dict[str, Any]) -> Dict[str, Any]:
    hotspot = (state.get("config") or {}).get("hotspot")
    if not (isinstance(hotspot, dict) and hotspot.get("passphrase")):
        return state
    out = dict(state)
    out["config"] = {**state["config"], "hotspot": {**hotspot, "passphrase": REDACTED}}
    return out


def save_state(path: str, state: Dict[str, Any]) -> None:
    """Persist state. The hotspot passphrase is never written; preseed files supply it again on resume."""

    state = _redacted(state)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(_yaml().safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def merge_config(state: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay preseed/CLI values onto state['config'] (one level deep for mappings)."""

    cfg = state.setdefault("config", {})
    for key, val in overrides.items():
        if isinstance(val, dict) and isinstance(cfg.get(key), dict):
            cfg[key] = {**cfg[key], **val}
        else:
            cfg[key] = val
    return state


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", "1.0")
    state.setdefault("config", {})
    state.setdefault("board", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("ui", "whiptail")
    cfg.setdefault("dry_run", False)
    cfg.setdefault("target_root", "/")
    cfg.setdefault("install_log_dir", "/tmp")
    cfg.setdefault("download_dir", "/tmp/raspi-writer")
    # None means "ask"; a list/string/bool preseeds the answer.
    cfg.setdefault("pi_zero", None)
    cfg.setdefault("software", None)
    cfg.setdefault("display", None)
    cfg.setdefault("hotspot", None)
    cfg.setdefault("finalize_reboot", False)
    net = cfg.setdefault("network", {})
    net.setdefault("probe_host", "1.1.1.1")
    net.setdefault("probe_timeout", 2)
    net.setdefault("fetch_attempts", 3)
    net.setdefault("retry_delay", 5)
    net.setdefault("fetch_timeout", 10)

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value
