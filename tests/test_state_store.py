from __future__ import annotations

import json
from pathlib import Path

from raspi_writer.config import InstallerConfig, load_preseed
from raspi_writer.state_store import ensure_defaults, load_state, merge_config, save_state


def test_json_roundtrip(tmp_path: Path) -> None:
    path = str(tmp_path / "state.json")
    state = ensure_defaults({})
    state["execution"]["completed_steps"] = ["10_preflight"]
    save_state(path, state)
    loaded = load_state(path)
    assert loaded["execution"]["completed_steps"] == ["10_preflight"]
    assert loaded["config"]["network"]["retry_delay"] == 5


def test_yaml_roundtrip(tmp_path: Path) -> None:
    path = str(tmp_path / "state.yaml")
    save_state(path, ensure_defaults({"config": {"software": ["vim"]}}))
    assert load_state(path)["config"]["software"] == ["vim"]


def test_missing_state_is_empty(tmp_path: Path) -> None:
    assert load_state(str(tmp_path / "nope.json")) == {}


def test_hotspot_passphrase_never_written(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    state = ensure_defaults({"config": {"hotspot": {"ssid": "Desk", "passphrase": "correcthorse"}}})
    save_state(str(path), state)
    assert "correcthorse" not in path.read_text(encoding="utf-8")
    assert json.loads(path.read_text(encoding="utf-8"))["config"]["hotspot"]["ssid"] == "Desk"
    # the in-memory state is untouched
    assert state["config"]["hotspot"]["passphrase"] == "correcthorse"


def test_defaults_do_not_override_user_values() -> None:
    state = ensure_defaults({"config": {"network": {"retry_delay": 1}, "display": "ili9341"}})
    assert state["config"]["network"]["retry_delay"] == 1
    assert state["config"]["network"]["fetch_attempts"] == 3
    assert state["config"]["display"] == "ili9341"


def test_preseed_merges_nested_network(tmp_path: Path) -> None:
    preseed = tmp_path / "answers.yaml"
    preseed.write_text("software: [vim, pandoc]\nnetwork:\n  probe_host: 9.9.9.9\n", encoding="utf-8")
    state = ensure_defaults({})
    merge_config(state, load_preseed(str(preseed)))

    cfg = InstallerConfig(state["config"])
    assert state["config"]["software"] == ["vim", "pandoc"]
    assert cfg.probe_host == "9.9.9.9"
    assert cfg.fetch_timeout == 10.0


def test_resume_asks_for_hotspot_again_without_its_passphrase(tmp_path: Path) -> None:
    path = str(tmp_path / "state.json")
    save_state(path, ensure_defaults({"config": {"hotspot": {"ssid": "Desk", "passphrase": "correcthorse"}}}))

    state = ensure_defaults(load_state(path))
    assert state["config"]["hotspot"] is None

    merge_config(state, {"hotspot": {"ssid": "Desk", "passphrase": "correcthorse"}})
    assert state["config"]["hotspot"]["passphrase"] == "correcthorse"
