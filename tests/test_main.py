from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import ScriptedOperator
from raspi_writer import main as main_mod


def _preseed(tmp_path: Path, body: str) -> str:
    p = tmp_path / "answers.yaml"
    p.write_text(body, encoding="utf-8")
    return str(p)


def test_preseeded_dry_run_completes(tmp_path: Path) -> None:
    config = _preseed(
        tmp_path,
        "\n".join(
            [
                "pi_zero: false",
                "software: [vim, pandoc]",
                "display: ili9341",
                "hotspot: false",
                f"target_root: {tmp_path / 'root'}",
                f"install_log_dir: {tmp_path / 'logs'}",
                "",
            ]
        ),
    )
    op = ScriptedOperator()
    state_path = tmp_path / "state.json"

    state = main_mod.run(
        state_path=str(state_path),
        log_path=str(tmp_path / "raspi-writer.log"),
        config_path=config,
        dry_run=True,
        operator=op,
    )

    exe = state["execution"]
    assert exe["completed_steps"] == [
        "10_preflight",
        "20_select_software",
        "30_install_software",
        "40_configure_display",
        "50_configure_hotspot",
        "90_finalize",
    ]
    assert exe["install_report"]["installed"] == ["vim", "pandoc"]
    assert exe["decisions"]["display"]["display"] == "ili9341"
    assert exe["decisions"]["hotspot"] == {"enabled": False}
    assert any("Small display detected" in m for m in op.messages())
    assert "Setup complete!" in op.messages()[-1]
    assert "checklist" not in op.kinds()
    assert json.loads(state_path.read_text(encoding="utf-8"))["execution"]["current_step"] is None

    # a second run resumes and has nothing left to do
    again = main_mod.run(state_path=str(state_path), log_path=str(tmp_path / "raspi-writer.log"), dry_run=True, operator=op)
    assert again["execution"]["summary"]["ran_steps"] == []


def test_cancelled_selection_exits_with_error(tmp_path: Path, monkeypatch) -> None:
    op = ScriptedOperator(confirm=[False], checklist=[None])
    monkeypatch.setattr(main_mod, "make_operator", lambda ui, dry_run=False: op)

    rc = main_mod.main(
        [
            "--state",
            str(tmp_path / "state.json"),
            "--log",
            str(tmp_path / "raspi-writer.log"),
            "--dry-run",
            "--ui",
            "console",
        ]
    )

    assert rc == 1
    saved = json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))
    assert saved["execution"]["completed_steps"] == ["10_preflight"]


def test_root_required_outside_dry_run(monkeypatch) -> None:
    monkeypatch.setattr(main_mod.os, "geteuid", lambda: 1000, raising=False)
    with pytest.raises(PermissionError):
        main_mod.require_root(dry_run=False)
    main_mod.require_root(dry_run=True)
