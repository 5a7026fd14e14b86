from __future__ import annotations

import subprocess
from collections import deque

from raspi_writer.lib.prompt import ConsoleOperator, WhiptailOperator


def _console(*answers):
    q = deque(answers)
    printed = []

    def fake_input(prompt):
        item = q.popleft()
        if isinstance(item, BaseException):
            raise item
        return item

    op = ConsoleOperator(input_fn=fake_input, password_fn=fake_input, print_fn=printed.append)
    return op, printed


def test_console_confirm_blank_uses_default() -> None:
    op, _ = _console("", "n", EOFError())
    assert op.confirm("Continue?", default=True) is True
    assert op.confirm("Continue?", default=True) is False
    assert op.confirm("Continue?") is False


def test_console_checklist_accepts_numbers_and_names() -> None:
    items = [("vim", "Vim", False), ("nano", "Nano", True), ("emacs", "Emacs", False)]
    op, printed = _console("1 emacs bogus 1", "")

    assert op.checklist("Software", "Pick", items) == ["vim", "emacs"]
    assert "Ignoring unknown choice: bogus" in printed
    assert op.checklist("Software", "Pick", items) == ["nano"]


def test_console_menu_reprompts_until_valid() -> None:
    op, printed = _console("9", "skip")
    choice = op.menu("Title", "Text", [("custom", "Enter URL"), ("skip", "Skip")])
    assert choice == "skip"
    assert "Invalid choice." in printed


def test_console_radiolist_blank_picks_preselected() -> None:
    op, _ = _console("")
    items = [("none", "No display", True), ("waveshare35a", "Waveshare 3.5in", False)]
    assert op.radiolist("Display", "Pick one", items) == "none"


def test_console_cancel_returns_none() -> None:
    op, _ = _console(KeyboardInterrupt(), EOFError())
    assert op.input_text("URL") is None
    assert op.password("Password") is None


def test_console_input_text_falls_back_to_default() -> None:
    op, _ = _console("   ")
    assert op.input_text("SSID", "RPi-Writers-Hotspot") == "RPi-Writers-Hotspot"


def test_whiptail_reads_answer_from_stderr(monkeypatch) -> None:
    seen = []

    def fake_run(argv, stderr=None, text=None):
        seen.append(argv)
        return subprocess.CompletedProcess(argv, 0, stdout=None, stderr='"vim"\n"nano"\n')

    monkeypatch.setattr(subprocess, "run", fake_run)
    op = WhiptailOperator()

    picked = op.checklist("Software", "Pick", [("vim", "Vim", True), ("nano", "Nano", False)])

    assert picked == ["vim", "nano"]
    assert seen[0][0] == "whiptail"
    assert "--separate-output" in seen[0]
    assert seen[0][-6:] == ["vim", "Vim", "ON", "nano", "Nano", "OFF"]


def test_whiptail_cancel_is_none(monkeypatch) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda argv, stderr=None, text=None: subprocess.CompletedProcess(argv, 1, stdout=None, stderr=""),
    )
    op = WhiptailOperator()
    assert op.menu("T", "Text", [("skip", "Skip")]) is None
    assert op.input_text("URL") is None
    assert op.confirm("Sure?") is False
