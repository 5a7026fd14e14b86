"""Operator interaction.

Two interchangeable front ends share the Operator protocol:
- WhiptailOperator: the dialog boxes Raspberry Pi OS users expect.
- ConsoleOperator: plain stdin/stdout, used when there is no usable terminal UI.

Every prompt returns None (or False for confirm) when the operator cancels.
"""

from __future__ import annotations

import getpass
import logging
import subprocess
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

ChecklistItem = Tuple[str, str, bool]
MenuItem = Tuple[str, str]


class Operator(Protocol):
    def message(self, text: str, *, title: str = "") -> None:
        ...

    def confirm(self, text: str, *, default: bool = True) -> bool:
        ...

    def checklist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[List[str]]:
        ...

    def radiolist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[str]:
        ...

    def menu(self, title: str, text: str, items: Sequence[MenuItem]) -> Optional[str]:
        ...

    def input_text(self, text: str, default: str = "") -> Optional[str]:
        ...

    def password(self, text: str) -> Optional[str]:
        ...


class WhiptailOperator:
    """whiptail draws on stdout and reports the answer on stderr."""

    def __init__(self, *, binary: str = "whiptail", width: int = 78) -> None:
        self.binary = binary
        self.width = width

    def _run(self, args: Sequence[str]) -> Tuple[int, str]:
        argv = [self.binary, *args]
        logger.debug("WHIPTAIL %s", args[0] if args else "")
        p = subprocess.run(argv, stderr=subprocess.PIPE, text=True)
        return p.returncode, (p.stderr or "").strip()

    def _height(self, text: str, extra: int = 0) -> int:
        return min(24, 8 + text.count("\n") + extra)

    def message(self, text: str, *, title: str = "") -> None:
        args = ["--title", title] if title else []
        self._run([*args, "--msgbox", text, str(self._height(text, 2)), str(self.width)])

    def confirm(self, text: str, *, default: bool = True) -> bool:
        args = [] if default else ["--defaultno"]
        rc, _ = self._run([*args, "--yesno", text, str(self._height(text)), str(self.width)])
        return rc == 0

    def checklist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[List[str]]:
        flat: list[str] = []
        for tag, desc, on in items:
            flat += [tag, desc, "ON" if on else "OFF"]
        rc, out = self._run(
            [
                "--title",
                title,
                "--separate-output",
                "--checklist",
                text,
                "20",
                str(self.width),
                str(min(12, max(1, len(items)))),
                *flat,
            ]
        )
        if rc != 0:
            return None
        return [ln.strip().strip('"') for ln in out.splitlines() if ln.strip()]

    def radiolist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[str]:
        flat: list[str] = []
        for tag, desc, on in items:
            flat += [tag, desc, "ON" if on else "OFF"]
        rc, out = self._run(
            ["--title", title, "--radiolist", text, "15", str(self.width), str(min(8, max(1, len(items)))), *flat]
        )
        if rc != 0 or not out:
            return None
        return out.strip('"')

    def menu(self, title: str, text: str, items: Sequence[MenuItem]) -> Optional[str]:
        flat: list[str] = []
        for tag, desc in items:
            flat += [tag, desc]
        rc, out = self._run(
            ["--title", title, "--menu", text, str(self._height(text, len(items) + 4)), str(self.width), str(len(items)), *flat]
        )
        if rc != 0 or not out:
            return None
        return out

    def input_text(self, text: str, default: str = "") -> Optional[str]:
        rc, out = self._run(["--inputbox", text, "8", str(self.width), default])
        return out if rc == 0 else None

    def password(self, text: str) -> Optional[str]:
        rc, out = self._run(["--passwordbox", text, "8", str(self.width)])
        return out if rc == 0 else None


class ConsoleOperator:
    """Line-oriented prompts. EOF or Ctrl-C at a prompt counts as cancel."""

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        password_fn: Callable[[str], str] = getpass.getpass,
        print_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._password = password_fn
        self._print = print_fn

    def _ask(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            self._print("")
            return None

    def message(self, text: str, *, title: str = "") -> None:
        if title:
            self._print(f"== {title} ==")
        self._print(text)

    def confirm(self, text: str, *, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        ans = self._ask(f"{text} [{hint}] ")
        if ans is None:
            return False
        ans = ans.strip().lower()
        if not ans:
            return default
        return ans in {"y", "yes"}

    def checklist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[List[str]]:
        self._print(f"== {title} ==")
        self._print(text)
        for i, (tag, desc, on) in enumerate(items, start=1):
            self._print(f"  {i:2d}. [{'x' if on else ' '}] {tag} - {desc}")
        ans = self._ask("Numbers or names separated by spaces (blank keeps defaults): ")
        if ans is None:
            return None
        if not ans.strip():
            return [tag for tag, _, on in items if on]

        tags = [tag for tag, _, _ in items]
        chosen: list[str] = []
        for tok in ans.replace(",", " ").split():
            if tok.isdigit() and 1 <= int(tok) <= len(tags):
                tok = tags[int(tok) - 1]
            if tok in tags and tok not in chosen:
                chosen.append(tok)
            elif tok not in tags:
                self._print(f"Ignoring unknown choice: {tok}")
        return chosen

    def radiolist(self, title: str, text: str, items: Sequence[ChecklistItem]) -> Optional[str]:
        default = next((tag for tag, _, on in items if on), None)
        picked = self.menu(title, text, [(tag, desc) for tag, desc, _ in items], default=default)
        return picked

    def menu(
        self,
        title: str,
        text: str,
        items: Sequence[MenuItem],
        default: Optional[str] = None,
    ) -> Optional[str]:
        self._print(f"== {title} ==")
        self._print(text)
        for i, (tag, desc) in enumerate(items, start=1):
            self._print(f"  {i}. {tag} - {desc}")
        tags = [tag for tag, _ in items]
        while True:
            ans = self._ask("Select > ")
            if ans is None:
                return None
            ans = ans.strip()
            if not ans and default is not None:
                return default
            if ans.isdigit() and 1 <= int(ans) <= len(tags):
                return tags[int(ans) - 1]
            if ans in tags:
                return ans
            self._print("Invalid choice.")

    def input_text(self, text: str, default: str = "") -> Optional[str]:
        suffix = f" [{default}]" if default else ""
        ans = self._ask(f"{text}{suffix}: ")
        if ans is None:
            return None
        return ans.strip() or default

    def password(self, text: str) -> Optional[str]:
        try:
            return self._password(f"{text}: ")
        except (EOFError, KeyboardInterrupt):
            self._print("")
            return None
