from __future__ import annotations

import json
from collections import deque
from typing import Any, Dict, List, Optional

import pytest
import requests


class ScriptedOperator:
    """Operator double: pops pre-programmed answers per prompt kind and records every call."""

    def __init__(self, **answers: List[Any]) -> None:
        self.answers: Dict[str, deque] = {k: deque(v) for k, v in answers.items()}
        self.calls: List[tuple] = []

    def _next(self, kind: str, default: Any = None) -> Any:
        q = self.answers.get(kind)
        if q:
            return q.popleft()
        return default

    def message(self, text: str, *, title: str = "") -> None:
        self.calls.append(("message", text))

    def confirm(self, text: str, *, default: bool = True) -> bool:
        self.calls.append(("confirm", text))
        return self._next("confirm", default)

    def checklist(self, title, text, items):
        self.calls.append(("checklist", title, list(items)))
        return self._next("checklist")

    def radiolist(self, title, text, items):
        self.calls.append(("radiolist", title, list(items)))
        return self._next("radiolist")

    def menu(self, title, text, items):
        self.calls.append(("menu", title, text, list(items)))
        return self._next("menu")

    def input_text(self, text, default=""):
        self.calls.append(("input_text", text))
        return self._next("input_text")

    def password(self, text):
        self.calls.append(("password", text))
        return self._next("password")

    def kinds(self) -> List[str]:
        return [c[0] for c in self.calls]

    def messages(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "message"]


class FakeResponse:
    def __init__(self, *, text: str = "", status: int = 200, url: str = "") -> None:
        self.text = text
        self.status_code = status
        self.url = url

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error for {self.url}")


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, responses: List[Any]) -> None:
        self.responses = deque(responses)
        self.requests: List[Dict[str, Any]] = []

    def get(self, url: str, headers: Optional[dict] = None, timeout: Any = None) -> FakeResponse:
        self.requests.append({"url": url, "headers": headers or {}, "timeout": timeout})
        item = self.responses.popleft() if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


def release_json(*names: str) -> str:
    return json.dumps(
        {
            "tag_name": "v1.0",
            "assets": [
                {"name": n, "browser_download_url": f"https://github.com/ownerA/repoA/releases/download/v1.0/{n}"}
                for n in names
            ],
        }
    )


@pytest.fixture
def operator_factory():
    return ScriptedOperator
