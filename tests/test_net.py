from __future__ import annotations

import subprocess

from raspi_writer.lib import net
from raspi_writer.lib.command import CmdResult


def _stub(returncode=0, exc=None, seen=None):
    def fake_run_cmd(argv, **kwargs):
        if seen is not None:
            seen.append((list(argv), kwargs))
        if exc is not None:
            raise exc
        return CmdResult(argv=list(argv), returncode=returncode, stdout="", stderr="")

    return fake_run_cmd


def test_reachable_sends_single_bounded_ping(monkeypatch) -> None:
    seen = []
    monkeypatch.setattr(net, "run_cmd", _stub(0, seen=seen))

    assert net.is_network_reachable("example.org", 2) is True
    argv, kwargs = seen[0]
    assert argv == ["ping", "-c", "1", "-W", "2", "example.org"]
    assert kwargs["check"] is False
    assert len(seen) == 1


def test_nonzero_exit_is_unreachable(monkeypatch) -> None:
    monkeypatch.setattr(net, "run_cmd", _stub(1))
    assert net.is_network_reachable("example.org", 2) is False


def test_missing_ping_binary_is_unreachable(monkeypatch) -> None:
    monkeypatch.setattr(net, "run_cmd", _stub(exc=FileNotFoundError("ping")))
    assert net.is_network_reachable() is False


def test_timeout_is_unreachable(monkeypatch) -> None:
    monkeypatch.setattr(net, "run_cmd", _stub(exc=subprocess.TimeoutExpired(["ping"], 3)))
    assert net.is_network_reachable("10.255.255.1", 2) is False
