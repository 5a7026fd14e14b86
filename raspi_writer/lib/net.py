from __future__ import annotations

import logging

from .command import run_cmd

logger = logging.getLogger(__name__)

DEFAULT_PROBE_HOST = "1.1.1.1"
DEFAULT_PROBE_TIMEOUT = 2


def is_network_reachable(
    probe_host: str = DEFAULT_PROBE_HOST,
    timeout_seconds: int = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """Single ICMP echo to probe_host. Any failure counts as unreachable; no retries."""

    argv = ["ping", "-c", "1", "-W", str(int(timeout_seconds)), probe_host]
    try:
        # ping's own -W bounds the wait; the extra second covers DNS lookup of probe_host.
        r = run_cmd(argv, check=False, timeout=float(timeout_seconds) + 1.0)
    except Exception as e:
        logger.info("Network probe to %s failed: %s", probe_host, e)
        return False

    ok = r.returncode == 0
    logger.info("Network probe to %s: %s", probe_host, "reachable" if ok else "unreachable")
    return ok
