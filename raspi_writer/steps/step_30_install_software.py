from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Optional

from ..config import InstallerConfig
from ..dispatch import InstallDispatcher
from ..lib.catalog import load_software_catalog
from ..lib.negotiate import negotiate_fallback
from ..lib.pkg import apt_update
from ..lib.prompt import Operator
from ..lib.releases import ReleaseResolver

logger = logging.getLogger(__name__)


def build_resolver(operator: Operator, cfg: InstallerConfig) -> ReleaseResolver:
    return ReleaseResolver(
        functools.partial(negotiate_fallback, operator),
        probe_host=cfg.probe_host,
        probe_timeout=cfg.probe_timeout,
        attempts=cfg.fetch_attempts,
        retry_delay=cfg.retry_delay,
        fetch_timeout=cfg.fetch_timeout,
    )


class InstallSoftwareStep:
    step_id = "30_install_software"

    def __init__(
        self,
        operator: Operator,
        *,
        resolver_factory: Optional[Callable[[Operator, InstallerConfig], ReleaseResolver]] = None,
    ) -> None:
        self.operator = operator
        self.resolver_factory = resolver_factory or build_resolver

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallerConfig(state.get("config") or {})
        plan = (state.get("execution") or {}).get("plan") or {}
        wanted = list(plan.get("software") or [])
        if not wanted:
            logger.info("No software selected")
            return state

        by_id = {e.id: e for e in load_software_catalog()}
        entries = [by_id[sid] for sid in wanted if sid in by_id]

        if any(argv[0] == "apt-get" for e in entries for argv in e.commands):
            try:
                apt_update(dry_run=cfg.dry_run)
            except RuntimeError as e:
                # Stale lists only matter for packages that actually moved; let each install report.
                logger.warning("apt-get update failed: %s", e)

        dispatcher = InstallDispatcher(
            resolver=self.resolver_factory(self.operator, cfg),
            operator=self.operator,
            log_dir=cfg.install_log_dir,
            download_dir=cfg.download_dir,
            dry_run=cfg.dry_run,
        )
        report = dispatcher.run_batch(entries)
        state.setdefault("execution", {})["install_report"] = report.to_dict()
        return state
