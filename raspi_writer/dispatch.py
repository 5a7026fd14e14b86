"""Install dispatcher: resolve, then run each selected entry's commands.

Entries are handled one at a time. A skipped resolution drops the entry
before any command is built, so a blank URL never reaches an argv. Command
output goes to one log file per entry; a failure is reported and the batch
moves on to the next entry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .lib.catalog import URL_PLACEHOLDER, SoftwareEntry
from .lib.command import CmdResult, run_cmd
from .lib.env import PATHS
from .lib.pkg import APT_ENV
from .lib.prompt import Operator
from .lib.releases import ReleaseResolver, ResolutionResult, Skipped

logger = logging.getLogger(__name__)

STATUS_INSTALLED = "installed"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"

_PLACEHOLDER_RX = re.compile(r"\{(?:url|download_dir|id)\}")


@dataclass(frozen=True)
class InstallOutcome:
    entry_id: str
    status: str
    log_path: Optional[str] = None
    detail: str = ""


@dataclass
class DispatchReport:
    outcomes: List[InstallOutcome] = field(default_factory=list)

    def ids(self, status: str) -> List[str]:
        return [o.entry_id for o in self.outcomes if o.status == status]

    @property
    def installed(self) -> List[str]:
        return self.ids(STATUS_INSTALLED)

    @property
    def failed(self) -> List[str]:
        return self.ids(STATUS_FAILED)

    @property
    def skipped(self) -> List[str]:
        return self.ids(STATUS_SKIPPED)

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "failed": self.failed,
            "skipped": self.skipped,
            "logs": {o.entry_id: o.log_path for o in self.outcomes if o.log_path},
        }


def render_commands(
    entry: SoftwareEntry,
    *,
    url: Optional[str],
    download_dir: str,
) -> List[List[str]]:
    """Fill placeholders in an entry's argv templates."""

    if entry.needs_url and not (url or "").strip():
        raise ValueError(f"{entry.id}: refusing to build install commands without a URL")

    values = {
        URL_PLACEHOLDER: (url or "").strip(),
        "{download_dir}": download_dir,
        "{id}": entry.id,
    }
    # One pass, so placeholder text inside a substituted value stays literal.
    return [[_PLACEHOLDER_RX.sub(lambda m: values[m.group(0)], arg) for arg in argv] for argv in entry.commands]


class InstallDispatcher:
    def __init__(
        self,
        *,
        resolver: ReleaseResolver,
        operator: Operator,
        log_dir: str = PATHS.install_log_dir,
        download_dir: str = PATHS.download_dir,
        dry_run: bool = False,
        runner: Callable[..., CmdResult] = run_cmd,
    ) -> None:
        self.resolver = resolver
        self.operator = operator
        self.log_dir = Path(log_dir)
        self.download_dir = download_dir
        self.dry_run = dry_run
        self.runner = runner

    def log_path_for(self, entry_id: str) -> Path:
        return self.log_dir / f"install_{entry_id}.log"

    def resolve(self, entry: SoftwareEntry) -> Optional[ResolutionResult]:
        if entry.release is None:
            return None
        return self.resolver.resolve(entry.release, entry.id)

    def install(self, entry: SoftwareEntry, result: Optional[ResolutionResult]) -> InstallOutcome:
        if isinstance(result, Skipped):
            logger.info("Skipping %s: %s", entry.id, result.reason or "no download URL")
            return InstallOutcome(entry_id=entry.id, status=STATUS_SKIPPED, detail=result.reason)

        url = result.url if result is not None else None
        commands = render_commands(entry, url=url, download_dir=self.download_dir)

        log_path = self.log_path_for(entry.id)
        if not self.dry_run:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.write_text("", encoding="utf-8")
            Path(self.download_dir).mkdir(parents=True, exist_ok=True)

        logger.info("Installing %s...", entry.id)
        for argv in commands:
            try:
                r = self.runner(
                    argv,
                    check=False,
                    env=APT_ENV,
                    log_file=None if self.dry_run else str(log_path),
                    dry_run=self.dry_run,
                )
                rc = r.returncode
                err = r.stderr
            except OSError as e:
                # Missing binary (wget, flatpak, ...).
                rc = 127
                err = str(e)
                if not self.dry_run:
                    with log_path.open("a", encoding="utf-8") as f:
                        f.write(f"{argv[0]}: {e}\n")
            if rc != 0:
                logger.error("Install of %s failed at %s (rc=%s)", entry.id, argv[0], rc)
                self.operator.message(f"Failed to install {entry.id}. Check {log_path} for details.")
                return InstallOutcome(
                    entry_id=entry.id,
                    status=STATUS_FAILED,
                    log_path=str(log_path),
                    detail=(err or "").strip()[-500:],
                )

        logger.info("%s installation completed.", entry.id)
        return InstallOutcome(entry_id=entry.id, status=STATUS_INSTALLED, log_path=str(log_path))

    def run_batch(self, entries: Sequence[SoftwareEntry]) -> DispatchReport:
        report = DispatchReport()
        for entry in entries:
            result = self.resolve(entry)
            report.outcomes.append(self.install(entry, result))
        logger.info(
            "Install batch done: installed=%s failed=%s skipped=%s",
            ",".join(report.installed) or "-",
            ",".join(report.failed) or "-",
            ",".join(report.skipped) or "-",
        )
        return report
