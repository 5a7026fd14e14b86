from __future__ import annotations

import logging
import shutil
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "update"], env=APT_ENV, dry_run=dry_run)


def apt_install(packages: Sequence[str], *, check: bool = True, dry_run: bool = False) -> bool:
    """Install packages; with check=False a failure is logged and False returned."""
    if not packages:
        return True
    r = run_cmd(["apt-get", "install", "-y", *packages], check=check, env=APT_ENV, dry_run=dry_run)
    if r.returncode != 0:
        logger.warning("apt-get install %s failed (rc=%s)", " ".join(packages), r.returncode)
        return False
    return True


def apt_has_package(package: str, *, dry_run: bool = False) -> bool:
    """Return True if apt knows about a package name.

    Display vendor packages only exist when their repo was added.
    """
    if dry_run:
        # Be permissive in dry-run so planning doesn't fail.
        return True
    r = run_cmd(["apt-cache", "show", package], check=False)
    return r.returncode == 0


def ensure_tool(binary: str, package: str | None = None, *, dry_run: bool = False) -> None:
    if shutil.which(binary):
        return
    logger.info("Installing %s...", binary)
    apt_update(dry_run=dry_run)
    apt_install([package or binary], dry_run=dry_run)
