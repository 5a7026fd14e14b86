from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def rooted(root: str, path: str) -> Path:
    return Path(root) / path.lstrip("/")


def write_file(root: str, rel: str, contents: str, *, mode: int | None = None, dry_run: bool = False) -> Path:
    p = rooted(root, rel)
    if dry_run:
        logger.info("Would write %s", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(p, mode)
    logger.info("Wrote %s", str(p))
    return p


def append_line_once(root: str, rel: str, line: str, *, dry_run: bool = False) -> bool:
    """Append line unless an identical line is already present. Returns True if appended."""

    p = rooted(root, rel)
    raw = p.read_text(encoding="utf-8") if p.exists() else ""
    if line in (ln.strip() for ln in raw.splitlines()):
        logger.info("%s already contains %r", str(p), line)
        return False
    if dry_run:
        logger.info("Would append %r to %s", line, str(p))
        return True

    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        if raw and not raw.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    logger.info("Appended %r to %s", line, str(p))
    return True
