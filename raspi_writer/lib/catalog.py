from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .manifests import load_displays_manifest, load_software_manifest
from .releases import ReleaseQuery

logger = logging.getLogger(__name__)

URL_PLACEHOLDER = "{url}"


@dataclass(frozen=True)
class SoftwareEntry:
    id: str
    description: str
    commands: Tuple[Tuple[str, ...], ...]
    resource_heavy: bool = False
    requires_64bit: bool = False
    release: Optional[ReleaseQuery] = None

    @property
    def needs_url(self) -> bool:
        return any(URL_PLACEHOLDER in arg for argv in self.commands for arg in argv)


@dataclass(frozen=True)
class DisplayOption:
    id: str
    description: str
    default: bool = False
    small: bool = False
    packages: Tuple[str, ...] = ()
    overlays: Tuple[str, ...] = ()
    commands: Tuple[Tuple[str, ...], ...] = ()


def _commands(raw: Any, where: str) -> Tuple[Tuple[str, ...], ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(c, list) and c for c in raw):
        raise ValueError(f"{where}: commands must be a list of non-empty argv lists")
    return tuple(tuple(str(a) for a in c) for c in raw)


def parse_software(raw: Dict[str, Any]) -> SoftwareEntry:
    sid = str(raw.get("id") or "").strip()
    if not sid:
        raise ValueError("software entry without id")

    release_raw = raw.get("release")
    release = ReleaseQuery.from_dict(release_raw) if release_raw else None
    commands = _commands(raw.get("commands"), f"software.{sid}")
    if not commands:
        raise ValueError(f"software.{sid}: no commands")

    entry = SoftwareEntry(
        id=sid,
        description=str(raw.get("description") or sid),
        commands=commands,
        resource_heavy=bool(raw.get("resource_heavy", False)),
        requires_64bit=bool(raw.get("requires_64bit", False)),
        release=release,
    )
    if entry.needs_url and release is None:
        raise ValueError(f"software.{sid}: uses {URL_PLACEHOLDER} but has no release block")
    return entry


def load_software_catalog(manifest: Optional[Dict[str, Any]] = None) -> List[SoftwareEntry]:
    manifest = manifest if manifest is not None else load_software_manifest()
    items = manifest.get("software") or []
    if not isinstance(items, list):
        raise ValueError("manifests/software.yaml: software must be a list")

    entries: list[SoftwareEntry] = []
    seen: set[str] = set()
    for raw in items:
        if not isinstance(raw, dict):
            raise ValueError("manifests/software.yaml: each entry must be a mapping")
        e = parse_software(raw)
        if e.id in seen:
            raise ValueError(f"duplicate software id: {e.id}")
        seen.add(e.id)
        entries.append(e)
    return entries


def load_display_catalog(manifest: Optional[Dict[str, Any]] = None) -> List[DisplayOption]:
    manifest = manifest if manifest is not None else load_displays_manifest()
    items = manifest.get("displays") or []
    if not isinstance(items, list):
        raise ValueError("manifests/displays.yaml: displays must be a list")

    out: list[DisplayOption] = []
    for raw in items:
        did = str(raw.get("id") or "").strip()
        if not did:
            raise ValueError("display entry without id")
        out.append(
            DisplayOption(
                id=did,
                description=str(raw.get("description") or did),
                default=bool(raw.get("default", False)),
                small=bool(raw.get("small", False)),
                packages=tuple(str(p) for p in (raw.get("packages") or [])),
                overlays=tuple(str(o) for o in (raw.get("overlays") or [])),
                commands=_commands(raw.get("commands"), f"displays.{did}"),
            )
        )
    return out


def unavailable_reason(entry: SoftwareEntry, *, is_pi_zero: bool, is_64bit: bool) -> Optional[str]:
    """Why an entry cannot be installed on this board, or None if it can."""
    if entry.requires_64bit and not is_64bit:
        return "Requires 64-bit OS"
    if entry.resource_heavy and is_pi_zero:
        return "Resource-heavy for Pi Zero"
    return None


def filter_selection(
    entries: List[SoftwareEntry],
    selected_ids: List[str],
    *,
    is_pi_zero: bool,
    is_64bit: bool,
) -> Tuple[List[SoftwareEntry], Dict[str, str]]:
    """Return (installable entries in catalog order, {id: reason} for rejected ids)."""

    wanted = set(selected_ids)
    known = {e.id for e in entries}
    rejected: Dict[str, str] = {sid: "Unknown software" for sid in selected_ids if sid not in known}

    keep: list[SoftwareEntry] = []
    for e in entries:
        if e.id not in wanted:
            continue
        why = unavailable_reason(e, is_pi_zero=is_pi_zero, is_64bit=is_64bit)
        if why:
            rejected[e.id] = why
        else:
            keep.append(e)
    if rejected:
        logger.info("Not installing: %s", rejected)
    return keep, rejected
