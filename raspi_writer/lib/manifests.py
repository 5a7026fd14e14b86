from __future__ import annotations

from pathlib import Path
from typing import Any, Dict


def _package_root() -> Path:
    # raspi_writer/lib/manifests.py -> raspi_writer
    return Path(__file__).resolve().parents[1]


def load_yaml(path: str | Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load manifests") from e

    p = Path(path)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package (manifests/...)."""
    return load_yaml(_package_root() / rel_path.lstrip("/"))


def load_software_manifest() -> Dict[str, Any]:
    return load_yaml_rel("manifests/software.yaml")


def load_displays_manifest() -> Dict[str, Any]:
    return load_yaml_rel("manifests/displays.yaml")
