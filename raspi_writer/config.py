from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .lib.env import PATHS


@dataclass(frozen=True)
class InstallerConfig:
    """Typed view over state['config']."""

    raw: Dict[str, Any]

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def target_root(self) -> str:
        return str(self.raw.get("target_root") or PATHS.target_root)

    @property
    def install_log_dir(self) -> str:
        return str(self.raw.get("install_log_dir") or PATHS.install_log_dir)

    @property
    def download_dir(self) -> str:
        return str(self.raw.get("download_dir") or PATHS.download_dir)

    @property
    def network(self) -> Dict[str, Any]:
        return dict(self.raw.get("network") or {})

    @property
    def probe_host(self) -> str:
        return str(self.network.get("probe_host") or "1.1.1.1")

    @property
    def probe_timeout(self) -> int:
        return int(self.network.get("probe_timeout", 2))

    @property
    def fetch_attempts(self) -> int:
        return int(self.network.get("fetch_attempts", 3))

    @property
    def retry_delay(self) -> float:
        return float(self.network.get("retry_delay", 5))

    @property
    def fetch_timeout(self) -> float:
        return float(self.network.get("fetch_timeout", 10))


def load_preseed(path: str) -> Dict[str, Any]:
    """Read a YAML preseed file; its keys are merged into state['config']."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("preseed config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the preseed file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("preseed file must contain a mapping/object")

    return raw
