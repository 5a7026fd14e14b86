"""Latest-release resolution.

A ReleaseQuery names where a piece of software is published and which file
we want. The resolver probes the network, asks the provider for its newest
release listing, and returns the first asset whose name matches. When that
does not work it hands over to the fallback negotiator instead of failing.

Providers come in two kinds sharing the same probe/retry skeleton:
- github_releases: structured JSON from the GitHub releases API.
- html_listing: a download page scanned as raw text.

When several assets match, the first one in the provider's own listing order
wins. Providers do not promise a stable order, so this is not necessarily the
newest build.
"""

from __future__ import annotations

import enum
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Union
from urllib.parse import urljoin

import requests

from .errors import FetchEmpty, FetchMalformed, NetworkUnreachable, NoMatchingAsset, ResolutionError
from .net import DEFAULT_PROBE_HOST, DEFAULT_PROBE_TIMEOUT, is_network_reachable

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_FETCH_TIMEOUT = 10.0
GITHUB_API = "https://api.github.com"
USER_AGENT = "raspi-writer-installer"


class ProviderKind(str, enum.Enum):
    GITHUB_RELEASES = "github_releases"
    HTML_LISTING = "html_listing"


@dataclass(frozen=True)
class ReleaseQuery:
    source: str
    pattern: str
    fallback_url: str = ""
    kind: ProviderKind = ProviderKind.GITHUB_RELEASES

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ReleaseQuery":
        source = str(raw.get("source") or "").strip()
        pattern = str(raw.get("pattern") or "").strip()
        if not source or not pattern:
            raise ValueError("release entries need both 'source' and 'pattern'")
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"invalid release pattern {pattern!r}: {e}") from e
        kind = ProviderKind(str(raw.get("kind") or ProviderKind.GITHUB_RELEASES.value))
        return cls(
            source=source,
            pattern=pattern,
            fallback_url=str(raw.get("fallback_url") or "").strip(),
            kind=kind,
        )


@dataclass(frozen=True)
class Resolved:
    url: str


@dataclass(frozen=True)
class UserProvided:
    url: str


@dataclass(frozen=True)
class Skipped:
    reason: str = ""


ResolutionResult = Union[Resolved, UserProvided, Skipped]


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    url: str


class AssetExtractor(Protocol):
    """Fetch a provider listing and pick the matching asset URL.

    Raises a ResolutionError subclass (or requests.RequestException) on failure.
    """

    def find_asset(self, query: ReleaseQuery, session: requests.Session, timeout: tuple[float, float]) -> str:
        ...


class GitHubReleasesExtractor:
    def __init__(self, *, api_base: str = GITHUB_API, token: Optional[str] = None) -> None:
        self.api_base = api_base.rstrip("/")
        self.token = token if token is not None else os.environ.get("GITHUB_TOKEN")

    def latest_release_url(self, source: str) -> str:
        return f"{self.api_base}/repos/{source.strip('/')}/releases/latest"

    def list_assets(self, query: ReleaseQuery, session: requests.Session, timeout: tuple[float, float]) -> List[ReleaseAsset]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = self.latest_release_url(query.source)
        logger.info("Fetching release info from API: %s", url)
        resp = session.get(url, headers=headers, timeout=timeout)
        resp.raise_for_status()

        if not (resp.text or "").strip():
            raise FetchEmpty(f"empty response from {url}")
        try:
            data = resp.json()
        except ValueError as e:
            raise FetchMalformed(f"response from {url} is not JSON") from e
        if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
            raise FetchMalformed(f"response from {url} has no asset list")

        assets: list[ReleaseAsset] = []
        for item in data["assets"]:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name") or "").strip()
            dl = str(item.get("browser_download_url") or "").strip()
            if name and dl:
                assets.append(ReleaseAsset(name=name, url=dl))
        if not assets:
            raise FetchEmpty(f"latest release of {query.source} has no assets")
        return assets

    def find_asset(self, query: ReleaseQuery, session: requests.Session, timeout: tuple[float, float]) -> str:
        rx = re.compile(query.pattern)
        assets = self.list_assets(query, session, timeout)
        for asset in assets:
            if rx.fullmatch(asset.name):
                logger.info("Found asset via API: %s", asset.name)
                return asset.url
        raise NoMatchingAsset(
            f"no asset of {query.source} matches {query.pattern!r} (saw {', '.join(a.name for a in assets)})"
        )


class HtmlListingExtractor:
    """Scan a download page for the first link matching the pattern."""

    def find_asset(self, query: ReleaseQuery, session: requests.Session, timeout: tuple[float, float]) -> str:
        logger.info("Fetching download page: %s", query.source)
        resp = session.get(query.source, timeout=timeout)
        resp.raise_for_status()

        text = resp.text or ""
        if not text.strip():
            raise FetchEmpty(f"empty page at {query.source}")

        m = re.search(query.pattern, text)
        if not m:
            raise NoMatchingAsset(f"no link on {query.source} matches {query.pattern!r}")
        found = m.group(0).strip("\"'")
        url = urljoin(query.source, found)
        logger.info("Found asset on page: %s", url)
        return url


def default_extractors() -> Dict[ProviderKind, AssetExtractor]:
    return {
        ProviderKind.GITHUB_RELEASES: GitHubReleasesExtractor(),
        ProviderKind.HTML_LISTING: HtmlListingExtractor(),
    }


def new_session() -> requests.Session:
    s = requests.Session()
    s.headers["User-Agent"] = USER_AGENT
    return s


# (software_name, source_description, fallback_url, reason) -> result
Negotiate = Callable[[str, str, str, str], ResolutionResult]


class ReleaseResolver:
    """Turn a ReleaseQuery into a ResolutionResult.

    Worst case with defaults is one 2s probe plus three 10s fetches separated
    by two 5s pauses before the operator is asked what to do.
    """

    def __init__(
        self,
        negotiate: Negotiate,
        *,
        session: Optional[requests.Session] = None,
        extractors: Optional[Dict[ProviderKind, AssetExtractor]] = None,
        probe: Callable[[str, int], bool] = is_network_reachable,
        sleep: Callable[[float], None] = time.sleep,
        probe_host: str = DEFAULT_PROBE_HOST,
        probe_timeout: int = DEFAULT_PROBE_TIMEOUT,
        attempts: int = DEFAULT_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        read_timeout: Optional[float] = None,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self.negotiate = negotiate
        self.session = session or new_session()
        self.extractors = extractors or default_extractors()
        self.probe = probe
        self.sleep = sleep
        self.probe_host = probe_host
        self.probe_timeout = probe_timeout
        self.attempts = attempts
        self.retry_delay = retry_delay
        # Connect and read share the per-attempt bound unless told otherwise.
        self.timeout = (fetch_timeout, fetch_timeout if read_timeout is None else read_timeout)

    def require_network(self) -> None:
        if not self.probe(self.probe_host, self.probe_timeout):
            raise NetworkUnreachable("network unreachable")

    def resolve(self, query: ReleaseQuery, software_name: str) -> ResolutionResult:
        try:
            self.require_network()
        except NetworkUnreachable as e:
            # Retrying a dead network only delays the operator.
            logger.warning("Network unreachable; cannot look up %s", software_name)
            return self.negotiate(software_name, query.source, query.fallback_url, str(e))

        extractor = self.extractors.get(query.kind)
        if extractor is None:
            raise ValueError(f"no extractor registered for provider kind {query.kind.value}")

        for attempt in range(1, self.attempts + 1):
            try:
                url = extractor.find_asset(query, self.session, self.timeout)
                logger.info("Resolved %s on attempt %d: %s", software_name, attempt, url)
                return Resolved(url=url)
            except (ResolutionError, requests.RequestException) as e:
                logger.warning(
                    "Attempt %d/%d to resolve %s failed: %s", attempt, self.attempts, software_name, e
                )
            if attempt < self.attempts:
                self.sleep(self.retry_delay)

        return self.negotiate(
            software_name,
            query.source,
            query.fallback_url,
            f"resolution failed after {self.attempts} attempts",
        )
