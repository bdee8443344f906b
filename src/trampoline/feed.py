"""Remote version feed client.

Lists the published versions of a package from a RubyGems-compatible index
(``GET /api/v1/versions/<name>.json``).
"""

from __future__ import annotations

from typing import Any

import httpx
from packaging.version import InvalidVersion

from trampoline.errors import FetchError
from trampoline.logging import get_logger
from trampoline.versions import Version

log = get_logger("trampoline.feed")

DEFAULT_FEED_URL = "https://rubygems.org"


class VersionFeedClient:
    """Fetches published versions from a remote index."""

    def __init__(
        self,
        base_url: str = DEFAULT_FEED_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def versions(self, package: str) -> list[Version]:
        """Return the published versions of *package*, oldest first.

        Raises ``FetchError`` on transport errors, non-200 responses and
        malformed bodies. Entries whose version does not parse are skipped.
        """
        url = f"{self._base_url}/api/v1/versions/{package}.json"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            log.warning("feed_request_failed", url=url, error=str(exc))
            raise FetchError(f"could not fetch versions of {package}: {exc}") from exc

        if resp.status_code != 200:
            log.warning("feed_bad_status", url=url, status=resp.status_code)
            raise FetchError(f"could not fetch versions of {package}: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise FetchError(f"malformed version feed for {package}") from exc
        if not isinstance(data, list):
            raise FetchError(f"malformed version feed for {package}")

        versions = sorted(set(_parse_entries(data)))
        log.debug("feed_versions_fetched", package=package, count=len(versions))
        return versions


def _parse_entries(entries: list[Any]) -> list[Version]:
    parsed: list[Version] = []
    for entry in entries:
        number = entry.get("number") if isinstance(entry, dict) else None
        if not isinstance(number, str):
            continue
        try:
            parsed.append(Version(number))
        except InvalidVersion:
            log.debug("feed_version_skipped", number=number)
    return parsed
