"""
Remote version catalog.

Scrapes the published release list from the upstream download page. The
page is fetched at most once per catalog instance and never cached on disk.
"""

from __future__ import annotations

import logging
import re

from .config import Config
from .errors import NotFoundError
from .net import http_get
from .versions import normalize_version, sort_versions

logger = logging.getLogger(__name__)

STABLE_VERSION_RE = re.compile(r"go(\d+(?:\.\d+){1,2})\.src\.tar\.gz")
UNSTABLE_VERSION_RE = re.compile(r"go(\d+(?:\.[0-9a-z]+){1,2})\.src\.tar\.gz")


def parse_versions(document: str, include_unstable: bool = False) -> list[str]:
    """
    Extract version identifiers from an index document.

    Args:
        document: HTML (or any text) listing release archives
        include_unstable: Also accept alphanumeric fields (beta/rc releases)

    Returns:
        Sorted, deduplicated version identifiers
    """
    pattern = UNSTABLE_VERSION_RE if include_unstable else STABLE_VERSION_RE
    return sort_versions(match.group(1) for match in pattern.finditer(document))


class RemoteCatalog:
    """Lazily fetched list of versions published upstream."""

    def __init__(self, config: Config):
        self.config = config
        self._document: str | None = None

    def _fetch(self) -> str:
        if self._document is None:
            logger.debug(f"Fetching release index: {self.config.index_url}")
            raw = http_get(self.config.index_url, timeout=self.config.timeout_seconds)
            self._document = raw.decode("utf-8", "ignore")
        return self._document

    def list_remote_versions(self, include_unstable: bool | None = None) -> list[str]:
        """
        List versions available for download.

        An empty list means no versions were found; it is not an error.

        Raises:
            NetworkError: If the index cannot be fetched
        """
        if include_unstable is None:
            include_unstable = self.config.unstable
        versions = parse_versions(self._fetch(), include_unstable)
        logger.debug(f"Found {len(versions)} remote versions")
        return versions

    def latest_version(self, include_unstable: bool | None = None) -> str:
        """
        Newest available version.

        Raises:
            NotFoundError: If the catalog lists no versions
        """
        versions = self.list_remote_versions(include_unstable)
        if not versions:
            raise NotFoundError(
                "No remote versions found",
                remediation=f"Check that {self.config.index_url} lists Go releases",
            )
        return versions[-1]

    def resolve_version_argument(self, token: str) -> str:
        """
        Map ``latest`` to the newest remote version; pass anything else through.

        Other tokens are not validated here; a bad version surfaces when
        its archive is requested.
        """
        if token == "latest":
            latest = self.latest_version()
            logger.debug(f"Resolved 'latest' to {latest}")
            return latest
        return normalize_version(token)
