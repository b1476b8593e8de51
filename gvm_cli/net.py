"""
HTTP helpers shared by the catalog, the installer and self-upgrade.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from typing import BinaryIO

from . import __version__
from .errors import NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = f"gvm/{__version__}"


def _request(url: str, method: str = "GET") -> urllib.request.Request:
    return urllib.request.Request(url, headers={"User-Agent": USER_AGENT}, method=method)


def http_get(url: str, timeout: int = 30) -> bytes:
    """
    Perform HTTP GET request.

    Args:
        url: URL to fetch
        timeout: Timeout in seconds

    Returns:
        Response body as bytes

    Raises:
        NetworkError: If request fails
    """
    logger.debug(f"GET {url}")
    try:
        with urllib.request.urlopen(_request(url), timeout=timeout) as response:
            return response.read()
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e


def http_status(url: str, timeout: int = 30) -> int:
    """
    Return the HTTP status of a HEAD request, following redirects.

    Raises:
        NetworkError: If the host cannot be reached at all
    """
    logger.debug(f"HEAD {url}")
    try:
        with urllib.request.urlopen(_request(url, method="HEAD"), timeout=timeout) as response:
            return response.status
    except urllib.error.HTTPError as e:
        return e.code
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise NetworkError(f"Failed to reach {url}: {e}") from e


def open_stream(url: str, timeout: int = 30) -> BinaryIO:
    """
    Open a streaming GET response. The caller closes it.

    Raises:
        NetworkError: If the request fails
    """
    logger.debug(f"GET (stream) {url}")
    try:
        return urllib.request.urlopen(_request(url), timeout=timeout)
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise NetworkError(f"Failed to download {url}: {e}") from e
