"""
Download and installation of release archives.

A version directory is created with ``gvm.lock`` inside before any archive
data is written, and the marker is only removed once extraction completed.
Any failure in between leaves the marker behind, so the next activation
refuses the directory and the next install replaces it.
"""

from __future__ import annotations

import http.client
import logging
import shutil
import sys
import tarfile
import time
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, TextIO

from .activation import ActivationResult, activate
from .config import Config
from .environment import Platform, detect_platform
from .errors import ArchiveError, InvalidVersionError, NetworkError
from .net import http_status, open_stream
from .store import VersionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadResult:
    """
    Result of downloading a version.

    Attributes:
        version: Version that was requested
        url: Archive URL (empty when nothing was fetched)
        fetched: False if the version was already present
        path: Version directory
        duration_seconds: Time spent downloading and extracting
    """
    version: str
    url: str
    fetched: bool
    path: str
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "url": self.url,
            "fetched": self.fetched,
            "path": self.path,
            "duration_seconds": self.duration_seconds,
        }


class ProgressReader:
    """File-like wrapper that reports download progress on a terminal."""

    def __init__(
        self,
        stream: BinaryIO,
        total: int | None = None,
        enabled: bool = True,
        out: TextIO | None = None,
    ):
        self._stream = stream
        self.total = total
        self.enabled = enabled
        self.out = out or sys.stderr
        self.bytes_read = 0
        self._last_report = ""

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        self.bytes_read += len(chunk)
        if self.enabled:
            self._report()
        return chunk

    def _report(self) -> None:
        if self.total:
            pct = min(100, int(self.bytes_read * 100 / self.total))
            text = f"{pct:3d}%"
        else:
            text = f"{self.bytes_read // (1024 * 1024)} MiB"
        if text != self._last_report:
            self._last_report = text
            self.out.write(f"\r  {text}")
            self.out.flush()

    @property
    def short(self) -> bool:
        """True if fewer bytes arrived than the server announced."""
        return bool(self.total) and self.bytes_read < self.total

    def finish(self) -> None:
        if self.enabled and self._last_report:
            self.out.write("\n")
            self.out.flush()


def archive_url(config: Config, version: str, target: Platform) -> str:
    """Download URL of a version's archive for a platform."""
    return f"{config.download_url.rstrip('/')}/{target.archive_name(version)}"


def extract_archive(stream: BinaryIO, dest: Path, strip_components: int = 1) -> int:
    """
    Stream-extract a ``.tar.gz`` into ``dest``.

    Args:
        stream: Readable gzip-compressed tar stream
        dest: Destination directory (must exist)
        strip_components: Leading path components to drop from each entry

    Returns:
        Number of extracted entries

    Raises:
        ArchiveError: If the archive is truncated, corrupt or unsafe
        NetworkError: If the connection drops mid-transfer
    """
    count = 0
    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as tar:
            for member in tar:
                parts = [part for part in member.name.split("/") if part not in ("", ".")]
                parts = parts[strip_components:]
                if not parts:
                    continue
                member.name = "/".join(parts)
                if member.islnk():
                    link_parts = member.linkname.split("/")[strip_components:]
                    member.linkname = "/".join(link_parts)
                tar.extract(member, path=dest, filter="data")
                count += 1
        # tar padding after the end-of-archive marker
        while stream.read(64 * 1024):
            pass
    except (http.client.HTTPException, TimeoutError, ConnectionError) as e:
        raise NetworkError(f"Download interrupted: {e}") from e
    except (tarfile.TarError, EOFError, zlib.error) as e:
        raise ArchiveError(f"Could not extract archive: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Could not write archive contents to {dest}: {e}") from e
    return count


def download(
    config: Config,
    version: str,
    store: VersionStore | None = None,
    target: Platform | None = None,
) -> DownloadResult:
    """
    Download and extract a version unless it is already present.

    An existing complete version directory makes this a no-op. A directory
    still carrying the lock marker is deleted and downloaded again.

    Raises:
        InvalidVersionError: If no archive exists for the version/platform
        NetworkError: If the transfer fails
        ArchiveError: If the archive cannot be extracted
    """
    store = store or VersionStore(config)
    version_dir = store.version_dir(version)

    if store.is_installed(version):
        if not store.is_locked(version):
            logger.info(f"Go {version} is already downloaded")
            return DownloadResult(version=version, url="", fetched=False, path=str(version_dir))
        logger.warning(f"Removing incomplete installation of Go {version}")
        shutil.rmtree(version_dir)

    target = target or detect_platform(config.os, config.arch)
    url = archive_url(config, version, target)

    try:
        status = http_status(url, timeout=config.timeout_seconds)
    except NetworkError as e:
        raise InvalidVersionError(
            f"Could not reach the archive for Go {version}: {e.message}",
            remediation="Check your network connection",
        ) from e
    if status >= 400:
        raise InvalidVersionError(
            f"Go {version} is not available for {target.os}-{target.arch} (HTTP {status})",
            remediation="Run 'gvm list-all' to see the available versions",
        )

    start_time = time.time()
    version_dir.mkdir(parents=True)
    lock = store.lock_path(version)
    lock.touch()

    logger.info(f"Downloading Go {version} ({target.os}-{target.arch})")
    with open_stream(url, timeout=config.timeout_seconds) as response:
        reader = ProgressReader(
            response,
            total=getattr(response, "length", None),
            enabled=not config.quiet and sys.stderr.isatty(),
        )
        count = extract_archive(reader, version_dir)
        reader.finish()

    if reader.short:
        raise NetworkError(
            f"Download of Go {version} ended after {reader.bytes_read} of {reader.total} bytes",
            remediation=f"Run 'gvm install {version}' again",
        )

    lock.unlink()
    duration = time.time() - start_time
    logger.debug(f"Extracted {count} entries into {version_dir} in {duration:.1f}s")

    return DownloadResult(
        version=version,
        url=url,
        fetched=True,
        path=str(version_dir),
        duration_seconds=duration,
    )


def install(config: Config, version: str, store: VersionStore | None = None) -> ActivationResult:
    """Download a version if needed, then activate it."""
    store = store or VersionStore(config)
    download(config, version, store=store)
    result = activate(config, version, store=store)
    logger.info(f"Go {version} is now active")
    return result
