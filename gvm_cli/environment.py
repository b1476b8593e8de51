"""
Platform detection for selecting the right release archive.

Maps the host operating system and CPU architecture onto the names used in
upstream Go archive filenames (e.g. ``go1.21.3.linux-amd64.tar.gz``).
"""

from __future__ import annotations

import logging
import platform
import re
from dataclasses import dataclass

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_OS = ("linux", "darwin", "freebsd")

# platform.machine() value (regex) -> archive architecture
ARCH_TABLE = (
    (r"^(x86_64|amd64)$", "amd64"),
    (r"^(i[3-6]86|x86)$", "386"),
    (r"^(aarch64|arm64|armv8.*)$", "arm64"),
    (r"^(armv6l|armv7l|arm.*)$", "armv6l"),
    (r"^ppc64le$", "ppc64le"),
    (r"^s390x$", "s390x"),
)


@dataclass(frozen=True)
class Platform:
    """
    Target platform for downloads.

    Attributes:
        os: Archive OS name ('linux', 'darwin', 'freebsd')
        arch: Archive architecture name ('amd64', 'arm64', ...)
        override: Whether either value came from an explicit override
    """
    os: str
    arch: str
    override: bool = False

    def __str__(self) -> str:
        override_str = " (override)" if self.override else ""
        return f"{self.os}-{self.arch}{override_str}"

    def archive_name(self, version: str) -> str:
        """Upstream archive filename for a version on this platform."""
        return f"go{version}.{self.os}-{self.arch}.tar.gz"


def map_arch(machine: str) -> str | None:
    """
    Translate a ``platform.machine()`` value into an archive architecture.

    Returns:
        Architecture name, or None if the machine type is unsupported
    """
    machine = machine.strip().lower()
    for pattern, arch in ARCH_TABLE:
        if re.match(pattern, machine):
            return arch
    return None


def detect_platform(os_override: str | None = None, arch_override: str | None = None) -> Platform:
    """
    Detect the platform, honouring explicit overrides.

    Args:
        os_override: Archive OS name to use instead of the detected one
        arch_override: Archive architecture to use instead of the detected one

    Returns:
        Platform for archive URL construction

    Raises:
        ConfigurationError: If the host is unsupported and not overridden
    """
    if os_override:
        os_name = os_override.strip().lower()
        logger.debug(f"OS explicitly set to: {os_name}")
    else:
        os_name = platform.system().lower()
        if os_name not in SUPPORTED_OS:
            raise ConfigurationError(
                f"Unsupported operating system: {os_name}",
                remediation=f"Pass --os with one of: {', '.join(SUPPORTED_OS)}",
            )

    if arch_override:
        arch = arch_override.strip().lower()
        logger.debug(f"Architecture explicitly set to: {arch}")
    else:
        machine = platform.machine()
        detected = map_arch(machine)
        if detected is None:
            raise ConfigurationError(
                f"Unsupported architecture: {machine}",
                remediation="Pass --arch with the archive architecture (e.g. amd64, arm64)",
            )
        arch = detected

    result = Platform(os=os_name, arch=arch, override=bool(os_override or arch_override))
    logger.debug(f"Target platform: {result}")
    return result
