"""
On-disk store of installed versions.

Layout::

    $GOROOT/.versions/<version>/bin/go     one directory per version
    $GOROOT/.versions/<version>/gvm.lock   present while an install is incomplete

There is no persisted "current version" pointer. The active version is
recomputed on every call by comparing the ``go`` binary found on PATH with
each installed version's own binary. That costs one stat (or one byte
comparison) per installed version and has no side effects.
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from .config import Config
from .errors import ActiveVersionError, NotInstalledError
from .versions import sort_versions

logger = logging.getLogger(__name__)

LOCK_FILENAME = "gvm.lock"
BINARY_NAME = "go"


def neighbor(versions: Sequence[str], selected: str | None, direction: str) -> str:
    """
    Adjacent entry in a sorted version list.

    Clamps at both ends: ``prev`` of the first entry is the first entry,
    ``next`` of the last entry is the last entry. A selection that is not
    in the list maps to the first entry.

    Args:
        versions: Non-empty sorted list
        selected: Currently highlighted version
        direction: 'prev' or 'next'

    Raises:
        ValueError: If direction is invalid or versions is empty
    """
    if not versions:
        raise ValueError("Cannot navigate an empty version list")
    if direction not in ("prev", "next"):
        raise ValueError(f"Invalid direction: {direction}. Must be 'prev' or 'next'")

    if selected not in versions:
        return versions[0]

    index = versions.index(selected)
    if direction == "prev":
        index = max(0, index - 1)
    else:
        index = min(len(versions) - 1, index + 1)
    return versions[index]


class VersionStore:
    """Installed versions under ``$GOROOT/.versions``."""

    def __init__(self, config: Config):
        self.config = config
        self.root = config.versions_dir

    def version_dir(self, version: str) -> Path:
        return self.root / version

    def binary_path(self, version: str) -> Path:
        """Path to a version's main ``go`` binary."""
        return self.version_dir(version) / "bin" / BINARY_NAME

    def lock_path(self, version: str) -> Path:
        return self.version_dir(version) / LOCK_FILENAME

    def is_installed(self, version: str) -> bool:
        return self.version_dir(version).is_dir()

    def is_locked(self, version: str) -> bool:
        """True if the version's install was interrupted."""
        return self.lock_path(version).exists()

    def list_installed(self) -> list[str]:
        """Installed versions in ascending order."""
        if not self.root.is_dir():
            return []
        names = [
            entry.name
            for entry in self.root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        ]
        return sort_versions(names)

    def resolve_go_binary(self) -> str | None:
        """Path of the ``go`` executable the shell would run, if any."""
        return shutil.which(BINARY_NAME, path=os.environ.get("PATH", os.defpath))

    def current_version(self) -> str | None:
        """
        Derive the active version from the binary on PATH.

        Returns:
            Matching version, or None if no ``go`` is resolvable or none match
        """
        current = self.resolve_go_binary()
        if not current:
            logger.debug("No go binary found in PATH")
            return None

        for version in self.list_installed():
            candidate = self.binary_path(version)
            if not candidate.is_file():
                continue
            try:
                if os.path.samefile(current, candidate):
                    return version
                if filecmp.cmp(current, candidate, shallow=False):
                    return version
            except OSError as e:
                logger.debug(f"Could not compare {current} with {candidate}: {e}")
        return None

    def neighbor(self, selected: str | None, direction: str) -> str:
        return neighbor(self.list_installed(), selected, direction)

    def remove(self, versions: Sequence[str]) -> list[str]:
        """
        Delete version directories.

        All targets are checked before anything is deleted, so a refused
        target leaves every directory untouched.

        Raises:
            NotInstalledError: If a version is not installed
            ActiveVersionError: If a version is the active one
        """
        active = self.current_version()
        for version in versions:
            if not self.is_installed(version):
                raise NotInstalledError(f"Go {version} is not installed")
            if version == active:
                raise ActiveVersionError(
                    f"Cannot remove the active version {version}",
                    remediation="Activate another version with 'gvm set <version>' first",
                )

        removed = []
        for version in dict.fromkeys(versions):
            shutil.rmtree(self.version_dir(version))
            logger.info(f"Removed {version}")
            removed.append(version)
        return removed

    def prune(self) -> list[str]:
        """Remove every installed version except the active one."""
        active = self.current_version()
        stale = [version for version in self.list_installed() if version != active]
        if not stale:
            logger.info("Nothing to prune")
            return []
        return self.remove(stale)

    def go_version_string(self, version: str | None = None) -> str:
        """
        First line of ``go version`` for a version (or the binary on PATH).

        Returns:
            Version line, or an empty string if the binary cannot be run
        """
        if version is not None:
            binary = str(self.binary_path(version))
            env = {**os.environ, "GOROOT": str(self.version_dir(version))}
        else:
            binary = self.resolve_go_binary() or BINARY_NAME
            env = None

        try:
            result = subprocess.run(
                [binary, "version"],
                capture_output=True,
                text=True,
                timeout=10,
                check=False,
                env=env,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"Could not run {binary} version: {e}")
            return ""
        lines = result.stdout.strip().splitlines()
        return lines[0] if lines else ""
