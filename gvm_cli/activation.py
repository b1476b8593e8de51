"""
Version activation through symlinks.

Activating a version links every top-level entry of its version directory
into ``$GOROOT`` and every executable in its ``bin/`` into ``$GOPATH/bin``.
Each link is swapped in a single ``os.replace``; the links are updated one
after another, so an interrupted activation can leave a mix of old and new
links until the next successful activation.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .errors import CorruptInstallError, NotInstalledError
from .store import LOCK_FILENAME, VersionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationResult:
    """
    Result of activating a version.

    Attributes:
        version: Version that is now active
        linked: Link paths that were created or refreshed
        removed: Stale links from the previous version that were deleted
    """
    version: str
    linked: tuple[str, ...]
    removed: tuple[str, ...]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "linked": list(self.linked),
            "removed": list(self.removed),
        }


def replace_with_symlink(link: Path, target: Path) -> None:
    """
    Point ``link`` at ``target`` in one rename.

    Existing symlinks and files are replaced atomically. A real directory
    (e.g. a Go install that predates gvm) is deleted first.
    """
    if link.is_dir() and not link.is_symlink():
        logger.warning(f"Replacing non-symlink directory: {link}")
        shutil.rmtree(link)

    tmp = link.with_name(f".{link.name}.gvm-tmp")
    if tmp.is_symlink() or tmp.exists():
        tmp.unlink()
    tmp.symlink_to(target)
    os.replace(tmp, link)


def _points_into(link: Path, root: Path) -> bool:
    """True if ``link`` is a symlink whose target lies under ``root``."""
    if not link.is_symlink():
        return False
    target = os.path.join(link.parent, os.readlink(link))
    target = os.path.normpath(os.path.abspath(target))
    root_str = os.path.normpath(os.path.abspath(root))
    return target == root_str or target.startswith(root_str + os.sep)


def _remove_stale_links(directory: Path, keep: set[str], versions_dir: Path) -> list[str]:
    removed = []
    if not directory.is_dir():
        return removed
    for entry in directory.iterdir():
        if entry.name in keep or entry.name == versions_dir.name:
            continue
        if _points_into(entry, versions_dir):
            entry.unlink()
            removed.append(str(entry))
            logger.debug(f"Removed stale link: {entry}")
    return removed


def _executables(bin_dir: Path) -> list[Path]:
    if not bin_dir.is_dir():
        return []
    return sorted(
        entry for entry in bin_dir.iterdir()
        if entry.is_file() and os.access(entry, os.X_OK)
    )


def activate(config: Config, version: str, store: VersionStore | None = None) -> ActivationResult:
    """
    Make an installed version the active one.

    Args:
        config: Runtime configuration
        version: Version to activate
        store: Version store (built from config if None)

    Returns:
        ActivationResult describing the links that changed

    Raises:
        NotInstalledError: If the version directory does not exist
        CorruptInstallError: If the install lock marker is present
    """
    store = store or VersionStore(config)
    version_dir = store.version_dir(version)

    if not version_dir.is_dir():
        raise NotInstalledError(
            f"Go {version} is not installed",
            remediation=f"Run 'gvm install {version}'",
        )
    if store.is_locked(version):
        raise CorruptInstallError(
            f"The installation of Go {version} is incomplete or corrupt",
            remediation=f"Run 'gvm install {version}' to download it again",
        )

    goroot = config.goroot_dir
    goroot.mkdir(parents=True, exist_ok=True)
    config.bin_dir.mkdir(parents=True, exist_ok=True)

    linked: list[str] = []
    entries = sorted(entry.name for entry in version_dir.iterdir() if entry.name != LOCK_FILENAME)
    for name in entries:
        link = goroot / name
        replace_with_symlink(link, version_dir / name)
        linked.append(str(link))

    executables = _executables(version_dir / "bin")
    for executable in executables:
        link = config.bin_dir / executable.name
        replace_with_symlink(link, executable)
        linked.append(str(link))

    removed = _remove_stale_links(goroot, set(entries), config.versions_dir)
    removed += _remove_stale_links(
        config.bin_dir, {e.name for e in executables}, config.versions_dir
    )

    logger.debug(f"Linked {len(linked)} entries for {version}")
    return ActivationResult(version=version, linked=tuple(linked), removed=tuple(removed))
