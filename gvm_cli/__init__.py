"""
gvm - Go version manager.

Core Modules:
- Catalog: Remote release listing and version resolution
- Store: Installed versions, active-version detection, removal
- Activation: Symlink switching of the shared toolchain root
- Installer: Archive download and extraction guarded by a lock marker
- Selector: Interactive terminal picker on top of raw keyboard input
"""

__version__ = "1.0.0"

# Version info for backward compatibility
VERSION = __version__

from .errors import (
    GvmError,
    NetworkError,
    InvalidVersionError,
    NotFoundError,
    NotInstalledError,
    CorruptInstallError,
    ActiveVersionError,
    ArchiveError,
    ConfigurationError,
    UserAbort,
)
from .config import Config, load_config, validate_environment
from .environment import Platform, detect_platform
from .versions import compare_versions, sort_versions, normalize_version
from .catalog import RemoteCatalog, parse_versions
from .store import VersionStore, neighbor, LOCK_FILENAME
from .activation import ActivationResult, activate
from .installer import DownloadResult, download, install
from .selector import Selector, run_selector
from .upgrade import self_upgrade
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    "VERSION",
    # Errors
    "GvmError",
    "NetworkError",
    "InvalidVersionError",
    "NotFoundError",
    "NotInstalledError",
    "CorruptInstallError",
    "ActiveVersionError",
    "ArchiveError",
    "ConfigurationError",
    "UserAbort",
    # Configuration
    "Config",
    "load_config",
    "validate_environment",
    "Platform",
    "detect_platform",
    # Versions
    "compare_versions",
    "sort_versions",
    "normalize_version",
    "RemoteCatalog",
    "parse_versions",
    "VersionStore",
    "neighbor",
    "LOCK_FILENAME",
    # Operations
    "ActivationResult",
    "activate",
    "DownloadResult",
    "download",
    "install",
    "Selector",
    "run_selector",
    "self_upgrade",
    # Logging
    "setup_logging",
    "get_logger",
]
