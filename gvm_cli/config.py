"""
Configuration loading and validation.

Configuration is resolved once per invocation into an immutable ``Config``
and passed explicitly to every component. Sources, highest priority first:

1. Command-line flags
2. ``GVM_*`` environment variables
3. Custom config file (``--config`` / ``GVM_CONFIG``)
4. User config ``~/.config/gvm/config.yml``
5. System config ``/etc/gvm/config.yml``
6. Defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_DOWNLOAD_URL = "https://dl.google.com/go"
DEFAULT_INDEX_URL = "https://go.dev/dl/"
DEFAULT_INSTALL_SCRIPT_URL = "https://bit.ly/gvm-install"

# Configuration file locations (highest priority first)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/gvm/config.yml"),
    os.path.expanduser("~/.config/gvm/config.yaml"),
    "/etc/gvm/config.yml",
    "/etc/gvm/config.yaml",
]

# Environment variable -> config key
ENV_OVERRIDES = {
    "GVM_OS": "os",
    "GVM_ARCH": "arch",
    "GVM_UNSTABLE": "unstable",
    "GVM_QUIET": "quiet",
    "GVM_NON_INTERACTIVE": "non_interactive",
    "GVM_LOG_FILE": "log_file",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """
    Complete runtime configuration for one gvm invocation.

    Attributes:
        gopath: Directory whose ``bin`` subfolder receives executable links
        goroot: Shared toolchain root holding ``.versions`` and the live links
        quiet: Only report warnings and errors
        verbose: Enable debug logging
        color: Allow colored output
        non_interactive: Never prompt; fail instead
        unstable: Include beta/rc releases in remote listings
        os: Archive OS override
        arch: Archive architecture override
        download_url: Base URL for release archives
        index_url: Page listing the published releases
        install_script_url: Install script fetched by self-upgrade
        timeout_seconds: Timeout for network operations
        trust_install_script: Allow self-upgrade without confirmation
        log_file: Optional debug log file
        source: Config files that contributed to this configuration
    """
    gopath: str = ""
    goroot: str = ""
    quiet: bool = False
    verbose: bool = False
    color: bool = True
    non_interactive: bool = False
    unstable: bool = False
    os: str | None = None
    arch: str | None = None
    download_url: str = DEFAULT_DOWNLOAD_URL
    index_url: str = DEFAULT_INDEX_URL
    install_script_url: str = DEFAULT_INSTALL_SCRIPT_URL
    timeout_seconds: int = 30
    trust_install_script: bool = False
    log_file: str | None = None
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if not isinstance(self.timeout_seconds, int) or not 1 <= self.timeout_seconds <= 300:
            raise ConfigurationError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. Must be between 1 and 300"
            )

        for name in ("download_url", "index_url", "install_script_url"):
            value = getattr(self, name)
            if not value.startswith(("https://", "http://")):
                raise ConfigurationError(f"Invalid {name}: {value!r}. Must be an http(s) URL")

    @property
    def bin_dir(self) -> Path:
        """Directory holding the managed executable links."""
        return Path(self.gopath) / "bin"

    @property
    def goroot_dir(self) -> Path:
        return Path(self.goroot)

    @property
    def versions_dir(self) -> Path:
        """Directory holding one subdirectory per installed version."""
        return Path(self.goroot) / ".versions"

    @staticmethod
    def from_dict(data: Mapping[str, Any], source: str = "") -> Config:
        """Create Config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(Config)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        values = {key: value for key, value in data.items() if key in known}
        if source:
            values["source"] = source
        try:
            return Config(**values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _load_yaml(file_path: str) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not load config from {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {file_path} must contain a mapping")
    return data


def load_config_data(custom_path: str | None = None) -> tuple[dict[str, Any], list[str]]:
    """
    Merge all config files into one dictionary.

    Args:
        custom_path: Optional config file that must exist and load

    Returns:
        Tuple of (merged data, paths that were loaded)

    Raises:
        ConfigurationError: If custom_path is given but cannot be loaded
    """
    merged: dict[str, Any] = {}
    loaded: list[str] = []

    # Lowest priority first so later files win key by key
    for location in reversed(CONFIG_LOCATIONS):
        if not os.path.exists(location):
            continue
        try:
            merged.update(_load_yaml(location))
            loaded.append(location)
            logger.debug(f"Loaded config from: {location}")
        except ConfigurationError as e:
            logger.warning(f"Skipping invalid config file: {e.message}")

    if custom_path:
        if not os.path.exists(custom_path):
            raise ConfigurationError(f"Config file not found: {custom_path}")
        merged.update(_load_yaml(custom_path))
        loaded.append(custom_path)
        logger.debug(f"Using custom config: {custom_path}")

    return merged, loaded


def load_config(
    custom_path: str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Load configuration from files, environment and command-line overrides.

    Args:
        custom_path: Optional config file (falls back to ``GVM_CONFIG``)
        overrides: Values from command-line flags; None entries are ignored
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Resolved Config

    Raises:
        ConfigurationError: If any source holds an invalid value
    """
    env = os.environ if environ is None else environ

    data, loaded = load_config_data(custom_path or env.get("GVM_CONFIG") or None)

    data["gopath"] = env.get("GOPATH", "")
    data["goroot"] = env.get("GOROOT", "")

    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if not value:
            continue
        if key in ("unstable", "quiet", "non_interactive"):
            data[key] = _parse_bool(value)
        else:
            data[key] = value

    if env.get("NO_COLOR") or _parse_bool(env.get("GVM_NO_COLOR", "")):
        data["color"] = False

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    return Config.from_dict(data, source=", ".join(loaded))


def validate_environment(config: Config, environ: Mapping[str, str] | None = None) -> None:
    """
    Check the startup preconditions and create the managed directories.

    Raises:
        ConfigurationError: If GOPATH/GOROOT are unset or GOPATH/bin is not on PATH
    """
    env = os.environ if environ is None else environ

    if not config.gopath:
        raise ConfigurationError(
            "GOPATH environment variable is not set",
            remediation="export GOPATH=$HOME/go and add $GOPATH/bin to PATH",
        )
    if not config.goroot:
        raise ConfigurationError(
            "GOROOT environment variable is not set",
            remediation="export GOROOT=$HOME/.go",
        )

    bin_dir = os.path.normpath(os.path.abspath(config.bin_dir))
    path_entries = [
        os.path.normpath(os.path.abspath(entry))
        for entry in env.get("PATH", "").split(os.pathsep)
        if entry
    ]
    if bin_dir not in path_entries:
        raise ConfigurationError(
            f"{bin_dir} is not in PATH",
            remediation=f'export PATH="{bin_dir}:$PATH"',
        )

    config.bin_dir.mkdir(parents=True, exist_ok=True)
    config.versions_dir.mkdir(parents=True, exist_ok=True)
