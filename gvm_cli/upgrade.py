"""
Self-upgrade of the gvm tool itself.

This is the one operation that executes code fetched from the network: the
install script at ``install_script_url`` is downloaded and piped to the
user's shell. It is kept apart from Go version installation and always
needs consent, either interactively or through ``trust_install_script``.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys

from .common import require_confirmation
from .config import Config
from .errors import GvmError
from .net import http_get

logger = logging.getLogger(__name__)


def installed_executable() -> str:
    """Path of the gvm executable being upgraded."""
    return shutil.which("gvm") or os.path.abspath(sys.argv[0])


def self_upgrade(config: Config) -> int:
    """
    Re-run the install script against the current installation.

    Returns:
        Exit code of the install script (0 on success)

    Raises:
        UserAbort: If consent was not given
        NetworkError: If the script cannot be downloaded
        GvmError: If the script exits non-zero
    """
    url = config.install_script_url
    shell = os.environ.get("SHELL") or "sh"
    logger.warning(f"self-upgrade will download {url} and run it with {shell}")

    if not config.trust_install_script:
        require_confirmation(
            config,
            "Run the remote install script? [y/N]: ",
            "Self-upgrade cancelled",
            remediation="Set 'trust_install_script: true' in ~/.config/gvm/config.yml to skip this prompt",
        )

    script = http_get(url, timeout=config.timeout_seconds)
    target = installed_executable()
    logger.info(f"Upgrading {target}")

    env = {**os.environ, "GVM_INSTALL_PATH": target}
    result = subprocess.run(
        [shell, "-s", "--", "-y"],
        input=script,
        env=env,
        check=False,
    )
    if result.returncode != 0:
        raise GvmError(f"Install script failed with exit code {result.returncode}")

    logger.info("gvm upgraded")
    return 0
