"""
gvm - Go version manager.

Usage:
    gvm                          # Pick an installed version interactively
    gvm install <version|latest> # Download (if needed) and activate
    gvm download <version|latest>
    gvm set <version|latest>
    gvm run <version> [args...]
    gvm which <version>
    gvm remove <version...>
    gvm prune
    gvm list
    gvm list-all
    gvm self-upgrade

Environment:
    GOPATH  Its bin/ directory receives the go executables; must be on PATH
    GOROOT  Shared toolchain root; versions live in $GOROOT/.versions
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from typing import Callable, Sequence

from . import __version__
from .activation import activate
from .catalog import RemoteCatalog
from .common import require_confirmation
from .config import Config, load_config, validate_environment
from .errors import CorruptInstallError, GvmError, NotInstalledError
from .installer import download, install
from .logging_config import setup_logging
from .render import RESET, format_installed_list, format_remote_list
from .selector import run_selector
from .store import VersionStore
from .upgrade import self_upgrade
from .versions import normalize_version

logger = logging.getLogger(__name__)

RED = "\033[31m"


def _stdout_color(config: Config) -> bool:
    return config.color and sys.stdout.isatty()


def cmd_select(args: argparse.Namespace, config: Config) -> int:
    """Open the interactive selector."""
    return run_selector(config)


def cmd_install(args: argparse.Namespace, config: Config) -> int:
    """Download a version if needed and make it active."""
    version = RemoteCatalog(config).resolve_version_argument(args.version)
    install(config, version)
    return 0


def cmd_download(args: argparse.Namespace, config: Config) -> int:
    """Download a version without activating it."""
    version = RemoteCatalog(config).resolve_version_argument(args.version)
    result = download(config, version)
    if result.fetched:
        logger.info(f"Downloaded Go {version} to {result.path}")
    return 0


def cmd_set(args: argparse.Namespace, config: Config) -> int:
    """Activate an installed version."""
    version = RemoteCatalog(config).resolve_version_argument(args.version)
    activate(config, version)
    logger.info(f"Go {version} is now active")
    return 0


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Run a specific version's go binary, offering to install it first."""
    store = VersionStore(config)
    version = RemoteCatalog(config).resolve_version_argument(args.version)

    if not store.is_installed(version):
        require_confirmation(
            config,
            f"Go {version} is not installed. Download it now? [y/N]: ",
            f"Go {version} is not installed",
            remediation=f"Run 'gvm download {version}' first",
        )
        download(config, version, store=store)
    elif store.is_locked(version):
        raise CorruptInstallError(
            f"The installation of Go {version} is incomplete or corrupt",
            remediation=f"Run 'gvm download {version}' to download it again",
        )

    binary = store.binary_path(version)
    env = {**os.environ, "GOROOT": str(store.version_dir(version))}
    logger.debug(f"Running {binary} {' '.join(args.args)}")
    try:
        result = subprocess.run([str(binary), *args.args], env=env, check=False)
    except OSError as e:
        raise GvmError(f"Could not run {binary}: {e}") from e
    return result.returncode


def cmd_which(args: argparse.Namespace, config: Config) -> int:
    """Print the path of a version's go binary."""
    store = VersionStore(config)
    version = normalize_version(args.version)
    if not store.is_installed(version):
        raise NotInstalledError(f"Go {version} is not installed")
    print(store.binary_path(version))
    return 0


def cmd_remove(args: argparse.Namespace, config: Config) -> int:
    """Delete installed versions (never the active one)."""
    VersionStore(config).remove([normalize_version(v) for v in args.versions])
    return 0


def cmd_prune(args: argparse.Namespace, config: Config) -> int:
    """Delete every installed version except the active one."""
    VersionStore(config).prune()
    return 0


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    """Print installed versions, marking the active one."""
    store = VersionStore(config)
    versions = store.list_installed()
    if not versions:
        logger.info("No Go versions installed")
        return 0
    for line in format_installed_list(versions, store.current_version(), _stdout_color(config)):
        print(line)
    return 0


def cmd_list_all(args: argparse.Namespace, config: Config) -> int:
    """Print the versions available upstream."""
    store = VersionStore(config)
    remote = RemoteCatalog(config).list_remote_versions()
    if not remote:
        logger.info("No remote versions found")
        return 0
    lines = format_remote_list(remote, store.list_installed(), store.current_version(), _stdout_color(config))
    for line in lines:
        print(line)
    return 0


def cmd_self_upgrade(args: argparse.Namespace, config: Config) -> int:
    """Re-run the gvm install script."""
    return self_upgrade(config)


COMMANDS: dict[str, Callable[[argparse.Namespace, Config], int]] = {
    "install": cmd_install,
    "download": cmd_download,
    "set": cmd_set,
    "run": cmd_run,
    "which": cmd_which,
    "remove": cmd_remove,
    "rm": cmd_remove,
    "prune": cmd_prune,
    "list": cmd_list,
    "ls": cmd_list,
    "list-all": cmd_list_all,
    "ls-remote": cmd_list_all,
    "self-upgrade": cmd_self_upgrade,
}


def _global_options() -> argparse.ArgumentParser:
    """Flags accepted both before and after the command name."""
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument("-q", "--quiet", action="store_true", default=argparse.SUPPRESS,
                         help="Only print warnings and errors")
    options.add_argument("-c", "--no-color", action="store_true", default=argparse.SUPPRESS,
                         help="Disable colored output")
    options.add_argument("-y", "--non-interactive", action="store_true", default=argparse.SUPPRESS,
                         help="Never prompt; fail instead")
    options.add_argument("-o", "--os", default=argparse.SUPPRESS,
                         help="Override the operating system (linux, darwin, freebsd)")
    options.add_argument("-a", "--arch", default=argparse.SUPPRESS,
                         help="Override the architecture (amd64, arm64, 386, ...)")
    options.add_argument("-u", "--unstable", action="store_true", default=argparse.SUPPRESS,
                         help="Include beta and release-candidate versions")
    options.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
                         help="Verbose output")
    options.add_argument("--config", default=argparse.SUPPRESS,
                         help="Path to a config file")
    return options


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    options = _global_options()
    parser = argparse.ArgumentParser(
        prog="gvm",
        description="Go version manager",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[options],
    )
    parser.add_argument("--version", action="version", version=f"gvm {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    def add(name: str, help_text: str, aliases: Sequence[str] = ()) -> argparse.ArgumentParser:
        return subparsers.add_parser(name, help=help_text, aliases=list(aliases), parents=[options])

    for name in ("install", "download", "set"):
        p = add(name, f"{name} a version ('latest' for the newest release)")
        p.add_argument("version", help="Version number or 'latest'")

    p = add("run", "Run a version's go binary with arguments")
    p.add_argument("version", help="Version number or 'latest'")
    p.add_argument("args", nargs=argparse.REMAINDER, help="Arguments passed to go")

    p = add("which", "Print the path of a version's go binary")
    p.add_argument("version")

    p = add("remove", "Remove installed versions", aliases=("rm",))
    p.add_argument("versions", nargs="+", metavar="version")

    add("prune", "Remove all versions except the active one")
    add("list", "List installed versions", aliases=("ls",))
    add("list-all", "List versions available for download", aliases=("ls-remote",))
    add("self-upgrade", "Upgrade gvm by re-running its install script")
    add("help", "Show this help")

    return parser


def _config_overrides(args: argparse.Namespace) -> dict:
    """Command-line values for load_config(); unset flags stay None."""
    return {
        "quiet": True if getattr(args, "quiet", False) else None,
        "verbose": True if getattr(args, "verbose", False) else None,
        "color": False if getattr(args, "no_color", False) else None,
        "non_interactive": True if getattr(args, "non_interactive", False) else None,
        "unstable": True if getattr(args, "unstable", False) else None,
        "os": getattr(args, "os", None),
        "arch": getattr(args, "arch", None),
    }


def print_error(error: GvmError, color: bool = True) -> None:
    """Print a formatted error line (and remediation hint) to stderr."""
    use_color = color and sys.stderr.isatty()
    prefix = f"{RED}✗{RESET}" if use_color else "✗"
    print(f"{prefix} {error.message}", file=sys.stderr)
    if error.remediation:
        print(f"  hint: {error.remediation}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for gvm."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "help":
        parser.print_help()
        return 0

    color = not getattr(args, "no_color", False)
    try:
        config = load_config(getattr(args, "config", None), overrides=_config_overrides(args))
        color = config.color
        setup_logging(
            log_file=config.log_file,
            verbose=config.verbose,
            quiet=config.quiet,
            color=config.color,
        )
        validate_environment(config)

        handler = COMMANDS.get(args.command, cmd_select)
        return handler(args, config)
    except GvmError as e:
        print_error(e, color)
        return 1
    except OSError as e:
        print_error(GvmError(str(e)), color)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
