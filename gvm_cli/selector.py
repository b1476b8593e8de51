"""
Interactive version selector.

A two-state machine (browsing -> terminated) over the highlighted version,
driven by single keystrokes from the terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Sequence, TextIO

from .activation import activate
from .config import Config
from .errors import NotInstalledError, UserAbort
from .render import format_selector
from .store import VersionStore, neighbor
from .terminal import CLEAR_SCREEN, TTY_PATH, TerminalSession, read_key

logger = logging.getLogger(__name__)

BROWSING = "browsing"
TERMINATED = "terminated"

# handle_key() actions
REDRAW = "redraw"
NOOP = "noop"
QUIT = "quit"
SELECT = "select"


class Selector:
    """
    Selection state for the interactive picker.

    Attributes:
        versions: Installed versions in ascending order
        active: Currently active version, if any
        highlighted: Version under the cursor
        state: BROWSING or TERMINATED
    """

    def __init__(self, versions: Sequence[str], active: str | None = None):
        if not versions:
            raise ValueError("Selector needs at least one version")
        self.versions = list(versions)
        self.active = active
        self.highlighted = active if active in self.versions else self.versions[0]
        self.state = BROWSING

    def handle_key(self, key: str) -> str:
        """Apply one keystroke and return the resulting action."""
        if self.state == TERMINATED:
            return NOOP
        if key in ("up", "k"):
            self.highlighted = neighbor(self.versions, self.highlighted, "prev")
            return REDRAW
        if key in ("down", "j"):
            self.highlighted = neighbor(self.versions, self.highlighted, "next")
            return REDRAW
        if key == "q":
            self.state = TERMINATED
            return QUIT
        if key == "enter":
            self.state = TERMINATED
            return SELECT
        return NOOP


def run_selector(
    config: Config,
    store: VersionStore | None = None,
    tty_path: str = TTY_PATH,
    out: TextIO | None = None,
    read: Callable[[str], str] = read_key,
) -> int:
    """
    Let the user browse installed versions and activate one.

    Returns:
        Exit code (0 on quit or successful selection)

    Raises:
        NotInstalledError: If no versions are installed
        UserAbort: If running non-interactively
    """
    store = store or VersionStore(config)
    out = out or sys.stdout

    versions = store.list_installed()
    if not versions:
        raise NotInstalledError(
            "No Go versions installed",
            remediation="Run 'gvm install latest'",
        )
    if config.non_interactive or not sys.stdin.isatty():
        raise UserAbort(
            "The version selector needs an interactive terminal",
            remediation="Use 'gvm set <version>' instead",
        )

    selector = Selector(versions, store.current_version())

    def draw() -> None:
        lines = format_selector(selector.versions, selector.highlighted, selector.active, config.color)
        out.write(CLEAR_SCREEN + "\r\n".join(lines))
        out.flush()

    with TerminalSession(tty_path, out=out, on_resume=draw):
        draw()
        while True:
            action = selector.handle_key(read(tty_path))
            if action == REDRAW:
                draw()
            elif action == QUIT:
                return 0
            elif action == SELECT:
                activate(config, selector.highlighted, store=store)
                break

    logger.debug(f"Selected {selector.highlighted}")
    print(store.go_version_string(selector.highlighted) or f"go{selector.highlighted}", file=out)
    return 0
