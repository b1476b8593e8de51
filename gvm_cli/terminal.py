"""
Raw keyboard input and full-screen terminal sessions.

``read_chars`` reads from the controlling terminal one character at a time
and always restores the previous terminal mode. ``TerminalSession`` owns the
alternate screen and the no-echo/character mode for the lifetime of a
``with`` block and keeps that true across Ctrl-C, SIGTERM and job-control
suspend/resume.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import signal
import sys
import termios
from typing import Callable, TextIO

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"

# Seconds to wait for the rest of an escape sequence after Esc
ESCAPE_TIMEOUT = 0.05

ALT_SCREEN_ON = "\x1b[?1049h"
ALT_SCREEN_OFF = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_SCREEN = "\x1b[H\x1b[2J"

# Escape sequence suffixes for the arrow keys (normal and application mode)
ARROW_KEYS = {
    "[A": "up",
    "OA": "up",
    "[B": "down",
    "OB": "down",
}


def _char_mode(attrs: list, echo: bool) -> list:
    """Copy of ``attrs`` with canonical mode off, VMIN=1 and VTIME=0."""
    new = list(attrs)
    new[6] = list(attrs[6])
    lflag = new[3] & ~termios.ICANON
    if not echo:
        lflag &= ~termios.ECHO
    new[3] = lflag
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    return new


def read_chars(limit: int = 1, tty_path: str = TTY_PATH, timeout: float | None = None) -> str:
    """
    Read up to ``limit`` characters from the terminal without line buffering.

    Multibyte UTF-8 input counts as one character. Stops early at end of
    input, or when ``timeout`` seconds pass without further input. The
    previous terminal mode is restored before returning, whether the read
    completed or not.
    """
    decoder = codecs.getincrementaldecoder("utf-8")("replace")
    text = ""
    fd = os.open(tty_path, os.O_RDONLY | os.O_NOCTTY)
    try:
        saved = termios.tcgetattr(fd)
        termios.tcsetattr(fd, termios.TCSANOW, _char_mode(saved, echo=True))
        try:
            while len(text) < limit:
                if timeout is not None and not select.select([fd], [], [], timeout)[0]:
                    break
                chunk = os.read(fd, 1)
                if not chunk:
                    break
                text += decoder.decode(chunk)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    finally:
        os.close(fd)
    return text + decoder.decode(b"", final=True)


def read_key(tty_path: str = TTY_PATH) -> str:
    """
    Read one keystroke.

    A lone Esc (nothing following within ESCAPE_TIMEOUT) is returned as
    ``"\\x1b"`` and does not consume the next key.

    Returns:
        'up', 'down' or 'enter' for those keys, otherwise the raw input
    """
    ch = read_chars(1, tty_path)
    if ch == "\x1b":
        seq = read_chars(2, tty_path, timeout=ESCAPE_TIMEOUT)
        return ARROW_KEYS.get(seq, ch + seq)
    if ch in ("\r", "\n"):
        return "enter"
    return ch


class TerminalSession:
    """
    Alternate screen with echo and line buffering disabled.

    Use as a context manager; leaving the block (normally, by exception or
    via SIGTERM) restores the screen and the terminal mode. On SIGTSTP the
    terminal is restored before the process stops and the session is set
    up again (and ``on_resume`` called) when it continues.
    """

    def __init__(
        self,
        tty_path: str = TTY_PATH,
        out: TextIO | None = None,
        on_resume: Callable[[], None] | None = None,
    ):
        self.tty_path = tty_path
        self.out = out or sys.stdout
        self.on_resume = on_resume
        self.active = False
        self._fd: int | None = None
        self._saved: list | None = None
        self._previous_handlers: dict[int, object] = {}

    def __enter__(self) -> TerminalSession:
        self._fd = os.open(self.tty_path, os.O_RDWR | os.O_NOCTTY)
        try:
            self._enter()
            self._install_handlers()
        except BaseException:
            self._leave()
            os.close(self._fd)
            self._fd = None
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self._restore_handlers()
            self._leave()
        finally:
            if self._fd is not None:
                os.close(self._fd)
                self._fd = None

    def _enter(self) -> None:
        if self.active:
            return
        self._saved = termios.tcgetattr(self._fd)
        termios.tcsetattr(self._fd, termios.TCSANOW, _char_mode(self._saved, echo=False))
        self.out.write(ALT_SCREEN_ON + HIDE_CURSOR)
        self.out.flush()
        self.active = True

    def _leave(self) -> None:
        if not self.active:
            return
        self.active = False
        self.out.write(SHOW_CURSOR + ALT_SCREEN_OFF)
        self.out.flush()
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)

    def _install_handlers(self) -> None:
        handlers = {
            signal.SIGTSTP: self._on_suspend,
            signal.SIGCONT: self._on_continue,
            signal.SIGTERM: self._on_terminate,
        }
        for signum, handler in handlers.items():
            self._previous_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, handler)

    def _restore_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _on_suspend(self, signum, frame) -> None:
        logger.debug("Suspending: restoring terminal")
        self._leave()
        signal.signal(signal.SIGTSTP, signal.SIG_DFL)
        os.kill(os.getpid(), signal.SIGTSTP)
        # Execution resumes here after SIGCONT
        signal.signal(signal.SIGTSTP, self._on_suspend)

    def _on_continue(self, signum, frame) -> None:
        if self.active:
            return
        logger.debug("Resumed: re-entering terminal session")
        self._enter()
        if self.on_resume is not None:
            self.on_resume()

    def _on_terminate(self, signum, frame) -> None:
        raise SystemExit(128 + signum)
