"""
Common utilities shared across gvm_cli modules.
"""

from __future__ import annotations

import sys

from .config import Config
from .errors import UserAbort


def confirm(prompt: str) -> bool:
    """
    Ask a yes/no question on the terminal.

    Returns:
        True if the user answered yes; False if declined or stdin is not a TTY
    """
    if not sys.stdin.isatty():
        return False

    print(prompt, end="", file=sys.stderr, flush=True)
    try:
        response = input().strip().lower()
    except EOFError:
        return False
    return response in ('y', 'yes')


def require_confirmation(config: Config, prompt: str, refusal: str, remediation: str | None = None) -> None:
    """
    Prompt unless running non-interactively.

    Raises:
        UserAbort: If the user declines, or if prompting is not allowed
    """
    if config.non_interactive:
        raise UserAbort(refusal, remediation=remediation)
    if not confirm(prompt):
        raise UserAbort(refusal, remediation=remediation)
