"""
Output rendering and formatting.
"""

from __future__ import annotations

from typing import Sequence

# ANSI color codes
GREEN = "\033[32m"
BOLD_GREEN = "\033[1;32m"
DIM = "\033[2m"
REVERSE = "\033[7m"
RESET = "\033[0m"


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """
    Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        enabled: Whether colors are enabled

    Returns:
        Colored text or plain text if colors disabled
    """
    if not enabled or not text:
        return text
    return f"{color}{text}{RESET}"


def format_installed_list(versions: Sequence[str], active: str | None, color: bool = True) -> list[str]:
    """One line per installed version; the active one is marked with '>'."""
    lines = []
    for version in versions:
        if version == active:
            lines.append(colorize(f"> {version}", BOLD_GREEN, color))
        else:
            lines.append(f"  {version}")
    return lines


def format_remote_list(
    remote: Sequence[str],
    installed: Sequence[str],
    active: str | None,
    color: bool = True,
) -> list[str]:
    """One line per remote version, flagging installed and active ones."""
    installed_set = set(installed)
    lines = []
    for version in remote:
        if version == active:
            lines.append(colorize(f"> {version}  (active)", BOLD_GREEN, color))
        elif version in installed_set:
            lines.append(colorize(f"  {version}  (installed)", GREEN, color))
        else:
            lines.append(f"  {version}")
    return lines


def format_selector(
    versions: Sequence[str],
    highlighted: str,
    active: str | None,
    color: bool = True,
) -> list[str]:
    """Screen contents for the interactive selector."""
    lines = ["Select a Go version:", ""]
    for version in versions:
        cursor = ">" if version == highlighted else " "
        marker = "*" if version == active else " "
        line = f"{cursor}{marker} {version}"
        if version == highlighted:
            line = colorize(line, REVERSE, color)
        lines.append(line)
    lines.append("")
    lines.append(colorize("↑/k up · ↓/j down · enter select · q quit", DIM, color))
    return lines
