"""
Version identifier parsing and ordering.
"""

from __future__ import annotations

import functools
import re
from typing import Iterable

from packaging import version as pkg_version

_LEADING_DIGITS = re.compile(r"^(\d*)")


def normalize_version(token: str) -> str:
    """Strip a leading ``go`` or ``v`` prefix (``go1.21.3`` -> ``1.21.3``)."""
    token = token.strip()
    for prefix in ("go", "v"):
        if token.lower().startswith(prefix) and token[len(prefix):][:1].isdigit():
            return token[len(prefix):]
    return token


def numeric_key(version: str) -> tuple[int, int, int]:
    """
    Three-field numeric key: leading digits of the first three dot fields.

    ``1.22rc1`` -> (1, 22, 0); missing fields count as 0.
    """
    parts = version.split(".")[:3]
    nums = [int(_LEADING_DIGITS.match(part).group(1) or 0) for part in parts]
    nums += [0] * (3 - len(nums))
    return (nums[0], nums[1], nums[2])


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings.

    Uses PEP 440 ordering when both parse (so ``1.22rc1 < 1.22``), otherwise
    compares numerically field by field and finally as plain strings.

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    try:
        ver1 = pkg_version.Version(v1)
        ver2 = pkg_version.Version(v2)
        if ver1 != ver2:
            return -1 if ver1 < ver2 else 1
    except pkg_version.InvalidVersion:
        key1, key2 = numeric_key(v1), numeric_key(v2)
        if key1 != key2:
            return -1 if key1 < key2 else 1

    if v1 < v2:
        return -1
    elif v1 > v2:
        return 1
    return 0


version_key = functools.cmp_to_key(compare_versions)


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Deduplicate and sort version identifiers in ascending order."""
    return sorted(set(versions), key=version_key)
